# pinmap/cli/main.py

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pinmap.common.logging import configure_logging, get_logger
from pinmap.common.retry import normalize_error
from pinmap.common.settings import MAX_CONCURRENT_LIMIT, MIN_UPLOAD_SPACING_MS, Settings, get_settings
from pinmap.domain.dataclasses.processing import ProcessingOptions
from pinmap.domain.dataclasses.results import UploadResult
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.enums.pin_status import PinStatus
from pinmap.domain.errors import PinmapError, ValidationError
from pinmap.services.pinata.client import PinataClient
from pinmap.services.pinata.service import PinataService
from pinmap.services.processors.cid_processor import CidProcessor
from pinmap.services.processors.download_processor import DownloadProcessor
from pinmap.services.processors.file_upload_processor import FileUploadProcessor
from pinmap.services.processors.folder_upload_processor import FolderUploadProcessor
from pinmap.services.processors.hash_processor import HashProcessor

logger = get_logger("pinmap.cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL_FAILURE = 2


class _Parser(argparse.ArgumentParser):
    """Usage errors surface as ValidationError so every failure exits through main()."""

    def error(self, message: str):  # type: ignore[override]
        raise ValidationError(message, ErrorCode.VALIDATION_ERROR)


def build_parser(cfg: Settings) -> argparse.ArgumentParser:
    parser = _Parser(
        prog="pinmap",
        description="Hash, compute IPFS CIDs for, and pin folders of files on Pinata.",
    )
    parser.add_argument(
        "--log-level",
        default=cfg.log_level,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL.",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p = sub.add_parser("hash", help="SHA-256 hash every file in a folder")
    p.add_argument("-f", "--folder", default=str(cfg.input_folder), help="Input folder.")
    p.add_argument("-o", "--output", default=str(cfg.hashes_output), help="Output JSON path.")
    p.add_argument(
        "--final-output",
        nargs="?",
        const=str(cfg.hash_of_hashes_output),
        default=None,
        help="Also write the hash of all hashes (default path when given without a value).",
    )
    p.add_argument("-c", "--concurrent", type=int, default=cfg.max_concurrent,
                   help=f"Concurrent operations (1-{MAX_CONCURRENT_LIMIT}).")

    p = sub.add_parser("cid", help="Compute the IPFS CID of every file in a folder (no upload)")
    p.add_argument("-f", "--folder", default=str(cfg.input_folder), help="Input folder.")
    p.add_argument("-o", "--output", default=str(cfg.cids_output), help="Output JSON path.")
    p.add_argument("-c", "--concurrent", type=int, default=cfg.max_concurrent,
                   help=f"Concurrent operations (1-{MAX_CONCURRENT_LIMIT}).")

    p = sub.add_parser("upload-files", help="Upload individual files to Pinata")
    p.add_argument("-f", "--folder", default=str(cfg.input_folder), help="Input folder.")
    p.add_argument("-o", "--output", default=str(cfg.uploaded_files_output), help="Output JSON path.")
    p.add_argument("-c", "--concurrent", type=int, default=cfg.upload_max_concurrent,
                   help=f"Concurrent uploads (1-{MAX_CONCURRENT_LIMIT}).")
    p.add_argument("--min-time", type=int, default=cfg.upload_min_time_ms,
                   help="Minimum time between upload starts (ms).")
    p.add_argument("--cache", default=str(cfg.existing_cids_path),
                   help="Existing CID mappings used to skip files already pinned.")

    p = sub.add_parser("upload-folder", help="Upload an entire folder to Pinata as one directory")
    p.add_argument("-f", "--folder", default=str(cfg.metadata_folder), help="Folder to upload.")
    p.add_argument("-o", "--output", default=str(cfg.folder_cid_output), help="Output JSON path.")
    p.add_argument("-n", "--name", default=None, help="Display name (defaults to the folder name).")
    p.add_argument("--as-mapping", action="store_true",
                   help="Write {name: cid} instead of the bare CID.")

    p = sub.add_parser("download", help="Download name -> CID mappings from Pinata")
    p.add_argument("-o", "--output", default=str(cfg.downloaded_cids_output), help="Output JSON path.")
    p.add_argument("-s", "--status", default=PinStatus.all.value,
                   choices=[s.value for s in PinStatus], help="Pin status filter.")

    return parser


def validate_args(args: argparse.Namespace) -> None:
    for attr in ("folder", "output"):
        value = getattr(args, attr, None)
        if value is not None and not str(value).strip():
            raise ValidationError(f"--{attr} must not be empty", ErrorCode.VALIDATION_ERROR)

    concurrent = getattr(args, "concurrent", None)
    if concurrent is not None and not 1 <= concurrent <= MAX_CONCURRENT_LIMIT:
        raise ValidationError(
            f"--concurrent must be between 1 and {MAX_CONCURRENT_LIMIT} (got {concurrent})",
            ErrorCode.VALIDATION_ERROR,
        )

    min_time = getattr(args, "min_time", None)
    if min_time is not None and min_time < MIN_UPLOAD_SPACING_MS:
        raise ValidationError(
            f"--min-time must be at least {MIN_UPLOAD_SPACING_MS}ms (got {min_time})",
            ErrorCode.VALIDATION_ERROR,
        )


def build_pinata_service(cfg: Settings) -> PinataService:
    """Credentials check + auth check; every remote command starts here."""
    cfg.require_pinata_credentials()
    service = PinataService.from_settings(PinataClient.from_settings(cfg), cfg)
    service.test_authentication()
    return service


def format_table(mapping: Dict[str, str], headers: Sequence[str] = ("name", "cid")) -> str:
    width = max([len(headers[0])] + [len(k) for k in mapping])
    lines = [f"{headers[0]:<{width}}  {headers[1]}", f"{'-' * width}  {'-' * len(headers[1])}"]
    lines += [f"{k:<{width}}  {v}" for k, v in mapping.items()]
    return "\n".join(lines)


# -------------------------
# Commands
# -------------------------
def cmd_hash(args: argparse.Namespace, cfg: Settings) -> int:
    processor = HashProcessor(rate_limit=cfg.hash_rate_limit(args.concurrent))
    options = ProcessingOptions(folder_path=Path(args.folder), output_path=Path(args.output))
    if args.final_output:
        final = processor.process_with_final_hash(options, Path(args.final_output))
        if final:
            print(final)
    else:
        hashes = processor.process(options)
        print(f"Hashed {len(hashes)} files -> {args.output}")
    return EXIT_OK


def cmd_cid(args: argparse.Namespace, cfg: Settings) -> int:
    processor = CidProcessor(rate_limit=cfg.hash_rate_limit(args.concurrent))
    cids = processor.process(ProcessingOptions(folder_path=Path(args.folder), output_path=Path(args.output)))
    print(f"Computed {len(cids)} CIDs -> {args.output}")
    return EXIT_OK


def _report_uploads(results: List[UploadResult], output: str) -> int:
    failed = [r for r in results if not r.success]
    cached = sum(1 for r in results if r.cached)
    print(f"Uploaded {len(results) - len(failed) - cached}, cached {cached}, failed {len(failed)} -> {output}")
    for r in failed:
        print(f"  FAILED {r.file_name}: {r.error}")
    return EXIT_PARTIAL_FAILURE if failed else EXIT_OK


def cmd_upload_files(args: argparse.Namespace, cfg: Settings) -> int:
    service = build_pinata_service(cfg)
    processor = FileUploadProcessor(
        service,
        existing_cids_path=Path(args.cache),
        rate_limit=cfg.upload_rate_limit(args.concurrent, args.min_time),
    )
    results = processor.process(ProcessingOptions(folder_path=Path(args.folder), output_path=Path(args.output)))
    return _report_uploads(results, args.output)


def cmd_upload_folder(args: argparse.Namespace, cfg: Settings) -> int:
    service = build_pinata_service(cfg)
    result = FolderUploadProcessor(service).process(
        ProcessingOptions(folder_path=Path(args.folder), output_path=Path(args.output)),
        args.name,
        as_mapping=args.as_mapping,
    )
    print(f"{result.folder_name}: {result.cid}")
    return EXIT_OK


def cmd_download(args: argparse.Namespace, cfg: Settings) -> int:
    service = build_pinata_service(cfg)
    mappings = DownloadProcessor(service).process(Path(args.output), PinStatus(args.status))
    if mappings:
        print(format_table(mappings))
    else:
        print(f"No '{args.status}' pins found")
    return EXIT_OK


COMMANDS = {
    "hash": cmd_hash,
    "cid": cmd_cid,
    "upload-files": cmd_upload_files,
    "upload-folder": cmd_upload_folder,
    "download": cmd_download,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        cfg = get_settings()
    except Exception as e:
        configure_logging()
        logger.error("[%s] Invalid configuration: %s", ErrorCode.CONFIG_INVALID, e)
        return EXIT_ERROR

    configure_logging(cfg.log_level, cfg.log_file)
    try:
        parser = build_parser(cfg)
        args = parser.parse_args(argv)
        if args.log_level != cfg.log_level:
            configure_logging(args.log_level, cfg.log_file)
        if not args.command:
            parser.print_help()
            return EXIT_ERROR
        validate_args(args)
        return COMMANDS[args.command](args, cfg)
    except PinmapError as e:
        logger.error("[%s] %s", e.code, e.message)
        return EXIT_ERROR
    except Exception as e:
        err = normalize_error(e, "cli")
        logger.exception("[%s] %s", err.code, err.message)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
