# pinmap/services/pinata/service.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pinmap.common.logging import get_logger
from pinmap.common.retry import with_retry
from pinmap.domain.enums.pin_status import PinStatus
from pinmap.domain.ports.pinning import PinningPort

logger = get_logger(__name__)

PageFetcher = Callable[[Callable[[], Dict[str, Any]], str], Dict[str, Any]]


class PinataService:
    """
    Pinata operations the processors need, on top of a PinningPort.

    - upload_file(): one file -> CID
    - upload_folder(): many multipart parts -> one container CID
    - download_cid_mappings(): walk every pin list page -> {name: cid}
    """

    def __init__(
        self,
        client: PinningPort,
        *,
        page_limit: int = 1000,
        max_retries: int = 3,
        retry_base_delay_ms: int = 1000,
    ) -> None:
        self.client = client
        self.page_limit = page_limit
        self.max_retries = max_retries
        self.retry_base_delay_ms = retry_base_delay_ms

    @classmethod
    def from_settings(cls, client: PinningPort, cfg) -> "PinataService":
        return cls(
            client,
            page_limit=cfg.pin_list_page_limit,
            max_retries=cfg.max_retries,
            retry_base_delay_ms=cfg.retry_base_delay_ms,
        )

    def test_authentication(self) -> None:
        self.client.test_authentication()
        logger.info("Pinata authentication successful")

    def upload_file(self, file_name: str, content: bytes) -> str:
        logger.debug("Uploading file to Pinata: %s", file_name)
        return self.client.pin_file(file_name, content)

    def upload_folder(self, parts: Sequence[Tuple[str, Path]], name: str) -> str:
        logger.info("Uploading folder to Pinata: %s (%d files)", name, len(parts))
        return self.client.pin_files(parts, name)

    def list_pins(self, *, status: PinStatus | str = PinStatus.all, page_offset: int = 0,
                  page_limit: Optional[int] = None) -> Dict[str, Any]:
        return self.client.pin_list(
            status=str(status),
            page_offset=page_offset,
            page_limit=page_limit or self.page_limit,
        )

    def _retrying_fetch(self, fetch: Callable[[], Dict[str, Any]], name: str) -> Dict[str, Any]:
        return with_retry(
            fetch, name, max_attempts=self.max_retries, base_delay_ms=self.retry_base_delay_ms
        )

    def download_cid_mappings(
        self,
        status: PinStatus | str = PinStatus.all,
        page_limit: Optional[int] = None,
        *,
        fetch_page: Optional[PageFetcher] = None,
    ) -> Dict[str, str]:
        """
        Page through the pin list and map metadata.name -> ipfs_pin_hash.

        Stops when the first page reports count == 0, on an empty page, or on
        a short page (fewer rows than the page limit). Rows without a name are
        dropped; a later row overwrites an earlier one with the same name.
        Each page goes through `fetch_page` (retrying by default).
        """
        limit = page_limit or self.page_limit
        fetch = fetch_page or self._retrying_fetch
        status = str(status)
        mappings: Dict[str, str] = {}
        offset = 0

        while True:
            logger.info("Fetching pins (status=%s, offset=%d, limit=%d)", status, offset, limit)
            page = fetch(
                lambda o=offset: self.list_pins(status=status, page_offset=o, page_limit=limit),
                f"pin-list:{offset}",
            )
            if offset == 0 and page.get("count") == 0:
                logger.warning("No '%s' files or folders were found", status)
                break

            rows: List[Mapping[str, Any]] = page.get("rows") or []
            if not rows:
                break

            for row in rows:
                name = (row.get("metadata") or {}).get("name")
                cid = row.get("ipfs_pin_hash")
                if name and cid:
                    mappings[str(name)] = str(cid)

            logger.info("Fetched %d pins (total mapped: %d)", len(rows), len(mappings))
            if len(rows) < limit:
                break
            offset += len(rows)

        return mappings

    @staticmethod
    def check_file_exists(file_name: str, existing: Mapping[str, str]) -> Tuple[bool, Optional[str]]:
        """Cache lookup: (True, cid) when `file_name` maps to a non-empty CID."""
        cid = existing.get(file_name)
        if cid:
            return True, cid
        return False, None
