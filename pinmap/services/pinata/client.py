"""Pinata REST client (pinning + pin list) on top of requests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

import requests

from pinmap.common.logging import get_logger
from pinmap.common.retry import normalize_error
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.errors import ConfigurationError, PinataError
from pinmap.domain.ports.pinning import PinningPort

logger = get_logger(__name__)

PIN_FILE_ENDPOINT = "/pinning/pinFileToIPFS"
PIN_LIST_ENDPOINT = "/data/pinList"
TEST_AUTH_ENDPOINT = "/data/testAuthentication"


class PinataClient(PinningPort):
    """Thin wrapper over Pinata's HTTP API. One method per remote call."""

    def __init__(
        self,
        *,
        base_url: str = "https://api.pinata.cloud",
        api_key: str | None = None,
        api_secret: str | None = None,
        jwt: str | None = None,
        timeout_seconds: int = 120,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not jwt and not (api_key and api_secret):
            raise ConfigurationError(
                "Pinata credentials are required (set PINATA_JWT or PINATA_API_KEY/PINATA_API_SECRET)",
                ErrorCode.CONFIG_MISSING,
            )
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.jwt = jwt.strip() if jwt else None
        self.api_key = api_key.strip() if api_key else None
        self.api_secret = api_secret.strip() if api_secret else None
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, cfg) -> "PinataClient":
        return cls(
            base_url=cfg.pinata_api_url,
            api_key=cfg.pinata_api_key,
            api_secret=cfg.pinata_api_secret,
            jwt=cfg.pinata_jwt,
            timeout_seconds=cfg.pinata_timeout_sec,
        )

    # -------------------------
    # Internals
    # -------------------------
    def _headers(self) -> Dict[str, str]:
        if self.jwt:
            return {"Authorization": f"Bearer {self.jwt}"}
        return {
            "pinata_api_key": self.api_key or "",
            "pinata_secret_api_key": self.api_secret or "",
        }

    def _request(self, method: str, endpoint: str, operation: str, **kwargs: Any) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        logger.debug("Pinata %s %s (%s)", method, url, operation)
        try:
            resp = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout_seconds, **kwargs
            )
        except requests.RequestException as e:
            raise normalize_error(e, operation) from e

        if resp.status_code in (401, 403):
            raise PinataError(
                f"Pinata authentication failed ({resp.status_code})",
                ErrorCode.PINATA_AUTH_FAILED,
                context={"operation": operation, "metadata": {"status": resp.status_code}},
            )
        if resp.status_code == 429:
            raise PinataError(
                "Pinata rate limit exceeded (429)",
                ErrorCode.PINATA_RATE_LIMITED,
                context={"operation": operation, "metadata": {"status": 429}},
            )
        if resp.status_code >= 400:
            code = ErrorCode.PINATA_UPLOAD_FAILED if endpoint == PIN_FILE_ENDPOINT else ErrorCode.API_ERROR
            raise PinataError(
                f"Pinata {operation} failed: {resp.status_code} {resp.text[:500]}",
                code,
                context={"operation": operation, "metadata": {"status": resp.status_code}},
                retryable=resp.status_code >= 500,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise PinataError(
                f"Pinata {operation} returned a non-JSON body",
                ErrorCode.API_ERROR,
                context={"operation": operation},
                cause=e,
            ) from e

    @staticmethod
    def _cid_from(data: Dict[str, Any], operation: str) -> str:
        cid = data.get("IpfsHash") or data.get("Hash") or data.get("cid")
        if not cid:
            raise PinataError("Pinata response missing CID", ErrorCode.API_ERROR, context={"operation": operation})
        return str(cid)

    # -------------------------
    # Remote calls
    # -------------------------
    def pin_file(self, file_name: str, content: bytes) -> str:
        """pinFileToIPFS for one file; metadata name = file_name. Returns the CID."""
        files = {"file": (file_name, content)}
        data = {"pinataMetadata": json.dumps({"name": file_name})}
        body = self._request("POST", PIN_FILE_ENDPOINT, "pin-file", files=files, data=data)
        return self._cid_from(body, "pin-file")

    def pin_files(self, parts: Sequence[Tuple[str, Path]], name: str) -> str:
        """
        One multipart pinFileToIPFS request carrying every (part filename, path)
        as a 'file' part plus pinataMetadata. Returns the container CID.

        Parts are read one at a time, so no more than one file handle is open
        however large the folder is.
        """
        files = [("file", (part_name, self._read_part(path))) for part_name, path in parts]
        data = {"pinataMetadata": json.dumps({"name": name})}
        body = self._request("POST", PIN_FILE_ENDPOINT, "pin-folder", files=files, data=data)
        return self._cid_from(body, "pin-folder")

    @staticmethod
    def _read_part(path: Path | str) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise normalize_error(e, "pin-folder") from e

    def pin_list(self, *, status: str, page_offset: int, page_limit: int) -> Dict[str, Any]:
        params = {"status": status, "pageOffset": page_offset, "pageLimit": page_limit}
        return self._request("GET", PIN_LIST_ENDPOINT, "pin-list", params=params)

    def test_authentication(self) -> None:
        self._request("GET", TEST_AUTH_ENDPOINT, "test-authentication")
