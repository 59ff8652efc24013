# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from pinmap.common import settings as settings_mod


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """
    Every test starts with a fresh settings cache, no Pinata credentials from
    the developer's shell, and a cwd without a stray .env.
    """
    for key in (
        "PINATA_API_KEY",
        "PINATA_API_SECRET",
        "PINATA_SECRET_API_KEY",
        "PINATA_JWT",
        "EXISTING_CIDS_PATH",
        "DEFAULT_OUTPUT_FOLDER",
        "LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    settings_mod.get_settings.cache_clear()
    yield
    settings_mod.get_settings.cache_clear()


def touch(p: Path, data: bytes = b"dummy") -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)
    return p


class FakePinningClient:
    """
    In-memory stand-in for PinataClient.

    - cids: file name -> CID returned by pin_file (default "Qm<name>")
    - fail: file names whose pin_file raises
    - pages: pin_list responses, served in call order
    """

    def __init__(
        self,
        *,
        cids: Optional[Dict[str, str]] = None,
        fail: Sequence[str] = (),
        pages: Optional[List[Dict[str, Any]]] = None,
        folder_cid: str = "QmFolder",
    ) -> None:
        self.cids = dict(cids or {})
        self.fail = set(fail)
        self.pages = list(pages or [])
        self.folder_cid = folder_cid
        self.pin_file_calls: List[Tuple[str, bytes]] = []
        self.pin_files_calls: List[Tuple[List[Tuple[str, Path]], str]] = []
        self.pin_list_calls: List[Dict[str, Any]] = []
        self.auth_checks = 0

    def pin_file(self, file_name: str, content: bytes) -> str:
        self.pin_file_calls.append((file_name, content))
        if file_name in self.fail:
            raise RuntimeError(f"upload rejected: {file_name}")
        return self.cids.get(file_name, f"Qm{file_name}")

    def pin_files(self, parts, name: str) -> str:
        self.pin_files_calls.append((list(parts), name))
        return self.folder_cid

    def pin_list(self, *, status: str, page_offset: int, page_limit: int) -> Dict[str, Any]:
        self.pin_list_calls.append({"status": status, "page_offset": page_offset, "page_limit": page_limit})
        if not self.pages:
            return {"count": 0, "rows": []}
        return self.pages.pop(0)

    def test_authentication(self) -> None:
        self.auth_checks += 1


def pin_rows(start: int, n: int) -> List[Dict[str, Any]]:
    return [
        {"ipfs_pin_hash": f"QmHash{i}", "metadata": {"name": f"file{i}.json"}}
        for i in range(start, start + n)
    ]


@pytest.fixture()
def fake_client():
    return FakePinningClient()
