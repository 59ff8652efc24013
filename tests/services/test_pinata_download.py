import json

import pytest

from conftest import FakePinningClient, pin_rows
from pinmap.domain.enums.error_code import ErrorCode
from pinmap.domain.enums.pin_status import PinStatus
from pinmap.domain.errors import PinataError, ValidationError
from pinmap.services.pinata.service import PinataService
from pinmap.services.processors.download_processor import DownloadProcessor


def test_pagination_until_short_page():
    client = FakePinningClient(
        pages=[
            {"count": 2037, "rows": pin_rows(0, 1000)},
            {"count": 2037, "rows": pin_rows(1000, 1000)},
            {"count": 2037, "rows": pin_rows(2000, 37)},
        ]
    )
    mappings = PinataService(client).download_cid_mappings(PinStatus.pinned)

    assert len(client.pin_list_calls) == 3
    assert [c["page_offset"] for c in client.pin_list_calls] == [0, 1000, 2000]
    assert {c["status"] for c in client.pin_list_calls} == {"pinned"}
    assert len(mappings) == 2037
    assert mappings["file2036.json"] == "QmHash2036"


def test_count_zero_stops_immediately():
    client = FakePinningClient(pages=[{"count": 0, "rows": []}])
    assert PinataService(client).download_cid_mappings() == {}
    assert len(client.pin_list_calls) == 1


def test_list_pins_defaults_and_pagination_route_through_it(monkeypatch):
    client = FakePinningClient(pages=[{"count": 1, "rows": pin_rows(0, 1)}])
    service = PinataService(client, page_limit=50)
    assert service.list_pins() == {"count": 1, "rows": pin_rows(0, 1)}
    assert client.pin_list_calls[-1] == {"status": "all", "page_offset": 0, "page_limit": 50}

    seen = []
    real = service.list_pins
    monkeypatch.setattr(service, "list_pins", lambda **kw: seen.append(kw) or real(**kw))
    service.download_cid_mappings(PinStatus.unpinned)
    assert seen == [{"status": "unpinned", "page_offset": 0, "page_limit": 50}]


def test_empty_page_stops():
    client = FakePinningClient(pages=[{"count": 4, "rows": pin_rows(0, 2)}, {"count": 4, "rows": []}])
    mappings = PinataService(client, page_limit=2).download_cid_mappings()
    assert list(mappings) == ["file0.json", "file1.json"]
    assert len(client.pin_list_calls) == 2


def test_unnamed_rows_dropped_and_later_rows_win():
    rows = [
        {"ipfs_pin_hash": "QmOld", "metadata": {"name": "a.json"}},
        {"ipfs_pin_hash": "QmNoName", "metadata": {}},
        {"ipfs_pin_hash": "QmNull", "metadata": None},
        {"ipfs_pin_hash": "QmNew", "metadata": {"name": "a.json"}},
    ]
    client = FakePinningClient(pages=[{"count": 4, "rows": rows}])
    assert PinataService(client).download_cid_mappings() == {"a.json": "QmNew"}


def test_page_fetch_is_retried():
    class Flaky(FakePinningClient):
        def __init__(self, **kw):
            super().__init__(**kw)
            self.failures = 1

        def pin_list(self, **kw):
            if self.failures:
                self.failures -= 1
                raise PinataError("slow down", ErrorCode.PINATA_RATE_LIMITED)
            return super().pin_list(**kw)

    client = Flaky(pages=[{"count": 1, "rows": pin_rows(0, 1)}])
    service = PinataService(client, retry_base_delay_ms=0)
    assert service.download_cid_mappings() == {"file0.json": "QmHash0"}


def test_check_file_exists():
    assert PinataService.check_file_exists("a", {"a": "QmA"}) == (True, "QmA")
    assert PinataService.check_file_exists("a", {"a": ""}) == (False, None)
    assert PinataService.check_file_exists("b", {}) == (False, None)


def test_download_processor_saves_sorted(tmp_path):
    rows = [
        {"ipfs_pin_hash": "Qm10", "metadata": {"name": "file10.json"}},
        {"ipfs_pin_hash": "Qm2", "metadata": {"name": "file2.json"}},
    ]
    out = tmp_path / "output" / "downloaded-cids.json"
    result = DownloadProcessor(PinataService(FakePinningClient(pages=[{"count": 2, "rows": rows}]))).process(out)

    assert list(result) == ["file2.json", "file10.json"]
    assert list(json.loads(out.read_text(encoding="utf-8"))) == ["file2.json", "file10.json"]


def test_download_processor_empty_writes_nothing(tmp_path):
    out = tmp_path / "downloaded.json"
    assert DownloadProcessor(PinataService(FakePinningClient())).process(out, "unpinned") == {}
    assert not out.exists()


def test_download_processor_validates(tmp_path):
    service = PinataService(FakePinningClient())
    with pytest.raises(ValidationError):
        DownloadProcessor(service).process("")
    with pytest.raises(ValueError):
        DownloadProcessor(service).process(tmp_path / "o.json", "bogus")
