import pytest
import requests

from balance_filter import workbook as workbook_module
from balance_filter.workbook import FileReadError, SheetNotFoundError, load_source, read_workbook
from conftest import balance_row, xlsx_bytes


def test_read_workbook_keeps_absolute_columns(balance_xlsx):
    wb = read_workbook(balance_xlsx)
    assert wb.sheet_names == ["Club Member Balance"]
    rows = wb.lookup("Club Member Balance").rows
    assert rows[3][10] == "gustav99"
    assert rows[3][11] == 5000
    assert rows[4][11] == -1200.5
    assert rows[0] == ["Club report"]


def test_read_workbook_converts_booleans():
    wb = read_workbook(xlsx_bytes({"S": [[True, None, "x"]]}))
    assert wb.lookup("S").rows == [["TRUE", None, "x"]]


def test_lookup_missing_sheet():
    wb = read_workbook(xlsx_bytes({"Other": [[1]]}))
    with pytest.raises(SheetNotFoundError, match='Sheet "Club Member Balance" not found.'):
        wb.lookup("Club Member Balance")


def test_garbage_bytes_raise_file_read_error():
    with pytest.raises(FileReadError):
        read_workbook(b"definitely not a spreadsheet")


def test_load_source_reads_local_file(tmp_path):
    path = tmp_path / "balances.xlsx"
    path.write_bytes(xlsx_bytes({"S": [balance_row("gus", 1)]}))
    name, data = load_source(str(path))
    assert name == "balances.xlsx"
    assert read_workbook(data).sheet_names == ["S"]


def test_load_source_missing_file(tmp_path):
    with pytest.raises(FileReadError):
        load_source(str(tmp_path / "missing.xlsx"))


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code
        self.headers = {"Content-Length": str(len(content))}
        self.closed = False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def close(self):
        self.closed = True


def test_load_source_downloads_url(monkeypatch):
    response = FakeResponse(b"xlsx-bytes")
    calls = []

    def fake_get(url, **kwargs):
        calls.append((url, kwargs))
        return response

    monkeypatch.setattr(workbook_module.requests, "get", fake_get)
    name, data = load_source("https://example.com/files/names.xlsx?dl=1")
    assert (name, data) == ("names.xlsx", b"xlsx-bytes")
    assert calls[0][1]["timeout"] == 60
    assert response.closed


def test_load_source_http_error(monkeypatch):
    monkeypatch.setattr(workbook_module.requests, "get", lambda url, **kw: FakeResponse(b"", 404))
    with pytest.raises(FileReadError, match="Could not download"):
        load_source("https://example.com/names.xlsx")


def test_load_source_rejects_oversized_download(monkeypatch):
    response = FakeResponse(b"x")
    response.headers["Content-Length"] = str(workbook_module.MAX_REMOTE_FILE_BYTES + 1)
    monkeypatch.setattr(workbook_module.requests, "get", lambda url, **kw: response)
    with pytest.raises(FileReadError, match="larger than"):
        load_source("https://example.com/names.xlsx")
