"""TransferPipeline with in-memory gateways."""

import json

import pytest

from circle.application import (
    ContactDirectory,
    ExportPayload,
    TransferFormat,
    TransferPipeline,
    detect_format,
    list_key,
)
from circle.domain import (
    Contact,
    PageRequest,
    TransientError,
    UnsupportedFormatError,
    ValidationError,
)
from circle.infrastructure import default_codecs
from fake_gateway import InMemoryContactGateway

CSV = (
    "First Name,Last Name,Title,Emails,Phones\n"
    'Ada,Lovelace,,"a@x.com (WORK); b@y.com (HOME)",+1234567890 (PERSONAL)\n'
    "Alan,Turing,,alan@x.com,+1987654321\n"
).encode("utf-8")


class FakeFileGateway:
    def __init__(self) -> None:
        self.submitted: list[tuple[TransferFormat, bytes, str]] = []
        self.reject_with: Exception | None = None

    async def submit_file(self, kind, data, filename):
        self.submitted.append((kind, data, filename))
        if self.reject_with is not None:
            raise self.reject_with
        return [
            Contact(id=i, first_name=f"c{i}", last_name="x", user_id=1)
            for i in range(1, data.count(b"\n"))
        ]

    async def request_export(self, kind):
        return b"[]" if kind is TransferFormat.JSON else b"First Name\n"


def _pipeline():
    files = FakeFileGateway()
    directory = ContactDirectory(InMemoryContactGateway())
    return TransferPipeline(files, directory, default_codecs()), files, directory


def test_detect_format():
    assert detect_format("Contacts.CSV") is TransferFormat.CSV
    assert detect_format("/tmp/backup.json") is TransferFormat.JSON
    with pytest.raises(UnsupportedFormatError):
        detect_format("contacts.xlsx")


@pytest.mark.asyncio
async def test_unsupported_extension_is_rejected_before_upload():
    pipeline, files, _ = _pipeline()
    with pytest.raises(UnsupportedFormatError) as exc_info:
        await pipeline.import_file("contacts.txt", CSV)
    assert exc_info.value.filename == "contacts.txt"
    assert files.submitted == []


@pytest.mark.asyncio
async def test_csv_import_submits_once_and_refreshes_listings():
    pipeline, files, directory = _pipeline()
    await directory.list_contacts()

    result = await pipeline.import_file("contacts.csv", CSV)

    assert len(files.submitted) == 1
    kind, body, filename = files.submitted[0]
    assert (kind, filename) == (TransferFormat.CSV, "contacts.csv")
    assert b"a@x.com (WORK); b@y.com (HOME)" in body
    assert result.count == 2
    assert result.message == "Successfully imported 2 contacts"
    assert not directory.cache.peek(list_key(PageRequest())).is_fresh


@pytest.mark.asyncio
async def test_malformed_row_fails_whole_batch_without_upload():
    pipeline, files, _ = _pipeline()
    bad = CSV + b"Grace,,,grace@x.com,+1555\n"
    with pytest.raises(ValidationError) as exc_info:
        await pipeline.import_file("people.csv", bad)
    assert exc_info.value.message.startswith("people.csv:")
    assert files.submitted == []


@pytest.mark.asyncio
async def test_empty_json_batch_is_rejected():
    pipeline, files, _ = _pipeline()
    with pytest.raises(ValidationError):
        await pipeline.import_file("contacts.json", b"[]")
    assert files.submitted == []


@pytest.mark.asyncio
async def test_rejected_batch_propagates_and_keeps_cache():
    pipeline, files, directory = _pipeline()
    await directory.list_contacts()
    files.reject_with = TransientError(503, "Service unavailable")

    body = json.dumps(
        [
            {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "emails": [{"email": "a@x.com"}],
                "phones": [{"phoneNumber": "+1234567890"}],
            }
        ]
    )
    with pytest.raises(TransientError):
        await pipeline.import_file("contacts.json", body.encode("utf-8"))

    assert directory.cache.peek(list_key(PageRequest())).is_fresh


@pytest.mark.asyncio
async def test_import_path_reads_file(tmp_path):
    pipeline, files, _ = _pipeline()
    path = tmp_path / "contacts.csv"
    path.write_bytes(CSV)
    result = await pipeline.import_path(path)
    assert result.filename == "contacts.csv"
    assert files.submitted[0][0] is TransferFormat.CSV


@pytest.mark.asyncio
async def test_export_returns_payload_that_saves(tmp_path):
    pipeline, _, _ = _pipeline()
    payload = await pipeline.export("json")
    assert payload == ExportPayload(TransferFormat.JSON, b"[]")
    assert payload.media_type == "application/json"
    path = payload.save(tmp_path / "out")
    assert path.name == "contacts.json"
    assert path.read_bytes() == b"[]"
