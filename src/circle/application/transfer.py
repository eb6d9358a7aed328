"""Import and export of contact batches (JSON and CSV files)."""

import logging
from collections.abc import Mapping
from pathlib import Path

from circle.application.directory import ContactDirectory
from circle.application.dto import BatchResult, ExportPayload, TransferFormat
from circle.application.ports import ContactCodec, ContactFileGateway
from circle.domain import RemoteError, UnsupportedFormatError, ValidationError

logger = logging.getLogger(__name__)


def detect_format(filename: str) -> TransferFormat:
    """Format from the file extension. Raises UnsupportedFormatError for anything else."""
    suffix = Path(filename or "").suffix.lower().lstrip(".")
    try:
        return TransferFormat(suffix)
    except ValueError:
        raise UnsupportedFormatError(filename) from None


class TransferPipeline:
    """Validates a file locally, submits it as one batch, and refreshes listings.

    The server is the batch boundary: nothing is submitted unless every row
    parses, and a rejected batch is reported for the whole file.
    """

    def __init__(
        self,
        gateway: ContactFileGateway,
        directory: ContactDirectory,
        codecs: Mapping[TransferFormat, ContactCodec],
    ) -> None:
        self._gateway = gateway
        self._directory = directory
        self._codecs = dict(codecs)

    def _codec(self, kind: TransferFormat) -> ContactCodec:
        codec = self._codecs.get(kind)
        if codec is None:
            raise UnsupportedFormatError(f"*.{kind.value}")
        return codec

    def prepare(self, filename: str, data: bytes) -> tuple[TransferFormat, bytes, int]:
        """Parse and re-encode a batch without sending it. Returns (format, body, row count)."""
        kind = detect_format(filename)
        codec = self._codec(kind)
        try:
            contacts = codec.decode(data)
        except ValidationError as exc:
            raise ValidationError(
                f"{filename}: {exc.message}", exc.field_errors
            ) from exc
        if not contacts:
            raise ValidationError(f"{filename}: file contains no contacts.")
        for row, contact in enumerate(contacts, start=1):
            errors = contact.field_errors()
            if errors:
                raise ValidationError(
                    f"{filename}: contact {row} is invalid.",
                    {f"contact {row}.{name}": msg for name, msg in errors.items()},
                )
        return kind, codec.encode(contacts), len(contacts)

    async def import_file(self, filename: str, data: bytes) -> BatchResult:
        kind, body, rows = self.prepare(filename, data)
        try:
            created = await self._gateway.submit_file(kind, body, filename)
        except RemoteError as exc:
            logger.warning("Import of %s rejected: %s", filename, exc)
            raise
        self._directory.invalidate_listings()
        logger.info("Imported %d of %d contacts from %s", len(created), rows, filename)
        return BatchResult(
            format=kind,
            filename=filename,
            contacts=tuple(created),
            message=f"Successfully imported {len(created)} contacts",
        )

    async def import_path(self, path: Path | str) -> BatchResult:
        path = Path(path)
        detect_format(path.name)
        return await self.import_file(path.name, path.read_bytes())

    async def export(self, kind: TransferFormat) -> ExportPayload:
        """Download the full contact set rendered by the server."""
        kind = TransferFormat(kind)
        content = await self._gateway.request_export(kind)
        logger.info("Exported %d bytes as %s", len(content), kind.value)
        return ExportPayload(format=kind, content=content)
