"""Reading invoice documents from disk."""

import csv
import io
import mimetypes
from pathlib import Path
from typing import Union

from reelcost.domain.errors import NotFoundError, ParseError
from reelcost.integrations.extraction import DocumentPayload

BINARY_TYPES = {
    ".pdf": "application/pdf",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".heic": "image/heic",
}

SPREADSHEET_DELIMITERS = {
    ".csv": ",",
    ".tsv": "\t",
}


def _spreadsheet_text(name: str, content: str, delimiter: str) -> str:
    """Render a spreadsheet export as plain text for extraction."""
    rows = csv.reader(io.StringIO(content), delimiter=delimiter)
    body = "\n".join(",".join(row) for row in rows)
    return f"Document Content (Spreadsheet Export):\n--- Sheet: {name} ---\n{body}"


def read_document(path: Union[str, Path]) -> DocumentPayload:
    """Load a document for extraction.

    PDFs and images are sent as bytes. CSV and TSV exports are rendered as
    text, one sheet named after the file.

    Args:
        path: Path to the document

    Returns:
        DocumentPayload

    Raises:
        NotFoundError: If the file doesn't exist
        ParseError: If the file type is unsupported or the text is unreadable
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in SPREADSHEET_DELIMITERS:
        try:
            content = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Could not read {path.name} as UTF-8 text: {e}")
        return DocumentPayload(
            name=path.name,
            mime_type="text/csv",
            text=_spreadsheet_text(path.stem, content, SPREADSHEET_DELIMITERS[suffix]),
        )

    mime_type = BINARY_TYPES.get(suffix) or mimetypes.guess_type(path.name)[0]
    if mime_type is None or not (mime_type == "application/pdf" or mime_type.startswith("image/")):
        raise ParseError(
            f"Unsupported document type '{suffix or path.name}'. "
            "Use PDF, an image, or a CSV/TSV export."
        )
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ParseError(f"Could not read {path.name}: {e}")
    return DocumentPayload(name=path.name, mime_type=mime_type, data=data)
