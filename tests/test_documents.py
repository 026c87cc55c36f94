"""Tests for reading documents from disk."""

import pytest

from reelcost.domain.errors import NotFoundError, ParseError
from reelcost.integrations.documents import read_document


def test_read_pdf(tmp_path):
    path = tmp_path / "Invoice.PDF"
    path.write_bytes(b"%PDF-1.4 data")

    document = read_document(path)
    assert document.name == "Invoice.PDF"
    assert document.mime_type == "application/pdf"
    assert document.data == b"%PDF-1.4 data"
    assert document.text is None


def test_read_image(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff")
    assert read_document(path).mime_type == "image/jpeg"


def test_read_csv_renders_sheet_text(tmp_path):
    path = tmp_path / "rental.csv"
    path.write_text("Item,Price\nLens,1200\n", encoding="utf-8")

    document = read_document(path)
    assert document.data is None
    assert document.text == (
        "Document Content (Spreadsheet Export):\n"
        "--- Sheet: rental ---\n"
        "Item,Price\nLens,1200"
    )


def test_read_tsv(tmp_path):
    path = tmp_path / "rental.tsv"
    path.write_text("Item\tPrice\nLens\t1200\n", encoding="utf-8")
    assert read_document(path).text.endswith("Item,Price\nLens,1200")


def test_unsupported_type(tmp_path):
    path = tmp_path / "notes.docx"
    path.write_bytes(b"PK")
    with pytest.raises(ParseError, match="Unsupported"):
        read_document(path)


def test_missing_file(tmp_path):
    with pytest.raises(NotFoundError):
        read_document(tmp_path / "nope.pdf")
