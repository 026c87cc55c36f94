"""Tests for document ingestion."""

from decimal import Decimal

from reelcost.domain.errors import ExternalServiceError
from reelcost.domain.ingestion import DocumentStatus, IngestionService
from reelcost.integrations.extraction import DocumentPayload, ExtractionResult, Extractor


class FakeExtractor(Extractor):
    """Extractor returning canned results keyed by document name."""

    def __init__(self, results):
        self.results = results
        self.calls = []

    def extract(self, document):
        self.calls.append(document.name)
        result = self.results[document.name]
        if isinstance(result, Exception):
            raise result
        return result


def _doc(name):
    return DocumentPayload(name=name, mime_type="application/pdf", data=b"%PDF " + name.encode())


def test_ingest_saves_drafts_in_order(temp_db, sample_project):
    extractor = FakeExtractor(
        {
            "a.pdf": ExtractionResult(ico="11111111", variable_symbol="1"),
            "b.pdf": ExtractionResult(ico="22222222", variable_symbol="2"),
        }
    )
    report = IngestionService(temp_db, extractor).ingest(
        [_doc("a.pdf"), _doc("b.pdf")], user_id="lp1", project_id=sample_project.id
    )

    assert extractor.calls == ["a.pdf", "b.pdf"]
    assert [item.status for item in report.items] == [DocumentStatus.SAVED] * 2
    assert [item.invoice.internal_id for item in report.items] == [1, 2]
    assert report.items[0].invoice.file_name == "a.pdf"
    assert temp_db.get_invoice_file_content(report.items[0].invoice.id) == b"%PDF a.pdf"


def test_failure_does_not_stop_the_queue(temp_db, sample_project):
    extractor = FakeExtractor(
        {
            "a.pdf": ExternalServiceError("Extraction failed: timeout"),
            "b.pdf": ExtractionResult(ico="22222222", variable_symbol="2"),
        }
    )
    report = IngestionService(temp_db, extractor).ingest(
        [_doc("a.pdf"), _doc("b.pdf")], user_id="lp1", project_id=sample_project.id
    )

    failed, saved = report.items
    assert failed.status == DocumentStatus.ERROR
    assert failed.error == "Extraction failed: timeout"
    assert saved.status == DocumentStatus.SAVED


def test_duplicates_are_marked_and_discarded(temp_db, sample_project):
    same = ExtractionResult(ico="11111111", amount_with_vat=Decimal("1210"))
    extractor = FakeExtractor({"a.pdf": same, "b.pdf": same})
    report = IngestionService(temp_db, extractor).ingest(
        [_doc("a.pdf"), _doc("b.pdf")], user_id="lp1", project_id=sample_project.id
    )

    assert [item.status for item in report.items] == [
        DocumentStatus.SAVED,
        DocumentStatus.DUPLICATE,
    ]
    assert report.items[1].invoice is None
    assert len(temp_db.list_invoices(project_id=sample_project.id)) == 1


def test_clear_finished_keeps_failures(temp_db, sample_project):
    extractor = FakeExtractor(
        {
            "a.pdf": ExtractionResult(ico="11111111", variable_symbol="1"),
            "b.pdf": ExtractionResult(ico="11111111", variable_symbol="1"),
            "c.pdf": ExternalServiceError("boom"),
        }
    )
    report = IngestionService(temp_db, extractor).ingest(
        [_doc("a.pdf"), _doc("b.pdf"), _doc("c.pdf")], user_id="lp1", project_id=sample_project.id
    )
    report.clear_finished()

    assert [item.document.name for item in report.items] == ["c.pdf"]


def test_progress_callback_sees_every_status(temp_db, sample_project):
    seen = []
    extractor = FakeExtractor({"a.pdf": ExtractionResult(ico="11111111")})
    service = IngestionService(
        temp_db, extractor, on_progress=lambda item: seen.append(item.status)
    )
    service.ingest([_doc("a.pdf")], user_id="lp1", project_id=sample_project.id)

    assert seen == [DocumentStatus.ANALYZING, DocumentStatus.SAVED]


def test_ingest_into_inbox(temp_db):
    extractor = FakeExtractor({"a.pdf": ExtractionResult(ico="11111111")})
    report = IngestionService(temp_db, extractor).ingest([_doc("a.pdf")], user_id="lp1")

    invoice = report.items[0].invoice
    assert invoice.project_id is None
    assert invoice.internal_id is None


def test_unknown_project_marks_error(temp_db):
    extractor = FakeExtractor({"a.pdf": ExtractionResult(ico="11111111")})
    report = IngestionService(temp_db, extractor).ingest(
        [_doc("a.pdf")], user_id="lp1", project_id=404
    )
    assert report.items[0].status == DocumentStatus.ERROR


def test_ingest_files_marks_unreadable_file_and_continues(temp_db, sample_project, tmp_path):
    notes = tmp_path / "notes.docx"
    notes.write_bytes(b"PK\x03\x04")
    scan = tmp_path / "scan.pdf"
    scan.write_bytes(b"%PDF scan")
    extractor = FakeExtractor({"scan.pdf": ExtractionResult(ico="11111111", variable_symbol="1")})

    report = IngestionService(temp_db, extractor).ingest_files(
        [notes, tmp_path / "missing.pdf", scan], user_id="lp1", project_id=sample_project.id
    )

    assert [item.status for item in report.items] == [
        DocumentStatus.ERROR,
        DocumentStatus.ERROR,
        DocumentStatus.SAVED,
    ]
    assert "Unsupported document type" in report.items[0].error
    assert "File not found" in report.items[1].error
    assert extractor.calls == ["scan.pdf"]
    assert report.items[2].invoice.file_name == "scan.pdf"
