"""Sequential ingestion of invoice documents."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from reelcost.database.base import Database
from reelcost.domain.entities import Invoice
from reelcost.domain.errors import DomainError, DuplicateError
from reelcost.domain.invoice import InvoiceService
from reelcost.integrations.documents import read_document
from reelcost.integrations.extraction import DocumentPayload, Extractor

logger = logging.getLogger(__name__)


class DocumentStatus(str, Enum):
    """Progress of one document through ingestion."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    SAVED = "saved"
    DUPLICATE = "duplicate"
    ERROR = "error"


FINISHED_STATUSES = {DocumentStatus.SAVED, DocumentStatus.DUPLICATE}


@dataclass
class DocumentProgress:
    """Ingestion state of a single document.

    Documents queued from disk carry only their path until they are read.
    """

    name: str
    document: Optional[DocumentPayload] = None
    path: Optional[Path] = None
    status: DocumentStatus = DocumentStatus.PENDING
    invoice: Optional[Invoice] = None
    error: Optional[str] = None


@dataclass
class IngestionReport:
    """Queue of documents with their outcomes."""

    items: list[DocumentProgress] = field(default_factory=list)

    def count(self, status: DocumentStatus) -> int:
        return sum(1 for item in self.items if item.status == status)

    def clear_finished(self) -> None:
        """Drop saved and duplicate documents, keeping failures for another try."""
        self.items = [item for item in self.items if item.status not in FINISHED_STATUSES]


class IngestionService:
    """Turns documents into draft invoices one at a time.

    A failing document is marked and skipped; the rest of the queue still
    runs. Duplicates are discarded, not retried.
    """

    def __init__(
        self,
        db: Database,
        extractor: Extractor,
        on_progress: Optional[Callable[[DocumentProgress], None]] = None,
    ):
        """Initialize ingestion service.

        Args:
            db: Database instance
            extractor: Extraction backend
            on_progress: Optional callback invoked on every status change
        """
        self.db = db
        self.extractor = extractor
        self.invoice_service = InvoiceService(db)
        self.on_progress = on_progress

    def _set_status(self, item: DocumentProgress, status: DocumentStatus) -> None:
        item.status = status
        if self.on_progress is not None:
            self.on_progress(item)

    def ingest(
        self,
        documents: list[DocumentPayload],
        user_id: str,
        project_id: Optional[int] = None,
    ) -> IngestionReport:
        """Extract and save each document as a draft invoice.

        Args:
            documents: Documents to process, in order
            user_id: Submitting user
            project_id: Target project, or None for the global inbox

        Returns:
            IngestionReport with one entry per document
        """
        items = [DocumentProgress(name=d.name, document=d) for d in documents]
        return self._run(IngestionReport(items=items), user_id, project_id)

    def ingest_files(
        self,
        paths: list[Union[str, Path]],
        user_id: str,
        project_id: Optional[int] = None,
    ) -> IngestionReport:
        """Read, extract and save each file as a draft invoice.

        A file that cannot be read is marked as failed like any other
        document error.
        """
        items = [DocumentProgress(name=Path(p).name, path=Path(p)) for p in paths]
        return self._run(IngestionReport(items=items), user_id, project_id)

    def _process(self, item: DocumentProgress, user_id: str, project_id: Optional[int]) -> Invoice:
        if item.document is None:
            item.document = read_document(item.path)
        extraction = self.extractor.extract(item.document)
        return self.invoice_service.create_invoice(
            extraction,
            user_id=user_id,
            project_id=project_id,
            file_content=item.document.data,
            file_name=item.document.name,
            file_mime_type=item.document.mime_type,
        )

    def _run(
        self, report: IngestionReport, user_id: str, project_id: Optional[int]
    ) -> IngestionReport:
        for item in report.items:
            self._set_status(item, DocumentStatus.ANALYZING)
            try:
                item.invoice = self._process(item, user_id, project_id)
            except DuplicateError as e:
                item.error = str(e)
                logger.info("Skipped duplicate document %s: %s", item.name, e)
                self._set_status(item, DocumentStatus.DUPLICATE)
            except DomainError as e:
                item.error = str(e)
                logger.warning("Failed to ingest %s: %s", item.name, e)
                self._set_status(item, DocumentStatus.ERROR)
            else:
                self._set_status(item, DocumentStatus.SAVED)

        logger.info(
            "Ingested %d documents: %d saved, %d duplicate, %d failed",
            len(report.items),
            report.count(DocumentStatus.SAVED),
            report.count(DocumentStatus.DUPLICATE),
            report.count(DocumentStatus.ERROR),
        )
        return report
