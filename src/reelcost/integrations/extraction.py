"""Invoice field extraction through an HTTP extraction service."""

import abc
import base64
import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from reelcost.domain.errors import ExternalServiceError
from reelcost.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class ExtractionResult(BaseModel):
    """Invoice fields read from a document.

    Values are proposals: every field may be missing, and users review them
    before an invoice leaves draft.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ico: Optional[str] = None
    company_name: Optional[str] = None
    bank_account: Optional[str] = None
    iban: Optional[str] = None
    variable_symbol: Optional[str] = None
    description: Optional[str] = None
    amount_with_vat: Optional[Decimal] = None
    amount_without_vat: Optional[Decimal] = None
    currency: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    raw_text: Optional[str] = None

    @field_validator("ico", "variable_symbol", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        # Services sometimes return identifiers as JSON numbers
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("amount_with_vat", "amount_without_vat", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                return None
            return parse_amount(value)
        if isinstance(value, float):
            return Decimal(str(value))
        return value


@dataclass(frozen=True)
class DocumentPayload:
    """A document ready to be sent for extraction.

    Binary documents carry ``data`` and ``mime_type``; spreadsheet exports are
    sent as ``text``.
    """

    name: str
    mime_type: str
    data: Optional[bytes] = None
    text: Optional[str] = None

    def request_body(self) -> dict[str, str]:
        if self.text is not None:
            return {"text": self.text}
        return {
            "mime_type": self.mime_type,
            "data": base64.b64encode(self.data or b"").decode("ascii"),
        }


class Extractor(abc.ABC):
    """Contract that every extraction backend must implement."""

    @abc.abstractmethod
    def extract(self, document: DocumentPayload) -> ExtractionResult:
        """Read invoice fields from *document*.

        Raises:
            ExternalServiceError: If the backend fails or returns unusable data
        """


@dataclass(frozen=True)
class ExtractionSettings:
    """Connection settings of the HTTP extraction service."""

    url: str
    api_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


def extraction_settings_from_env() -> ExtractionSettings:
    """Read extraction settings from REELCOST_EXTRACTION_* variables.

    Raises:
        ExternalServiceError: If no service URL is configured
    """
    url = os.environ.get("REELCOST_EXTRACTION_URL")
    if not url:
        raise ExternalServiceError(
            "No extraction service configured. Set REELCOST_EXTRACTION_URL."
        )
    timeout_str = os.environ.get("REELCOST_EXTRACTION_TIMEOUT")
    try:
        timeout = float(timeout_str) if timeout_str else DEFAULT_TIMEOUT
    except ValueError:
        raise ExternalServiceError(
            f"Invalid REELCOST_EXTRACTION_TIMEOUT value: '{timeout_str}'"
        )
    return ExtractionSettings(
        url=url,
        api_key=os.environ.get("REELCOST_EXTRACTION_API_KEY") or None,
        timeout=timeout,
    )


class HttpExtractor(Extractor):
    """Extractor posting documents to an HTTP endpoint.

    Failures are reported once; there is no retry.
    """

    def __init__(
        self,
        settings: ExtractionSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def extract(self, document: DocumentPayload) -> ExtractionResult:
        logger.debug("Extracting %s (%s)", document.name, document.mime_type)
        try:
            with httpx.Client(timeout=self.settings.timeout, transport=self._transport) as client:
                resp = client.post(
                    self.settings.url,
                    headers=self._headers(),
                    json=document.request_body(),
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Extraction of %s failed: %s", document.name, e)
            raise ExternalServiceError(
                f"Extraction failed with HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Extraction of %s failed: %s", document.name, e)
            raise ExternalServiceError(f"Extraction failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError(f"Extraction returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ExternalServiceError("Extraction returned an unexpected response shape")
        try:
            return ExtractionResult.model_validate(data)
        except ValidationError as e:
            raise ExternalServiceError(f"Extraction returned invalid data: {e}") from e
