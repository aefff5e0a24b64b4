from typing import Any

import httpx

from recapify.extraction.base import BaseTextExtractor
from recapify.extraction.exceptions import CorruptFileError, ExtractionBackendError


class OcrSpaceAdapter(BaseTextExtractor):
    """Extracts text from scanned PDFs through the OCR.space HTTP API.

    Stateless from the caller's side: nothing is persisted remotely.
    """

    def __init__(
        self,
        *,
        api_key: str,
        url: str,
        timeout_seconds: int,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = url
        self._client = http_client or httpx.Client(timeout=timeout_seconds)

    def extract(self, file_bytes: bytes) -> str:
        try:
            response = self._client.post(
                self._url,
                headers={"apikey": self._api_key},
                data={"filetype": "PDF", "isOverlayRequired": "false"},
                files={"file": ("document.pdf", file_bytes, "application/pdf")},
            )
            response.raise_for_status()
            payload: dict[str, Any] = response.json()
        except httpx.HTTPError as exc:
            raise ExtractionBackendError(f"OCR request failed: {exc}") from exc
        except ValueError as exc:
            raise ExtractionBackendError(f"OCR returned invalid JSON: {exc}") from exc

        if payload.get("IsErroredOnProcessing"):
            message = payload.get("ErrorMessage") or "unknown OCR error"
            raise CorruptFileError(f"OCR could not process the file: {message}")

        results = payload.get("ParsedResults") or []
        pages = [str(item.get("ParsedText") or "") for item in results]
        return "\n".join(pages).strip()
