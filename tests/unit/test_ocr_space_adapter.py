import httpx
import pytest

from recapify.extraction.exceptions import CorruptFileError, ExtractionBackendError
from recapify.extraction.ocr_space_adapter import OcrSpaceAdapter


def _adapter(handler) -> OcrSpaceAdapter:  # type: ignore[no-untyped-def]
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OcrSpaceAdapter(
        api_key="ocr-key",
        url="https://ocr.example/parse/image",
        timeout_seconds=10,
        http_client=client,
    )


class TestOcrSpaceAdapter:
    def test_joins_parsed_pages(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "IsErroredOnProcessing": False,
                    "ParsedResults": [{"ParsedText": "Page A"}, {"ParsedText": "Page B "}],
                },
            )

        result = _adapter(handler).extract(b"%PDF-bytes")

        assert result == "Page A\nPage B"
        assert seen[0].headers["apikey"] == "ocr-key"
        assert seen[0].method == "POST"

    def test_processing_error_is_corrupt_file(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"IsErroredOnProcessing": True, "ErrorMessage": ["bad file"]}
            )

        with pytest.raises(CorruptFileError, match="bad file"):
            _adapter(handler).extract(b"junk")

    def test_http_error_is_backend_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(ExtractionBackendError, match="OCR request failed"):
            _adapter(handler).extract(b"%PDF")

    def test_network_error_is_backend_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ExtractionBackendError):
            _adapter(handler).extract(b"%PDF")

    def test_invalid_json_is_backend_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(ExtractionBackendError, match="invalid JSON"):
            _adapter(handler).extract(b"%PDF")
