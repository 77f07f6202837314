"""Gemini REST client for multimodal occupancy inference."""

import asyncio
import base64
import logging
from typing import Any, Optional

import httpx

from ..detection.models import InferenceRequest
from ..errors import InferenceError, MissingCredentialError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-pro"

# Status codes worth another attempt when retries are enabled
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class GeminiGateway:
    """
    Thin adapter over the Gemini ``generateContent`` endpoint.

    Sends the prompt and inline images of an InferenceRequest and returns the
    text of the first candidate. The service is treated as opaque: nothing
    here interprets the returned text.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 120.0,
        max_retries: int = 0,
        retry_backoff_seconds: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            api_key: Gemini API key (None or empty means unconfigured)
            model: Model name, e.g. "gemini-2.5-pro"
            base_url: API root without trailing slash
            timeout_seconds: Per-attempt request timeout
            max_retries: Extra attempts on 429/5xx or transport errors
            retry_backoff_seconds: Base delay, doubled after each attempt
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key or None
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(0, max_retries)
        self.retry_backoff_seconds = retry_backoff_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        """True when an API credential is available."""
        return self.api_key is not None

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    @staticmethod
    def build_payload(request: InferenceRequest) -> dict[str, Any]:
        """Translate an InferenceRequest into a generateContent request body."""
        parts: list[dict[str, Any]] = [{"text": request.prompt}]
        for image in request.images:
            parts.append(
                {
                    "inline_data": {
                        "mime_type": image.mime_type,
                        "data": base64.b64encode(image.data).decode("ascii"),
                    }
                }
            )

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": request.temperature,
                "responseMimeType": request.response_mime_type,
            },
        }

    @staticmethod
    def extract_text(data: Any) -> str:
        """Concatenate the text parts of the first candidate, or '' if there are none."""
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return ""

        if not isinstance(parts, list):
            return ""
        return "".join(
            p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)
        )

    async def send(self, request: InferenceRequest) -> str:
        """
        Submit a request and return the raw completion text.

        Raises:
            MissingCredentialError: If no API key is configured
            InferenceError: On HTTP errors, timeouts or transport failures
        """
        if not self.is_configured:
            raise MissingCredentialError("Inference API key is not configured")

        payload = self.build_payload(request)
        headers = {"x-goog-api-key": self.api_key}

        async with httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self._transport
        ) as client:
            for attempt in range(self.max_retries + 1):
                try:
                    resp = await client.post(self.endpoint, headers=headers, json=payload)
                    resp.raise_for_status()
                    return self.extract_text(resp.json())
                except httpx.HTTPStatusError as e:
                    status = e.response.status_code
                    if status in RETRYABLE_STATUS and attempt < self.max_retries:
                        await self._backoff(attempt, f"HTTP {status}")
                        continue
                    logger.error(f"Inference request failed with HTTP {status}")
                    raise InferenceError(f"Inference service returned HTTP {status}") from e
                except httpx.TimeoutException as e:
                    if attempt < self.max_retries:
                        await self._backoff(attempt, "timeout")
                        continue
                    logger.error(f"Inference request timed out after {self.timeout_seconds}s")
                    raise InferenceError("Inference service timed out") from e
                except httpx.TransportError as e:
                    if attempt < self.max_retries:
                        await self._backoff(attempt, type(e).__name__)
                        continue
                    logger.error(f"Inference request failed: {type(e).__name__}")
                    raise InferenceError("Inference service unreachable") from e
                except httpx.RequestError as e:
                    # Decoding and other non-transport failures; not retried
                    logger.error(f"Inference request failed: {type(e).__name__}")
                    raise InferenceError("Inference service returned an unreadable response") from e
                except ValueError as e:
                    logger.error("Inference service returned a non-JSON body")
                    raise InferenceError("Inference service returned an invalid response") from e

        # Loop always returns or raises
        raise InferenceError("Inference request failed")

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.retry_backoff_seconds * (2 ** attempt)
        logger.warning(
            f"Inference attempt {attempt + 1} failed ({reason}), retrying in {delay:.1f}s"
        )
        await asyncio.sleep(delay)
