import httpx
import structlog

from app.core.exceptions import AiServiceError, AiServiceNotConfiguredError

logger = structlog.get_logger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiTextGenerator:
    """
    Thin Gemini REST client (generateContent).

    Only the API key is required; without it every call raises
    AiServiceNotConfiguredError so the report endpoint can answer 503.
    """

    provider = "google-gemini"

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-1.5-flash",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate_text(self, prompt: str) -> str:
        if not self.is_configured:
            raise AiServiceNotConfiguredError()

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": 2048, "temperature": 0.3, "topP": 0.95},
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            r = await client.post(
                f"{GEMINI_BASE_URL}/{self.model}:generateContent",
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )
            if r.status_code >= 400:
                logger.error("report.provider_error", model=self.model, status=r.status_code, body=r.text[:500])
                raise AiServiceError(f"Gemini error {r.status_code}")

        text = _extract_text(r.json())
        if not text:
            logger.error("report.empty_response", model=self.model)
            raise AiServiceError()
        return text


def _extract_text(body: dict) -> str | None:
    for candidate in body.get("candidates") or []:
        parts = (candidate.get("content") or {}).get("parts") or []
        joined = "\n".join(p["text"] for p in parts if isinstance(p.get("text"), str)).strip()
        if joined:
            return joined
    return None
