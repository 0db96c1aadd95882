"""Chat-completion adapters for the user's AI integrations."""

import logging

import requests

logger = logging.getLogger(__name__)

OPENAI_API_BASE = "https://api.openai.com/v1"
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
XAI_API_BASE = "https://api.x.ai/v1"
REQUEST_TIMEOUT = 60


class AIProviderError(Exception):
    """Raised when an AI provider request fails."""


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return f"{resp.status_code} {resp.reason}"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return f"{resp.status_code} {resp.reason}"


class OpenAIChatService:
    """
    OpenAI-compatible chat completions.

    Implements LLMService protocol.
    """

    NAME = "OpenAI"
    API_BASE = OPENAI_API_BASE
    MODEL = "gpt-4"

    def __init__(self, api_key: str, model: str | None = None, session: requests.Session | None = None):
        if not api_key:
            raise ValueError(f"No API key provided for {self.NAME}")
        self.api_key = api_key
        self.model = model or self.MODEL
        self._session = session or requests.Session()

    def _payload(self, prompt: str, system: str | None) -> dict:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return {
            "model": self.model,
            "messages": messages,
            "temperature": 0.0,
            "max_tokens": 2048,
            "response_format": {"type": "json_object"},
        }

    def generate(self, prompt: str, system: str | None = None) -> str:
        try:
            resp = self._session.post(
                f"{self.API_BASE}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=self._payload(prompt, system),
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise AIProviderError(f"{self.NAME} API error: {e}") from e

        if not resp.ok:
            message = _error_message(resp)
            logger.error(f"{self.NAME} request failed: {message}")
            raise AIProviderError(f"{self.NAME} API error: {message}")

        try:
            return resp.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise AIProviderError(f"Unexpected response format from {self.NAME} API") from e


class XAIChatService(OpenAIChatService):
    """Grok via xAI's OpenAI-compatible endpoint."""

    NAME = "xAI"
    API_BASE = XAI_API_BASE
    MODEL = "grok-3-beta"

    def _payload(self, prompt: str, system: str | None) -> dict:
        payload = super()._payload(prompt, system)
        payload.pop("max_tokens")
        return payload


class GeminiService:
    """
    Google Gemini generateContent.

    Implements LLMService protocol.
    """

    MODEL = "gemini-pro"

    def __init__(self, api_key: str, model: str | None = None, session: requests.Session | None = None):
        if not api_key:
            raise ValueError("No API key provided for Gemini")
        self.api_key = api_key
        self.model = model or self.MODEL
        self._session = session or requests.Session()

    def generate(self, prompt: str, system: str | None = None) -> str:
        parts = [{"text": system}] if system else []
        parts.append({"text": prompt})
        try:
            resp = self._session.post(
                f"{GEMINI_API_BASE}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json={
                    "contents": [{"role": "user", "parts": parts}],
                    "generationConfig": {
                        "temperature": 0.0,
                        "topP": 0.95,
                        "topK": 40,
                        "maxOutputTokens": 2048,
                    },
                },
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise AIProviderError(f"Gemini API error: {e}") from e

        if not resp.ok:
            message = _error_message(resp)
            logger.error(f"Gemini request failed: {message}")
            raise AIProviderError(f"Gemini API error: {message}")

        try:
            return resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise AIProviderError("Unexpected response format from Gemini API") from e


_SERVICES = {
    "openai": OpenAIChatService,
    "gemini": GeminiService,
    "xai": XAIChatService,
}


def get_ai_service(provider: str, api_key: str, session: requests.Session | None = None):
    """Build the LLMService for an AI integration provider id."""
    service_cls = _SERVICES.get(provider)
    if service_cls is None:
        raise ValueError(f"Unsupported AI provider: {provider}")
    return service_cls(api_key, session=session)


def verify_api_key(provider: str, api_key: str, session: requests.Session | None = None) -> bool:
    """Check an API key by listing the provider's models."""
    http = session or requests
    match provider:
        case "openai":
            url, params, headers = f"{OPENAI_API_BASE}/models", None, {"Authorization": f"Bearer {api_key}"}
        case "gemini":
            url, params, headers = f"{GEMINI_API_BASE}/models", {"key": api_key}, None
        case "xai":
            url, params, headers = f"{XAI_API_BASE}/models", None, {"Authorization": f"Bearer {api_key}"}
        case _:
            raise ValueError(f"Unsupported AI provider: {provider}")

    try:
        resp = http.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        logger.warning(f"{provider} key test failed: {e}")
        return False
    if not resp.ok:
        logger.warning(f"{provider} key test failed with status {resp.status_code}")
        return False
    return True
