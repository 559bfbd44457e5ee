"LLM client infrastructure for the extraction tier."

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, Protocol

import httpx
from dotenv import load_dotenv

from config.settings import LLMSettings
from notes_validator.common.exceptions import LLMError
from notes_validator.common.logger import get_logger
from notes_validator.infra.llm_control import llm_slot, retry_delay
from notes_validator.infra.settings import get_infra_settings

logger = get_logger("common.llm")


# Load environment variables from a .env file if present so NOTES_LLM_* keys are available locally.
# Important: do NOT override explicitly-exported environment variables.
if not get_infra_settings().skip_dotenv:
    try:
        load_dotenv(dotenv_path=Path(__file__).resolve().parents[2] / ".env", override=False)
    except Exception as e:
        logger.warning(
            "Failed to load .env via python-dotenv (%s); proceeding with OS env only",
            type(e).__name__,
        )


def _normalize_base_url(base_url: str | None) -> str:
    normalized = (base_url or "").strip().rstrip("/")
    if normalized.endswith("/v1"):
        normalized = normalized[:-3].rstrip("/")
    return normalized or "https://api.openai.com"


def _request_id(response: httpx.Response) -> str | None:
    for header_name in ("x-request-id", "request-id", "x-openai-request-id"):
        value = response.headers.get(header_name)
        if value:
            return value
    return None


def _error_message(response: httpx.Response) -> str:
    message = ""
    try:
        data = response.json()
    except Exception:  # noqa: BLE001
        data = None

    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict):
            message = str(err.get("message") or "")

    if not message:
        message = str((response.text or "")).strip()

    message = " ".join(message.split())
    if len(message) > 500:
        message = message[:500] + "…"
    return message or f"HTTP {response.status_code}"


class LLMInterface(Protocol):
    def generate(self, prompt: str, **kwargs: Any) -> str:
        ...


class OpenAICompatLLM:
    """Plain-text client for OpenAI-compatible Chat Completions endpoints.

    Transient failures (transport errors, 429, 5xx) are retried with backoff
    inside a total deadline; everything else raises `LLMError`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        *,
        base_url: str | None = None,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model or "gpt-4o-mini"
        self.base_url = _normalize_base_url(base_url)
        self.timeout_seconds = float(timeout_seconds)
        self.max_retries = max(0, int(max_retries))
        self._transport = transport

        if not self.api_key:
            logger.warning("No LLM API key configured; OpenAICompatLLM calls will fail.")

    def _get_timeout(self) -> httpx.Timeout:
        return httpx.Timeout(connect=10.0, read=self.timeout_seconds, write=30.0, pool=30.0)

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}" if self.api_key else "",
            "Content-Type": "application/json",
        }

    def generate(self, prompt: str, **kwargs: Any) -> str:
        """Return the assistant message text for a single-turn prompt."""
        url = f"{self.base_url}/v1/chat/completions"
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": float(kwargs.get("temperature", 0.0)),
        }
        if kwargs.get("max_tokens") is not None:
            payload["max_tokens"] = int(kwargs["max_tokens"])

        deadline = time.monotonic() + float(get_infra_settings().llm_deadline_s)
        attempts = self.max_retries + 1
        last_error = "no attempt made"

        with httpx.Client(timeout=self._get_timeout(), transport=self._transport) as client:
            for attempt in range(attempts):
                try:
                    with llm_slot(timeout=max(0.0, deadline - time.monotonic())):
                        response = client.post(url, headers=self._get_headers(), json=payload)
                except (httpx.TimeoutException, httpx.TransportError) as exc:
                    if attempt + 1 < attempts and time.monotonic() < deadline:
                        logger.warning(
                            "Chat Completions transport error; retrying endpoint=%s model=%s",
                            url,
                            self.model,
                        )
                        time.sleep(min(retry_delay(attempt), max(0.0, deadline - time.monotonic())))
                        continue
                    raise LLMError(
                        f"Chat Completions transport error (model={self.model}): {type(exc).__name__}"
                    ) from exc

                if response.status_code < 400:
                    return self._parse_content(response)

                request_id = _request_id(response)
                logger.warning(
                    "Chat Completions error status=%s model=%s%s",
                    response.status_code,
                    self.model,
                    f" request_id={request_id}" if request_id else "",
                )
                retryable = response.status_code == 429 or 500 <= response.status_code <= 599
                if not retryable:
                    raise LLMError(
                        f"Chat Completions error {response.status_code} (model={self.model}): "
                        f"{_error_message(response)}"
                    )

                last_error = f"{response.status_code} {_error_message(response)}"
                if attempt + 1 >= attempts or time.monotonic() >= deadline:
                    break
                time.sleep(min(retry_delay(attempt, response.headers), max(0.0, deadline - time.monotonic())))

        raise LLMError(f"Chat Completions retries exhausted (model={self.model}): last error {last_error}")

    @staticmethod
    def _parse_content(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError as exc:
            raise LLMError("Chat Completions returned non-JSON body") from exc
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise LLMError("No choices returned from Chat Completions API")
        content = (choices[0].get("message") or {}).get("content")
        return str(content or "")


def build_llm(settings: LLMSettings | None = None) -> LLMInterface | None:
    """Return a configured LLM client, or None when the LLM tier is disabled."""
    settings = settings or LLMSettings()
    if not settings.enabled:
        return None
    if not settings.api_key:
        logger.warning("LLM tier enabled but no API key set; LLM extraction disabled")
        return None
    return OpenAICompatLLM(
        api_key=settings.api_key,
        model=settings.model,
        base_url=settings.base_url,
        timeout_seconds=settings.timeout_s,
        max_retries=settings.max_retries,
    )


__all__ = ["LLMInterface", "OpenAICompatLLM", "build_llm"]
