"""
Gemini generateContent client

Provides:
- Full-article generation from a headline, description and snippet
- API key validation with an explicit policy for inconclusive probes

Calls go straight to the REST endpoint with the user's own key. Every call
is raced against a deadline; on expiry the request is cancelled.
"""

import asyncio
import enum
import httpx
import logging
from typing import Any, Dict, Optional

from newsflow.schemas import ArticleContent

logger = logging.getLogger(__name__)

GOOGLE_KEY_PREFIX = "AIza"

ARTICLE_PROMPT = """
You are an expert journalist. Based on the title, description, and any available content provided,
write a well-structured, detailed, and informative news article.

Create a full article with a proper introduction, body, and conclusion. Include analysis and context around the topic.
Make the content engaging, factual, and in a journalistic style.

Article should be at least 5-6 paragraphs to fully cover the topic. Avoid making up specific facts, quotes,
or statistics that aren't clearly implied by the provided information.

Title: {title}
Description: {description}
Content: {content}
URL: {url}
"""

# Probe failures that still prove the key authenticated
_VALID_KEY_MARKERS = ("safety", "blocked", "not available", "rate limit")
_INVALID_KEY_MARKERS = ("api key", "invalid", "authentication", "unauthorized", "unauthenticated")


class KeyValidationPolicy(str, enum.Enum):
    """How to decide a well-formed key whose live probe was inconclusive."""
    LENIENT = "LENIENT"  # accept it
    STRICT = "STRICT"  # reject it


class GeminiError(Exception):
    """Generation failed."""


class GeminiTimeout(GeminiError):
    """Generation did not finish before the deadline."""


def build_article_prompt(article: ArticleContent) -> str:
    return ARTICLE_PROMPT.format(
        title=article.title,
        description=article.description or "",
        content=article.content or "",
        url=article.url or "",
    )


def _error_message(resp: httpx.Response) -> str:
    """The error.message field when the body has one, else the raw text."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return resp.text


def _extract_text(data: Any) -> str:
    if not isinstance(data, dict):
        raise GeminiError(f"Unexpected response shape: {type(data).__name__}")
    candidates = data.get("candidates") or []
    if not candidates:
        reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates returned")
        raise GeminiError(f"Response blocked: {reason}")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts)


class GeminiClient:

    def __init__(
        self,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        model: str = "gemini-1.5-pro",
        timeout: float = 60.0,
        validation_timeout: float = 15.0,
        policy: KeyValidationPolicy = KeyValidationPolicy.LENIENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.validation_timeout = validation_timeout
        self.policy = policy
        self._transport = transport

    async def _generate(self, api_key: str, prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        body = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.post(url, params={"key": api_key}, json=body)
                if resp.status_code >= 400:
                    raise GeminiError(f"Gemini returned {resp.status_code}: {_error_message(resp)}")
                data = resp.json()
        except httpx.HTTPError as e:
            raise GeminiError(f"Gemini request failed: {e}") from e
        except ValueError as e:
            raise GeminiError(f"Gemini returned malformed JSON: {e}") from e
        return _extract_text(data)

    async def generate(self, api_key: str, prompt: str, timeout: Optional[float] = None) -> str:
        """Generate text, cancelling the request once the deadline passes."""
        deadline = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(self._generate(api_key, prompt), timeout=deadline)
        except asyncio.TimeoutError as e:
            raise GeminiTimeout(f"Gemini did not answer within {deadline:.0f}s") from e

    async def summarize_article(self, article: ArticleContent, api_key: str) -> str:
        """Expand a headline and its snippet into a full article."""
        if not api_key:
            raise GeminiError("Gemini API key is required")
        text = await self.generate(api_key, build_article_prompt(article))
        logger.info(f"Generated {len(text)} characters for '{article.title[:60]}'")
        return text

    async def validate_api_key(self, api_key: Optional[str]) -> Dict[str, Any]:
        """
        Check a key with a one-word probe.

        Returns {"valid": bool, "reason": str}. Keys that are empty or lack
        the Google prefix are rejected without a network call.
        """
        if not api_key or not api_key.strip():
            return {"valid": False, "reason": "API key is empty"}
        if not api_key.startswith(GOOGLE_KEY_PREFIX):
            return {"valid": False, "reason": "API key doesn't match the expected format for Google API keys"}

        try:
            await self.generate(api_key, "Hello", timeout=self.validation_timeout)
            return {"valid": True, "reason": "API key validated"}
        except GeminiTimeout:
            logger.warning("Gemini key validation timed out")
            return self._inconclusive("validation timed out")
        except GeminiError as e:
            message = str(e).lower()
            if any(marker in message for marker in _VALID_KEY_MARKERS):
                return {"valid": True, "reason": "API key accepted; probe content was filtered"}
            if any(marker in message for marker in _INVALID_KEY_MARKERS):
                logger.info(f"Gemini key rejected: {e}")
                return {"valid": False, "reason": "Invalid API key"}
            logger.warning(f"Gemini key validation inconclusive: {e}")
            return self._inconclusive("validation request failed")

    def _inconclusive(self, what: str) -> Dict[str, Any]:
        if self.policy == KeyValidationPolicy.LENIENT:
            return {"valid": True, "reason": f"Key format looks valid; {what}"}
        return {"valid": False, "reason": f"Could not verify key; {what}"}
