"""
Chat-completions client that turns a topic into raw deck text.

Prompt wording and model choice live here; the codec never sees anything but
the returned text.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .constants import DEFAULT_TEMPERATURE
from .exceptions import GenerationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = """\
You generate flashcard decks for children. Output ONLY the deck in this exact format, nothing else:

Title: <topic>

Q: <question> | A: <answer>

Generate exactly {count} question/answer pairs about "{topic}" appropriate for ages {age_range}. Keep questions and answers short and clear."""

USER_PROMPT_TEMPLATE = (
    'Generate a {count}-card flashcard deck about "{topic}" for ages {age_range}.'
)


def build_messages(topic: str, age_range: str, count: int) -> List[Dict[str, str]]:
    """Return the system and user messages for one deck request."""
    fields = {"topic": topic, "age_range": age_range, "count": count}
    return [
        {"role": "system", "content": SYSTEM_PROMPT_TEMPLATE.format(**fields)},
        {"role": "user", "content": USER_PROMPT_TEMPLATE.format(**fields)},
    ]


def _error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of a provider error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"HTTP {response.status_code}"


def _extract_content(body: Any) -> str:
    try:
        choices = body["choices"]
    except (TypeError, KeyError) as e:
        raise GenerationError("Malformed response from API: no choices") from e
    if not choices:
        raise GenerationError("Empty response from API")
    try:
        content = choices[0]["message"]["content"]
    except (TypeError, KeyError, IndexError) as e:
        raise GenerationError("Malformed response from API: no message content") from e
    if not isinstance(content, str) or not content.strip():
        raise GenerationError("Empty response from API")
    return content


class DeckGenerator:
    """Calls the configured provider and returns raw deck text."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        """
        Args:
            settings: Provider URL, model, key and timeout.
            client: Optional pre-built httpx client (tests inject one with a
                MockTransport). When omitted, a client is created per request.
        """
        self.settings = settings
        self._client = client

    def generate(self, topic: str, age_range: str, count: int) -> str:
        """
        Request a deck of ``count`` cards about ``topic``.

        Returns:
            str: The completion text, unparsed.

        Raises:
            ConfigurationError: If no API key is configured.
            GenerationError: On transport failure or timeout, a non-200 status
                (``status_code`` set), or a body without usable content.
        """
        api_key = self.settings.require_api_key()
        url = f"{self.settings.openai_base_url.rstrip('/')}/chat/completions"
        payload = {
            "model": self.settings.openai_model,
            "messages": build_messages(topic, age_range, count),
            "temperature": DEFAULT_TEMPERATURE,
        }
        headers = {"Authorization": f"Bearer {api_key}"}

        logger.info(
            f"Requesting {count} cards about '{topic}' for ages {age_range} "
            f"from {self.settings.openai_model}"
        )
        try:
            if self._client is not None:
                response = self._client.post(
                    url,
                    json=payload,
                    headers=headers,
                    timeout=self.settings.request_timeout,
                )
            else:
                with httpx.Client(timeout=self.settings.request_timeout) as client:
                    response = client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.debug(f"Generation request timed out: {e}")
            raise GenerationError(
                f"Request timed out after {self.settings.request_timeout:g}s"
            ) from e
        except httpx.HTTPError as e:
            logger.debug(f"Generation request failed: {e}")
            raise GenerationError(f"Request failed: {e}") from e

        if response.status_code != 200:
            message = _error_message(response)
            logger.debug(f"Provider returned {response.status_code}: {message}")
            raise GenerationError(
                f"API error ({response.status_code}): {message}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise GenerationError("Malformed response from API: invalid JSON") from e
        return _extract_content(body)
