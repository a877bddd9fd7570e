from enum import Enum
import logging
from typing import Any, Self

import httpx

from recipe_assistant.config import Config, api_key_usable
from recipe_assistant.errors import AuthError, TransportError, UpstreamError
from recipe_assistant.prompts import CHAT_SYSTEM_PROMPT, RECIPE_SYSTEM_PROMPT


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://api.openai.com/v1/"
DEFAULT_MODEL = "gpt-3.5-turbo"
MAX_TOKENS = 1000
TEMPERATURE = 0.7
TIMEOUT = 60


class Mode(Enum):
    recipe = "recipe"
    chat = "chat"


SYSTEM_PROMPTS = {
    Mode.recipe: RECIPE_SYSTEM_PROMPT,
    Mode.chat: CHAT_SYSTEM_PROMPT,
}


def completion_http_client(
    base_url: str = DEFAULT_BASE_URL, timeout: float = TIMEOUT
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )


class ChatMsg:
    def __init__(self, *, role: str, content: str) -> None:
        self.role = role
        self.content = content

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


def _error_message(data: Any) -> str | None:
    if not isinstance(data, dict) or "error" not in data:
        return None
    error = data["error"]
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error)


class CompletionClient:
    """Sends one system + user prompt pair and returns the reply text.

    No state is kept between calls and nothing is retried. The credential is
    checked before any request is built.
    """

    @classmethod
    def from_config(cls, config: Config, *, client: httpx.AsyncClient | None = None) -> Self:
        return cls(
            api_key=config.openai_api_key,
            model=config.completion_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            client=(
                completion_http_client(config.openai_base_url, config.request_timeout)
                if client is None
                else client
            ),
        )

    def __init__(
        self,
        *,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = TEMPERATURE,
        max_tokens: int = MAX_TOKENS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = completion_http_client() if client is None else client

    @property
    def configured(self) -> bool:
        return api_key_usable(self.api_key)

    def set_api_key(self, api_key: str) -> None:
        if not api_key_usable(api_key):
            raise AuthError("Please enter a valid OpenAI API key.")
        self.api_key = api_key.strip()

    def payload(self, prompt: str, mode: Mode) -> dict[str, Any]:
        messages = [
            ChatMsg(role="system", content=SYSTEM_PROMPTS[mode]),
            ChatMsg(role="user", content=prompt),
        ]
        return {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

    async def complete(self, prompt: str, mode: Mode) -> str:
        if not self.configured:
            raise AuthError("Please enter your OpenAI API key.")

        logger.debug("Requesting %s completion from %s", mode.value, self.model)
        try:
            resp = await self._client.post(
                "chat/completions",
                json=self.payload(prompt, mode),
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Completion request failed: {e!r}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        message = _error_message(data)
        if message is not None:
            raise UpstreamError(message, status_code=resp.status_code)

        if not resp.is_success:
            raise TransportError(
                f"OpenAI API error: {resp.status_code}", status_code=resp.status_code
            )

        try:
            content = data["choices"][0]["message"]["content"]  # type: ignore[index]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError(
                f"Problem reading completion. {data}", status_code=resp.status_code
            ) from e
        return content or ""

    async def close(self) -> None:
        await self._client.aclose()
