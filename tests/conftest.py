import asyncio
from typing import Any, Callable

import httpx

from recipe_assistant.completion import CompletionClient, Mode


class FakeCompletion:
    """Hands out canned replies (or raises canned errors) in call order."""

    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[str, Mode]] = []
        self.gates: dict[int, asyncio.Event] = {}

    def gate(self, call_index: int) -> asyncio.Event:
        """Hold the reply for the nth call until the returned event is set."""
        event = asyncio.Event()
        self.gates[call_index] = event
        return event

    async def complete(self, prompt: str, mode: Mode) -> str:
        index = len(self.calls)
        self.calls.append((prompt, mode))
        reply = self.replies[index]
        if index in self.gates:
            await self.gates[index].wait()
        if isinstance(reply, Exception):
            raise reply
        return reply


def completion_reply(content: str) -> dict[str, Any]:
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def mock_completion_client(
    handler: Callable[[httpx.Request], httpx.Response], *, api_key: str = "sk-test"
) -> CompletionClient:
    client = httpx.AsyncClient(
        base_url="https://api.openai.com/v1/",
        transport=httpx.MockTransport(handler),
    )
    return CompletionClient(api_key=api_key, client=client)


CHICKEN_RICE = (
    '{"title":"Chicken Rice","ingredients":["chicken","rice"],'
    '"instructions":["cook"],"prepTime":"5 min","cookTime":"10 min","servings":"2"}'
)
