import asyncio
from typing import Any, Callable, TypeVar


T = TypeVar("T")


class AsyncJolt:
    """Yield to the event loop either side of a blocking hand-off."""

    async def __aenter__(self) -> None:
        await asyncio.sleep(0)

    async def __aexit__(self, *args: Any, **kwargs: Any) -> None:
        await asyncio.sleep(0)


async def in_thread(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking client call (supabase, for one) off the event loop."""
    async with AsyncJolt():
        return await asyncio.to_thread(func, *args, **kwargs)
