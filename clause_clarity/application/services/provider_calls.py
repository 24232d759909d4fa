"""Caller-level timeouts for provider calls.

A timeout is reported as the provider's own failure mode (ProviderError with
status 504), never as a separate error kind.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from clause_clarity.domain.errors import ProviderError

T = TypeVar("T")


async def with_timeout(
    awaitable: Awaitable[T],
    timeout_s: float | None,
    error_cls: type[ProviderError],
    what: str,
) -> T:
    if timeout_s is None or timeout_s <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout_s)
    except TimeoutError as ex:
        raise error_cls(f"{what} timed out after {timeout_s:g}s", status=504) from ex
