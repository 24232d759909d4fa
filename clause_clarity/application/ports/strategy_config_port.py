"""Strategy configuration store port.

The core never persists settings itself; interfaces load a StrategyConfig
before each call and pass it in.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from clause_clarity.domain.models import StrategyConfig


@runtime_checkable
class StrategyConfigStorePort(Protocol):
    def load(self) -> StrategyConfig: ...

    def update(self, **changes: bool) -> StrategyConfig:
        """Merge partial toggle changes, persist and return the new config."""
        ...
