"""File-backed strategy configuration.

Missing file or missing keys fall back to the defaults passed in; unknown
keys in the file are ignored.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path

from clause_clarity.application.ports.strategy_config_port import StrategyConfigStorePort
from clause_clarity.domain.errors import ConfigurationError
from clause_clarity.domain.models import StrategyConfig

logger = logging.getLogger(__name__)

TOGGLES = tuple(f.name for f in fields(StrategyConfig))


@dataclass
class JsonStrategyConfigStore(StrategyConfigStorePort):
    path: str
    defaults: StrategyConfig = field(default_factory=StrategyConfig)

    def load(self) -> StrategyConfig:
        target = Path(self.path)
        if not target.exists():
            return self.defaults
        try:
            data = json.loads(target.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as ex:
            logger.warning("Unreadable strategy config %s, using defaults: %s", target, ex)
            return self.defaults
        if not isinstance(data, dict):
            logger.warning("Strategy config %s is not an object, using defaults", target)
            return self.defaults
        known = {k: bool(v) for k, v in data.items() if k in TOGGLES}
        return replace(self.defaults, **known)

    def update(self, **changes: bool) -> StrategyConfig:
        unknown = sorted(set(changes) - set(TOGGLES))
        if unknown:
            raise ConfigurationError(f"Unknown strategy toggle(s): {', '.join(unknown)}")
        updated = replace(self.load(), **{k: bool(v) for k, v in changes.items()})
        target = Path(self.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(asdict(updated), indent=2), encoding="utf-8")
        logger.info("Strategy config updated: %s", changes)
        return updated
