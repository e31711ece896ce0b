from dataclasses import dataclass, field

from ..db import Store
from ..services.auth import PinGuard
from .config import Settings


@dataclass
class PosContext:
    """What a bridge handler can reach: the open store, the PIN guard, config."""

    store: Store
    settings: Settings
    pin_guard: PinGuard = field(default_factory=PinGuard)

    @classmethod
    def from_settings(cls, cfg: Settings) -> "PosContext":
        return cls(
            store=Store.from_settings(cfg),
            settings=cfg,
            pin_guard=PinGuard(cfg.pin_max_attempts, cfg.pin_lockout_seconds),
        )
