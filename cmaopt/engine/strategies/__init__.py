"""Strategy engine registry surface.

Provides a small factory to obtain a StrategyEngine by name.
"""

from __future__ import annotations

from typing import Final

from cmaopt.engine.interfaces import StrategyEngine
from cmaopt.engine.strategies.cmaes import CMAESEngine, CMAESState

_REGISTRY: Final[dict[str, type[StrategyEngine]]] = {
    "cmaes": CMAESEngine,
}


def engine_from_name(name: str, **params: object) -> StrategyEngine:
    """Return a StrategyEngine instance from the registry.

    Raises KeyError for unknown engines.
    """
    key = name.lower()
    if key not in _REGISTRY:
        raise KeyError(f"Unknown engine: {name}. Available: {list(_REGISTRY.keys())}")
    cls = _REGISTRY[key]
    return cls(**params)  # type: ignore[call-arg]


__all__ = [
    "engine_from_name",
    "CMAESEngine",
    "CMAESState",
]
