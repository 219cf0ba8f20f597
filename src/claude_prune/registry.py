"""Strategy registry and candidate menu construction."""

from __future__ import annotations

from .types import StrategyCandidate, StrategyInfo

# Global strategy registry, populated by @strategy decorator in strategies/
STRATEGIES: dict[str, StrategyInfo] = {}

# Order in which candidates appear in the menu
MENU_ORDER: list[str] = ["recent", "bookends", "smart"]


def strategy(name: str, description: str):
    """Decorator to register a candidate-selection strategy."""
    def decorator(func):
        STRATEGIES[name] = StrategyInfo(
            name=name,
            description=description,
            func=func,
        )
        return func
    return decorator


def percent_freed(total: int, kept: int) -> int:
    """Share of turns a selection would free, as a rounded percentage."""
    if total <= 0:
        return 0
    # Half-up rounding, not banker's rounding
    return int(100 * (total - kept) / total + 0.5)


def build_candidates(analyzer, config: dict | None = None) -> list[StrategyCandidate]:
    """Run every menu strategy against the analyzer, in menu order."""
    config = config or {}
    return [STRATEGIES[name].func(analyzer, config) for name in MENU_ORDER if name in STRATEGIES]
