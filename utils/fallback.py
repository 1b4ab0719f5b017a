import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, Tuple, TypeVar
from core.exceptions import AllTiersFailedError
from utils.logger import describe_error

T = TypeVar("T")

Strategy = Tuple[str, Callable[[], T]]


@dataclass
class TierResult(Generic[T]):
    tier: str
    value: T


def try_in_order(strategies: Sequence[Strategy], logger: Optional[logging.Logger] = None,
                 context: Optional[dict] = None) -> TierResult:
    """
    Run strategies one after another and return the first success.

    A strategy fails by raising. Each failure is logged and triggers the
    next strategy; nothing is retried. When the last strategy fails,
    AllTiersFailedError is raised carrying every tier's error.

    Args:
        strategies: ordered (tier_name, zero-argument callable) pairs
        logger: where tier transitions are reported
        context: extra fields attached to every log entry

    Returns:
        TierResult with the winning tier name and its return value
    """
    logger = logger or logging.getLogger(__name__)
    context = context or {}
    errors: list[Tuple[str, Exception]] = []

    for position, (name, attempt) in enumerate(strategies):
        try:
            value = attempt()
        except Exception as exc:
            errors.append((name, exc))
            remaining = len(strategies) - position - 1
            logger.warning(
                f"Tier '{name}' failed: {describe_error(exc)}",
                extra={
                    **context,
                    "tier": name,
                    "error_type": type(exc).__name__,
                    "remaining_tiers": remaining,
                }
            )
            continue

        if errors:
            logger.info(
                f"Tier '{name}' succeeded after {len(errors)} failed tier(s)",
                extra={**context, "tier": name}
            )
        return TierResult(tier=name, value=value)

    raise AllTiersFailedError(errors) from (errors[-1][1] if errors else None)
