"""Production configuration guard: enforces hard constraints in production.

The guard validates production-critical settings before any settlement
runs.  It fails hard (raises ``ProductionConfigError``) if any constraint
is violated.

This module is the single enforcement point for production invariants.
Other code should not scatter ``if is_production`` checks.
"""

from __future__ import annotations

import logging

from batchsettle.config import SettleConfig

logger = logging.getLogger(__name__)


class ProductionConfigError(RuntimeError):
    """Raised when production configuration constraints are violated.

    The process should exit; this must not be caught and ignored.
    """


def enforce_production_constraints(config: SettleConfig) -> None:
    """Validate all production-critical configuration constraints.

    Constraints enforced
    --------------------
    1. Debug mode must be disabled.
    2. Escrows must be one-shot (``allow_repeat_completion`` off).

    Raises
    ------
    ProductionConfigError
        Listing every violated constraint at once.
    """
    if not config.is_production:
        return  # Guard only applies in production

    violations: list[str] = []

    if config.debug:
        violations.append(
            "debug=True is not allowed in production. "
            "Set BATCHSETTLE_DEBUG=false."
        )

    if config.allow_repeat_completion:
        violations.append(
            "allow_repeat_completion=True is not allowed in production. "
            "Set BATCHSETTLE_ALLOW_REPEAT_COMPLETION=false."
        )

    if violations:
        msg = (
            "Production configuration guard failed.\n"
            + "\n".join(f"  - {v}" for v in violations)
        )
        logger.critical(msg)
        raise ProductionConfigError(msg)

    logger.info("Production configuration guard passed.")
