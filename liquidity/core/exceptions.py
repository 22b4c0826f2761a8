"""liquidity.core.exceptions

Errors are part of the interface.

Dry, precise, structural.
"""

from __future__ import annotations


class LiquidityError(Exception):
    """Base exception for liquidity."""


class ConfigError(LiquidityError):
    """Configuration is missing, invalid, or inconsistent."""


class ProviderError(LiquidityError):
    """Upstream data could not be fetched or parsed."""


class EngineTimeoutError(LiquidityError, TimeoutError):
    """An engine did not finish within its timeout."""


class ValidationError(LiquidityError, ValueError):
    """Input to a numerical routine is empty, mismatched, or out of range."""


class OrchestrationError(LiquidityError):
    """An orchestration run could not be carried out."""


class RegistryError(OrchestrationError):
    """Engine registry is inconsistent: unknown dependency, cycle, or duplicate id."""


class EngineFailedError(LiquidityError):
    """An engine returned a report with `success=False`."""
