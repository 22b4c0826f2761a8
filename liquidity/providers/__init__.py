"""liquidity.providers

Where engines get their numbers. Engines see only `ObservationProvider`.
"""

from liquidity.providers.base import ObservationProvider, StaticProvider, build_provider
from liquidity.providers.http import HttpProvider

__all__ = ["HttpProvider", "ObservationProvider", "StaticProvider", "build_provider"]
