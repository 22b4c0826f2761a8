"""liquidity.brain.regime

Thresholds that turn the composite score and consensus into labels.
"""

from __future__ import annotations

from liquidity.core.types import ConflictLevel, Regime

EXPANSION_ABOVE = 7.0
CONTRACTION_BELOW = 3.0
LOW_CONFLICT_ABOVE = 0.7
MEDIUM_CONFLICT_ABOVE = 0.5


def classify_regime(clis: float) -> Regime:
    if clis > EXPANSION_ABOVE:
        return Regime.EXPANSION
    if clis < CONTRACTION_BELOW:
        return Regime.CONTRACTION
    return Regime.TRANSITION


def conflict_level(consensus: float) -> ConflictLevel:
    if consensus > LOW_CONFLICT_ABOVE:
        return ConflictLevel.LOW
    if consensus > MEDIUM_CONFLICT_ABOVE:
        return ConflictLevel.MEDIUM
    return ConflictLevel.HIGH
