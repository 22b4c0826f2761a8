"""liquidity.brain.aggregator

Many engines. One vote count.

Each successful report votes with its signal. Failed reports abstain; degraded
reports vote neutral because that is what the runtime made them say.

- master signal: a category wins only with a strict majority over the other two combined
- consensus: share of the largest category
- CLIS: 5 + 2 * mean(value), clamped to [1, 10], one decimal
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from liquidity.brain.regime import classify_regime, conflict_level
from liquidity.core.types import ConflictLevel, EngineReport, MasterSignal, Regime, Signal

CLIS_MIN = 1.0
CLIS_MAX = 10.0
CLIS_NEUTRAL = 5.0


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(x)))


def _round1(x: float) -> float:
    # Half-up, not banker's rounding: 6.25 -> 6.3.
    return math.floor(x * 10.0 + 0.5) / 10.0


def _mean(xs: list[float]) -> float:
    return float(sum(xs) / len(xs)) if xs else 0.0


@dataclass(frozen=True, slots=True)
class AggregateSignal:
    master_signal: MasterSignal
    strength: float  # 0..1
    clis: float  # 1..10
    consensus: float  # 0..1
    conflict_level: ConflictLevel
    regime: Regime
    average_confidence: float  # 0..100, over voting reports
    votes: dict[str, int]


def neutral_aggregate() -> AggregateSignal:
    return AggregateSignal(
        master_signal=MasterSignal.NEUTRAL,
        strength=0.5,
        clis=CLIS_NEUTRAL,
        consensus=0.5,
        conflict_level=ConflictLevel.HIGH,
        regime=Regime.TRANSITION,
        average_confidence=0.0,
        votes={str(s): 0 for s in Signal},
    )


def aggregate(reports: Sequence[EngineReport] | Sequence[tuple[str, EngineReport]]) -> AggregateSignal:
    """Combine engine reports into one decision.

    Accepts bare reports or `(engine_id, report)` pairs, in any order; the
    result does not depend on ordering.
    """

    voters = [r[1] if isinstance(r, tuple) else r for r in reports]
    voters = [r for r in voters if r.success]
    if not voters:
        return neutral_aggregate()

    total = len(voters)
    counts = Counter(r.signal for r in voters)
    bull = counts[Signal.BULLISH]
    bear = counts[Signal.BEARISH]
    neutral = counts[Signal.NEUTRAL]

    if bull > bear + neutral:
        master, winning = MasterSignal.RISK_ON, bull
    elif bear > bull + neutral:
        master, winning = MasterSignal.RISK_OFF, bear
    else:
        master, winning = MasterSignal.NEUTRAL, neutral

    clis = _round1(_clamp(CLIS_NEUTRAL + 2.0 * _mean([r.value for r in voters]), CLIS_MIN, CLIS_MAX))
    consensus = max(bull, bear, neutral) / total

    return AggregateSignal(
        master_signal=master,
        strength=winning / total,
        clis=clis,
        consensus=consensus,
        conflict_level=conflict_level(consensus),
        regime=classify_regime(clis),
        average_confidence=_mean([r.confidence for r in voters]),
        votes={str(Signal.BULLISH): bull, str(Signal.BEARISH): bear, str(Signal.NEUTRAL): neutral},
    )
