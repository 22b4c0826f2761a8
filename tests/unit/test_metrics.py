from __future__ import annotations

from liquidity.core.metrics import MetricsRegistry


def test_counters_are_keyed_by_labels() -> None:
    m = MetricsRegistry()
    m.inc("engine_runs", engine="a", outcome="fresh")
    m.inc("engine_runs", outcome="fresh", engine="a")
    m.inc("engine_runs", engine="b", outcome="error")

    assert m.value("engine_runs", engine="a", outcome="fresh") == 2.0
    assert m.value("engine_runs", engine="b", outcome="error") == 1.0
    assert m.value("engine_runs", engine="c", outcome="fresh") == 0.0
    assert m.total("engine_runs") == 3.0


def test_gauges_and_snapshot_rendering() -> None:
    m = MetricsRegistry()
    m.set("orchestrator_clis", 6.5)
    m.set("orchestrator_clis", 7.0)
    m.inc("provider_reads", series="WALCL", engine="net-liquidity")

    assert m.snapshot() == {
        "orchestrator_clis": 7.0,
        "provider_reads{engine=net-liquidity,series=WALCL}": 1.0,
    }
