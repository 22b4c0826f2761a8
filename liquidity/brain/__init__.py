"""liquidity.brain

Orchestration and signal aggregation.
"""
