"""liquidity.engines

Engine contract, runtime, registry, and the built-in engines.

Built-in engine modules register themselves on import; see `registry.discover()`.
"""
