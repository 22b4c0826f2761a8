"""liquidity.core

Shared plumbing: config, errors, cache, metrics, time, logging, HTTP client.
"""
