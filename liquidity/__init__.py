"""liquidity: engine runtime and signal aggregation core.

Many small engines, each allowed to fail. One composite signal out the other end.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.0.0"
