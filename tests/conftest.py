from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

# uv/pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from liquidity.core.config import Config  # noqa: E402


@pytest.fixture()
def anyio_backend() -> str:
    # The runtime is built on asyncio tasks.
    return "asyncio"


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config copied from the repo defaults with fixtures in a temp dir and no pauses or report caching."""

    cfg_dst_dir = temp_dir / "config"
    cfg_dst_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(REPO_ROOT / "config" / "default.yaml", cfg_dst_dir / "default.yaml")

    fixtures_dst = temp_dir / "data" / "fixtures"
    fixtures_dst.mkdir(parents=True, exist_ok=True)
    shutil.copy2(REPO_ROOT / "data" / "fixtures" / "series.json", fixtures_dst / "series.json")

    c = Config.from_yaml(cfg_dst_dir / "default.yaml")
    return c.model_copy(
        update={
            "runtime": c.runtime.model_copy(update={"report_ttl_ms": 0}),
            "orchestrator": c.orchestrator.model_copy(update={"inter_engine_delay_ms": 0}),
        }
    )
