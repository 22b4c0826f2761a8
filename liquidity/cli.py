"""liquidity.cli

Command line interface entry point for liquidity.

Design constraints:
- argparse-based.
- Lazy imports: do not import numpy, httpx or FastAPI at parse time.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liquidity",
        description="Run liquidity engines and aggregate them into one composite signal.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_orch = sub.add_parser("orchestrate", help="Run every engine once and print the master signal")
    p_orch.add_argument("--force", action="store_true", help="Ignore cached engine reports.")
    p_orch.add_argument("--json", action="store_true", help="Print the full result as JSON.")

    sub.add_parser("health", help="Print orchestrator availability")
    sub.add_parser("engines", help="List registered engines in execution order")

    p_api = sub.add_parser("api", help="Start FastAPI server")
    p_api.add_argument("--host", default=None)
    p_api.add_argument("--port", type=int, default=None)

    return parser


def _print_version() -> None:
    from liquidity import __version__

    print(f"liquidity v{__version__}")


def _load_config(ctx: CliContext):
    from liquidity.core.config import Config
    from liquidity.core.logging import configure_logging

    config = Config.from_repo_defaults(ctx.repo_root)
    configure_logging(config.logging)
    return config


def _cmd_orchestrate(ctx: CliContext, args: argparse.Namespace) -> int:
    # Lazy import: engines pull in numpy.
    from liquidity.brain.orchestrator import Orchestrator

    try:
        config = _load_config(ctx)
        orchestrator = Orchestrator.from_config(config)
        result = asyncio.run(orchestrator.run(force=bool(args.force)))
    except Exception as e:
        print(f"orchestration failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return 0

    print(
        f"{result.master_signal}  clis={result.clis:.1f}  regime={result.regime}  "
        f"consensus={result.consensus:.2f}  conflict={result.conflict_level}"
    )
    print(f"engines: {result.engines_executed}/{result.engines_attempted} fresh")
    for engine_id, report in result.per_engine_reports:
        flag = " (stale)" if report.is_degraded else "" if report.success else " (failed)"
        print(f"  {engine_id:<20} {report.signal:<8} conf={report.confidence:5.1f} value={report.value:+.2f}{flag}")
    for engine_id, message in result.errors:
        print(f"  ! {engine_id}: {message}", file=sys.stderr)
    return 0


def _cmd_health(ctx: CliContext, args: argparse.Namespace) -> int:
    from liquidity.brain.orchestrator import Orchestrator

    try:
        orchestrator = Orchestrator.from_config(_load_config(ctx))
    except Exception as e:
        print(f"health check failed: {e}", file=sys.stderr)
        return 1
    print(json.dumps(orchestrator.health()))
    return 0


def _cmd_engines(ctx: CliContext, args: argparse.Namespace) -> int:
    from liquidity.brain.orchestrator import Orchestrator

    try:
        orchestrator = Orchestrator.from_config(_load_config(ctx))
        order = orchestrator.registry.execution_order()
    except Exception as e:
        print(f"cannot resolve engines: {e}", file=sys.stderr)
        return 1
    for runtime in order:
        deps = ", ".join(runtime.engine.dependencies) or "-"
        print(f"{runtime.engine.tier.name.lower():<11} {runtime.engine_id:<20} depends on: {deps}")
    return 0


def _cmd_api(ctx: CliContext, args: argparse.Namespace) -> int:
    config = _load_config(ctx)

    host = args.host or config.api.host
    port = args.port or config.api.port

    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port, reload=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "orchestrate": _cmd_orchestrate,
        "health": _cmd_health,
        "engines": _cmd_engines,
        "api": _cmd_api,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
