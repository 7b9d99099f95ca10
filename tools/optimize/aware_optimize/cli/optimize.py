"""Command-line helpers for output optimization."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

from aware_optimize.assemble.header import DEFAULT_FILE_HEADER
from aware_optimize.bundle.esbuild import Esbuild
from aware_optimize.bundle.modules import resolve_module_set
from aware_optimize.config import esbuild_from_env, is_verbose, load_config
from aware_optimize.errors import OptimizeError
from aware_optimize.pipeline import optimize_loader_task, optimize_task, run_minify
from aware_optimize.schemas.optimize import MinifyOptions

logger = logging.getLogger("aware_optimize.cli")


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose or is_verbose())

    handlers = {
        "optimize": _handle_optimize,
        "loader": _handle_loader,
        "minify": _handle_minify,
        "modules": _handle_modules,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.error(f"Unknown command '{args.command}'")
        return 1

    try:
        return handler(args)
    except (OptimizeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aware-optimize", description="Bundle, assemble and minify build output.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    optimize = subparsers.add_parser("optimize", help="Run the optimize task from a config file.")
    optimize.add_argument("--config", required=True)
    optimize.add_argument("--out", help="Override the configured output folder.")
    optimize.add_argument("--serial", action="store_true", help="Bundle modules one at a time.")
    optimize.add_argument("--workspace-root")

    loader = subparsers.add_parser("loader", help="Build the loader preamble alone.")
    loader.add_argument("--src", required=True)
    loader.add_argument("--out", required=True)
    loader.add_argument("--bundle-loader", action=argparse.BooleanOptionalAction, default=True)
    loader.add_argument("--header", help="Header text; defaults to the standard notice.")
    loader.add_argument("--external-loader-info", help="JSON object appended as loader config.")
    loader.add_argument("--workspace-root")

    minify = subparsers.add_parser("minify", help="Minify a folder into <src>-min.")
    minify.add_argument("--src", required=True)
    minify.add_argument("--source-map-base-url")
    minify.add_argument("--max-concurrency", type=int)
    minify.add_argument("--workspace-root")

    modules = subparsers.add_parser("modules", help="Print the resolved module set.")
    modules.add_argument("--config", required=True)
    modules.add_argument("--workspace-root")

    return parser


def _handle_optimize(args: argparse.Namespace) -> int:
    workspace = _resolve_workspace(args.workspace_root)
    options = load_config(_resolve_path(args.config, workspace))
    if args.serial:
        options = options.model_copy(update={"esm": options.esm.model_copy(update={"serial": True})})
    destination = _resolve_path(args.out, workspace) if args.out else None

    result = asyncio.run(
        optimize_task(
            options,
            bundler=Esbuild(esbuild_from_env()),
            verbose=args.verbose or is_verbose(),
            destination=destination,
        )
    )
    payload = {
        "destination": str(result.destination),
        "modules": result.modules,
        "files": [str(path) for path in result.written],
    }
    _print_json(payload)
    return 0


def _handle_loader(args: argparse.Namespace) -> int:
    workspace = _resolve_workspace(args.workspace_root)
    src = _resolve_path(args.src, workspace)
    out = _resolve_path(args.out, workspace)
    external_loader_info = json.loads(args.external_loader_info) if args.external_loader_info else None

    written = asyncio.run(
        optimize_loader_task(
            src=src,
            out=out,
            bundle_loader=args.bundle_loader,
            header=args.header if args.header is not None else DEFAULT_FILE_HEADER,
            external_loader_info=external_loader_info,
        )
    )
    payload = {
        "src": str(src),
        "out": str(out),
        "bundle_loader": args.bundle_loader,
        "files": [str(path) for path in written],
    }
    _print_json(payload)
    return 0


def _handle_minify(args: argparse.Namespace) -> int:
    workspace = _resolve_workspace(args.workspace_root)
    overrides = {"src": args.src, "source_map_base_url": args.source_map_base_url}
    if args.max_concurrency is not None:
        overrides["max_concurrency"] = args.max_concurrency
    options = MinifyOptions.model_validate(overrides)

    result = asyncio.run(run_minify(options, root=workspace, bundler=Esbuild(esbuild_from_env())))
    payload = {
        "destination": str(result.destination),
        "minified": result.minified,
        "copied": result.copied,
        "bytes_in": result.bytes_in,
        "bytes_out": result.bytes_out,
        "files": [str(path) for path in result.written],
    }
    _print_json(payload)
    return 0


def _handle_modules(args: argparse.Namespace) -> int:
    workspace = _resolve_workspace(args.workspace_root)
    config_path = _resolve_path(args.config, workspace)
    options = load_config(config_path)
    payload = {
        "config": str(config_path),
        "modules": resolve_module_set(options.esm.entry_points),
    }
    _print_json(payload)
    return 0


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_workspace(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_path(value: str, workspace: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = workspace / path
    return path.resolve()


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":
    raise SystemExit(main())
