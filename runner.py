#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import pathlib
import sys
from typing import Any, Dict, List, Optional

from core.util import load_yaml, log, ensure_dir, utc_ts
from core.registry import load_plugins, find_plugin
from core.context import LaneContext, SCAN_DERIVED_DATA_PATH, XCODEBUILD_DERIVED_DATA_PATH
from core.errors import PluginError, ConfigurationError

PLUGIN_NAME = "periphery"


# --------------------
# helpers
# --------------------
def _options_from_args(args: argparse.Namespace, base: Dict[str, Any]) -> Dict[str, Any]:
    """CLI flags override whatever the YAML file set."""
    options = dict(base)
    for key in ("executable", "config", "index_store_path", "xcode_version"):
        value = getattr(args, key)
        if value is not None:
            options[key] = value
    if args.skip_build:
        options["skip_build"] = True
    return options


def _context_from_args(args: argparse.Namespace, base: Dict[str, Any]) -> LaneContext:
    context = LaneContext(base)
    if args.derived_data_path:
        context[SCAN_DERIVED_DATA_PATH] = args.derived_data_path
    if args.xcodebuild_derived_data_path:
        context[XCODEBUILD_DERIVED_DATA_PATH] = args.xcodebuild_derived_data_path
    return context


def _write_results(results: List[Any], out_dir: str) -> str:
    ensure_dir(out_dir)
    out_file = pathlib.Path(out_dir) / f"{PLUGIN_NAME}_results_{utc_ts()}.json"
    with open(out_file, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in results], f, indent=2, ensure_ascii=False)
    return str(out_file)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Identify unused Swift code with periphery")
    ap.add_argument("--config-yaml", help="YAML file with 'options' and 'context' sections")
    ap.add_argument("--executable", help="Path to the periphery executable")
    ap.add_argument("--config", help="Path to a periphery configuration file")
    ap.add_argument("--skip-build", action="store_true", default=False, help="Skip the project build step")
    ap.add_argument("--index-store-path", help="Path to the index store to use")
    ap.add_argument("--xcode-version", help="Xcode version used to pick the index store layout")
    ap.add_argument("--derived-data-path", help="Derived data recorded by a previous scan/build_app step")
    ap.add_argument("--xcodebuild-derived-data-path", help="Derived data recorded by a previous xcodebuild step")
    ap.add_argument("--out-dir", default="./data/periphery", help="Results output dir")
    ap.add_argument("--plugins-dir", default=str(pathlib.Path(__file__).parent / "plugins"), help="Plugins dir")
    return ap


# --------------------
# main
# --------------------
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_yaml(args.config_yaml) if args.config_yaml else {}
        if not isinstance(cfg, dict):
            raise ConfigurationError(f"{args.config_yaml} must contain a mapping with 'options' and 'context' sections")
        options = _options_from_args(args, cfg.get("options") or {})
        context = _context_from_args(args, cfg.get("context") or {})

        cls = find_plugin(load_plugins(args.plugins_dir), PLUGIN_NAME)
        if not cls:
            raise ConfigurationError(f"Plugin {PLUGIN_NAME} not found in {args.plugins_dir}")

        plugin = cls(context=context)
        log(f"[{PLUGIN_NAME}] Running {plugin.name} ...")
        findings, artifacts = plugin.scan(options)
        log(f"[{PLUGIN_NAME}] {plugin.name} produced {len(findings)} findings")
        log(f"[{PLUGIN_NAME}] Command: {artifacts.get('cmd')}")
    except PluginError as e:
        log(f"[ERROR] {e}")
        return 1

    out_file = _write_results(findings, args.out_dir)
    log(f"[{PLUGIN_NAME}] Saved results → {out_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
