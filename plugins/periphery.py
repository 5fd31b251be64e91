# plugins/periphery.py
from __future__ import annotations
import json
import os
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.context import DERIVED_DATA_KEYS, PERIPHERY_RESULTS, LaneContext
from core.errors import ConfigurationError, MalformedOutputError, PathNotFoundError, ScanFailedError, ToolNotFoundError
from core.plugins import Finding, Option, Results, RunConfiguration, ScannerPlugin
from core.process import ProcessRunner, quote_cmd, run_process
from core.toolchain import index_store_path, resolve_xcode_version
from core.util import is_test, log

DEFAULT_EXECUTABLE = "periphery"


def resolve_path(path: Optional[str]) -> Optional[str]:
    if path is None:
        return None
    path = os.path.abspath(os.path.expanduser(path))
    if not os.path.exists(path):
        raise PathNotFoundError(path)
    return path


def summarize(findings: Sequence[Finding]) -> Dict[Optional[str], int]:
    # Group by the first hint only; periphery reports one hint per result in practice
    return dict(Counter(f.hints[0] if f.hints else None for f in findings))


class PeripheryRunner:
    """
    Runs one periphery scan: verify the binary, build the command, run it,
    decode the JSON and publish the results to the lane context.
    """

    def __init__(self, cfg: RunConfiguration, context: Optional[LaneContext] = None,
                 runner: ProcessRunner = run_process):
        self.executable = cfg.executable or DEFAULT_EXECUTABLE
        self.config = resolve_path(cfg.config)
        self.skip_build = bool(cfg.skip_build)
        self.index_store_path = resolve_path(cfg.index_store_path)
        self.xcode_version = cfg.xcode_version
        self.context = context if context is not None else LaneContext()
        self.runner = runner
        self.results: Optional[Results] = None
        self.command: Optional[List[str]] = None

    def run(self) -> Results:
        self.verify_executable()
        self.perform_scan()
        self.print_summary()
        return self.results

    def verify_executable(self) -> str:
        res = self.runner([self.executable, "version"])
        if not res.ok:
            raise ToolNotFoundError(self.executable)
        version = res.stdout.strip()
        log(f"[periphery] Using periphery version {version}")
        return version

    def perform_scan(self) -> Results:
        cmd = self.build_command()
        self.command = cmd
        log("[periphery] Performing scan. This might take a few moments...")
        res = self.runner(cmd)
        if not res.ok:
            output = (res.stderr or res.stdout).strip()
            log(f"[ERROR] {output}")
            raise ScanFailedError(output=output)

        try:
            data = json.loads(res.stdout)
        except ValueError as e:
            raise MalformedOutputError(f"periphery did not produce valid JSON: {e}") from e
        if not isinstance(data, list):
            raise MalformedOutputError(f"Expected a JSON array from periphery, got {type(data).__name__}")

        self.results = Results(Finding.from_json(raw) for raw in data)
        self.context[PERIPHERY_RESULTS] = self.results
        return self.results

    def build_command(self) -> List[str]:
        cmd = [self.executable, "scan", "--disable-update-check", "--format", "json"]
        if self.config:
            cmd += ["--config", self.config]
        if self.skip_build or self.index_store_path is not None:
            cmd += ["--skip-build", "--index-store-path", self.resolve_index_store_path()]
        return cmd

    def resolve_index_store_path(self) -> str:
        if self.index_store_path is not None:
            return self.index_store_path

        derived_data_path = self.find_derived_data_path()
        if derived_data_path is None:
            raise ConfigurationError(
                "The index store path could not be resolved. Either specify it using the index_store_path "
                "argument or provide a path to derived data when using build_app or xcodebuild actions."
            )

        try:
            version = resolve_xcode_version(self.xcode_version, self.runner)
        except ValueError as e:
            raise ConfigurationError(f"Invalid xcode_version '{self.xcode_version}': {e}") from e
        return index_store_path(derived_data_path, version)

    def find_derived_data_path(self) -> Optional[str]:
        for key in DERIVED_DATA_KEYS:
            candidate = self.context.get(key)
            if candidate and os.path.exists(candidate):
                return candidate
        return None

    def print_summary(self) -> Dict[Optional[str], int]:
        grouped = summarize(self.results or [])
        if not is_test():
            log("[periphery] Summary of Results")
            for hint, count in grouped.items():
                log(f"[periphery]   {hint or '(none)'}: {count}")
        return grouped


class PeripheryPlugin(ScannerPlugin):
    name = "periphery"
    description = "Identifies unused code in Swift projects using Periphery"
    authors = ("Liam Nichols",)
    return_value = "Output of the command parsed from JSON into an array of Finding objects"
    output = [(PERIPHERY_RESULTS, "The output of periphery decoded into an array of Finding objects.")]
    supported_platforms = ("ios", "mac")
    available_options = (
        Option("executable", "PERIPHERY_EXECUTABLE", "Path to the `periphery` executable on your machine",
               default=DEFAULT_EXECUTABLE),
        Option("config", "PERIPHERY_CONFIG", "Path to configuration file"),
        Option("skip_build", "PERIPHERY_SKIP_BUILD", "Skip the project build step", default=False, type=bool),
        Option("index_store_path", "PERIPHERY_INDEX_STORE_PATH", "Path to index store to use"),
        Option("xcode_version", "PERIPHERY_XCODE_VERSION", "Xcode version deciding the index store layout"),
    )

    def __init__(self, context: Optional[LaneContext] = None, runner: ProcessRunner = run_process):
        self.context = context if context is not None else LaneContext()
        self.runner = runner

    def scan(self, options: Mapping[str, Any]):
        cfg = self.validate_config(options)
        scanner = PeripheryRunner(cfg, self.context, self.runner)
        results = scanner.run()
        return results, {"cmd": quote_cmd(scanner.command or []), "summary": summarize(results)}
