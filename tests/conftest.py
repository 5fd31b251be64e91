"""Shared fixtures for the periphery plugin tests."""

from __future__ import annotations

import json
from typing import Dict, List, Sequence

import pytest

from core.context import LaneContext
from core.process import ProcessResult


class FakeRunner:
    """Stands in for core.process.run_process; answers by the first argument after the executable."""

    def __init__(self, responses: Dict[str, ProcessResult] | None = None):
        self.responses = dict(responses or {})
        self.calls: List[List[str]] = []

    def __call__(self, cmd: Sequence[str]) -> ProcessResult:
        cmd = list(cmd)
        self.calls.append(cmd)
        key = cmd[1] if len(cmd) > 1 else ""
        return self.responses.get(key, ProcessResult(127, "", f"{cmd[0]}: not found"))

    def commands(self, sub: str) -> List[List[str]]:
        return [c for c in self.calls if len(c) > 1 and c[1] == sub]


def scan_output(items) -> ProcessResult:
    return ProcessResult(0, json.dumps(items), "")


SAMPLE_RESULTS = [
    {
        "kind": "function.method.static",
        "name": "unusedStaticMethod()",
        "modifiers": ["static", "public"],
        "attributes": [],
        "accessibility": "public",
        "ids": ["s:7MyApp5ThingC18unusedStaticMethodyyFZ"],
        "hints": ["unused"],
        "location": "/src/MyApp/Thing.swift:12:24",
    },
    {
        "kind": "var.static",
        "name": "shared",
        "modifiers": ["static"],
        "attributes": [],
        "accessibility": "internal",
        "ids": ["s:7MyApp5ThingC6sharedACvpZ"],
        "hints": ["redundantPublicAccessibility"],
        "location": "/src/MyApp/Thing.swift:4:16",
    },
]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PERIPHERY_EXECUTABLE", "PERIPHERY_CONFIG", "PERIPHERY_SKIP_BUILD",
                 "PERIPHERY_INDEX_STORE_PATH", "PERIPHERY_XCODE_VERSION"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PERIPHERY_TEST", "1")


@pytest.fixture
def context() -> LaneContext:
    return LaneContext()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner({
        "version": ProcessResult(0, "2.10.0\n", ""),
        "scan": scan_output(SAMPLE_RESULTS),
    })
