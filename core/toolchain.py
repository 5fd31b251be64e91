# core/toolchain.py
from __future__ import annotations
import os
import re
from typing import Callable, List, Optional, Tuple

from core.process import ProcessRunner, run_process
from core.util import log

Version = Tuple[int, ...]

# Newest first. Xcode 14 moved the index store under Index.noindex.
# https://github.com/peripheryapp/periphery#xcode
INDEX_STORE_LAYOUTS: List[Tuple[Callable[[Optional[Version]], bool], Tuple[str, ...]]] = []

XCODE_14 = "14.0.0"


def parse_version(text: str) -> Version:
    # first dotted number only; trailing "beta 3" or build ids are ignored
    m = re.search(r"\d+(?:\.\d+)*", text or "")
    if not m:
        raise ValueError(f"not a version: {text!r}")
    nums = [int(p) for p in m.group(0).split(".")[:3]]
    while len(nums) < 3:
        nums.append(0)
    return tuple(nums)


def at_least(version: Optional[Version], minimum: str) -> bool:
    # Unknown version -> assume a current toolchain
    if version is None:
        return True
    return version >= parse_version(minimum)


def detect_xcode_version(runner: ProcessRunner = run_process) -> Optional[Version]:
    """Ask xcodebuild for the selected Xcode. Returns None when it cannot be determined."""
    res = runner(["xcodebuild", "-version"])
    if not res.ok:
        return None
    m = re.search(r"Xcode\s+([\d.]+)", res.stdout)
    if not m:
        return None
    return parse_version(m.group(1))


def register_layout(predicate: Callable[[Optional[Version]], bool], *segments: str, first: bool = False) -> None:
    entry = (predicate, tuple(segments))
    if first:
        INDEX_STORE_LAYOUTS.insert(0, entry)
    else:
        INDEX_STORE_LAYOUTS.append(entry)


register_layout(lambda v: at_least(v, XCODE_14), "Index.noindex", "DataStore")
register_layout(lambda v: True, "Index", "DataStore")


def index_store_layout(version: Optional[Version]) -> Tuple[str, ...]:
    for predicate, segments in INDEX_STORE_LAYOUTS:
        if predicate(version):
            return segments
    raise LookupError(f"no index store layout for Xcode {version}")


def index_store_path(derived_data_path: str, version: Optional[Version]) -> str:
    return os.path.join(derived_data_path, *index_store_layout(version))


def resolve_xcode_version(configured: Optional[str], runner: ProcessRunner = run_process) -> Optional[Version]:
    if configured:
        return parse_version(configured)
    version = detect_xcode_version(runner)
    if version is None:
        log("[periphery][WARN] Could not determine Xcode version; assuming the current index store layout")
    return version
