# core/context.py
from __future__ import annotations
from typing import Any, Dict, Iterator, MutableMapping, Optional

# Written by build steps that ran earlier in the same pipeline
SCAN_DERIVED_DATA_PATH = "SCAN_DERIVED_DATA_PATH"
XCODEBUILD_DERIVED_DATA_PATH = "XCODEBUILD_DERIVED_DATA_PATH"

# Written by the periphery plugin
PERIPHERY_RESULTS = "PERIPHERY_RESULTS"

DERIVED_DATA_KEYS = (SCAN_DERIVED_DATA_PATH, XCODEBUILD_DERIVED_DATA_PATH)


class LaneContext(MutableMapping):
    """
    Shared key/value store handed to every step of a pipeline run.
    Plugins get it injected instead of reaching for a global.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        # str() of each value so large result lists stay abbreviated
        body = ", ".join(f"{k}={v}" for k, v in self._values.items())
        return f"LaneContext({body})"
