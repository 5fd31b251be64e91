from __future__ import annotations
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional, Tuple

from core.errors import ConfigurationError, MalformedOutputError
from core.util import parse_flag


def _strings(key: str, value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise MalformedOutputError(f"Expected a JSON array for '{key}', got {type(value).__name__}")
    return tuple(str(v) for v in value)


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


# https://github.com/peripheryapp/periphery/blob/master/Sources/Frontend/Formatters/JsonFormatter.swift
@dataclass(frozen=True)
class Finding:
    kind: Optional[str] = None
    name: Optional[str] = None
    modifiers: Tuple[str, ...] = ()
    attributes: Tuple[str, ...] = ()
    accessibility: Optional[str] = None
    ids: Tuple[str, ...] = ()
    hints: Tuple[str, ...] = ()
    location: Optional[str] = None

    @classmethod
    def from_json(cls, raw: Any) -> "Finding":
        if not isinstance(raw, dict):
            raise MalformedOutputError(f"Expected a JSON object for each result, got {type(raw).__name__}")
        return cls(
            kind=_opt_str(raw.get("kind")),
            name=_opt_str(raw.get("name")),
            modifiers=_strings("modifiers", raw.get("modifiers")),
            attributes=_strings("attributes", raw.get("attributes")),
            accessibility=_opt_str(raw.get("accessibility")),
            ids=_strings("ids", raw.get("ids")),
            hints=_strings("hints", raw.get("hints")),
            location=_opt_str(raw.get("location")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            out[f.name] = list(v) if isinstance(v, tuple) else v
        return out


class Results(list):
    """
    Findings of one scan, in scanner order.

    The lane context gets dumped when a later step fails and a scan can hold
    thousands of items, so the string form only shows the first one.
    """

    def __str__(self) -> str:
        if len(self) < 2:
            return super().__repr__()
        return f"[{self[0]!r}, ...] ({len(self)} items)"


@dataclass(frozen=True)
class Option:
    key: str
    env_name: str
    description: str
    default: Any = None
    type: type = str


@dataclass(frozen=True)
class RunConfiguration:
    executable: str = "periphery"
    config: Optional[str] = None
    skip_build: bool = False
    index_store_path: Optional[str] = None
    xcode_version: Optional[str] = None

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]], available: Tuple[Option, ...],
                     env: Optional[Mapping[str, str]] = None) -> "RunConfiguration":
        """
        Merge caller options with env overrides and defaults.
        Explicit options win, then the option's env var, then its default.
        """
        options = dict(options or {})
        env = os.environ if env is None else env
        known = {o.key: o for o in available}
        unknown = sorted(set(options) - set(known))
        if unknown:
            raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")

        values: Dict[str, Any] = {}
        for opt in available:
            v = options.get(opt.key)
            if v is None:
                v = env.get(opt.env_name) or None
            if v is None:
                v = opt.default
            if opt.type is bool:
                v = parse_flag(v)
            elif v is not None:
                v = str(v)
            values[opt.key] = v

        declared = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in declared})


class ScannerPlugin:
    name: str = "abstract"
    description: str = ""
    authors: Tuple[str, ...] = ()
    available_options: Tuple[Option, ...] = ()
    supported_platforms: Tuple[str, ...] = ()

    @classmethod
    def is_supported(cls, platform: str) -> bool:
        return platform in cls.supported_platforms

    def validate_config(self, options: Mapping[str, Any]) -> RunConfiguration:
        return RunConfiguration.from_options(options, self.available_options)

    def scan(self, options: Mapping[str, Any]) -> tuple[list[Finding], dict]:
        raise NotImplementedError
