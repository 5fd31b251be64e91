import yaml
import pathlib
import datetime as dt
import os

TRUTHY = ("1", "true", "yes", "on")


def load_yaml(path: str):
    with open(path) as f:
        return yaml.safe_load(f) or {}


def ensure_dir(p):
    pathlib.Path(p).mkdir(parents=True, exist_ok=True)


def log(msg: str):
    ts = dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    print(f"{ts} {msg}", flush=True)


def utc_ts() -> str:
    """Return a UTC timestamp string YYYYMMDDTHHMMSSZ."""
    return dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def parse_flag(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in TRUTHY


def is_test() -> bool:
    """True when running under the test suite; set PERIPHERY_TEST=1 to silence console tables."""
    return parse_flag(os.getenv("PERIPHERY_TEST"))
