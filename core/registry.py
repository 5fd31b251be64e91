# core/registry.py
from __future__ import annotations
import hashlib, importlib.util, inspect, sys, types
from pathlib import Path
from typing import Dict, Optional, Set, Tuple, Type

from core.plugins import ScannerPlugin
from core.util import log


def _aliases(s: str) -> Set[str]:
    s = (s or "").strip()
    if not s:
        return set()
    return {s, s.lower(), s.replace("-", "_"), s.replace("-", "_").lower()}


def _import_module(mod_name: str, file_path: str) -> types.ModuleType:
    spec = importlib.util.spec_from_file_location(mod_name, file_path)
    if not spec or not spec.loader:
        raise ImportError(f"Cannot load spec for {file_path}")
    mod = importlib.util.module_from_spec(spec)
    sys.modules[mod_name] = mod
    try:
        spec.loader.exec_module(mod)  # type: ignore[attr-defined]
    except Exception:
        sys.modules.pop(mod_name, None)
        raise
    return mod


def _cached_module(fpath: Path) -> Tuple[str, Optional[types.ModuleType]]:
    """
    Module name for a plugin file and its already-imported module, if any.
    A same-named file from another directory gets a path-suffixed name.
    """
    mod_name = f"plugins.{fpath.stem}"
    mod = sys.modules.get(mod_name)
    if mod is None:
        return mod_name, None
    cached = getattr(mod, "__file__", None)
    if cached and Path(cached).resolve() == fpath.resolve():
        return mod_name, mod
    digest = hashlib.sha1(str(fpath.resolve()).encode("utf-8")).hexdigest()[:8]
    mod_name = f"{mod_name}_{digest}"
    return mod_name, sys.modules.get(mod_name)


def load_plugins(plugins_dir: str = "./plugins") -> Dict[str, Type[ScannerPlugin]]:
    """
    Load ScannerPlugin subclasses from plugins/*.py, registered under
    the declared 'name', the file stem and the class name
    (plus lowercase and hyphen->underscore variants of each).
    """
    out: Dict[str, Type[ScannerPlugin]] = {}
    pdir = Path(plugins_dir)
    if not pdir.exists():
        log(f"[registry][WARN] plugins dir not found: {pdir.resolve()}")
        return out

    files = sorted(f for f in pdir.glob("*.py") if f.name != "__init__.py")
    for fpath in files:
        mod_name, mod = _cached_module(fpath)
        if mod is None:
            try:
                mod = _import_module(mod_name, str(fpath))
            except Exception as e:
                log(f"[registry][ERROR] import {fpath.name}: {e}")
                continue

        classes = [obj for _, obj in inspect.getmembers(mod, inspect.isclass)
                   if issubclass(obj, ScannerPlugin) and obj is not ScannerPlugin]
        if not classes:
            log(f"[registry][WARN] no ScannerPlugin subclass in {fpath.name}")
            continue

        for cls in classes:
            names = _aliases(getattr(cls, "name", "")) | _aliases(fpath.stem) | _aliases(cls.__name__)
            # keep the first registration on collisions
            for k in sorted(names):
                out.setdefault(k, cls)
            log(f"[registry] loaded {cls.__name__} as {sorted(names)}")

    return out


def find_plugin(plugins: Dict[str, Type[ScannerPlugin]], name: str) -> Optional[Type[ScannerPlugin]]:
    for key in (name, name.lower(), name.replace("-", "_"), name.replace("-", "_").lower()):
        if key in plugins:
            return plugins[key]
    return None
