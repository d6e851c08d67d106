from __future__ import annotations
from typing import Any, Dict
from pathlib import Path
import sys

import yaml

from .proc import DEFAULT_MAX_PIDS

DEFAULT_RULES_FILE = "default_procs.txt"

DEFAULT_CONFIG: Dict[str, Any] = {
    "rules_file": DEFAULT_RULES_FILE,
    "verbose": False,
    "color": True,
    "max_pids": DEFAULT_MAX_PIDS,
    "require_privileges": True,
    "output": "text",
}

OUTPUT_FORMATS = ("text", "json")


def _valid(key: str, value: Any) -> bool:
    if key == "rules_file":
        return isinstance(value, str) and bool(value.strip())
    if key == "max_pids":
        return isinstance(value, int) and not isinstance(value, bool) and value >= 1
    if key == "output":
        return value in OUTPUT_FORMATS
    # remaining keys are on/off flags
    return isinstance(value, bool)


def load_config(path: str | None) -> Dict[str, Any]:
    cfg = DEFAULT_CONFIG.copy()
    if not path:
        return cfg
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        unknown = sorted(str(k) for k in data if k not in DEFAULT_CONFIG)
        if unknown:
            print(f"Warning: ignoring unknown config keys in {path}: {', '.join(unknown)}", file=sys.stderr)
        for key, value in data.items():
            if key not in DEFAULT_CONFIG:
                continue
            if not _valid(key, value):
                print(f"Warning: invalid value {value!r} for {key!r} in {path}, using {DEFAULT_CONFIG[key]!r}",
                      file=sys.stderr)
                continue
            cfg[key] = value
        print(f"Loaded config from {path}", file=sys.stderr)
    except (OSError, yaml.YAMLError, ValueError) as e:
        print(f"Warning: Could not load config {path}: {e}", file=sys.stderr)
        cfg = DEFAULT_CONFIG.copy()
    return cfg
