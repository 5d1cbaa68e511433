import os
from typing import Any
from dataclasses import is_dataclass, asdict
from enum import Enum


def _project_root() -> str:
    """Return absolute path to the project root (one level up from this file's directory)."""
    return os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


def _resolve_path(path: str) -> str:
    """Resolve relative paths to the project root if they don't exist as given."""
    if not path or os.path.exists(path):
        return path
    return os.path.join(_project_root(), path)


def _to_json_compatible(obj: Any) -> Any:
    """
    Convert results to JSON primitives.

    Guest/Room dataclasses become dicts, Gender becomes its tag, the guest id sets
    of `guest_ids_of_room` become sorted lists and integer ids used as keys
    become strings.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        return {k: _to_json_compatible(v) for k, v in asdict(obj).items()}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, set):
        return sorted(_to_json_compatible(v) for v in obj)
    if isinstance(obj, (list, tuple)):
        return [_to_json_compatible(v) for v in obj]
    if isinstance(obj, dict):
        return {str(k): _to_json_compatible(v) for k, v in obj.items()}
    return obj
