"""Read session settings from JSON/YAML files and coerce their scalars.

Settings files either hold the session keys at the top level or nest them
under a named section (``session:``), so one file can also carry settings for
other tools.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

CONFIG_SUFFIXES: tuple[str, ...] = (".json", ".yaml", ".yml")


def load_config_mapping(path: str | Path, *, section: str | None = None) -> dict[str, Any]:
    """Read a settings file whose root is a mapping.

    Parameters
    ----------
    path : str | pathlib.Path
        File with a `.json`, `.yaml` or `.yml` suffix.
    section : str | None, optional
        When given and present at the root, return that nested mapping
        instead of the root. A file without the section is returned whole.

    Returns
    -------
    dict[str, Any]
        Parsed settings. An empty YAML document yields ``{}``.

    Raises
    ------
    ValueError
        If the suffix is unsupported, or the root or section is not a mapping.
    ImportError
        If a YAML file is given and PyYAML is not installed.
    """

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in CONFIG_SUFFIXES:
        raise ValueError(
            f"unsupported config file extension {suffix!r}; expected one of {', '.join(CONFIG_SUFFIXES)}"
        )

    text = config_path.read_text(encoding="utf-8")
    if suffix == ".json":
        raw = json.loads(text)
    else:
        try:
            import yaml
        except ImportError as exc:  # pragma: no cover - exercised only without pyyaml
            raise ImportError(
                "YAML config loading requires PyYAML. Install with `pip install prl-task[yaml]`."
            ) from exc
        raw = yaml.safe_load(text)

    raw = {} if raw is None else raw
    if not isinstance(raw, dict):
        raise ValueError("config root must be a JSON/YAML object")
    if section is None or section not in raw:
        return raw
    nested = raw[section]
    if not isinstance(nested, dict):
        raise ValueError(f"config section {section!r} must be an object")
    return nested


def check_keys(
    mapping: Mapping[str, Any],
    *,
    field_name: str,
    allowed: Iterable[str],
    required: Iterable[str] = (),
) -> None:
    """Reject unknown keys and report missing required ones.

    Raises
    ------
    ValueError
        Listing every unknown key, or else every missing required key.
    """

    allowed_names = {str(key) for key in allowed}
    unknown = sorted(str(key) for key in mapping if str(key) not in allowed_names)
    if unknown:
        raise ValueError(f"{field_name} has unknown keys: {unknown}")
    missing = sorted(str(key) for key in required if key not in mapping)
    if missing:
        raise ValueError(f"{field_name} is missing required keys: {missing}")


def coerce_int(value: Any, *, field_name: str) -> int:
    """Return ``value`` as an int; numeric strings and whole floats are accepted."""

    number = coerce_float(value, field_name=field_name, kind="an integer")
    if not number.is_integer():
        raise ValueError(f"{field_name} must be an integer, got {value!r}")
    return int(number)


def coerce_float(value: Any, *, field_name: str, kind: str = "numeric") -> float:
    """Return ``value`` as a float; booleans are rejected."""

    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be {kind}, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be {kind}, got {value!r}") from exc


__all__ = ["CONFIG_SUFFIXES", "check_keys", "coerce_float", "coerce_int", "load_config_mapping"]
