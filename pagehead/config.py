"""Configuration for the head coordinator."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

log = logging.getLogger(__name__)

__all__ = ["HeadConfig", "load_config", "load_config_file"]

ENV_SUFFIX = "PAGEHEAD_TITLE_SUFFIX"
ENV_CALL_TIMEOUT = "PAGEHEAD_CALL_TIMEOUT_S"
ENV_DRAIN_ON_DISPOSE = "PAGEHEAD_DRAIN_ON_DISPOSE"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True)
class HeadConfig:
    """Options for :class:`pagehead.coordinator.HeadCoordinator`.

    ``suffix`` is appended verbatim to every derived title.  ``call_timeout_s``
    bounds each queued bridge call; ``None`` waits forever.
    """

    suffix: str = ""
    call_timeout_s: Optional[float] = None
    drain_on_dispose: bool = True


def _coerce_timeout(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in {"none", "off"}:
        return None
    try:
        parsed = float(lowered)
    except ValueError:
        log.warning("Invalid call timeout value: %r", value)
        return default
    if parsed <= 0:
        log.warning("Call timeout must be positive: %r", value)
        return default
    return parsed


def _coerce_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    log.warning("Invalid boolean value: %r", value)
    return default


def _from_mapping(values: Mapping[str, str]) -> HeadConfig:
    defaults = HeadConfig()
    return HeadConfig(
        suffix=values.get(ENV_SUFFIX, defaults.suffix),
        call_timeout_s=_coerce_timeout(values.get(ENV_CALL_TIMEOUT), defaults.call_timeout_s),
        drain_on_dispose=_coerce_bool(
            values.get(ENV_DRAIN_ON_DISPOSE), defaults.drain_on_dispose
        ),
    )


def load_config(environ: Optional[Mapping[str, str]] = None) -> HeadConfig:
    """Build a :class:`HeadConfig` from environment variables."""

    return _from_mapping(os.environ if environ is None else environ)


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def load_config_file(path: Path) -> HeadConfig:
    """Read ``KEY=VALUE`` lines from *path*; a missing file yields defaults.

    Keys may omit the ``PAGEHEAD_`` prefix.  Quote a value to keep leading or
    trailing blanks, e.g. ``TITLE_SUFFIX=" - Docs"``.
    """

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        log.info("Config file %s not found; using defaults", path)
        return HeadConfig()

    parsed: Dict[str, str] = {}
    for line in raw.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            log.warning("Ignoring config line without '=': %r", stripped)
            continue
        key, value = stripped.split("=", 1)
        key = key.strip().upper()
        if not key.startswith("PAGEHEAD_"):
            key = f"PAGEHEAD_{key}"
        parsed[key] = _strip_quotes(value.strip())
    return _from_mapping(parsed)
