from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

APP_DIR = Path.home() / ".nmr_mirror"
CONFIG_PATH = APP_DIR / "config.json"

DEFAULT_THRESHOLD_DAYS = 3.0
DEFAULT_MARKER_PATTERNS = ["pdata/"]
DEFAULT_RETRIES = 2
DEFAULT_WAIT_SEC = 5
UNC_PREFIX = "\\\\"
WINDOWS_SEP = "\\"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SourcePair:
    source_root: Path
    dest_root: Path


@dataclass(frozen=True)
class MachineConfig:
    name: str
    instrument_id: str
    pairs: tuple[SourcePair, ...]


@dataclass(frozen=True)
class RobocopyConfig:
    retries: int = DEFAULT_RETRIES
    wait_sec: int = DEFAULT_WAIT_SEC
    prefix: str = UNC_PREFIX
    separator: str = WINDOWS_SEP


@dataclass(frozen=True)
class AppConfig:
    log_dir: Path
    records_dir: Path
    threshold_days: float
    exemptions: frozenset[str]
    marker_patterns: tuple[str, ...]
    robocopy: RobocopyConfig
    machines: dict[str, MachineConfig] = field(default_factory=dict)

    def machine(self, name: str) -> MachineConfig:
        try:
            return self.machines[name]
        except KeyError:
            known = ", ".join(sorted(self.machines)) or "none configured"
            raise ConfigError(f"Unknown machine '{name}' (known: {known})") from None


def load_config_file(path: Path = CONFIG_PATH) -> dict:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return raw


def _parse_pairs(name: str, entry: dict) -> tuple[SourcePair, ...]:
    if "pairs" in entry:
        raw_pairs = entry["pairs"]
        if not isinstance(raw_pairs, list) or not all(
            isinstance(p, (list, tuple)) and len(p) == 2 for p in raw_pairs
        ):
            raise ConfigError(f"Machine '{name}': each pair must be [source, destination]")
        sources = [p[0] for p in raw_pairs]
        dests = [p[1] for p in raw_pairs]
    else:
        sources = entry.get("sources", [])
        dests = entry.get("destinations", [])
        if not isinstance(sources, list) or not isinstance(dests, list):
            raise ConfigError(f"Machine '{name}': sources and destinations must be lists")

    if len(sources) != len(dests):
        raise ConfigError(
            f"Machine '{name}': {len(sources)} sources but {len(dests)} destinations"
        )
    if not sources:
        raise ConfigError(f"Machine '{name}': no source/destination pairs configured")
    if not all(isinstance(p, str) and p for p in sources + dests):
        raise ConfigError(f"Machine '{name}': source and destination paths must be non-empty strings")

    return tuple(SourcePair(Path(s), Path(d)) for s, d in zip(sources, dests))


def _parse_machine(name: str, entry: Any) -> MachineConfig:
    if not isinstance(entry, dict):
        raise ConfigError(f"Machine '{name}' must be a JSON object")
    instrument_id = str(entry.get("instrument_id") or name)
    return MachineConfig(name=name, instrument_id=instrument_id, pairs=_parse_pairs(name, entry))


def _string_list(raw: dict, key: str, default: list[str]) -> list[str]:
    value = raw.get(key, default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings, got {value!r}")
    return value


def build_config(
    raw: dict,
    threshold_days: Optional[float] = None,
    log_dir: Optional[Path] = None,
) -> AppConfig:
    machines_raw = raw.get("machines", {})
    if not isinstance(machines_raw, dict):
        raise ConfigError("'machines' must map machine names to objects")

    robo_raw = raw.get("robocopy", {})
    if not isinstance(robo_raw, dict):
        raise ConfigError(f"'robocopy' must be a JSON object, got {robo_raw!r}")

    try:
        robocopy = RobocopyConfig(
            retries=int(robo_raw.get("retries", DEFAULT_RETRIES)),
            wait_sec=int(robo_raw.get("wait", DEFAULT_WAIT_SEC)),
            prefix=str(robo_raw.get("prefix", UNC_PREFIX)),
            separator=str(robo_raw.get("separator", WINDOWS_SEP)),
        )
        eff_log_dir = log_dir or Path(raw.get("log_dir", "."))
        records_dir = Path(raw["records_dir"]) if raw.get("records_dir") else eff_log_dir
        days = threshold_days if threshold_days is not None else float(raw.get("threshold_days", DEFAULT_THRESHOLD_DAYS))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config value: {e}") from e

    if days < 0:
        raise ConfigError(f"threshold_days must not be negative: {days}")

    return AppConfig(
        log_dir=eff_log_dir,
        records_dir=records_dir,
        threshold_days=days,
        exemptions=frozenset(_string_list(raw, "exemptions", [])),
        marker_patterns=tuple(_string_list(raw, "marker_patterns", DEFAULT_MARKER_PATTERNS)),
        robocopy=robocopy,
        machines={name: _parse_machine(name, entry) for name, entry in machines_raw.items()},
    )
