"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
ENV_PREFIX = "ESIGN_"
ENV_CONFIG_FILE = "ESIGN_CONFIG"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Export": {
        "fetch_timeout": "30.0",
        "fetch_retries": "3",
        "retry_backoff": "0.5",
        "output_dir": ".",
    },
    "Render": {
        "text_inset": "8.0",
        "baseline_offset": "4.0",
        "default_font_size": "12.0",
    },
    "Certificate": {
        "image_width": "200.0",
    },
    "Audit": {
        "enabled": "false",
        "log_path": "logs/export_audit.jsonl",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class ExportConfig:
    fetch_timeout: float = 30.0
    fetch_retries: int = 3
    retry_backoff: float = 0.5
    output_dir: Path = Path(".")


@dataclass
class RenderConfig:
    text_inset: float = 8.0
    baseline_offset: float = 4.0
    default_font_size: float = 12.0


@dataclass
class CertificateConfig:
    image_width: float = 200.0


@dataclass
class AuditConfig:
    enabled: bool = False
    log_path: Path = Path("logs/export_audit.jsonl")


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser()
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


_TYPES: Dict[str, type] = {"Path": Path, "bool": bool, "int": int, "float": float, "str": str}


def _cast(value: Any, typ: Any) -> Any:
    # dataclass field types are strings under postponed annotations
    if isinstance(typ, str):
        typ = _TYPES.get(typ, str)
    if typ is Path:
        return Path(str(value)).expanduser()
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, field.type)
    return cls(**kwargs)


def _env_overlays(environ: Optional[Dict[str, str]] = None) -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in (environ if environ is not None else os.environ).items():
        if not env_key.startswith(ENV_PREFIX) or env_key == ENV_CONFIG_FILE:
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "ESign" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "esign" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety.

    Precedence (lowest first): embedded defaults, ``defaults.ini``,
    ``ESIGN_<SECTION>__<KEY>`` environment variables, the INI named by
    ``ESIGN_CONFIG``, the per-user INI.
    """

    def __init__(self, *, environ: Optional[Dict[str, str]] = None,
                 user_ini: Optional[Path] = None) -> None:
        self._lock = RLock()
        self._environ = environ
        self._user_ini = user_ini
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        env_vars = self._environ if self._environ is not None else dict(os.environ)
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if DEFAULTS_INI.exists():
                _apply(merged, _read_ini(DEFAULTS_INI), "defaults.ini", str(DEFAULTS_INI), sources)

            # Layer 2: environment variables
            _apply(merged, _env_overlays(env_vars), "env", "os.environ", sources)

            # Layer 3: explicit config file
            explicit = env_vars.get(ENV_CONFIG_FILE)
            if explicit and Path(explicit).exists():
                _apply(merged, _read_ini(Path(explicit)), "explicit", explicit, sources)

            # Layer 4: user overrides
            user_ini = self._user_ini or _user_config_path()
            if user_ini.exists():
                _apply(merged, _read_ini(user_ini), "user", str(user_ini), sources)

            self._merged = merged
            self._sources = sources

            self.export = _build_dataclass(ExportConfig, merged.get("Export", {}))
            self.render = _build_dataclass(RenderConfig, merged.get("Render", {}))
            self.certificate = _build_dataclass(CertificateConfig, merged.get("Certificate", {}))
            self.audit = _build_dataclass(AuditConfig, merged.get("Audit", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


_instance: Optional[ConfigService] = None
_instance_lock = RLock()


def get_config() -> ConfigService:
    """Process-wide configuration, created on first use."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = ConfigService()
        return _instance
