"""Configuration loader and validator for AutoPaste.

Provides ``load_config(path)`` which reads a JSON config (with
comment and trailing-comma tolerant sanitizer) and merges user
overrides from ``~/.config/autopaste/config.json``.

Also provides ``validate_config(conf)`` which normalizes and
validates config keys, raising ``ValueError`` on invalid values.
"""

from __future__ import annotations

import json
import logging
import os
import re

from autopaste.core.strategy import MECHANISMS

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = '~/.config/autopaste/config.json'

# Single source of truth for default configuration
DEFAULT_CONFIG: dict = {
    'debug': False,
    'cache_ttl': 30.0,
    'restore_clipboard': True,
    'permission_dialog': True,
    'app_name': 'AutoPaste',
    'nircmd_path': None,
    'timings': {},
}

TIMING_FIELDS = ('pre_delay', 'timeout', 'restore_delay')


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _sanitize_json_text(s: str) -> str:
    """Remove ``#``/``//`` comments and trailing commas from JSON-like text."""
    # Hash-style line comments
    s = re.sub(r"^[ \t]*#.*$", "", s, flags=re.MULTILINE)
    # C++-style whole-line comments; "//" inside string values is kept
    s = re.sub(r"^[ \t]*//.*$", "", s, flags=re.MULTILINE)
    # Trailing commas before } or ]
    s = re.sub(r",[ \t\r\n]+(\}|\])", r"\1", s)
    return s


def _bool(conf: dict, key: str) -> bool:
    val = conf.get(key, DEFAULT_CONFIG[key])
    if not isinstance(val, bool):
        raise ValueError(f"Invalid '{key}': must be boolean")
    return val


def _validate_timings(raw) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("Invalid 'timings': must be an object keyed by mechanism")
    out: dict = {}
    for mechanism, values in raw.items():
        if mechanism not in MECHANISMS:
            raise ValueError(f"Invalid 'timings': unknown mechanism '{mechanism}'")
        if not isinstance(values, dict):
            raise ValueError(f"Invalid 'timings.{mechanism}': must be an object")
        entry = {}
        for name, value in values.items():
            if name not in TIMING_FIELDS:
                raise ValueError(f"Invalid 'timings.{mechanism}': unknown field '{name}'")
            try:
                fval = float(value)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid 'timings.{mechanism}.{name}': {value}")
            if fval < 0 or (name == 'timeout' and fval == 0):
                raise ValueError(f"Invalid 'timings.{mechanism}.{name}': must be positive")
            entry[name] = fval
        out[mechanism] = entry
    return out


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def validate_config(conf: dict | None) -> dict:
    """Validate and normalize configuration dictionary.

    Returns a normalized dict with all expected keys.
    Raises ``ValueError`` on invalid values.
    """
    if conf is None:
        conf = {}

    out = dict(DEFAULT_CONFIG)

    out['debug'] = _bool(conf, 'debug')
    out['restore_clipboard'] = _bool(conf, 'restore_clipboard')
    out['permission_dialog'] = _bool(conf, 'permission_dialog')

    # cache_ttl — float in [0, 3600]; 0 disables caching
    ttl = conf.get('cache_ttl', DEFAULT_CONFIG['cache_ttl'])
    try:
        ttl_val = float(ttl)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid 'cache_ttl': {ttl}")
    if not (0.0 <= ttl_val <= 3600.0):
        raise ValueError(f"Invalid 'cache_ttl': {ttl} (must be between 0 and 3600)")
    out['cache_ttl'] = ttl_val

    # app_name — non-empty string, shown in the Accessibility dialog
    name = conf.get('app_name', DEFAULT_CONFIG['app_name'])
    if not isinstance(name, str) or not name:
        raise ValueError("Invalid 'app_name': must be a non-empty string")
    out['app_name'] = name

    # nircmd_path — string or null
    nircmd = conf.get('nircmd_path', DEFAULT_CONFIG['nircmd_path'])
    if nircmd is not None and (not isinstance(nircmd, str) or not nircmd):
        raise ValueError("Invalid 'nircmd_path': must be a non-empty string or null")
    out['nircmd_path'] = nircmd

    out['timings'] = _validate_timings(conf.get('timings'))

    return out


def _read_and_merge(path: str, target_config: dict) -> bool:
    """Read a JSON file, validate, and merge into *target_config*.

    Returns True on success, False on any error.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = f.read()
    except OSError as exc:
        logger.warning("Cannot read config %s: %s", path, exc)
        return False

    try:
        cfg = json.loads(raw)
    except json.JSONDecodeError:
        try:
            cfg = json.loads(_sanitize_json_text(raw))
        except json.JSONDecodeError as exc:
            logger.warning("JSON parse error in %s: %s", path, exc)
            return False

    if not isinstance(cfg, dict):
        logger.warning("Invalid config %s: top level must be an object", path)
        return False

    try:
        validated = validate_config(cfg)
    except ValueError as verr:
        logger.warning("Invalid config %s: %s", path, verr)
        return False

    # Only override keys explicitly present in source
    for k in cfg:
        if k in validated:
            target_config[k] = validated[k]
    return True


# ------------------------------------------------------------------
# Top-level loader
# ------------------------------------------------------------------

def load_config(config_path: str | None = None) -> dict:
    """Load and merge configuration.

    If *config_path* is given, uses only that file (returns defaults if
    the file does not exist).  Otherwise falls back to
    ``~/.config/autopaste/config.json``.

    Returns the effective configuration dict (always has all default keys).
    """
    config = dict(DEFAULT_CONFIG)
    path = config_path if config_path is not None else os.path.expanduser(USER_CONFIG_PATH)
    if os.path.exists(path):
        _read_and_merge(path, config)
    return config
