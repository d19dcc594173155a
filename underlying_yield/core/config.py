import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from underlying_yield.core.constants.base import (
    DEFAULT_ADAPTER_TIMEOUT,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_RPC_TIMEOUT,
)
from underlying_yield.core.constants.symbols import DEFAULT_VARIANT, SYMBOLS_BY_VARIANT

_CONFIG_ENV_KEYS = ("UNDERLYING_YIELD_CONFIG_PATH", "UNDERLYING_YIELD_CONFIG")
_DEFAULT_CONFIG_FILENAME = "config.json"


def _find_project_root(start: Path) -> Path | None:
    cur = start.resolve()
    for parent in [cur, *cur.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


def _project_root() -> Path | None:
    return _find_project_root(Path.cwd()) or _find_project_root(Path(__file__).parent)


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()

    env_path = next(
        (os.getenv(k, "").strip() for k in _CONFIG_ENV_KEYS if os.getenv(k)), ""
    )
    if env_path:
        p = Path(env_path).expanduser()
        if p.is_absolute():
            return p
        root = _project_root()
        return (root / p) if root else p

    root = _project_root()
    return (root / _DEFAULT_CONFIG_FILENAME) if root else Path(_DEFAULT_CONFIG_FILENAME)


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    try:
        return json.loads(cfg_path.read_text())
    except Exception as exc:
        logger.warning(f"Ignoring unreadable config file {cfg_path}: {exc}")
        return {}


CONFIG: dict[str, Any] = load_config_json()


def set_config(config: dict[str, Any]) -> None:
    """Replace the global CONFIG dict in-place.

    This allows code that imported CONFIG at module import time to see updates.
    """
    CONFIG.clear()
    CONFIG.update(config)


def load_config(
    path: str | Path | None = None, *, require_exists: bool = False
) -> None:
    """Load config from disk into the global CONFIG dict."""
    set_config(load_config_json(path, require_exists=require_exists))


def set_rpc_urls(rpc_urls: dict[str, Any]) -> None:
    CONFIG["rpc_urls"] = rpc_urls


def get_rpc_urls() -> dict[str, Any]:
    return CONFIG.get("rpc_urls", {})


def _positive_float(section: str, key: str, default: float) -> float:
    raw = CONFIG.get(section, {}).get(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {section}.{key}={raw!r}; using {default}")
        return default
    if value <= 0:
        logger.warning(f"Non-positive {section}.{key}={raw!r}; using {default}")
        return default
    return value


def get_rpc_timeout() -> float:
    return _positive_float("system", "rpc_timeout_s", DEFAULT_RPC_TIMEOUT)


def get_http_timeout() -> float:
    return _positive_float("system", "http_timeout_s", DEFAULT_HTTP_TIMEOUT)


def get_adapter_timeout() -> float:
    return _positive_float("system", "adapter_timeout_s", DEFAULT_ADAPTER_TIMEOUT)


def get_lookback_days() -> int:
    raw = CONFIG.get("yields", {}).get("lookback_days")
    if raw is None:
        return DEFAULT_LOOKBACK_DAYS
    try:
        value = float(raw)
    except (TypeError, ValueError):
        value = 0.0
    if isinstance(raw, bool) or not value.is_integer() or value <= 0:
        logger.warning(
            f"Invalid yields.lookback_days={raw!r}; using {DEFAULT_LOOKBACK_DAYS}"
        )
        return DEFAULT_LOOKBACK_DAYS
    return int(value)


def get_variant() -> str:
    variant = str(CONFIG.get("yields", {}).get("variant") or DEFAULT_VARIANT).strip()
    if variant not in SYMBOLS_BY_VARIANT:
        raise ValueError(
            f"Unknown yields.variant {variant!r}; expected one of {sorted(SYMBOLS_BY_VARIANT)}"
        )
    return variant


def get_cbeth_missing_data_value() -> float | None:
    """Value reported for cbETH when the oracle window is too thin.

    cbETH has no REST fallback; ``0.0`` by default, ``null`` in config for ``None``.
    """
    yields = CONFIG.get("yields", {})
    if "cbeth_missing_data_value" not in yields:
        return 0.0
    raw = yields["cbeth_missing_data_value"]
    return None if raw is None else float(raw)
