import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from clmm_quoter.core.constants.base import (
    DEFAULT_BITMAP_WORD_RADIUS,
    DEFAULT_MAX_STEPS,
)

_CONFIG_ENV_KEYS = ("CLMM_QUOTER_CONFIG_PATH", "CLMM_QUOTER_CONFIG")
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
    except json.JSONDecodeError as exc:
        if require_exists:
            raise
        logger.warning(f"Ignoring unreadable config {cfg_path}: {exc}")
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


def get_rpc_urls() -> dict[str, Any]:
    return CONFIG.get("strategy", {}).get("rpc_urls", {})


def _quoter_section() -> dict[str, Any]:
    section = CONFIG.get("quoter", {})
    return section if isinstance(section, dict) else {}


def _positive_int(value: Any, default: int, key: str) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"quoter.{key} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"quoter.{key} must be positive, got {parsed}")
    return parsed


def get_max_steps() -> int:
    return _positive_int(_quoter_section().get("max_steps"), DEFAULT_MAX_STEPS, "max_steps")


def get_bitmap_word_radius() -> int:
    radius = _quoter_section().get("bitmap_word_radius")
    if radius == 0:
        return 0
    return _positive_int(radius, DEFAULT_BITMAP_WORD_RADIUS, "bitmap_word_radius")
