# src/delivery_status_sync/config/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from dotenv import dotenv_values, find_dotenv, load_dotenv

from delivery_status_sync.models import SyncSettings


# --- Public contract ---------------------------------------------------------

class EnvError(RuntimeError):
    """Raised when required environment variables are missing or malformed."""


# Only needed when the caller asks for strict validation (e.g. cron deployments)
REQUIRED_KEYS: Tuple[str, ...] = (
    "SYNC_STORE_PATH",
)


def load_project_dotenv(start: Optional[Path] = None, *, override: bool = False) -> Path:
    """
    Load variables from the nearest `.env` file (searching upward from `start` or CWD).
    Does NOT override existing env vars unless `override=True`.
    Returns the resolved Path to the .env file if found; otherwise Path().
    """
    start_path = Path.cwd() if start is None else Path(start)

    dotenv_str = find_dotenv(filename=".env", usecwd=True)
    dotenv_path = Path(dotenv_str) if dotenv_str else Path()

    if not dotenv_str:
        for p in (start_path, *start_path.parents):
            candidate = p / ".env"
            if candidate.exists():
                dotenv_path = candidate
                break

    if not dotenv_path.exists() or dotenv_path.is_dir():
        return Path()

    load_dotenv(dotenv_path=dotenv_path, override=override)
    return dotenv_path.resolve()


def env(name: str, *, default=None, required: bool = False, cast: Optional[Callable] = None):
    """
    Test-friendly accessor.

    - If `required=True` and var is missing, raise KeyError(name).
    - If `cast` is provided, apply it to the raw string and propagate cast errors.
    - Returns `default` when missing (or blank) and not required.
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        if required:
            raise KeyError(name)
        return default

    if cast is not None:
        return cast(raw)
    return raw


# --- Internal helpers --------------------------------------------------------

def _typed(name: str, default, cast: Callable):
    try:
        value = env(name, default=default, cast=cast)
    except ValueError as e:
        raise EnvError(f"Invalid value for {name}: {os.getenv(name)!r}") from e
    if isinstance(value, (int, float)) and value <= 0:
        raise EnvError(f"{name} must be positive, got {value}")
    return value


def _file_values(path: Path) -> Dict[str, str]:
    # Keys declared without a value come back as None.
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


# --- Main loader APIs --------------------------------------------------------

def load_env(
    dotenv_path: Optional[Path] = None,
    *,
    override: bool = False,
    required_keys: Tuple[str, ...] = (),
    strict: bool = False,
) -> Dict[str, str]:
    """
    Load env vars from a .env file into the process environment and return a dict
    of key/value pairs found in that file.

    - If `dotenv_path` is provided, load exactly that file.
    - Otherwise, auto-discover the nearest .env via `load_project_dotenv`.
    - If `strict=True` and `required_keys` are provided, ensure they are present
      in `os.environ` after loading; otherwise raise EnvError.
    - `override` controls whether .env values replace existing process env values.
    """
    loaded: Dict[str, str] = {}

    if dotenv_path:
        path = Path(dotenv_path)
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
            loaded = _file_values(path)
    else:
        path = load_project_dotenv(override=override)
        if path.is_file():
            loaded = _file_values(path)

    if strict and required_keys:
        missing = [k for k in required_keys if not os.getenv(k)]
        if missing:
            raise EnvError(
                f"Missing required environment variable(s): {', '.join(missing)}")

    return loaded


def get_app_env(dotenv_path: Path | str | None = ".env", *, strict: bool = False) -> SyncSettings:
    """
    Load sync settings and return a typed config object.

    - `dotenv_path` may point to a specific .env file, or be None to disable file
      loading (useful for tests).
    - Existing process env wins over the file (prefers CI/host settings).
    - When `strict=True` REQUIRED_KEYS are validated and EnvError is raised on misses.
    """
    load_env(
        Path(dotenv_path) if dotenv_path else None,
        override=False,
        required_keys=REQUIRED_KEYS,
        strict=strict,
    )

    defaults = SyncSettings()
    return SyncSettings(
        SYNC_STORE_PATH=env("SYNC_STORE_PATH"),
        SYNC_BATCH_SIZE=_typed("SYNC_BATCH_SIZE", defaults.SYNC_BATCH_SIZE, int),
        SYNC_CONCURRENCY=_typed("SYNC_CONCURRENCY", defaults.SYNC_CONCURRENCY, int),
        SYNC_PACING_MS=_typed("SYNC_PACING_MS", defaults.SYNC_PACING_MS, int),
        SYNC_ERROR_SAMPLE_CAP=_typed(
            "SYNC_ERROR_SAMPLE_CAP", defaults.SYNC_ERROR_SAMPLE_CAP, int),
        PROVIDER_TIMEOUT_SEC=_typed(
            "PROVIDER_TIMEOUT_SEC", defaults.PROVIDER_TIMEOUT_SEC, float),
        PATHAO_BASE_URL=env("PATHAO_BASE_URL"),
        REDX_BASE_URL=env("REDX_BASE_URL"),
        STEADFAST_BASE_URL=env("STEADFAST_BASE_URL"),
        PAPERFLY_TRACKER_URL=env("PAPERFLY_TRACKER_URL"),
    )


__all__ = [
    "EnvError",
    "REQUIRED_KEYS",
    "load_project_dotenv",
    "load_env",
    "env",
    "get_app_env",
]
