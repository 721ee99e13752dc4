from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from ..scanner.errors import ConfigError
from ..scanner.hasher import HASH_CHUNK_SIZE
from ..scanner.pool import default_worker_count

WORKERS_ENV = "DUPSCAN_WORKERS"
CHUNK_SIZE_ENV = "DUPSCAN_CHUNK_SIZE"
LOG_LEVEL_ENV = "DUPSCAN_LOG_LEVEL"
ORDER_ENV = "DUPSCAN_ORDER"

GROUP_ORDERS = ("first-seen", "digest", "wasted")


@dataclass
class ScanSettings:
    """Runtime knobs read from the environment (and a local .env file)."""

    workers: int
    chunk_size: int = HASH_CHUNK_SIZE
    log_level: str = "INFO"
    order: str = "first-seen"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> ScanSettings:
    """
    Build ScanSettings from ``environ`` (defaults to ``os.environ``).

    When reading the real environment, a ``.env`` file in the working
    directory is loaded first without overriding variables already set.

    Raises:
        ConfigError: a variable is set to an unusable value.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    workers = _positive_int(environ, WORKERS_ENV, default_worker_count())
    chunk_size = _positive_int(environ, CHUNK_SIZE_ENV, HASH_CHUNK_SIZE)

    log_level = (environ.get(LOG_LEVEL_ENV) or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"{LOG_LEVEL_ENV} must be a logging level name, got {log_level!r}", "INVALID_CONFIG")

    order = (environ.get(ORDER_ENV) or "first-seen").strip().lower()
    if order not in GROUP_ORDERS:
        raise ConfigError(
            f"{ORDER_ENV} must be one of {', '.join(GROUP_ORDERS)}, got {order!r}", "INVALID_CONFIG"
        )

    return ScanSettings(workers=workers, chunk_size=chunk_size, log_level=log_level, order=order)


def _positive_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}", "INVALID_CONFIG") from exc
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {value}", "INVALID_CONFIG")
    return value
