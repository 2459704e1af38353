# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Settings loader for the collection store and the mail relay.

Configuration is read from an INI file (default: ``config.ini``, overridden
by ``JDM_CONFIG``) with environment variables as fallbacks.

Example:
    Configuration file format (config.ini)::

        [store]
        db_path = /var/lib/jsondb/database
        host = 0.0.0.0
        port = 3002

        [relay]
        host = 0.0.0.0
        port = 3001
        smtp_host = smtp.zoho.com
        smtp_port = 465
        smtp_timeout = 10

        [server]
        cors_origins = https://app.example.com, https://admin.example.com
        max_body_mb = 50

        [logging]
        level = INFO

Environment variables (all prefixed with JDM_):
    JDM_CONFIG, JDM_DB_PATH, JDM_DB_HOST, JDM_DB_PORT, JDM_RELAY_HOST,
    JDM_RELAY_PORT, JDM_SMTP_HOST, JDM_SMTP_PORT, JDM_SMTP_TIMEOUT,
    JDM_CORS_ORIGINS, JDM_MAX_BODY_MB, JDM_LOG_LEVEL
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path

from jsondb_mail.logger import get_logger

logger = get_logger("ConfigLoader")

DEFAULT_SMTP_HOST = "smtp.zoho.com"
DEFAULT_SMTP_PORT = 465


@dataclass
class StoreSettings:
    """Collection store settings."""

    db_path: str = "database"
    """Base directory holding ``<collection>.json`` files."""

    host: str = "0.0.0.0"
    port: int = 3002


@dataclass
class RelaySettings:
    """Mail relay settings."""

    host: str = "0.0.0.0"
    port: int = 3001

    smtp_host: str = DEFAULT_SMTP_HOST
    smtp_port: int = DEFAULT_SMTP_PORT
    """Implicit TLS port of the mail provider."""

    smtp_timeout: float = 10.0
    """Seconds allowed for connect, login and send."""


@dataclass
class ServerSettings:
    """HTTP settings shared by both applications."""

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    max_body_mb: float = 50.0

    @property
    def max_body_bytes(self) -> int:
        return int(self.max_body_mb * 1024 * 1024)


@dataclass
class Settings:
    store: StoreSettings = field(default_factory=StoreSettings)
    relay: RelaySettings = field(default_factory=RelaySettings)
    server: ServerSettings = field(default_factory=ServerSettings)
    log_level: str = "INFO"


def _split_origins(value: str) -> list[str]:
    origins = [part.strip() for part in value.split(",") if part.strip()]
    return origins or ["*"]


def load_settings(config_path: str | None = None) -> Settings:
    """Load :class:`Settings` from ``config_path`` and the environment.

    INI values win over environment variables; a missing file is not an
    error, every option then falls back to its environment variable or
    default.
    """
    path = Path(config_path or os.getenv("JDM_CONFIG", "config.ini"))
    parser = configparser.ConfigParser()
    if path.exists():
        parser.read(path)
        logger.debug("Loaded configuration from %s", path)

    def get(section: str, option: str, fallback: str | None = None) -> str | None:
        if parser.has_option(section, option):
            return parser.get(section, option)
        return fallback

    def get_int(section: str, option: str, fallback: str | None, default: int) -> int:
        value = get(section, option, fallback)
        if value is None or not str(value).strip():
            return default
        return int(value)

    def get_float(section: str, option: str, fallback: str | None, default: float) -> float:
        value = get(section, option, fallback)
        if value is None or not str(value).strip():
            return default
        return float(value)

    store = StoreSettings(
        db_path=os.path.expanduser(
            get("store", "db_path", os.getenv("JDM_DB_PATH")) or StoreSettings.db_path
        ),
        host=get("store", "host", os.getenv("JDM_DB_HOST")) or StoreSettings.host,
        port=get_int("store", "port", os.getenv("JDM_DB_PORT"), StoreSettings.port),
    )
    relay = RelaySettings(
        host=get("relay", "host", os.getenv("JDM_RELAY_HOST")) or RelaySettings.host,
        port=get_int("relay", "port", os.getenv("JDM_RELAY_PORT"), RelaySettings.port),
        smtp_host=get("relay", "smtp_host", os.getenv("JDM_SMTP_HOST")) or DEFAULT_SMTP_HOST,
        smtp_port=get_int("relay", "smtp_port", os.getenv("JDM_SMTP_PORT"), DEFAULT_SMTP_PORT),
        smtp_timeout=get_float("relay", "smtp_timeout", os.getenv("JDM_SMTP_TIMEOUT"), RelaySettings.smtp_timeout),
    )
    server = ServerSettings(
        cors_origins=_split_origins(get("server", "cors_origins", os.getenv("JDM_CORS_ORIGINS")) or "*"),
        max_body_mb=get_float("server", "max_body_mb", os.getenv("JDM_MAX_BODY_MB"), ServerSettings.max_body_mb),
    )
    level = get("logging", "level", os.getenv("JDM_LOG_LEVEL")) or "INFO"
    return Settings(store=store, relay=relay, server=server, log_level=level.strip().upper())
