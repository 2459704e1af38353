# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ASGI application factories for uvicorn.

Both services are configured from :func:`jsondb_mail.config_loader.load_settings`.

Usage:
    uvicorn jsondb_mail.server:db_app --factory --port 3002
    uvicorn jsondb_mail.server:mail_app --factory --port 3001
"""

from __future__ import annotations

from fastapi import FastAPI

from .config_loader import Settings, load_settings
from .db_api import create_db_app
from .logger import configure_logging
from .mail_api import create_mail_app
from .relay import MailRelay
from .smtp_transport import SMTPTransport
from .store import CollectionStore


def build_db_app(settings: Settings) -> FastAPI:
    """Create the collection store application described by ``settings``."""
    store = CollectionStore(settings.store.db_path)
    return create_db_app(
        store,
        cors_origins=settings.server.cors_origins,
        max_body_bytes=settings.server.max_body_bytes,
    )


def build_mail_app(settings: Settings) -> FastAPI:
    """Create the mail relay application described by ``settings``."""
    transport = SMTPTransport(
        settings.relay.smtp_host,
        settings.relay.smtp_port,
        timeout=settings.relay.smtp_timeout,
    )
    return create_mail_app(
        MailRelay(transport),
        cors_origins=settings.server.cors_origins,
        max_body_bytes=settings.server.max_body_bytes,
    )


def db_app() -> FastAPI:
    settings = load_settings()
    configure_logging(settings.log_level)
    return build_db_app(settings)


def mail_app() -> FastAPI:
    settings = load_settings()
    configure_logging(settings.log_level)
    return build_mail_app(settings)
