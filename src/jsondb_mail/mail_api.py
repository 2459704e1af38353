# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""FastAPI application factory for the mail relay.

``POST /api/send-email`` receives ``{emailData, smtpConfig}``. SMTP
credentials are supplied by the caller on every request and are used for
that single submission only; they are never logged or stored.

Any failure, whether a malformed payload, rejected credentials or a network
error, is answered with HTTP 500 and ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations

from typing import Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api_base import DEFAULT_MAX_BODY_BYTES, build_app, metrics_response
from .logger import get_logger
from .models import HealthResponse, SendEmailPayload, SendEmailResponse
from .relay import MailRelay

logger = get_logger("MailAPI")

SEND_FAILED = "Failed to send email"


def _failure(details: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": SEND_FAILED, "details": details},
    )


def create_mail_app(
    relay: MailRelay,
    *,
    cors_origins: Sequence[str] | None = None,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> FastAPI:
    """Create the mail relay application around ``relay``."""
    api = build_app("SMTP Mail Relay", cors_origins=cors_origins, max_body_bytes=max_body_bytes)
    api.state.relay = relay

    @api.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
        return _failure(str(exc.errors()))

    @api.post("/api/send-email", response_model=SendEmailResponse)
    async def send_email(payload: SendEmailPayload):
        """Relay one email through the provider with the supplied credentials."""
        logger.info("Email send request received")
        try:
            result = await relay.send(payload.email_data, payload.smtp_config)
        except Exception as exc:
            logger.error("Error sending email: %s", exc)
            return _failure(str(exc))
        return SendEmailResponse(success=True, message_id=result.message_id, response=result.response)

    @api.get("/api/health", response_model=HealthResponse)
    async def health():
        """Static liveness probe; no dependency is checked."""
        return HealthResponse(status="ok", message="Mail relay is running")

    @api.get("/metrics")
    async def metrics():
        """Expose Prometheus metrics collected by the relay."""
        return metrics_response(relay.metrics.generate_latest())

    return api
