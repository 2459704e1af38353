# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""One-shot SMTP sessions over implicit TLS.

Every call to :meth:`SMTPTransport.send` opens a fresh connection,
authenticates with the credentials it was given, submits one message and
quits. Nothing is pooled or reused between calls.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

import aiosmtplib

from .config_loader import DEFAULT_SMTP_HOST, DEFAULT_SMTP_PORT
from .logger import get_logger


@dataclass
class SendResult:
    """Outcome of a successful submission."""

    message_id: Optional[str]
    response: str


class SMTPTransport:
    """Send single messages to a fixed SMTP provider."""

    def __init__(
        self,
        host: str = DEFAULT_SMTP_HOST,
        port: int = DEFAULT_SMTP_PORT,
        *,
        use_tls: bool = True,
        timeout: float = 10.0,
        logger=None,
    ):
        self.host = host
        self.port = port
        self.use_tls = use_tls
        self.timeout = timeout
        self.logger = logger or get_logger("SMTPTransport")

    def _client(self) -> aiosmtplib.SMTP:
        """Build an unconnected SMTP client for one session."""
        # Implicit TLS (port 465): use_tls=True, start_tls=False
        return aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            start_tls=False,
            use_tls=self.use_tls,
            timeout=self.timeout,
        )

    async def _release(self, smtp: aiosmtplib.SMTP, connected: bool) -> None:
        """Quit a session that got past connect, otherwise drop the socket."""
        try:
            if connected:
                await smtp.quit()
            else:
                smtp.close()
        except Exception as exc:
            self.logger.debug("Ignoring error while closing SMTP session: %s", exc)
            smtp.close()

    async def send(self, message: EmailMessage, user: Optional[str], password: Optional[str]) -> SendResult:
        """Submit ``message`` in a dedicated session and return the server reply.

        The session is released on every path, including rejected logins and
        handshake timeouts.
        """
        smtp = self._client()
        connected = False

        async def _do_connect():
            nonlocal connected
            await smtp.connect()
            connected = True
            if user and password:
                await smtp.login(user, password)

        try:
            # aiosmtplib applies its timeout per command; bound the whole handshake too
            await asyncio.wait_for(_do_connect(), timeout=self.timeout * 1.5)
            _, response = await asyncio.wait_for(smtp.send_message(message), timeout=self.timeout * 3)
        finally:
            await self._release(smtp, connected)
        message_id = message.get("Message-ID")
        return SendResult(message_id=str(message_id) if message_id else None, response=str(response))
