# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Translate a JSON email description into one SMTP submission.

The relay is stateless: credentials travel in each request, a new SMTP
session is opened per call, and nothing is retried or retained once the
provider has answered.
"""

from __future__ import annotations

import base64
import binascii
from email.message import EmailMessage
from email.utils import make_msgid, parseaddr
from typing import Any, List, Optional

from .errors import TransportError
from .logger import get_logger
from .mime import content_type_for, split_content_type
from .models import AttachmentPayload, EmailData, SmtpConfig
from .prometheus import RelayMetrics
from .smtp_transport import SendResult, SMTPTransport


def _format_addresses(value: Any) -> Optional[str]:
    if not value:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (list, tuple, set)):
        items = [str(addr).strip() for addr in value if addr and str(addr).strip()]
        return ", ".join(items) if items else None
    return str(value)


def decode_base64(content: str) -> bytes:
    """Decode attachment payloads, tolerating missing padding and whitespace."""
    data = "".join(content.split())
    padding_needed = 4 - (len(data) % 4)
    if padding_needed != 4:
        data += "=" * padding_needed
    try:
        return base64.b64decode(data)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 content: {exc}") from exc


class MailRelay:
    """Build messages from :class:`EmailData` and hand them to the transport."""

    def __init__(
        self,
        transport: SMTPTransport | None = None,
        *,
        metrics: RelayMetrics | None = None,
        logger=None,
    ):
        self.transport = transport or SMTPTransport()
        self.metrics = metrics or RelayMetrics()
        self.logger = logger or get_logger("MailRelay")

    def _build_attachments(self, msg: EmailMessage, attachments: List[AttachmentPayload]) -> None:
        self.logger.info("Attaching %d file(s)", len(attachments))
        for att in attachments:
            filename = att.attachment_name
            if not filename:
                raise ValueError("Attachment without a name")
            content_type = content_type_for(filename)
            maintype, subtype = split_content_type(content_type)
            payload = decode_base64(att.content or "")
            msg.add_attachment(payload, maintype=maintype, subtype=subtype, filename=filename)
            self.metrics.inc_attachment(content_type)
            self.logger.info("  %s (%s)", filename, content_type)

    def build_message(self, email_data: EmailData) -> EmailMessage:
        """Translate ``email_data`` into an :class:`EmailMessage`."""
        sender = _format_addresses(email_data.from_address)
        if not sender:
            raise ValueError("emailData.fromAddress is required")
        recipients = _format_addresses(email_data.to_address)
        if not recipients:
            raise ValueError("No recipients defined")

        msg = EmailMessage()
        msg["From"] = sender
        msg["To"] = recipients
        msg["Subject"] = email_data.subject or ""
        if cc_value := _format_addresses(email_data.cc):
            msg["Cc"] = cc_value
            self.logger.info("CC: %s", cc_value)
        domain = parseaddr(sender)[1].rpartition("@")[2] or None
        msg["Message-ID"] = make_msgid(domain=domain)
        msg.set_content(email_data.content or "", subtype="html")

        if email_data.attachments:
            self._build_attachments(msg, email_data.attachments)
        return msg

    async def send(self, email_data: EmailData | None, smtp_config: SmtpConfig | None) -> SendResult:
        """Build and submit one message with the caller's credentials.

        ``ValueError`` is raised for payloads that cannot form a message;
        anything the transport raises is wrapped in :class:`TransportError`.
        """
        if email_data is None:
            raise ValueError("emailData is required")
        if smtp_config is None:
            raise ValueError("smtpConfig is required")

        self.logger.info("Sending email to %s", _format_addresses(email_data.to_address))
        try:
            msg = self.build_message(email_data)
        except ValueError:
            self.metrics.inc_error()
            raise
        try:
            result = await self.transport.send(msg, smtp_config.email, smtp_config.password)
        except Exception as exc:
            self.metrics.inc_error()
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        self.metrics.inc_sent()
        self.logger.info("Email sent, Message-ID: %s", result.message_id)
        return result
