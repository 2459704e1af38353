# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for the collection store and mail relay HTTP APIs.

Request models are intentionally permissive: the store validates its own
inputs so that failures surface as ``{"success": false, "error": ...}`` with
the proper status, and the relay delegates validation to the SMTP transport.

Models:
    - ProductivitySavePayload, ConfigSavePayload: store requests
    - CollectionInfo, StoreStats and the ``*Response`` models: store replies
    - AttachmentPayload, EmailData, SmtpConfig, SendEmailPayload: relay requests
    - SendEmailResponse, HealthResponse: relay replies
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# --------------------------------------------------------------------- store
class ProductivitySavePayload(BaseModel):
    """Body of ``POST /api/db/productividad/save``; ``data`` must be an array."""

    data: Any = None


class ConfigSavePayload(BaseModel):
    """Body of ``POST /api/db/config/save``."""

    collection: Any = None
    data: Any = None


class StoreResponse(BaseModel):
    """Base schema shared by every store response."""

    success: bool


class MessageResponse(StoreResponse):
    message: str


class SaveResponse(MessageResponse):
    count: int


class ProductivityResponse(StoreResponse):
    data: Any
    count: int


class ConfigDataResponse(StoreResponse):
    data: Any = None


class CollectionInfo(BaseModel):
    """One collection file as reported by ``GET /api/db/collections``."""

    name: str
    size: int
    modified: str
    records: Union[int, str]


class CollectionsResponse(StoreResponse):
    collections: List[CollectionInfo]


class StoreStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    collections: int
    total_size: str = Field(alias="totalSize")
    total_records: int = Field(alias="totalRecords")
    path: str


class StatsResponse(StoreResponse):
    stats: StoreStats


# --------------------------------------------------------------------- relay
class AttachmentPayload(BaseModel):
    """Base64-encoded attachment; the filename is relayed verbatim."""

    model_config = ConfigDict(populate_by_name=True)

    attachment_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("attachmentName", "name", "attachment_name"),
    )
    content: Optional[str] = None


class EmailData(BaseModel):
    """Email description received by ``POST /api/send-email``."""

    model_config = ConfigDict(populate_by_name=True)

    from_address: Optional[str] = Field(default=None, alias="fromAddress")
    to_address: Optional[Union[str, List[str]]] = Field(default=None, alias="toAddress")
    subject: Optional[str] = None
    content: Optional[str] = None
    cc: Optional[Union[str, List[str]]] = None
    attachments: Optional[List[AttachmentPayload]] = None


class SmtpConfig(BaseModel):
    """Credentials used for a single relay call; never stored."""

    email: Optional[str] = None
    password: Optional[str] = None


class SendEmailPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email_data: Optional[EmailData] = Field(default=None, alias="emailData")
    smtp_config: Optional[SmtpConfig] = Field(default=None, alias="smtpConfig")


class SendEmailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message_id: Optional[str] = Field(default=None, alias="messageId")
    response: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str
