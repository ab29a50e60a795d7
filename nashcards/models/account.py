"""
Nash Cards — Account Records

Credential and session records as they are serialized into durable storage.
Field aliases keep the stored JSON layout (`loginTime`) stable.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CredentialRecord(BaseModel):
    """
    A registered account.

    Email is the unique key. There is no update or delete path; a record
    lives in storage indefinitely once created.
    """
    id: str = Field(..., description="Millisecond timestamp string, '1' for the demo account")
    name: str
    email: str
    password: str = Field(..., repr=False)  # Cleartext, demo only


class SessionRecord(BaseModel):
    """The currently authenticated user. At most one exists."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    login_time: str = Field(..., alias="loginTime", description="ISO-8601 UTC timestamp")
