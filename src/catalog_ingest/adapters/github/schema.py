"""Pydantic models for the few GitHub payloads read field by field."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class GitHubBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class InstallationToken(GitHubBaseModel):
    token: str
    expires_at: datetime


class ContentFile(GitHubBaseModel):
    """One item of the repository contents API."""

    type: str
    path: str
    content: str | None = None
    encoding: str | None = None

    @property
    def is_file(self) -> bool:
        return self.type == "file" and self.content is not None

    def decoded(self) -> str:
        if self.content is None:
            raise ValueError(f"{self.path} carries no content")
        try:
            raw = base64.b64decode(self.content)
        except binascii.Error as exc:
            raise ValueError(f"{self.path} is not valid base64") from exc
        return raw.decode("utf-8")
