"""Session identity of the caller, passed explicitly into the directory store."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Identity(BaseModel):
    token: str = Field(default="", repr=False)
    employee_tag: str | None = None
    name: str | None = None
    role: str | None = None

    model_config = {"frozen": True}
