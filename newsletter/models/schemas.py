from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SubscriberRecord(BaseModel):
    """Response body for subscription endpoints, serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    first_name: str = Field(default="none", alias="firstName")
    gender: Literal["male", "female", "none"] = "none"
    birth_day: str = Field(alias="birthDay", pattern=r"^\d{4}-\d{2}-\d{2}$")
    consent: Literal["true", "false"] = "false"
    newsletter_id: str = Field(alias="newsletterId")
