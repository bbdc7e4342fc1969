"""Pydantic models for the Adobe Sign REST payloads the adapter writes or inspects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AdobeSignBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ErrorResponse(AdobeSignBaseModel):
    code: str | None = None
    message: str | None = None

    def describe(self) -> str:
        if self.code and self.message:
            return f"{self.code}: {self.message}"
        return self.code or self.message or "no error details"


class ReminderRequest(AdobeSignBaseModel):
    recipient_participant_ids: list[str] = Field(alias="recipientParticipantIds")
    note: str | None = None
    status: str = "ACTIVE"

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ReminderCreationResult(AdobeSignBaseModel):
    id: str | None = None
