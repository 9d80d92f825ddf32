from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from realty.models.visit import VisitStatus


class VisitCreate(BaseModel):
    property_id: int
    client_name: str = Field(min_length=1, max_length=160)
    scheduled_at: datetime
    status: VisitStatus = VisitStatus.scheduled

    @field_validator("client_name")
    @classmethod
    def _strip_client_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("client_name must not be blank")
        return value

    @field_validator("scheduled_at")
    @classmethod
    def _to_naive_utc(cls, value: datetime) -> datetime:
        # Stored as naive UTC, matching created_at/updated_at.
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class VisitStatusUpdate(BaseModel):
    status: VisitStatus


class VisitResponse(BaseModel):
    id: int
    property_id: int
    client_name: str
    scheduled_at: datetime
    status: VisitStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PropertySummary(BaseModel):
    code: str | None
    street: str | None
    neighborhood: str | None
    city: str | None

    class Config:
        from_attributes = True


class VisitWithProperty(VisitResponse):
    property: PropertySummary | None = None
