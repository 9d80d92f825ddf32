import re
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, computed_field, field_validator

from realty.models.property import PropertyKind
from realty.models.visit import VisitStatus
from realty.schemas.visit import VisitResponse

GENERATED_CODE = re.compile(r"IM\d+", re.IGNORECASE)


class PropertyCreate(BaseModel):
    code: str | None = Field(default=None, max_length=20)
    postal_code: str | None = Field(default=None, max_length=9)
    street: str | None = None
    number: str | None = None
    complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = Field(default=None, max_length=2)
    kind: PropertyKind = PropertyKind.rental
    price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    description: str | None = None
    cover_image: str | None = None
    status: str = "available"

    @field_validator("code")
    @classmethod
    def _check_code(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        value = value.strip()
        # IM<digits> is the shape of generated codes.
        if GENERATED_CODE.fullmatch(value):
            raise ValueError("codes like IM0001 are assigned automatically")
        return value


class PropertyUpdate(BaseModel):
    postal_code: str | None = Field(default=None, max_length=9)
    street: str | None = None
    number: str | None = None
    complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = Field(default=None, max_length=2)
    kind: PropertyKind | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    description: str | None = None
    cover_image: str | None = None
    status: str | None = None


class PropertyResponse(BaseModel):
    id: int
    code: str | None = None
    postal_code: str | None = None
    street: str | None = None
    number: str | None = None
    complement: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    kind: PropertyKind
    price: Decimal
    description: str | None = None
    cover_image: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AggregatedProperty(PropertyResponse):
    """A property together with the one visit currently associated with it."""

    current_visit: VisitResponse | None = None

    @computed_field
    @property
    def display_status(self) -> str:
        visit = self.current_visit
        if visit is not None:
            if visit.status == VisitStatus.scheduled:
                return f"Scheduled - {visit.scheduled_at:%d/%m} at {visit.scheduled_at:%H:%M}"
            if visit.status == VisitStatus.negotiating:
                return "Negotiating"
        return self.status


class ListingPage(BaseModel):
    items: list[AggregatedProperty]
    count: int
    total: int
    active_filters: bool
    ignored_filters: list[str] = Field(default_factory=list)


class ImageUploadResponse(BaseModel):
    path: str
    url: str
