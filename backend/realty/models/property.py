from datetime import datetime
from decimal import Decimal
import enum

from sqlalchemy import DateTime, Enum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from realty.core.database import Base


class PropertyKind(str, enum.Enum):
    rental = "rental"
    sale = "sale"


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    code: Mapped[str | None] = mapped_column(String(20), unique=True, index=True)

    postal_code: Mapped[str | None] = mapped_column(String(9))
    street: Mapped[str | None] = mapped_column(String(200))
    number: Mapped[str | None] = mapped_column(String(20))
    complement: Mapped[str | None] = mapped_column(String(120))
    neighborhood: Mapped[str | None] = mapped_column(String(120))
    city: Mapped[str | None] = mapped_column(String(120), index=True)
    state: Mapped[str | None] = mapped_column(String(2))

    kind: Mapped[PropertyKind] = mapped_column(Enum(PropertyKind), default=PropertyKind.rental, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    cover_image: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(60), default="available", nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    visits: Mapped[list["Visit"]] = relationship(  # noqa: F821
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="[Visit.scheduled_at, Visit.id]",
    )
