"""Client-side filtering of the aggregated listing.

Criteria arrive as the raw text typed into the search form. Every field is
optional; an empty value places no constraint. A record is kept only when it
satisfies every active criterion, and the input order is preserved.
"""

from collections.abc import Iterable
from dataclasses import dataclass, fields, replace
from decimal import Decimal, InvalidOperation
from typing import Any, TypeVar

T = TypeVar("T")

PRICE_FIELDS = ("min_price", "max_price")


def parse_price(raw: str | None) -> Decimal | None:
    """Parse a free-text price, returning None when it is blank or not a finite number."""
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    if "," in text and "." not in text:
        text = text.replace(",", ".")
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


@dataclass(frozen=True)
class FilterCriteria:
    city: str = ""
    neighborhood: str = ""
    kind: str = ""
    min_price: str = ""
    max_price: str = ""

    @classmethod
    def from_query(
        cls,
        city: str | None = None,
        neighborhood: str | None = None,
        kind: str | None = None,
        min_price: str | None = None,
        max_price: str | None = None,
    ) -> "FilterCriteria":
        return cls(
            city=city or "",
            neighborhood=neighborhood or "",
            kind=kind or "",
            min_price=min_price or "",
            max_price=max_price or "",
        )

    def is_active(self) -> bool:
        return any(getattr(self, f.name) != "" for f in fields(self))

    def merge(self, other: "FilterCriteria") -> "FilterCriteria":
        overrides = {f.name: getattr(other, f.name) for f in fields(other) if getattr(other, f.name) != ""}
        return replace(self, **overrides)

    def ignored_fields(self) -> list[str]:
        """Price fields that were filled in but could not be read as a number."""
        return [
            name
            for name in PRICE_FIELDS
            if getattr(self, name).strip() and parse_price(getattr(self, name)) is None
        ]


def _contains(value: str | None, needle: str) -> bool:
    if not value:
        return False
    return needle.lower() in value.lower()


def _kind_value(kind: Any) -> str:
    return getattr(kind, "value", kind)


def matches(item: Any, criteria: FilterCriteria) -> bool:
    if criteria.city and not _contains(item.city, criteria.city):
        return False
    if criteria.neighborhood and not _contains(item.neighborhood, criteria.neighborhood):
        return False
    if criteria.kind and _kind_value(item.kind) != criteria.kind:
        return False

    min_price = parse_price(criteria.min_price)
    if min_price is not None and item.price < min_price:
        return False
    max_price = parse_price(criteria.max_price)
    if max_price is not None and item.price > max_price:
        return False
    return True


def filter_properties(properties: Iterable[T], criteria: FilterCriteria) -> list[T]:
    if not criteria.is_active():
        return list(properties)
    return [item for item in properties if matches(item, criteria)]

