"""Aggregated property listing.

Every property appears once. Properties with at least one visit come first,
newest first, each carrying a single current visit; properties without any
visit follow, also newest first.
"""

import logging
from collections.abc import Collection, Sequence
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager, selectinload

from realty.core.errors import FetchError
from realty.models.property import Property
from realty.models.visit import Visit
from realty.schemas.property import AggregatedProperty
from realty.schemas.visit import VisitResponse

logger = logging.getLogger(__name__)

OUTER_JOIN = "outer_join"
TWO_STEP = "two_step"

_NEWEST_FIRST = (Property.created_at.desc(), Property.id.desc())


def fetch_properties_with_visits(db: Session) -> list[Property]:
    stmt = (
        select(Property)
        .where(Property.visits.any())
        .options(selectinload(Property.visits))
        .order_by(*_NEWEST_FIRST)
        .execution_options(populate_existing=True)
    )
    return list(db.scalars(stmt).all())


def fetch_properties_excluding(db: Session, ids: Collection[int]) -> list[Property]:
    stmt = select(Property).order_by(*_NEWEST_FIRST)
    # NOT IN over an empty list must not reject every row.
    if ids:
        stmt = stmt.where(Property.id.not_in(list(ids)))
    return list(db.scalars(stmt).all())


def fetch_properties_outer_joined(db: Session) -> list[Property]:
    stmt = (
        select(Property)
        .outerjoin(Property.visits)
        .options(contains_eager(Property.visits))
        .order_by(*_NEWEST_FIRST, Visit.scheduled_at, Visit.id)
        .execution_options(populate_existing=True)
    )
    return list(db.scalars(stmt).unique().all())


def select_current_visit(visits: Sequence[Visit], now: datetime | None = None) -> Visit | None:
    """Pick the visit shown alongside a property.

    The soonest visit at or after ``now`` wins. When every visit is already in
    the past the most recent one is used instead.
    """
    if not visits:
        return None
    now = now or datetime.utcnow()
    ordered = sorted(visits, key=lambda v: (v.scheduled_at, v.id))
    for visit in ordered:
        if visit.scheduled_at >= now:
            return visit
    return ordered[-1]


def _project(prop: Property, visit: Visit | None) -> AggregatedProperty:
    item = AggregatedProperty.model_validate(prop)
    if visit is not None:
        item.current_visit = VisitResponse.model_validate(visit)
    return item


def _aggregate_outer_join(db: Session, now: datetime | None) -> list[AggregatedProperty]:
    with_visit: list[AggregatedProperty] = []
    without_visit: list[AggregatedProperty] = []
    for prop in fetch_properties_outer_joined(db):
        visit = select_current_visit(prop.visits, now)
        if visit is None:
            without_visit.append(_project(prop, None))
        else:
            with_visit.append(_project(prop, visit))
    return with_visit + without_visit


def _aggregate_two_step(db: Session, now: datetime | None) -> list[AggregatedProperty]:
    joined = fetch_properties_with_visits(db)
    rest = fetch_properties_excluding(db, [prop.id for prop in joined])
    return [_project(prop, select_current_visit(prop.visits, now)) for prop in joined] + [
        _project(prop, None) for prop in rest
    ]


def aggregate_listings(db: Session, strategy: str = OUTER_JOIN, now: datetime | None = None) -> list[AggregatedProperty]:
    if strategy == OUTER_JOIN:
        loader = _aggregate_outer_join
    elif strategy == TWO_STEP:
        loader = _aggregate_two_step
    else:
        raise ValueError(f"Unknown listing fetch strategy: {strategy}")

    try:
        items = loader(db, now)
    except SQLAlchemyError as exc:
        logger.exception("Failed to load properties (strategy=%s)", strategy)
        raise FetchError("Failed to load properties.") from exc

    with_visit = sum(1 for item in items if item.current_visit is not None)
    logger.info("Loaded %d properties (%d with a visit, strategy=%s)", len(items), with_visit, strategy)
    return items


def get_listing(db: Session, property_id: int, now: datetime | None = None) -> AggregatedProperty | None:
    try:
        prop = db.scalars(
            select(Property)
            .where(Property.id == property_id)
            .options(selectinload(Property.visits))
            .execution_options(populate_existing=True)
        ).first()
    except SQLAlchemyError as exc:
        logger.exception("Failed to load property %s", property_id)
        raise FetchError("Failed to load properties.") from exc
    if prop is None:
        return None
    return _project(prop, select_current_visit(prop.visits, now))
