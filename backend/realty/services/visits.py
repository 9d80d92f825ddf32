import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from realty.core.errors import FetchError, MutationError, NotFoundError
from realty.models.property import Property
from realty.models.visit import Visit, VisitStatus
from realty.schemas.visit import VisitCreate, VisitWithProperty

logger = logging.getLogger(__name__)


def list_visits(db: Session) -> list[VisitWithProperty]:
    try:
        rows = (
            db.query(Visit)
            .options(joinedload(Visit.property))
            .order_by(Visit.scheduled_at.asc(), Visit.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to load visits")
        raise FetchError("Failed to load visits.") from exc
    logger.info("Loaded %d visits", len(rows))
    return [VisitWithProperty.model_validate(row) for row in rows]


def get_visit(db: Session, visit_id: int) -> Visit:
    visit = db.query(Visit).filter(Visit.id == visit_id).first()
    if not visit:
        raise NotFoundError("Visit not found")
    return visit


def create_visit(db: Session, payload: VisitCreate) -> Visit:
    prop = db.query(Property).filter(Property.id == payload.property_id).first()
    if not prop:
        raise NotFoundError("Property not found")

    visit = Visit(**payload.model_dump())
    try:
        db.add(visit)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to schedule visit for property %s", payload.property_id)
        raise MutationError("Failed to schedule visit. Try again.") from exc

    db.refresh(visit)
    logger.info("Scheduled visit %s for property %s", visit.id, visit.property_id)
    return visit


def update_visit_status(db: Session, visit_id: int, status: VisitStatus) -> Visit:
    visit = get_visit(db, visit_id)
    visit.status = status
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update visit %s", visit_id)
        raise MutationError("Failed to update visit. Try again.") from exc

    db.refresh(visit)
    logger.info("Visit %s is now %s", visit.id, visit.status.value)
    return visit


def delete_visit(db: Session, visit_id: int) -> None:
    visit = get_visit(db, visit_id)
    try:
        db.delete(visit)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to delete visit %s", visit_id)
        raise MutationError("Failed to delete visit. Try again.") from exc
    logger.info("Deleted visit %s", visit_id)
