import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from realty.core.errors import ConflictError, MutationError, NotFoundError
from realty.models.property import Property
from realty.schemas.property import PropertyCreate, PropertyUpdate

logger = logging.getLogger(__name__)


def property_code(property_id: int) -> str:
    return f"IM{property_id:04d}"


def get_property(db: Session, property_id: int) -> Property:
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise NotFoundError("Property not found")
    return prop


def create_property(db: Session, payload: PropertyCreate) -> Property:
    prop = Property(**payload.model_dump())
    code = payload.code
    try:
        db.add(prop)
        db.flush()
        if not code:
            code = prop.code = property_code(prop.id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Property code %s is already in use", code)
        raise ConflictError(f"Property code {code} is already in use.") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create property")
        raise MutationError("Failed to register property. Try again.") from exc

    db.refresh(prop)
    logger.info("Created property %s (%s)", prop.id, prop.code)
    return prop


def update_property(db: Session, property_id: int, payload: PropertyUpdate) -> Property:
    prop = get_property(db, property_id)
    # Only fields sent by the client change; an edit without a new upload keeps the cover.
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in ("kind", "price", "status") and value is None:
            continue
        setattr(prop, field, value)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update property %s", property_id)
        raise MutationError("Failed to update property. Try again.") from exc

    db.refresh(prop)
    logger.info("Updated property %s", prop.id)
    return prop


def delete_property(db: Session, property_id: int) -> None:
    prop = get_property(db, property_id)
    try:
        db.delete(prop)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to delete property %s", property_id)
        raise MutationError("Failed to delete property. Try again.") from exc
    logger.info("Deleted property %s", property_id)
