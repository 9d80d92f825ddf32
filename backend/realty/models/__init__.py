from realty.models.property import Property, PropertyKind
from realty.models.visit import Visit, VisitStatus

__all__ = [
    "Property",
    "PropertyKind",
    "Visit",
    "VisitStatus",
]
