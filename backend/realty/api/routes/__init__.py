from realty.api.routes import addresses, properties, visits

__all__ = [
    "properties",
    "visits",
    "addresses",
]
