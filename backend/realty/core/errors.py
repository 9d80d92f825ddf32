"""Exception hierarchy for the listings service."""


class RealtyError(Exception):
    """Base exception for all listings service errors."""


class FetchError(RealtyError):
    """Raised when loading listings from the data backend fails."""


class MutationError(RealtyError):
    """Raised when a create, update or delete against the data backend fails."""


class StorageError(MutationError):
    """Raised when an image cannot be written to file storage."""


class NotFoundError(RealtyError):
    """Raised when a referenced property or visit does not exist."""


class ValidationError(RealtyError):
    """Raised when caller input is malformed."""


class AddressLookupError(RealtyError):
    """Raised when the postal code service cannot be reached or answers badly."""


class ConflictError(RealtyError):
    """Raised when a write collides with existing data, such as a taken property code."""
