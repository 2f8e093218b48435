"""
Typed failures raised by the feed, reaction and ownership services.

Each failure kind maps to exactly one HTTP status code; the mapping lives on
the class and app.core.error_handlers reads it from there.
"""

from fastapi import status


class MemeHubError(Exception):
    """Base class for every failure the core surfaces to its callers"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


# Validation -----------------------------------------------------------------

class ValidationError(MemeHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class MissingField(ValidationError):
    message = "Title and caption are required"


class CaptionTooLong(ValidationError):
    message = "Caption must be 140 characters or less"


class InvalidCategory(ValidationError):
    message = "Invalid category"


class InvalidReactionType(ValidationError):
    message = "Invalid reaction type"


class NoFieldsToUpdate(ValidationError):
    message = "No fields to update"


class InvalidCoordinates(ValidationError):
    message = "Invalid coordinates"


class InvalidImage(ValidationError):
    message = "Image is required"


# Lookup ---------------------------------------------------------------------

class NotFound(MemeHubError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class MemeNotFound(NotFound):
    message = "Meme not found"


class UserNotFound(NotFound):
    message = "User not found"


class NotFoundOrUnauthorized(MemeHubError):
    """Raised when a resource is missing or owned by someone else.

    The two cases look the same to the caller.
    """

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found or unauthorized"


class LocationNotSet(MemeHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User location not set"


# Storage --------------------------------------------------------------------

class StorageFault(MemeHubError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Database unavailable - please try again later"
