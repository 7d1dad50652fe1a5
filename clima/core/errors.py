# clima/core/errors.py
"""
Domain errors raised by services and converted to JSON at the HTTP boundary.

Every error carries:
  - message: human-readable text shown verbatim by the front-end
  - status_code: HTTP status used by the exception handler in clima.main
"""
from fastapi import status


class ClimaError(Exception):
    """Base class for every error the API reports as `{"message": ...}`."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ClimaError):
    """A required field is missing or blank."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class ConflictError(ClimaError):
    """The store rejected a write because of a uniqueness constraint."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Record already exists."


class AuthError(ClimaError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Incorrect email or password."


class NotFoundError(ClimaError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class InvalidTokenError(ClimaError):
    """Bad signature, malformed token, missing claims or expired."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The link is invalid or has expired."


class ServerError(ClimaError):
    """Store unreachable, mail provider failure, anything unclassified."""


class MailDeliveryError(ServerError):
    default_message = "Email could not be delivered."


def missing_fields_message(names: list[str]) -> str:
    if len(names) == 1:
        return f"The field {names[0]} is required."
    return f"The fields {', '.join(names)} are required."


def require_fields(**fields: object) -> None:
    """
    Raise ValidationError naming every missing or blank field.

    Usage:
        require_fields(email=email, password=password)
    """
    missing = [
        name
        for name, value in fields.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise ValidationError(missing_fields_message(missing))
