"""Rejection kinds raised by the booking core.

Each kind has a stable ``code`` and the HTTP status the API renders it with,
so callers never have to match on message text.
"""


class ReservationError(Exception):
    status = 400
    code = "ERROR"
    message = "Request failed."

    def __init__(self, message: str | None = None, details: list | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details


class InvalidInput(ReservationError):
    status = 422
    code = "INVALID_INPUT"
    message = "Invalid input."


class Unauthenticated(ReservationError):
    status = 401
    code = "UNAUTHENTICATED"
    message = "Missing or invalid bearer token."


class Forbidden(ReservationError):
    status = 403
    code = "FORBIDDEN"
    message = "You are not allowed to perform this action."


class NotFound(ReservationError):
    status = 404
    code = "NOT_FOUND"
    message = "Reservation not found."


class NoAvailability(ReservationError):
    status = 409
    code = "NO_AVAILABILITY"
    message = "No table is available for this date, time slot and party size."


class AlreadyTerminal(ReservationError):
    status = 409
    code = "ALREADY_TERMINAL"
    message = "Reservation is already cancelled or completed."


class EmailTaken(ReservationError):
    status = 409
    code = "EMAIL_TAKEN"
    message = "An account with this email already exists."


class RateLimited(ReservationError):
    status = 429
    code = "RATE_LIMITED"
    message = "Too many requests. Try again shortly."
