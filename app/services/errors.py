# app/services/errors.py
"""
Domain errors raised by the services layer.
app.main maps each kind to a fixed HTTP status; routers never catch them.
"""


class BookingError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(BookingError):
    status_code = 400
    default_message = "Invalid input"


class Unauthorized(BookingError):
    status_code = 401
    default_message = "Invalid or missing token"


class Forbidden(BookingError):
    status_code = 403
    default_message = "Administrators only"


class NotFound(BookingError):
    status_code = 404
    default_message = "Not found"


class Conflict(BookingError):
    status_code = 409
    default_message = "Conflict"


class Unavailable(BookingError):
    status_code = 503
    default_message = "Service temporarily unavailable"


class TooManyRequests(BookingError):
    status_code = 429
    default_message = "Too many requests"
