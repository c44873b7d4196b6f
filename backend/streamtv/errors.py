"""Error kinds surfaced by the customer, queue and watch operations.

Each error carries the HTTP status it maps to and a message that is safe to
show the customer. Routes never catch these; the handler in ``main`` renders
them.
"""


class StreamTVError(Exception):
    status_code = 500
    detail = "Internal error"
    retry = False

    def __init__(self, detail: str = None):
        self.detail = detail or self.detail
        super().__init__(self.detail)


class InvalidCredentials(StreamTVError):
    status_code = 401
    detail = "Invalid User Name or Password - Try again"
    retry = True


class Unauthenticated(StreamTVError):
    status_code = 401
    detail = "Login required"


class DuplicateUsername(StreamTVError):
    status_code = 409
    detail = "Username already exists - Try again"
    retry = True


class NotFound(StreamTVError):
    status_code = 404
    detail = "Not found"


class Conflict(StreamTVError):
    status_code = 409
    detail = "The request conflicts with existing data - Try again"
    retry = True


class StoreUnavailable(StreamTVError):
    status_code = 503
    detail = "Storage is unavailable, please try again later"


class InvalidInput(StreamTVError):
    status_code = 422
    detail = "Invalid input - Try again"
    retry = True

    def __init__(self, errors, detail: str = None):
        self.errors = list(errors)
        super().__init__(detail)
