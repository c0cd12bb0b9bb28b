"""
Domain errors raised by handlers and the access/transition core.

Each error carries the HTTP status it maps to; `create_app()` registers a
single handler that turns any `PortalError` into a JSON error response.
"""


class PortalError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def kind(self) -> str:
        return type(self).__name__


class AuthenticationFailed(PortalError):
    status_code = 401
    default_detail = "Not authorized to access this route"


class Forbidden(PortalError):
    status_code = 403
    default_detail = "Access forbidden"


class NotFound(PortalError):
    status_code = 404
    default_detail = "Resource not found"


class ValidationFailed(PortalError):
    status_code = 400
    default_detail = "Validation error"


class IneligibleForResource(PortalError):
    status_code = 400
    default_detail = "You do not meet the eligibility criteria for this job"


class IllegalTransition(PortalError):
    status_code = 400
    default_detail = "Status change not allowed"


class Conflict(PortalError):
    status_code = 409
    default_detail = "Duplicate record"
