"""
Error taxonomy for the portal.

Services raise these; main.py translates them into JSON responses so
routes never build HTTP errors for domain failures themselves.
"""


class PortalError(Exception):
    """Base class. Every failure is scoped to a single user action."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class PortalValidationError(PortalError):
    """Malformed input or an illegal transition. Nothing was written."""

    status_code = 400


class MembershipConflictError(PortalValidationError):
    """A uid may sit in only one of a drive's applicants / opted_out sets."""

    status_code = 409


class DuplicateAccountError(PortalValidationError):
    status_code = 409


class NotFoundError(PortalError):
    status_code = 404


class PermissionDeniedError(PortalError):
    status_code = 403


class AuthenticationError(PortalError):
    status_code = 401


class RemoteStoreError(PortalError):
    """Network, timeout or server-side failure talking to MongoDB. Not retried."""

    status_code = 503
