"""Jamf-specific exceptions for error handling.

All of them are lookup failures: the canonical identity could not be obtained
and no local change may be attempted.
"""


class JamfError(LookupError):
    """Base exception for all Jamf Pro operations."""
    pass


class JamfAPIError(JamfError):
    """HTTP or transport error from the Jamf Pro API.

    Attributes:
        status_code: HTTP status code (0 when the request never got a response)
        message: Error message from response
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class ComputerNotFoundError(JamfError):
    """No computer inventory record matches this host's serial number."""
    pass


class IdentityMissingError(JamfError):
    """The computer record has no usable username assigned."""
    pass
