"""Jamf Pro API client library.

Architecture:
- client.py: HTTP client with client-credentials authentication and auto-refresh
- computers.py: Computer inventory lookups and the canonical identity provider
- exceptions.py: Typed exceptions (all LookupError subclasses)
"""
from .client import JamfClient, REQUEST_TIMEOUT
from .computers import ComputerService, JamfIdentityProvider
from .exceptions import (
    JamfError,
    JamfAPIError,
    ComputerNotFoundError,
    IdentityMissingError,
)

__all__ = [
    "JamfClient",
    "REQUEST_TIMEOUT",
    "ComputerService",
    "JamfIdentityProvider",
    "JamfError",
    "JamfAPIError",
    "ComputerNotFoundError",
    "IdentityMissingError",
]
