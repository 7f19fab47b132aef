"""Computer inventory lookups and the canonical identity provider."""
from __future__ import annotations
import logging
from typing import Optional
from urllib.parse import quote

from ..identity import CanonicalIdentity
from ..validators import login_name_from_jamf, validate_display_name, validate_login_name
from .client import JamfClient
from .exceptions import ComputerNotFoundError, IdentityMissingError, JamfAPIError

logger = logging.getLogger(__name__)


class ComputerService:
    """Service for reading Jamf Pro computer records."""

    def __init__(self, client: JamfClient):
        """Initialize computer service.

        Args:
            client: Authenticated Jamf client
        """
        self.client = client

    def match_serial(self, serial: str) -> dict:
        """Return the computer summary matching a hardware serial number.

        Raises:
            ComputerNotFoundError: If no record matches
            JamfAPIError: On HTTP error or an unreadable response body
        """
        path = f"/JSSResource/computers/match/{quote(serial, safe='')}"
        try:
            resp = self.client.get(path)
        except JamfAPIError as e:
            if e.status_code == 404:
                raise ComputerNotFoundError(f"No computer record for serial {serial}") from e
            raise
        try:
            computers = resp.json().get("computers") or []
        except (ValueError, AttributeError) as e:
            raise JamfAPIError(resp.status_code, f"Unexpected computer match response: {e!r}", resp.url) from e
        if not computers:
            raise ComputerNotFoundError(f"No computer record for serial {serial}")
        if not isinstance(computers, list) or not isinstance(computers[0], dict):
            raise JamfAPIError(resp.status_code, "Unexpected computer match response shape", resp.url)
        if len(computers) > 1:
            logger.warning("%d computer records match serial %s; using the first", len(computers), serial)
        return computers[0]


class JamfIdentityProvider:
    """Canonical identity provider backed by Jamf Pro inventory."""

    def __init__(
        self,
        client: JamfClient,
        client_id: str,
        client_secret: str,
        strip_email_domain: bool = True,
    ):
        self.client = client
        self.client_id = client_id
        self.client_secret = client_secret
        self.strip_email_domain = strip_email_domain
        self.computers = ComputerService(client)

    def fetch(self, host_serial: str, fallback_display_name: Optional[str] = None) -> CanonicalIdentity:
        """Fetch the username and real name Jamf assigns to this host.

        Args:
            host_serial: Hardware serial number of this Mac
            fallback_display_name: Used when the record has no real name

        Returns:
            Canonical identity for the host

        Raises:
            ComputerNotFoundError: No record for this host
            IdentityMissingError: Record has no usable username
            JamfAPIError: Transport or authentication failure
        """
        logger.info("Generating a bearer token for the API call")
        self.client.authenticate(self.client_id, self.client_secret)

        logger.info("Making an API call to get user information in Jamf Pro")
        record = self.computers.match_serial(host_serial)

        login_name = login_name_from_jamf(record.get("username") or "", self.strip_email_domain)
        if not login_name:
            raise IdentityMissingError(
                "There is no username set in Jamf Pro. Please set a username in the device inventory record"
            )
        try:
            validate_login_name(login_name)
        except ValueError as e:
            raise IdentityMissingError(f"Jamf username {login_name!r} is not a valid login name: {e}") from e

        try:
            display_name = validate_display_name(record.get("realname") or "", fallback_display_name or "")
        except ValueError as e:
            raise IdentityMissingError(f"Jamf real name is not usable: {e}") from e
        logger.info("The username in Jamf is %s", login_name)
        logger.info("The Full Name in Jamf is %s", display_name)
        return CanonicalIdentity(target_login_name=login_name, target_display_name=display_name)
