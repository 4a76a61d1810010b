"""
HTTP client for the email-relay service.

The relay exposes a single endpoint:

    POST /send-email   {"to": [...], "subject": "...", "body": "..."}

and answers 200 when it accepted the message. Anything else is a delivery
failure. The three ways a send can fail are raised as distinct exceptions so
callers can report them separately.
"""
import json
import logging
from typing import Any, Dict, Optional

import httpx

from core.config import EMAIL_RELAY_URL, EMAIL_RELAY_TIMEOUT
from core.exceptions import (
    EmailRelayConnectionError,
    EmailRelayError,
    EmailSerializationError,
)
from models.alert import EmailDeliveryRequest

logger = logging.getLogger(__name__)

SEND_EMAIL_ENDPOINT = "/send-email"


class EmailRelayClient:
    """Client for the email-relay REST endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            base_url: Relay base URL. Defaults to EMAIL_RELAY_URL.
            timeout: Request timeout in seconds. Defaults to EMAIL_RELAY_TIMEOUT.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self.base_url = base_url or EMAIL_RELAY_URL
        if not self.base_url:
            raise ValueError("EMAIL_RELAY_URL must be set in config")

        self.base_url = self.base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else EMAIL_RELAY_TIMEOUT
        self._transport = transport

    @staticmethod
    def _encode(request: EmailDeliveryRequest) -> bytes:
        """
        Encode the delivery request as JSON.

        Raises:
            EmailSerializationError: If the payload is not JSON-serializable
        """
        payload: Dict[str, Any] = request.to_payload()
        try:
            return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            error_msg = f"Could not serialize email request: {e}"
            logger.error(error_msg)
            raise EmailSerializationError(error_msg) from e

    async def send_email(self, request: EmailDeliveryRequest) -> None:
        """
        Submit one email to the relay.

        Makes exactly one attempt; there is no retry.

        Raises:
            EmailSerializationError: If the request cannot be encoded
            EmailRelayError: If the relay answers with any status other than 200
            EmailRelayConnectionError: If the relay cannot be reached
        """
        content = self._encode(request)
        url = f"{self.base_url}{SEND_EMAIL_ENDPOINT}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    content=content,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            error_msg = f"Request error: {e}"
            logger.error(error_msg, extra={"url": url})
            raise EmailRelayConnectionError(error_msg) from e

        if response.status_code != 200:
            error_msg = f"Email relay error {response.status_code}: {response.text}"
            logger.error(error_msg, extra={"url": url})
            raise EmailRelayError(error_msg, relay_status=response.status_code)

        logger.info(
            "Email accepted by relay",
            extra={"recipients": len(request.to), "subject": request.subject}
        )
