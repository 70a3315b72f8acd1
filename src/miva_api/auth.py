"""
Request authentication for the ``X-Miva-API-Authorization`` header.

Two header formats are produced:

- unsigned:  ``MIVA <access_token>``
- signed:    ``MIVA-HMAC-SHA256 <access_token>:<base64 signature>``

The signature is an HMAC over the exact request body bytes, keyed with the
base64-decoded private key.  An empty private key always means unsigned.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac

from .config import AUTH_HEADER_NAME, DEFAULT_HMAC_ALGORITHM, HMAC_ALGORITHMS
from .exceptions import InvalidValueError


class Auth:
    """Builds the authorization header value for a request body."""

    header_name = AUTH_HEADER_NAME

    def __init__(
        self,
        access_token: str,
        private_key: str,
        hmac_algorithm: str = DEFAULT_HMAC_ALGORITHM,
    ) -> None:
        self.access_token = access_token
        self.private_key = private_key
        self.hmac_algorithm = self._resolve_algorithm(hmac_algorithm or "")
        # Raw digest of the most recent signed body
        self.signature: bytes | None = None

        self._key = b""
        if self.hmac_algorithm:
            try:
                self._key = base64.b64decode(private_key, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise InvalidValueError(
                    f"Private key is not valid base64: {exc}"
                ) from exc

    def _resolve_algorithm(self, hmac_algorithm: str) -> str:
        if hmac_algorithm == "" or self.private_key == "":
            return ""

        algorithm = hmac_algorithm.lower()
        if algorithm not in HMAC_ALGORITHMS:
            raise InvalidValueError(
                f'Invalid HMAC type "{hmac_algorithm}" provided. '
                f'Valid HMAC types: "{", ".join(HMAC_ALGORITHMS)}".'
            )
        return algorithm

    @property
    def is_signed(self) -> bool:
        return self.hmac_algorithm != ""

    def compute_header_value(self, body: str | bytes) -> str:
        """
        Return the authorization header value for ``body``.

        Args:
            body: Serialized request body; ``str`` is UTF-8 encoded first.
        """
        if not self.is_signed:
            return f"MIVA {self.access_token}"

        if isinstance(body, str):
            body = body.encode("utf-8")

        self.signature = hmac.new(
            self._key, body, getattr(hashlib, self.hmac_algorithm)
        ).digest()

        return "MIVA-HMAC-{} {}:{}".format(
            self.hmac_algorithm.upper(),
            self.access_token,
            base64.b64encode(self.signature).decode("ascii"),
        )

    def get_auth_header(self, body: str | bytes) -> dict[str, str]:
        return {self.header_name: self.compute_header_value(body)}

    def create_auth_header(self, body: str | bytes) -> str:
        """Return the header as a single ``Name: value`` line."""
        return f"{self.header_name}: {self.compute_header_value(body)}"
