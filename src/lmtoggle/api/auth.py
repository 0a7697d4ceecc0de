#!/usr/bin/env python3
"""LMv1 Request Signing for the LogicMonitor REST API.

LogicMonitor authenticates API tokens per request: every call carries an
HMAC-SHA256 signature over the verb, a millisecond timestamp, the request
body and the resource path. There is no session token to cache, so each
request is signed independently with a fresh timestamp.

Signature construction:
    message   = verb + epoch_millis + body + resource_path
    digest    = HMAC-SHA256(access_key, message), hex, lower-case
    signature = base64(digest_hex)
    header    = "LMv1 {access_id}:{signature}:{epoch_millis}"

The hex-then-base64 double encoding is what the portal verifies against;
it is not interchangeable with base64 of the raw digest.

Security Notes:
    - The access key lives in an AccessKey holder, masked with a one-time pad
    - The unmasked key only exists inside AccessKey.use() and is zeroed after
    - repr() never shows the key and AccessKey refuses to be pickled
    - key_id (SHA-256 prefix) is the only key-derived value safe to log

Example:
    >>> credentials = Credentials("id123", AccessKey("secret"), "acme")
    >>> signer = RequestSigner(credentials)
    >>> header = signer.authorization_header("GET", "/device/devices")
"""
import base64
import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class AccessKey:
    """Secret holder for an LMv1 access key.

    The key is stored XOR-masked with a random pad of the same length.
    Callers never receive the key as a value; they pass an operation to
    use(), which runs it against a transient unmasked buffer and wipes the
    buffer afterwards.
    """

    __slots__ = ("_pad", "_masked")

    def __init__(self, value: str):
        raw = bytearray(value.encode("utf-8"))
        self._pad = secrets.token_bytes(len(raw))
        self._masked = bytearray(b ^ p for b, p in zip(raw, self._pad))
        for i in range(len(raw)):
            raw[i] = 0

    def use(self, operation: Callable[[bytearray], T]) -> T:
        """Run operation with the unmasked key, then clear it.

        Args:
            operation: Callable receiving the key bytes. It must not keep a
                reference to the buffer; the buffer is zeroed on return.

        Returns:
            Whatever operation returns
        """
        exposed = bytearray(m ^ p for m, p in zip(self._masked, self._pad))
        try:
            return operation(exposed)
        finally:
            for i in range(len(exposed)):
                exposed[i] = 0

    @property
    def key_id(self) -> str:
        """Safe identifier for logging (SHA-256 hash, first 8 chars)."""
        return self.use(lambda key: hashlib.sha256(key).hexdigest()[:8])

    def __bool__(self) -> bool:
        return len(self._masked) > 0

    def __repr__(self) -> str:
        return "AccessKey('**********')"

    __str__ = __repr__

    def __reduce__(self):
        raise TypeError("AccessKey cannot be serialized")


@dataclass(frozen=True)
class Credentials:
    """LMv1 API token plus the portal it belongs to.

    Attributes:
        access_id: API token access id (safe to log)
        access_key: API token access key, held in an AccessKey
        account_name: Portal subdomain, e.g. "acme" for acme.logicmonitor.com
    """
    access_id: str
    access_key: AccessKey
    account_name: str

    def __repr__(self) -> str:
        return (
            f"Credentials(access_id={self.access_id!r}, "
            f"access_key={self.access_key!r}, "
            f"account_name={self.account_name!r})"
        )


class RequestSigner:
    """Builds LMv1 Authorization header values.

    The signer holds no per-request state. Each call to
    authorization_header() reads the clock again, so two requests never
    share a timestamp-bound signature.

    Attributes:
        credentials: Credentials used for every signature
    """

    SCHEME = "LMv1"

    def __init__(
        self,
        credentials: Credentials,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize the signer.

        Args:
            credentials: Access id, access key and account name
            clock: Returns seconds since the epoch (default: time.time)
        """
        self.credentials = credentials
        self._clock = clock or time.time

    def epoch_millis(self) -> int:
        """Current Unix time in milliseconds."""
        return int(self._clock() * 1000)

    def signature(
        self,
        verb: str,
        epoch_millis: int,
        resource_path: str,
        body: str = "",
    ) -> str:
        """Compute the base64(hex(HMAC-SHA256)) request signature."""
        message = f"{verb.upper()}{epoch_millis}{body or ''}{resource_path}".encode("utf-8")

        digest_hex = self.credentials.access_key.use(
            lambda key: hmac.new(key, message, hashlib.sha256).hexdigest()
        )
        return base64.b64encode(digest_hex.lower().encode("ascii")).decode("ascii")

    def sign(
        self,
        verb: str,
        epoch_millis: int,
        resource_path: str,
        body: str = "",
    ) -> str:
        """Build the Authorization header value for one request.

        Args:
            verb: HTTP method (GET, PATCH, ...)
            epoch_millis: Request timestamp in milliseconds
            resource_path: Path below /santaba/rest, without query string
            body: Exact serialized request body ("" for GET)

        Returns:
            "LMv1 {access_id}:{signature}:{epoch_millis}"
        """
        signature = self.signature(verb, epoch_millis, resource_path, body)
        return f"{self.SCHEME} {self.credentials.access_id}:{signature}:{epoch_millis}"

    def authorization_header(
        self,
        verb: str,
        resource_path: str,
        body: str = "",
    ) -> str:
        """Sign a request with a fresh timestamp."""
        return self.sign(verb, self.epoch_millis(), resource_path, body)
