"""Error taxonomy shared by the order and webhook flows.

Routers translate these into HTTP responses; services raise them and never
build HTTP responses themselves.
"""


class StorefrontError(Exception):
    """Base class for domain errors."""


class ValidationError(StorefrontError):
    """Missing or malformed input supplied by the caller."""


class NotFoundError(StorefrontError):
    """A referenced entity does not exist."""


class GatewayError(StorefrontError):
    """The payment provider rejected the request or could not be reached."""


class SignatureError(StorefrontError):
    """A webhook payload could not be authenticated."""


class StoreError(StorefrontError):
    """The order store failed to read or write."""


class AuthenticationError(StorefrontError):
    """Credentials did not match a known user."""
