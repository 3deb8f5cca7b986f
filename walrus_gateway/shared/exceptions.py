"""Exception hierarchy for the Walrus site gateway.

Every error carries the HTTP status the API layer should map it to.
"""


class GatewayError(Exception):
    """Base exception for gateway failures."""

    status_code: int = 500

    def __init__(self, message: str = "", *, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(GatewayError):
    """Raised when configuration is invalid or missing."""

    pass


class BadInputError(GatewayError):
    """Raised for a missing or malformed request parameter."""

    status_code = 400


class NotFoundError(GatewayError):
    """Raised when no registry object, resource table or file matches."""

    status_code = 404


class MalformedObjectError(NotFoundError):
    """Raised when a resolved object lacks the expected site structure.

    Served as 404, logged as a data integrity concern.
    """

    pass


class BlobNotFoundError(NotFoundError):
    """Raised when the aggregator answers a blob request with a non-5xx error."""

    def __init__(self, message: str = "", *, status: int | None = None, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.status = status


class EmptySiteError(GatewayError):
    """Raised when a site resolves but holds no servable resources.

    Not a failure for the caller: the API renders it as 200 with an empty payload.
    """

    status_code = 200


class UpstreamUnavailableError(GatewayError):
    """Raised when the naming service, registry or aggregator is unreachable.

    API layer should map this to 503 Service Unavailable.
    """

    status_code = 503


class RegistryError(UpstreamUnavailableError):
    """Raised when the registry answers a JSON-RPC call with an error member."""

    def __init__(self, message: str = "", *, code: int | None = None, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.code = code


class IntegrityMismatchError(GatewayError):
    """Raised when fetched bytes do not hash to the resource's blob hash."""

    status_code = 502

    def __init__(self, message: str = "", *, expected: bytes = b"", actual: bytes = b""):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


__all__ = [
    "GatewayError",
    "ConfigurationError",
    "BadInputError",
    "NotFoundError",
    "MalformedObjectError",
    "BlobNotFoundError",
    "EmptySiteError",
    "UpstreamUnavailableError",
    "RegistryError",
    "IntegrityMismatchError",
]
