"""
Errors raised by the gateway.

Every error carries a ``kind`` that the response layer reports to the caller.
Handlers catch these at their boundary; nothing is retried.
"""


class GatewayError(Exception):
    """Base class for all gateway failures."""

    kind = "GatewayError"

    def __init__(self, message=None):
        super().__init__(message or self.__doc__.strip().splitlines()[0])

    @property
    def message(self):
        return str(self)


class MissingConfiguration(GatewayError):
    """Missing required configuration variable."""

    kind = "MissingConfiguration"


class OriginNotAllowed(GatewayError):
    """Origin does not match supplied redirect URLs."""

    kind = "OriginNotAllowed"


class InvalidIP(GatewayError):
    """Invalid IP address."""

    kind = "InvalidIP"


class IPNotAllowed(GatewayError):
    """IP address is not allowed."""

    kind = "IPNotAllowed"


class MissingParameter(GatewayError):
    """Missing required request parameter."""

    kind = "MissingParameter"


class ExchangeFailed(GatewayError):
    """Authorization code exchange failed."""

    kind = "ExchangeFailed"


class RefreshFailed(GatewayError):
    """The refresh token returned contains no data."""

    kind = "RefreshFailed"


class ProfileFetchFailed(GatewayError):
    """Could not fetch the user profile."""

    kind = "ProfileFetchFailed"


class DomainNotAllowed(GatewayError):
    """The provided account is not in the domain.

    Handlers turn this into a soft denial rather than an error response.
    """

    kind = "DomainNotAllowed"
