"""
The three gateway handlers: generateauthurl, generatetoken and refreshtoken.

Each handler runs one linear request cycle and returns a ``HandlerResult``.
Handlers never raise; every failure becomes an ``ERROR`` result.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .admission import check_domain, check_ip, denial_message
from .client import EMAIL_SCOPE
from .errors import DomainNotAllowed, GatewayError, MissingParameter, RefreshFailed
from .origin import resolve_redirect_url
from .validators import validate_required

logger = logging.getLogger(__name__)


@dataclass
class GatewayRequest:
    """A request as seen by the handlers, independent of the transport."""

    origin: Optional[str] = None
    source_ip: Optional[str] = None
    body: dict = field(default_factory=dict)


class Outcome(enum.Enum):
    """How a handler invocation ended."""

    SUCCESS = 'success'
    ADMITTED = 'admitted'
    DENIED = 'denied'
    ERROR = 'error'


@dataclass
class HandlerResult:
    """
    Tagged handler result.

    ``DENIED`` means the user authenticated with an account outside the
    allowed domains. It is not a failed request, so the caller can tell
    "wrong account" apart from "request failed".
    """

    outcome: Outcome
    payload: Any = None
    error_kind: Optional[str] = None

    @property
    def ok(self):
        return self.outcome is not Outcome.ERROR

    @classmethod
    def success(cls, payload):
        return cls(Outcome.SUCCESS, payload)

    @classmethod
    def admitted(cls, tokens):
        return cls(Outcome.ADMITTED, tokens)

    @classmethod
    def denied(cls, reason):
        return cls(Outcome.DENIED, {'admitted': 0, 'errorMessage': reason})

    @classmethod
    def error(cls, kind, message):
        return cls(Outcome.ERROR, message, error_kind=kind)


def _failure(handler_name, exc):
    if isinstance(exc, GatewayError):
        logger.error(f"{handler_name} handler: {exc.kind}: {exc}")
        return HandlerResult.error(exc.kind, exc.message)
    logger.exception(f"{handler_name} handler: unexpected error: {exc}")
    return HandlerResult.error('InternalError', str(exc) or type(exc).__name__)


def generate_auth_url(request, settings, client_cache):
    """
    Build the Google authorization URL for a login button.

    Args:
        request: GatewayRequest
        settings: GatewaySettings
        client_cache: ClientCache

    Returns:
        HandlerResult: SUCCESS carrying the URL, or ERROR
    """
    logger.info(f"generateauthurl handler: origin={request.origin} ip={request.source_ip}")
    try:
        redirect_url = resolve_redirect_url(request.origin, settings.redirect_urls)
        check_ip(request.source_ip, settings.allowed_ips)
        client = client_cache.get_client(settings, redirect_url)
        url = client.authorization_url(scope=EMAIL_SCOPE, access_type='offline')
    except Exception as e:
        return _failure('generateauthurl', e)

    return HandlerResult.success(url)


def generate_token(request, settings, client_cache):
    """
    Swap an authorization code for tokens and apply domain admission.

    Args:
        request: GatewayRequest whose body carries ``code``
        settings: GatewaySettings
        client_cache: ClientCache

    Returns:
        HandlerResult: ADMITTED with the token set plus ``admitted`` and
        ``email``, DENIED for accounts outside the allowed domains, or ERROR
    """
    logger.info(f"generatetoken handler: origin={request.origin}")
    code = request.body.get('code')
    try:
        redirect_url = resolve_redirect_url(request.origin, settings.redirect_urls)
        client = client_cache.get_client(settings, redirect_url)
        validate_required(code, 'code', error=MissingParameter)

        tokens = client.exchange_code(code)
        client.set_credentials(tokens)
        email = client.fetch_userinfo().get('email')

        try:
            check_domain(email, settings.allowed_domains)
        except DomainNotAllowed:
            logger.warning(f"Login denied for {email}: not in {settings.allowed_domains}")
            return HandlerResult.denied(denial_message(settings.allowed_domains))
    except Exception as e:
        return _failure('generatetoken', e)

    tokens['admitted'] = 1
    tokens['email'] = email
    logger.info(f"Login admitted: {email}")
    return HandlerResult.admitted(tokens)


def refresh_token(request, settings, client_cache):
    """
    Refresh an access token from a refresh token.

    ``accessToken`` must be present in the body but is not used: only the
    refresh token is stored so the library performs a real refresh.

    Args:
        request: GatewayRequest whose body carries ``refreshToken`` and ``accessToken``
        settings: GatewaySettings
        client_cache: ClientCache

    Returns:
        HandlerResult: SUCCESS carrying the refresh response data, or ERROR
    """
    logger.info(f"refreshtoken handler: origin={request.origin}")
    try:
        redirect_url = resolve_redirect_url(request.origin, settings.redirect_urls)
        client = client_cache.get_client(settings, redirect_url)
        refresh = validate_required(request.body.get('refreshToken'), 'refreshToken', error=MissingParameter)
        validate_required(request.body.get('accessToken'), 'accessToken', error=MissingParameter)

        client.set_credentials({'refresh_token': refresh})
        data = client.refresh_access_token()
        if not data:
            raise RefreshFailed()
    except Exception as e:
        return _failure('refreshtoken', e)

    return HandlerResult.success(data)
