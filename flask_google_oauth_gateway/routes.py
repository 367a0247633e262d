"""
Flask routes exposing the gateway handlers.
"""

from flask import current_app, request
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import EXTENSION_NAME
from .handlers import GatewayRequest, generate_auth_url, generate_token, refresh_token
from .responses import flask_response


def get_source_ip():
    """
    Get the client IP of the current request.

    X-Forwarded-For is written by the client and is never read here. Behind
    Cloud Run or a load balancer, pass ``trusted_proxy_hops`` to
    ``setup_gateway_routes`` so ProxyFix rewrites ``remote_addr`` from the
    entries the trusted proxies appended.

    Returns:
        str: Source IP, or None if unknown
    """
    return request.remote_addr


def get_gateway_request():
    """
    Build a GatewayRequest from the current Flask request.

    Returns:
        GatewayRequest
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        body = {}
    return GatewayRequest(
        origin=request.headers.get('Origin'),
        source_ip=get_source_ip(),
        body=body,
    )


def _dispatch(handler):
    config = current_app.extensions[EXTENSION_NAME]
    result = handler(get_gateway_request(), config.get_settings(), config.client_cache)
    if not result.ok:
        current_app.logger.warning(
            f"{request.path} failed: {result.error_kind}: {result.payload} (IP: {get_source_ip()})"
        )
    return flask_response(result)


def setup_gateway_routes(app, url_prefix='', trusted_proxy_hops=0):
    """
    Set up the gateway routes for the Flask app.

    Args:
        app: Flask application instance, already initialized with Config
        url_prefix: Optional prefix for the three routes
        trusted_proxy_hops: Number of proxies in front of the app (1 on
            Cloud Run). Only that many X-Forwarded-For entries, counted from
            the right, are trusted.
    """
    if trusted_proxy_hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=trusted_proxy_hops)

    @app.route(f'{url_prefix}/generateauthurl', methods=['GET', 'POST'])
    def gateway_generate_auth_url():
        """Return a Google authorization URL for the login button."""
        return _dispatch(generate_auth_url)

    @app.route(f'{url_prefix}/generatetoken', methods=['POST'])
    def gateway_generate_token():
        """Swap an authorization code for tokens."""
        return _dispatch(generate_token)

    @app.route(f'{url_prefix}/refreshtoken', methods=['POST'])
    def gateway_refresh_token():
        """Refresh an access token."""
        return _dispatch(refresh_token)
