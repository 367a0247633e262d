"""
Google OAuth Login Gateway for Flask and AWS Lambda

This module provides three request handlers fronting a "Login with Google" flow:
1. generateauthurl - build the Google authorization URL for a login button
2. generatetoken - exchange an authorization code for tokens, admitting only
   accounts in the allowed email domains
3. refreshtoken - refresh an access token from a refresh token

Redirect URLs are picked by request origin, and requests can be restricted by
source IP and by email domain.

Configuration comes from environment variables, falling back to Google Cloud
Secret Manager secrets of the same name.
"""

from .client import ClientCache, OAuthClient
from .config import Config, GatewaySettings
from .handlers import GatewayRequest, HandlerResult, Outcome
from .routes import setup_gateway_routes

__version__ = "0.1.0"
__all__ = [
    "Config",
    "GatewaySettings",
    "ClientCache",
    "OAuthClient",
    "GatewayRequest",
    "HandlerResult",
    "Outcome",
    "setup_gateway_routes",
]
