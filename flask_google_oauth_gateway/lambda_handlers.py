"""
AWS Lambda entry points for API Gateway (REST v1 and HTTP v2 payloads).

Configuration and the OAuth client cache live at module level so warm
containers reuse them across invocations.
"""

import base64
import binascii
import json
import logging
import os

from .config import Config
from .handlers import GatewayRequest, generate_auth_url, generate_token, refresh_token
from .responses import lambda_response

logger = logging.getLogger(__name__)

_config = None


def get_config():
    """
    Return the process-wide Config, creating it on first use.

    Secret Manager lookups are off unless ``USE_SECRET_MANAGER`` is set to a
    true value: outside Google Cloud, credential discovery probes the GCE
    metadata server for every unset variable and stalls cold starts.
    """
    global _config
    if _config is None:
        use_secret_manager = os.getenv('USE_SECRET_MANAGER', '').strip().lower() in ('1', 'true', 'yes')
        _config = Config(use_secret_manager=use_secret_manager)
    return _config


def parse_body(event):
    """
    Decode the JSON body of an API Gateway event.

    Returns:
        dict: Parsed body, or an empty dict if it is missing or not a JSON object
    """
    body = event.get('body')
    if not body:
        return {}
    if event.get('isBase64Encoded'):
        try:
            body = base64.b64decode(body).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            logger.warning(f"Could not decode base64 body: {e}")
            return {}
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning(f"Request body is not valid JSON: {e}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def gateway_request_from_event(event):
    """
    Build a GatewayRequest from an API Gateway proxy event.

    Header names are matched case-insensitively. The source IP comes from
    ``requestContext.http.sourceIp`` (v2) or ``requestContext.identity.sourceIp`` (v1).
    """
    headers = {key.lower(): value for key, value in (event.get('headers') or {}).items()}
    context = event.get('requestContext') or {}
    source_ip = (context.get('http') or {}).get('sourceIp') or (context.get('identity') or {}).get('sourceIp')
    return GatewayRequest(
        origin=headers.get('origin'),
        source_ip=source_ip,
        body=parse_body(event),
    )


def _invoke(handler, event):
    config = get_config()
    result = handler(gateway_request_from_event(event), config.get_settings(), config.client_cache)
    return lambda_response(result)


def generateauthurl(event, context):
    """Lambda handler: generate the authorization URL."""
    return _invoke(generate_auth_url, event)


def generatetoken(event, context):
    """Lambda handler: exchange an authorization code for tokens."""
    return _invoke(generate_token, event)


def refreshtoken(event, context):
    """Lambda handler: refresh an access token."""
    return _invoke(refresh_token, event)
