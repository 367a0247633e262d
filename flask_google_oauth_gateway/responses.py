"""
Turn handler results into HTTP responses.

Successful results, soft denials included, are 200. Errors are 400 with
``{"error": <kind>, "message": <text>}``.
"""

import json

from flask import jsonify

from .handlers import Outcome


def response_body(result):
    """
    Map a HandlerResult to a status code and a JSON-serialisable body.

    Returns:
        tuple: (status_code, body)
    """
    if result.outcome is Outcome.ERROR:
        return 400, {'error': result.error_kind, 'message': result.payload}
    return 200, result.payload


def flask_response(result):
    """Build a Flask response for a HandlerResult."""
    status, body = response_body(result)
    return jsonify(body), status


def lambda_response(result):
    """Build an API Gateway proxy response dict for a HandlerResult."""
    status, body = response_body(result)
    return {
        'statusCode': status,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }
