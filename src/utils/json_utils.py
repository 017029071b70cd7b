"""
JSON utilities for API Gateway request bodies.
"""

import base64
import json
from typing import Any, Dict


def parse_json_body(body: Any, is_base64_encoded: bool = False) -> Dict[str, Any]:
    """Parse an API Gateway request body into a JSON object.

    Args:
        body: Raw body string (may be None or empty)
        is_base64_encoded: Whether API Gateway base64-encoded the body

    Returns:
        Parsed object, empty dict for an empty body

    Raises:
        ValueError: If the body is not a string, not valid JSON or not a JSON object
    """
    if body is None or body == '':
        return {}

    # Direct invokes and console test events can carry an already-decoded body
    if not isinstance(body, str):
        raise ValueError('Body must be a JSON string')

    if is_base64_encoded:
        try:
            body = base64.b64decode(body, validate=True).decode('utf-8')
        except (ValueError, UnicodeDecodeError) as e:
            raise ValueError(f'Body is not valid base64: {e}')

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f'Body is not valid JSON: {e.msg}')

    if not isinstance(payload, dict):
        raise ValueError('Body must be a JSON object')
    return payload
