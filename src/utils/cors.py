"""
CORS header providers.

Headers come from a shared CORS Lambda function when it answers, otherwise
from a static default set. Providers return None instead of raising so the
chain in resolve_cors_headers stays a plain fallback.
"""

import json
from typing import Any, Dict, Iterable, Optional

import boto3

from .config import CorsConfig
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'OPTIONS, POST',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Allow-Credentials': 'true',
}


class LambdaCorsProvider:
    """Fetch CORS headers by invoking the shared CORS function synchronously."""

    def __init__(self, config: CorsConfig):
        self.config = config
        self.function_name = config.function_name
        self.client = boto3.client('lambda', region_name=config.region)

        logger.info(f'Initialized CORS provider for function: {self.function_name}')

    def get_headers(self, event: Dict[str, Any]) -> Optional[Dict[str, str]]:
        """
        Invoke the CORS function with the inbound event.

        Args:
            event: Raw API Gateway event

        Returns:
            Header mapping from the function payload, or None if unavailable
        """
        try:
            response = self.client.invoke(FunctionName=self.function_name,
                                          InvocationType='RequestResponse',
                                          Payload=json.dumps(event, default=str))
            if response.get('FunctionError'):
                logger.warning(f'CORS function {self.function_name} returned error: {response["FunctionError"]}')
                return None

            payload = json.loads(response['Payload'].read())
            headers = payload.get('headers') if isinstance(payload, dict) else None
            if not isinstance(headers, dict):
                logger.warning(f'CORS function {self.function_name} returned no headers')
                return None
            return headers

        except Exception as e:
            logger.warning(f'CORS function {self.function_name} unavailable, using defaults: {e}')
            return None


class StaticCorsProvider:
    """Serve a fixed set of CORS headers."""

    def __init__(self, headers: Optional[Dict[str, str]] = None):
        self.headers = dict(headers or DEFAULT_CORS_HEADERS)

    def get_headers(self, event: Dict[str, Any]) -> Optional[Dict[str, str]]:
        return dict(self.headers)


def resolve_cors_headers(providers: Iterable[Any], event: Dict[str, Any]) -> Dict[str, str]:
    """Return the headers of the first provider that yields any.

    Falls back to DEFAULT_CORS_HEADERS when every provider declines.
    """
    for provider in providers:
        headers = provider.get_headers(event)
        if headers is not None:
            return headers
    return dict(DEFAULT_CORS_HEADERS)
