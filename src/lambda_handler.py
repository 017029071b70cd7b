"""
AWS Lambda entry point deleting a user from Cognito and DynamoDB.

Handler setting: ``src.lambda_handler.lambda_handler``.
"""
import json
from typing import Any, Dict

from src.models.errors import BadRequestError, ConfigurationError, UserDeletionError
from src.services.context import ServiceContext, get_service_context
from src.services.user_deletion import UserDeletionService
from src.utils.cors import DEFAULT_CORS_HEADERS, resolve_cors_headers
from src.utils.json_utils import parse_json_body
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

SUCCESS_MESSAGE = 'User and all associated records successfully deleted'


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Handle an API Gateway proxy request.

    Args:
        event: API Gateway proxy event
        context: Lambda context (unused)

    Returns:
        API Gateway proxy response
    """
    try:
        service_context = get_service_context()
    except ConfigurationError as e:
        logger.error(f'Service context unavailable: {e}')
        if event.get('httpMethod') == 'OPTIONS':
            return {'statusCode': 200, 'headers': dict(DEFAULT_CORS_HEADERS), 'body': ''}
        return _error_response(e, dict(DEFAULT_CORS_HEADERS))

    return handle_request(event, service_context)


def handle_request(event: Dict[str, Any], service_context: ServiceContext) -> Dict[str, Any]:
    """Process one request against the given clients.

    Args:
        event: API Gateway proxy event
        service_context: Shared clients and configuration

    Returns:
        API Gateway proxy response
    """
    cors = resolve_cors_headers(service_context.cors_providers, event)

    if event.get('httpMethod') == 'OPTIONS':
        return {'statusCode': 200, 'headers': cors, 'body': ''}

    try:
        user_id = parse_user_id(event)
    except BadRequestError as e:
        logger.warning(f'Rejected request: {e}')
        return _error_response(e, cors)

    try:
        outcome = UserDeletionService(service_context).delete_user(user_id)
    except UserDeletionError as e:
        logger.error(f'Deletion error for user {user_id}: [{e.tag}] {e}')
        return _error_response(e, cors)
    except Exception as e:
        logger.exception(f'Unexpected deletion error for user {user_id}: {e}')
        return _response(500, {'message': str(e), 'error': UserDeletionError.tag}, cors)

    return _response(200, {'message': SUCCESS_MESSAGE, 'deletedCounts': outcome.deleted_counts()}, cors)


def parse_user_id(event: Dict[str, Any]) -> str:
    """Extract the user identifier from the request body.

    Raises:
        BadRequestError: If the body is malformed or has no usable id
    """
    try:
        body = parse_json_body(event.get('body'), bool(event.get('isBase64Encoded')))
    except ValueError as e:
        raise BadRequestError(f'Invalid request: {e}')

    user_id = body.get('id')
    if not isinstance(user_id, str) or not user_id.strip():
        raise BadRequestError('Invalid request: Missing required field: id')
    return user_id


def _error_response(error: UserDeletionError, headers: Dict[str, str]) -> Dict[str, Any]:
    return _response(error.status_code, {'message': str(error), 'error': error.tag}, headers)


def _response(status_code: int, body: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {
            **headers, 'Content-Type': 'application/json'
        },
        'body': json.dumps(body),
    }
