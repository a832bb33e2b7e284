"""
Provider callback Lambda handler.

Endpoint:
- POST /webhook - Replicate prediction completion callback

Every accepted or ignored callback is acknowledged with 200 so the provider
does not redeliver it. Only a store failure while finalizing answers 500,
letting the provider's redelivery finish the job.
"""
import base64
import json
import re
from typing import Any, Dict, Optional

from summary_cache.config import load_config
from summary_cache.data_access import (
    CorrelationTable,
    DedupLock,
    DynamoDBClient,
    DynamoDBExpiringStore,
    SummaryRepository,
)
from summary_cache.exceptions import ConfigurationError, InternalError
from summary_cache.services import CompletionHandler
from summary_cache.utils import (
    ErrorCode,
    MetricsPublisher,
    configure_lambda_logging,
    error_response,
    get_structured_logger,
    success_response,
)

configure_lambda_logging()
logger = get_structured_logger('WebhookHandler')

ROUTE_PATTERN = re.compile(r'(?:^|/)(webhook)$')

# Built on first use and reused across warm invocations
_completion_handler: Optional[CompletionHandler] = None


def get_completion_handler() -> CompletionHandler:
    """
    Build the completion handler from the environment once per container.

    Raises:
        ConfigurationError: If required settings are missing
    """
    global _completion_handler
    if _completion_handler is None:
        config = load_config(require_provider=False)
        store = DynamoDBExpiringStore(
            config.table_name,
            dynamodb_client=DynamoDBClient(region=config.region)
        )
        _completion_handler = CompletionHandler(
            repository=SummaryRepository(store),
            lock=DedupLock(store),
            correlations=CorrelationTable(store),
            provider_tag=config.replicate_model_version or '',
            metrics=MetricsPublisher(
                namespace=config.metrics_namespace,
                enabled=config.metrics_enabled,
                region=config.region
            ),
            logger=logger
        )
    return _completion_handler


def extract_route(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    match = ROUTE_PATTERN.search(path)
    return match.group(1) if match else None


def parse_payload(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Decode the callback body.

    Returns:
        Payload dict, or None when the body is not a JSON object
    """
    raw = event.get('body') or ''
    try:
        if event.get('isBase64Encoded'):
            raw = base64.b64decode(raw).decode('utf-8')
        payload = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Handle a provider completion callback.

    Payload (Replicate prediction):
        id: Prediction id (``jobId`` also accepted)
        status: 'starting', 'processing', 'succeeded', 'failed' or 'canceled'
            (``outcome`` also accepted)
        output: String or list of strings on success
        error: Error message on failure

    Args:
        event: API Gateway HTTP API event
        context: Lambda context

    Returns:
        API Gateway response dict
    """
    request_id = getattr(context, 'aws_request_id', None)
    log = get_structured_logger('WebhookHandler', request_id=request_id)

    http = event.get('requestContext', {}).get('http', {})
    method = (http.get('method') or event.get('httpMethod') or '').upper()
    path = event.get('rawPath') or http.get('path') or event.get('path') or ''

    if extract_route(path) != 'webhook' or method != 'POST':
        return error_response(
            ErrorCode.ROUTE_NOT_FOUND,
            'Not found',
            details={'availableEndpoints': ['POST /webhook']}
        )

    payload = parse_payload(event)
    if payload is None:
        log.warning('Ignoring callback with unreadable body', operation='lambda_handler')
        return success_response(200, {
            'received': True,
            'stored': False,
            'warning': 'Invalid payload',
        })

    job_id = payload.get('id') or payload.get('jobId')
    outcome = payload.get('status') or payload.get('outcome')

    log.info('Callback received', operation='lambda_handler', job_id=job_id, outcome=outcome)

    try:
        body = get_completion_handler().handle(
            job_id=job_id,
            outcome=outcome,
            output=payload.get('output'),
            error=payload.get('error')
        )
        return success_response(200, body)

    except ConfigurationError as e:
        log.error('Service is not configured', operation='lambda_handler', error=e)
        return error_response(
            ErrorCode.INTERNAL_CONFIGURATION_ERROR,
            f'Configuration error: {e}'
        )

    except InternalError as e:
        return error_response(ErrorCode.INTERNAL_STORE_ERROR, str(e))

    except Exception as e:
        log.error('Unhandled error', operation='lambda_handler', error=e)
        return error_response(ErrorCode.INTERNAL_SERVER_ERROR, 'Internal server error')
