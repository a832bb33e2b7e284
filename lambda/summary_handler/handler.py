"""
HTTP API Lambda handler for article summaries.

Endpoints:
- POST /generate-summary - Return a cached summary or start generating one
- GET /fetch-summary?url=...|fingerprint=... - Poll for a summary
"""
import base64
import json
import re
import time
from typing import Any, Dict, Optional

from summary_cache.config import ServiceConfig, load_config
from summary_cache.data_access import (
    CorrelationTable,
    DedupLock,
    DynamoDBClient,
    DynamoDBExpiringStore,
    StoreError,
    SummaryRepository,
)
from summary_cache.exceptions import (
    ConfigurationError,
    InternalError,
    ProviderError,
    ValidationError,
)
from summary_cache.models import SummaryStatus
from summary_cache.services import HtmlContentExtractor, SummaryOrchestrator, create_provider
from summary_cache.utils import (
    ErrorCode,
    MetricsPublisher,
    configure_lambda_logging,
    error_response,
    get_structured_logger,
    success_response,
)

configure_lambda_logging()
logger = get_structured_logger('SummaryHandler')

ROUTE_PATTERN = re.compile(r'(?:^|/)(generate-summary|fetch-summary|webhook)$')

AVAILABLE_ENDPOINTS = [
    'POST /generate-summary',
    'GET /fetch-summary?url=... or ?fingerprint=...',
]

STATUS_CODES = {
    SummaryStatus.COMPLETE: 200,
    SummaryStatus.PROCESSING: 202,
    SummaryStatus.PENDING: 200,
    SummaryStatus.UNKNOWN: 200,
}

VALIDATION_CODES = {
    'body': ErrorCode.VALIDATION_INVALID_MESSAGE_FORMAT,
    'text': ErrorCode.VALIDATION_NO_CONTENT,
}

# Built on first use and reused across warm invocations
_config: Optional[ServiceConfig] = None
_orchestrator: Optional[SummaryOrchestrator] = None


def get_orchestrator(require_provider: bool = False) -> SummaryOrchestrator:
    """
    Build the orchestrator from the environment once per container.

    Fetch works without provider settings; generate needs them.

    Args:
        require_provider: Attach the inference provider, failing if it is
            not configured

    Raises:
        ConfigurationError: If required settings are missing
    """
    global _config, _orchestrator
    if _orchestrator is None:
        config = load_config(require_provider=False)
        store = DynamoDBExpiringStore(
            config.table_name,
            dynamodb_client=DynamoDBClient(region=config.region)
        )
        _orchestrator = SummaryOrchestrator(
            repository=SummaryRepository(store),
            lock=DedupLock(store),
            correlations=CorrelationTable(store),
            extractor=HtmlContentExtractor(),
            provider=None,
            metrics=MetricsPublisher(
                namespace=config.metrics_namespace,
                enabled=config.metrics_enabled,
                region=config.region
            ),
            logger=logger
        )
        _config = config

    if require_provider and _orchestrator.provider is None:
        _orchestrator.provider = create_provider(_config)

    return _orchestrator


def extract_route(path: Optional[str]) -> Optional[str]:
    """
    Extract the route name from a request path.

    Tolerates a stage or function prefix ('/prod/generate-summary').

    Args:
        path: Request path

    Returns:
        Route name or None
    """
    if not path:
        return None
    match = ROUTE_PATTERN.search(path)
    return match.group(1) if match else None


def _request_method(event: Dict[str, Any]) -> str:
    http = event.get('requestContext', {}).get('http', {})
    return (http.get('method') or event.get('httpMethod') or '').upper()


def _request_path(event: Dict[str, Any]) -> str:
    http = event.get('requestContext', {}).get('http', {})
    return event.get('rawPath') or http.get('path') or event.get('path') or ''


def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the JSON request body.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    raw = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        try:
            raw = base64.b64decode(raw).decode('utf-8')
        except (ValueError, UnicodeDecodeError) as e:
            raise ValidationError(f'Invalid request body encoding: {e}', field='body')

    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f'Invalid JSON in request body: {e}', field='body')

    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object', field='body')
    return body


def internal_error_code(error: InternalError) -> ErrorCode:
    """Pick the error code for an internal failure from its cause."""
    if isinstance(error.__cause__, ProviderError):
        return ErrorCode.INTERNAL_PROVIDER_ERROR
    if isinstance(error.__cause__, StoreError):
        return ErrorCode.INTERNAL_STORE_ERROR
    return ErrorCode.INTERNAL_SERVER_ERROR


def _optional_str(body: Dict[str, Any], field: str) -> Optional[str]:
    value = body.get(field)
    if not isinstance(value, str):
        return None
    # JSON allows lone surrogate escapes; store keys and items must be valid UTF-8
    return value.encode('utf-16', 'surrogatepass').decode('utf-16', 'replace')


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Route summary API requests.

    Args:
        event: API Gateway HTTP API event
        context: Lambda context

    Returns:
        API Gateway response dict
    """
    start_time = time.time()
    request_id = getattr(context, 'aws_request_id', None)
    log = get_structured_logger('SummaryHandler', request_id=request_id)

    method = _request_method(event)
    path = _request_path(event)
    route = extract_route(path)

    log.info('Request received', operation='lambda_handler', method=method, path=path)

    try:
        if method == 'OPTIONS':
            return success_response(200, {})
        if route == 'generate-summary' and method == 'POST':
            return handle_generate(event)
        if route == 'fetch-summary' and method == 'GET':
            return handle_fetch(event)

        return error_response(
            ErrorCode.ROUTE_NOT_FOUND,
            'Not found',
            details={'availableEndpoints': AVAILABLE_ENDPOINTS}
        )

    except ValidationError as e:
        log.warning('Request rejected', operation='lambda_handler', reason=e.message, field=e.field)
        return error_response(
            VALIDATION_CODES.get(e.field, ErrorCode.VALIDATION_MISSING_PARAMETER),
            e.message
        )

    except ConfigurationError as e:
        log.error('Service is not configured', operation='lambda_handler', error=e)
        return error_response(
            ErrorCode.INTERNAL_CONFIGURATION_ERROR,
            f'Configuration error: {e}'
        )

    except InternalError as e:
        log.error('Request failed', operation='lambda_handler', error=e)
        return error_response(internal_error_code(e), str(e))

    except StoreError as e:
        log.error('Store operation failed', operation='lambda_handler', error=e)
        return error_response(ErrorCode.INTERNAL_STORE_ERROR, 'Store operation failed')

    except Exception as e:
        log.error('Unhandled error', operation='lambda_handler', error=e)
        return error_response(ErrorCode.INTERNAL_SERVER_ERROR, 'Internal server error')

    finally:
        duration_ms = (time.time() - start_time) * 1000
        log.debug('Request finished', operation='lambda_handler', duration_ms=duration_ms)
        if route and _orchestrator is not None and _orchestrator.metrics is not None:
            _orchestrator.metrics.emit_request_latency(route, duration_ms)


def handle_generate(event: Dict[str, Any]) -> Dict[str, Any]:
    """Handle POST /generate-summary."""
    body = parse_json_body(event)

    url = _optional_str(body, 'url')
    if not url or not url.strip():
        raise ValidationError('URL is required', field='url')

    outcome = get_orchestrator(require_provider=True).generate(
        url=url,
        headline=_optional_str(body, 'headline'),
        html=_optional_str(body, 'html'),
        snippet=_optional_str(body, 'snippet')
    )
    return success_response(STATUS_CODES[outcome.status], outcome.to_dict())


def handle_fetch(event: Dict[str, Any]) -> Dict[str, Any]:
    """Handle GET /fetch-summary."""
    params = event.get('queryStringParameters') or {}

    outcome = get_orchestrator().fetch(
        fingerprint=params.get('fingerprint'),
        url=params.get('url')
    )
    return success_response(STATUS_CODES[outcome.status], outcome.to_dict())
