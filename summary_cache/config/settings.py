"""
Service configuration loaded from the Lambda environment.

Environment Variables:
    REPLICATE_API_TOKEN: Replicate API token (required to generate)
    REPLICATE_MODEL_VERSION: Replicate model version id (required to generate)
    WEBHOOK_BASE_URL: Public base URL the provider calls back (required to generate)
    SUMMARY_STORE_TABLE_NAME: DynamoDB table for all store entries (default: SummaryStore)
    AWS_REGION: AWS region (default: us-east-1)
    PROVIDER_TIMEOUT_SECONDS: Provider HTTP timeout in seconds (default: 30)
    METRICS_ENABLED: Emit CloudWatch metrics (default: true)
    METRICS_NAMESPACE: CloudWatch namespace (default: ArticleSummary)
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .table_names import get_table_name, SUMMARY_STORE_TABLE_NAME
from ..exceptions import ConfigurationError

# Entry lifetimes in seconds
URL_INDEX_TTL_SECONDS = 7 * 24 * 3600
CACHE_ENTRY_TTL_SECONDS = 7 * 24 * 3600
DEDUP_LOCK_TTL_SECONDS = 60
CORRELATION_TTL_SECONDS = 3600

# Characters of article text that take part in the fingerprint
FINGERPRINT_TEXT_PREFIX_CHARS = 300

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 30.0
DEFAULT_METRICS_NAMESPACE = 'ArticleSummary'

PROVIDER_ENV_VARS = (
    'REPLICATE_API_TOKEN',
    'REPLICATE_MODEL_VERSION',
    'WEBHOOK_BASE_URL',
)


@dataclass(frozen=True)
class ServiceConfig:
    """
    Deployment configuration shared by the Lambda entry points.

    Attributes:
        table_name: DynamoDB table holding every store entry
        region: AWS region
        replicate_api_token: Replicate API token
        replicate_model_version: Replicate model version, also the provider tag
        webhook_base_url: Base URL for the provider callback
        provider_timeout_seconds: Timeout for provider HTTP calls
        metrics_enabled: Whether CloudWatch metrics are emitted
        metrics_namespace: CloudWatch namespace
    """

    table_name: str = SUMMARY_STORE_TABLE_NAME
    region: str = 'us-east-1'
    replicate_api_token: Optional[str] = None
    replicate_model_version: Optional[str] = None
    webhook_base_url: Optional[str] = None
    provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    metrics_enabled: bool = True
    metrics_namespace: str = DEFAULT_METRICS_NAMESPACE

    def __post_init__(self):
        """Validate configuration on initialization."""
        if not self.table_name:
            raise ConfigurationError(['SUMMARY_STORE_TABLE_NAME'])

        if self.provider_timeout_seconds <= 0:
            raise ValueError(
                f"provider_timeout_seconds must be positive, "
                f"got {self.provider_timeout_seconds}"
            )

    @property
    def webhook_url(self) -> str:
        """Callback URL registered with every provider submission."""
        return f"{(self.webhook_base_url or '').rstrip('/')}/webhook"


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def load_config(
    require_provider: bool = True,
    environ: Optional[Mapping[str, str]] = None
) -> ServiceConfig:
    """
    Build ServiceConfig from environment variables.

    Args:
        require_provider: Whether the provider settings must be present
            (the generate path needs them; fetch and webhook do not)
        environ: Mapping to read instead of os.environ

    Returns:
        Validated ServiceConfig

    Raises:
        ConfigurationError: If required variables are missing
    """
    env = os.environ if environ is None else environ

    if require_provider:
        missing = [name for name in PROVIDER_ENV_VARS if not env.get(name)]
        if missing:
            raise ConfigurationError(missing)

    timeout = env.get('PROVIDER_TIMEOUT_SECONDS')
    try:
        provider_timeout = float(timeout) if timeout else DEFAULT_PROVIDER_TIMEOUT_SECONDS
    except ValueError:
        raise ValueError(f"PROVIDER_TIMEOUT_SECONDS must be a number, got {timeout!r}")

    table_name = get_table_name('SUMMARY_STORE_TABLE_NAME', environ=env)

    return ServiceConfig(
        table_name=table_name,
        region=env.get('AWS_REGION', 'us-east-1'),
        replicate_api_token=env.get('REPLICATE_API_TOKEN'),
        replicate_model_version=env.get('REPLICATE_MODEL_VERSION'),
        webhook_base_url=env.get('WEBHOOK_BASE_URL'),
        provider_timeout_seconds=provider_timeout,
        metrics_enabled=_parse_bool(env.get('METRICS_ENABLED'), True),
        metrics_namespace=env.get('METRICS_NAMESPACE', DEFAULT_METRICS_NAMESPACE),
    )
