"""
Inference provider client.

Submits summarization jobs to Replicate's predictions API. Completion is
reported asynchronously: Replicate posts the finished prediction to the
webhook URL registered with each submission.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import requests

from ..config.settings import ServiceConfig
from ..exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

REPLICATE_PREDICTIONS_URL = 'https://api.replicate.com/v1/predictions'

SUMMARY_PROMPT_TEMPLATE = (
    "Summarize the following article in 2-3 concise paragraphs. "
    "Focus on the main points and key information.\n\n"
    "Title: {title}\n\n"
    "Article:\n{text}\n\n"
    "Summary:"
)

MAX_NEW_TOKENS = 500
TEMPERATURE = 0.7


@dataclass(frozen=True)
class ProviderJob:
    """Job accepted by the provider."""

    job_id: str
    status: str = 'starting'


class InferenceProvider(Protocol):
    """
    Protocol for asynchronous summarization backends.
    """

    def submit(self, text: str, title: Optional[str] = None) -> ProviderJob:
        """
        Submit a summarization job.

        Args:
            text: Article text to summarize
            title: Article title for the prompt

        Returns:
            ProviderJob carrying the provider's job id

        Raises:
            ProviderError: If the provider does not accept the job
        """
        ...


def build_prompt(text: str, title: Optional[str] = None) -> str:
    return SUMMARY_PROMPT_TEMPLATE.format(title=title or 'Untitled', text=text)


class ReplicateClient:
    """
    InferenceProvider backed by the Replicate predictions API.
    """

    def __init__(
        self,
        api_token: str,
        model_version: str,
        webhook_url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        api_url: str = REPLICATE_PREDICTIONS_URL
    ):
        """
        Initialize Replicate client.

        Args:
            api_token: Replicate API token
            model_version: Model version id
            webhook_url: Callback URL for completed predictions
            timeout: HTTP timeout in seconds
            session: Optional requests session for testing
            api_url: Predictions endpoint
        """
        self.api_token = api_token
        self.model_version = model_version
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.api_url = api_url

    def _build_payload(self, text: str, title: Optional[str]) -> Dict[str, Any]:
        return {
            'version': self.model_version,
            'input': {
                'prompt': build_prompt(text, title),
                'max_new_tokens': MAX_NEW_TOKENS,
                'temperature': TEMPERATURE,
            },
            'webhook': self.webhook_url,
            'webhook_events_filter': ['completed'],
        }

    def submit(self, text: str, title: Optional[str] = None) -> ProviderJob:
        """
        Create a prediction on Replicate.

        Args:
            text: Article text to summarize
            title: Article title for the prompt

        Returns:
            ProviderJob with the prediction id

        Raises:
            ProviderError: On network failure, non-2xx status or a
                response without a prediction id
        """
        headers = {
            'Authorization': f'Token {self.api_token}',
            'Content-Type': 'application/json',
        }

        try:
            response = self.session.post(
                self.api_url,
                json=self._build_payload(text, title),
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Replicate request failed: {e}")
            raise ProviderError(f"Replicate request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(
                f"Replicate rejected prediction: {response.status_code} {response.text[:500]}"
            )
            raise ProviderError(
                f"Replicate API error: {response.status_code}",
                status_code=response.status_code
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                'Replicate returned a non-JSON response',
                status_code=response.status_code
            ) from e

        job_id = body.get('id') if isinstance(body, dict) else None
        if not job_id:
            raise ProviderError(
                'Replicate response missing prediction id',
                status_code=response.status_code
            )

        logger.info(f"Replicate prediction created: {job_id}")
        return ProviderJob(job_id=job_id, status=body.get('status') or 'starting')


def create_provider(config: ServiceConfig, session: Optional[requests.Session] = None) -> ReplicateClient:
    """
    Build the Replicate client from service configuration.

    Raises:
        ConfigurationError: If provider settings are missing
    """
    missing = [
        name for name, value in (
            ('REPLICATE_API_TOKEN', config.replicate_api_token),
            ('REPLICATE_MODEL_VERSION', config.replicate_model_version),
            ('WEBHOOK_BASE_URL', config.webhook_base_url),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(missing)

    return ReplicateClient(
        api_token=config.replicate_api_token,
        model_version=config.replicate_model_version,
        webhook_url=config.webhook_url,
        timeout=config.provider_timeout_seconds,
        session=session
    )
