"""
CloudWatch metrics utility for the summary service.

Provides count metrics for cache effectiveness, lock contention and
callback outcomes, plus a latency metric for request handling.
"""
import logging
from typing import List, Dict, Optional
from datetime import datetime, timezone

import boto3

logger = logging.getLogger(__name__)


class MetricsPublisher:
    """
    CloudWatch metrics publisher for summary generation metrics.
    """

    def __init__(
        self,
        namespace: str = 'ArticleSummary',
        enabled: bool = True,
        cloudwatch_client=None,
        region: str = 'us-east-1'
    ):
        """
        Initialize metrics publisher.

        Args:
            namespace: CloudWatch metrics namespace
            enabled: When False every emit call is a no-op
            cloudwatch_client: Optional CloudWatch client for testing
            region: AWS region for the default client
        """
        self.namespace = namespace
        self.enabled = enabled
        self._cloudwatch = cloudwatch_client
        self._region = region

    @property
    def cloudwatch(self):
        if self._cloudwatch is None:
            self._cloudwatch = boto3.client('cloudwatch', region_name=self._region)
        return self._cloudwatch

    def put_count_metric(
        self,
        metric_name: str,
        value: int = 1,
        dimensions: Optional[List[Dict[str, str]]] = None
    ):
        """
        Emit count metric.

        Args:
            metric_name: Metric name (e.g., 'CacheHit')
            value: Count value (default: 1)
            dimensions: Metric dimensions
        """
        self._put_metric(metric_name, value, 'Count', dimensions or [])

    def put_latency_metric(
        self,
        metric_name: str,
        value: float,
        dimensions: Optional[List[Dict[str, str]]] = None
    ):
        """
        Emit latency metric in milliseconds.
        """
        self._put_metric(metric_name, value, 'Milliseconds', dimensions or [])

    def _put_metric(
        self,
        metric_name: str,
        value: float,
        unit: str,
        dimensions: List[Dict[str, str]]
    ):
        if not self.enabled:
            return

        try:
            metric_data = {
                'MetricName': metric_name,
                'Value': value,
                'Unit': unit,
                'Timestamp': datetime.now(timezone.utc)
            }

            if dimensions:
                metric_data['Dimensions'] = dimensions

            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=[metric_data]
            )
        except Exception as e:
            # metrics never fail a request
            logger.warning(f"Failed to emit metric {metric_name}: {e}")

    def emit_cache_hit(self, source: str):
        """
        Emit cache hit count.

        Args:
            source: Where the hit was found ('url_index' or 'fingerprint')
        """
        self.put_count_metric('CacheHit', dimensions=[{'Name': 'Source', 'Value': source}])

    def emit_cache_miss(self):
        self.put_count_metric('CacheMiss')

    def emit_generation_triggered(self):
        self.put_count_metric('GenerationTriggered')

    def emit_generation_pending(self):
        self.put_count_metric('GenerationPending')

    def emit_provider_failure(self):
        self.put_count_metric('ProviderSubmissionFailed')

    def emit_callback_outcome(self, outcome: str):
        """
        Emit callback outcome count.

        Args:
            outcome: 'stored', 'failed' or 'unknown_job'
        """
        metric_name = {
            'stored': 'CallbackStored',
            'failed': 'CallbackFailed',
            'unknown_job': 'UnknownJobCallback',
        }.get(outcome)
        if metric_name:
            self.put_count_metric(metric_name)

    def emit_request_latency(self, route: str, duration_ms: float):
        self.put_latency_metric(
            'RequestLatency',
            duration_ms,
            dimensions=[{'Name': 'Route', 'Value': route}]
        )
