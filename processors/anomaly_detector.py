"""
Period-over-period anomaly detector.
Flags entities whose clicks, CTR or position regressed past a threshold.
"""

import math

import pandas as pd
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from config.settings import Settings, settings
from models.entities import AggregateMetric, Alert, AlertSeverity, AlertType
from processors.metrics_normalizer import MetricsNormalizer, RowLike
from utils.helpers import entity_key, format_percentage, safe_float
from utils.logger import get_logger
from utils.validators import validate_threshold

MetricLike = Union[AggregateMetric, Mapping[str, Any]]

METRIC_FIELDS = {
    'clicks': ('total_clicks', 'totalClicks', 'clicks'),
    'impressions': ('total_impressions', 'totalImpressions', 'impressions'),
    'ctr': ('avg_ctr', 'avgCtr', 'ctr'),
    'position': ('avg_position', 'avgPosition', 'position')
}

SEVERITY_ORDER = {AlertSeverity.HIGH: 0, AlertSeverity.MEDIUM: 1}

# Absolute slack when comparing drop fractions to cutoffs
CHANGE_TOLERANCE = 1e-9


def _lookup(data: Mapping[str, Any], names) -> Any:
    for name in names:
        if data.get(name) is not None:
            return data[name]
    return None


def reaches(change: float, cutoff: float) -> bool:
    """True when a drop fraction is at or above a cutoff, up to float noise."""
    return change >= cutoff or math.isclose(
        change, cutoff, rel_tol=0.0, abs_tol=CHANGE_TOLERANCE
    )


class AnomalyDetector:
    """
    Detects metric regressions between two equal-length periods.
    Emits one alert per regressed metric per entity.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        normalizer: Optional[MetricsNormalizer] = None,
        log=None
    ):
        """
        Initialize anomaly detector.

        Args:
            config: Settings holding default threshold and severity cutoff
            normalizer: Normalizer used when detecting from raw rows
            log: Logger sink
        """
        self.config = config or settings
        self.log = log or get_logger("anomaly_detector")
        self.normalizer = normalizer or MetricsNormalizer(log=self.log)

    def _metrics_frame(self, metrics: Iterable[MetricLike]) -> pd.DataFrame:
        """Load aggregates into a DataFrame, skipping entries without entity."""
        records = []
        for metric in metrics:
            if isinstance(metric, AggregateMetric):
                data = metric.to_dict()
            elif isinstance(metric, Mapping):
                data = metric
            else:
                self.log.warning(
                    f"Skipping unsupported metric of type {type(metric).__name__}"
                )
                continue

            entity = data.get('entity')
            key = entity_key(entity) if isinstance(entity, str) else ''
            if not key:
                continue

            records.append({
                'entity': key,
                'clicks': safe_float(_lookup(data, METRIC_FIELDS['clicks'])),
                'impressions': safe_float(
                    _lookup(data, METRIC_FIELDS['impressions'])
                ),
                'ctr': safe_float(_lookup(data, METRIC_FIELDS['ctr'])),
                'position': safe_float(_lookup(data, METRIC_FIELDS['position']))
            })

        return pd.DataFrame(
            records,
            columns=['entity', 'clicks', 'impressions', 'ctr', 'position']
        )

    def calculate_change_metrics(
        self,
        current: Iterable[MetricLike],
        previous: Iterable[MetricLike]
    ) -> pd.DataFrame:
        """
        Calculate drop fractions between time periods.

        Only entities present in both periods are kept, in the order of
        the current period. Positive values are regressions. An entity
        repeated in the previous period keeps its last entry.

        Args:
            current: Current period aggregates
            previous: Previous period aggregates

        Returns:
            DataFrame with change metrics
        """
        current_df = self._metrics_frame(current)
        previous_df = self._metrics_frame(previous)

        if current_df.empty or previous_df.empty:
            return pd.DataFrame()

        # Prepare previous data with prefix
        prev_subset = previous_df.drop_duplicates('entity', keep='last')
        prev_subset = prev_subset.rename(columns={
            'clicks': 'prev_clicks',
            'impressions': 'prev_impressions',
            'ctr': 'prev_ctr',
            'position': 'prev_position'
        })

        # Merge datasets
        merged = pd.merge(
            current_df,
            prev_subset,
            on='entity',
            how='inner'
        )

        if merged.empty:
            return merged

        # Calculate changes
        merged['clicks_change'] = (
            (merged['prev_clicks'] - merged['clicks']) /
            merged['prev_clicks'].clip(lower=1)
        )
        merged['ctr_change'] = (
            (merged['prev_ctr'] - merged['ctr']) /
            merged['prev_ctr'].clip(lower=self.config.ctr_epsilon)
        )

        # Higher position number = worse ranking
        merged['position_change'] = (
            (merged['position'] - merged['prev_position']) /
            merged['prev_position'].clip(lower=1)
        )

        # A missing position in either period is not comparable
        unranked = (merged['position'] < 1) | (merged['prev_position'] < 1)
        merged.loc[unranked, 'position_change'] = 0.0

        return merged

    def resolve_threshold(self, threshold: Any) -> float:
        """Return a usable threshold, falling back to the configured one."""
        if threshold is None:
            return self.config.anomaly_threshold

        is_valid, error = validate_threshold(threshold)
        if not is_valid:
            self.log.warning(
                f"{error}; using default {self.config.anomaly_threshold}"
            )
            return self.config.anomaly_threshold
        return float(threshold)

    def classify_severity(self, change: float) -> AlertSeverity:
        """Severity for a drop fraction that already met the threshold."""
        if reaches(change, self.config.high_severity_threshold):
            return AlertSeverity.HIGH
        return AlertSeverity.MEDIUM

    def detect_anomalies(
        self,
        current: Iterable[MetricLike],
        previous: Iterable[MetricLike],
        threshold: Optional[float] = None
    ) -> List[Alert]:
        """
        Detect regressions between two periods.

        Args:
            current: Current period aggregates
            previous: Previous period aggregates
            threshold: Minimum drop fraction to alert on (0-1)

        Returns:
            Alerts in the order of the current period
        """
        threshold = self.resolve_threshold(threshold)
        changes = self.calculate_change_metrics(current, previous)

        if changes.empty:
            return []

        checks = [
            (AlertType.CLICKS_DROP, 'clicks_change'),
            (AlertType.CTR_DROP, 'ctr_change'),
            (AlertType.POSITION_DROP, 'position_change')
        ]

        alerts = []
        for _, row in changes.iterrows():
            for alert_type, column in checks:
                change = float(row[column])
                if reaches(change, threshold):
                    alerts.append(Alert(
                        type=alert_type,
                        severity=self.classify_severity(change),
                        change=change,
                        item=row['entity']
                    ))

        self.log.info(
            f"Compared {len(changes)} entities, raised {len(alerts)} alerts "
            f"(threshold {format_percentage(threshold, 0)})"
        )
        return alerts

    def detect_anomalies_from_rows(
        self,
        current_rows: Iterable[RowLike],
        previous_rows: Iterable[RowLike],
        threshold: Optional[float] = None
    ) -> List[Alert]:
        """
        Group raw rows per entity, then detect regressions.

        Args:
            current_rows: Current period rows
            previous_rows: Previous period rows
            threshold: Minimum drop fraction to alert on (0-1)

        Returns:
            Alerts ordered by the current period's aggregates

        Raises:
            ValidationError: If any row is malformed
        """
        current = self.normalizer.group_by_entity(current_rows)
        previous = self.normalizer.group_by_entity(previous_rows)
        return self.detect_anomalies(current, previous, threshold)

    @staticmethod
    def sort_by_severity(alerts: Iterable[Alert]) -> List[Alert]:
        """
        Order alerts for display: HIGH first, biggest drop first.

        Args:
            alerts: Alerts to sort

        Returns:
            New sorted list
        """
        return sorted(
            alerts,
            key=lambda a: (SEVERITY_ORDER[a.severity], -a.change)
        )

    def get_recovery_recommendations(
        self,
        alert_type: Union[AlertType, str]
    ) -> Dict[str, Any]:
        """
        Get recovery recommendations based on alert type.

        Args:
            alert_type: Type of regression detected

        Returns:
            Dict with diagnosis, likely cause and actions
        """
        if isinstance(alert_type, AlertType):
            alert_type = alert_type.value

        recommendations = {
            AlertType.POSITION_DROP.value: {
                'diagnosis': 'Average position worsened',
                'likely_cause': 'Competitors improved or algorithm change',
                'actions': [
                    'Audit competing pages for content gaps',
                    'Update content with fresh information',
                    'Improve internal linking to the page',
                    'Add structured data if missing',
                    'Check for technical issues (page speed, mobile)'
                ]
            },
            AlertType.CLICKS_DROP.value: {
                'diagnosis': 'Clicks dropped',
                'likely_cause': 'Lost visibility or less compelling snippet',
                'actions': [
                    'Check whether impressions dropped as well',
                    'Verify the page is still indexed',
                    'Optimize title tag for CTR',
                    'Look for cannibalization with other pages',
                    'Consider seasonality factors'
                ]
            },
            AlertType.CTR_DROP.value: {
                'diagnosis': 'CTR specifically dropped',
                'likely_cause': 'SERP changes or less compelling listing',
                'actions': [
                    'Analyze SERP changes for key queries',
                    'Update title and meta description',
                    'Add FAQ schema for more SERP space',
                    'Check for featured snippets to target',
                    'Analyze competitor snippets'
                ]
            }
        }

        return recommendations.get(alert_type, {
            'diagnosis': 'Unknown regression pattern',
            'likely_cause': 'Requires manual investigation',
            'actions': ['Conduct detailed manual audit']
        })

    def summarize_alerts(self, alerts: Iterable[Alert]) -> Dict[str, Any]:
        """
        Summarize alert findings.

        Args:
            alerts: Alerts from detect_anomalies

        Returns:
            Summary dict
        """
        alerts = list(alerts)
        summary = {
            'total_alerts': len(alerts),
            'by_type': {t.value: 0 for t in AlertType},
            'by_severity': {s.value: 0 for s in AlertSeverity},
            'entities_affected': 0,
            'max_change': 0.0
        }

        if not alerts:
            return summary

        for alert in alerts:
            summary['by_type'][alert.type.value] += 1
            summary['by_severity'][alert.severity.value] += 1

        summary['entities_affected'] = len({a.item for a in alerts})
        summary['max_change'] = round(max(a.change for a in alerts), 4)

        return summary


def detect_anomalies(
    current: Iterable[MetricLike],
    previous: Iterable[MetricLike],
    threshold: Optional[float] = None
) -> List[Alert]:
    """Detect regressions with the default detector."""
    return AnomalyDetector().detect_anomalies(current, previous, threshold)
