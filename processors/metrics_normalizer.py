"""
Metrics normalization module.
Groups raw search performance rows into per-entity aggregates.
"""

import pandas as pd
from typing import Any, Iterable, List, Mapping, Union

from models.entities import AggregateMetric, PerformanceRow
from utils.helpers import entity_key
from utils.logger import get_logger
from utils.validators import ValidationError, validate_row_values

RowLike = Union[PerformanceRow, Mapping[str, Any]]

AGGREGATE_COLUMNS = [
    'entity', 'total_clicks', 'total_impressions',
    'avg_ctr', 'avg_position', 'row_count'
]


def _as_number(value: float) -> Union[int, float]:
    """Keep whole-number totals as ints."""
    value = float(value)
    return int(value) if value.is_integer() else value


class MetricsNormalizer:
    """
    Normalizes performance rows into per-entity aggregates.
    Grouping is case-insensitive on the query or page.
    """

    def __init__(self, log=None):
        """
        Initialize normalizer.

        Args:
            log: Logger sink; defaults to the engine logger
        """
        self.log = log or get_logger("metrics_normalizer")

    def coerce_row(self, row: RowLike, index: int = 0) -> PerformanceRow:
        """
        Convert and validate a single row.

        Args:
            row: PerformanceRow or mapping with row fields
            index: Position of the row in its batch, for error messages

        Returns:
            Validated PerformanceRow

        Raises:
            ValidationError: If the row is malformed
        """
        if isinstance(row, PerformanceRow):
            perf_row = row
        elif isinstance(row, Mapping):
            perf_row = PerformanceRow.from_dict(row)
        else:
            raise ValidationError(
                f"Row {index} must be a PerformanceRow or mapping, "
                f"got {type(row).__name__}"
            )

        is_valid, error = validate_row_values(
            perf_row.entity,
            perf_row.clicks,
            perf_row.impressions,
            perf_row.position
        )
        if not is_valid:
            self.log.error(f"Rejected row {index}: {error}")
            raise ValidationError(f"Row {index}: {error}")

        return perf_row

    def rows_to_frame(self, rows: Iterable[RowLike]) -> pd.DataFrame:
        """
        Validate rows and load them into a DataFrame.

        Args:
            rows: Performance rows

        Returns:
            DataFrame with entity_key, clicks, impressions, position
        """
        records = []
        for i, row in enumerate(rows):
            perf_row = self.coerce_row(row, i)
            records.append({
                'entity_key': entity_key(perf_row.entity),
                'clicks': float(perf_row.clicks),
                'impressions': float(perf_row.impressions),
                'position': float(perf_row.position)
            })

        return pd.DataFrame(
            records,
            columns=['entity_key', 'clicks', 'impressions', 'position']
        )

    def group_by_entity(
        self,
        rows: Union[Iterable[RowLike], pd.DataFrame]
    ) -> List[AggregateMetric]:
        """
        Group rows by entity and aggregate their metrics.

        CTR is recomputed from summed clicks and impressions. Position is
        impression-weighted, falling back to a plain mean when a group
        has no impressions.

        Args:
            rows: Performance rows, mappings, or a DataFrame of rows

        Returns:
            Aggregates sorted by clicks (desc) then entity

        Raises:
            ValidationError: If any row is malformed
        """
        if isinstance(rows, pd.DataFrame):
            rows = rows.to_dict('records')

        df = self.rows_to_frame(rows)
        if df.empty:
            return []

        df['weighted_position'] = df['position'] * df['impressions']

        grouped = df.groupby('entity_key', sort=False).agg(
            total_clicks=('clicks', 'sum'),
            total_impressions=('impressions', 'sum'),
            weighted_position=('weighted_position', 'sum'),
            position_sum=('position', 'sum'),
            row_count=('position', 'size')
        ).reset_index()

        aggregates = self._build_aggregates(grouped)
        self.log.debug(
            f"Grouped {len(df)} rows into {len(aggregates)} entities"
        )
        return aggregates

    def merge_aggregates(
        self,
        *batches: Iterable[AggregateMetric]
    ) -> List[AggregateMetric]:
        """
        Merge aggregates built from separate row batches.

        Equivalent to grouping the union of the original rows.

        Args:
            batches: Lists of AggregateMetric

        Returns:
            Merged aggregates sorted by clicks (desc) then entity
        """
        records = []
        for batch in batches:
            for agg in batch:
                impressions = float(agg.total_impressions)
                records.append({
                    'entity_key': entity_key(agg.entity),
                    'total_clicks': float(agg.total_clicks),
                    'total_impressions': impressions,
                    'weighted_position': agg.avg_position * impressions,
                    'position_sum': agg.avg_position * agg.row_count,
                    'row_count': agg.row_count
                })

        if not records:
            return []

        df = pd.DataFrame(records)
        grouped = df.groupby('entity_key', sort=False).agg(
            total_clicks=('total_clicks', 'sum'),
            total_impressions=('total_impressions', 'sum'),
            weighted_position=('weighted_position', 'sum'),
            position_sum=('position_sum', 'sum'),
            row_count=('row_count', 'sum')
        ).reset_index()

        return self._build_aggregates(grouped)

    def _build_aggregates(self, grouped: pd.DataFrame) -> List[AggregateMetric]:
        """Turn grouped sums into sorted AggregateMetric objects."""
        grouped = grouped.sort_values(
            ['total_clicks', 'entity_key'],
            ascending=[False, True],
            kind='mergesort'
        )

        aggregates = []
        for row in grouped.itertuples(index=False):
            clicks = float(row.total_clicks)
            impressions = float(row.total_impressions)
            row_count = int(row.row_count)

            if impressions > 0:
                avg_ctr = clicks / impressions
                avg_position = row.weighted_position / impressions
            else:
                avg_ctr = 0.0
                avg_position = row.position_sum / row_count

            aggregates.append(AggregateMetric(
                entity=row.entity_key,
                total_clicks=_as_number(clicks),
                total_impressions=_as_number(impressions),
                avg_ctr=avg_ctr,
                avg_position=float(avg_position),
                row_count=row_count
            ))

        return aggregates

    def aggregates_to_frame(
        self,
        aggregates: Iterable[AggregateMetric]
    ) -> pd.DataFrame:
        """
        Convert aggregates to a DataFrame.

        Args:
            aggregates: AggregateMetric list

        Returns:
            DataFrame with one row per entity
        """
        return pd.DataFrame(
            [agg.to_dict() for agg in aggregates],
            columns=AGGREGATE_COLUMNS
        )


def group_by_entity(
    rows: Union[Iterable[RowLike], pd.DataFrame]
) -> List[AggregateMetric]:
    """Group rows by entity with the default normalizer."""
    return MetricsNormalizer().group_by_entity(rows)


def merge_aggregates(*batches: Iterable[AggregateMetric]) -> List[AggregateMetric]:
    """Merge per-batch aggregates with the default normalizer."""
    return MetricsNormalizer().merge_aggregates(*batches)
