"""
Keyword cannibalization detection.
Finds queries for which several pages of the same site compete.
"""

import pandas as pd
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config.settings import Settings, settings
from models.entities import CannibalCluster, CannibalPage
from utils.helpers import entity_key
from utils.logger import get_logger
from utils.validators import ValidationError, validate_row_values


class CannibalizationDetector:
    """
    Groups query/page rows into cannibalization clusters and picks the
    page that should own each query.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        custom_weights: Dict[str, float] = None,
        log=None
    ):
        """
        Initialize detector.

        Args:
            config: Settings holding cluster thresholds
            custom_weights: Optional page score weights
            log: Logger sink
        """
        self.config = config or settings
        self.weights = custom_weights or self.config.cannibalization_score_weights
        self.log = log or get_logger("cannibalization")

    def _rows_to_frame(self, rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
        """Load query/page rows, skipping rows that lack either dimension."""
        records = []
        skipped = 0
        for i, row in enumerate(rows):
            query = row.get('query')
            page = row.get('page')
            if not isinstance(query, str) or not query.strip() or \
                    not isinstance(page, str) or not page.strip():
                skipped += 1
                continue

            is_valid, error = validate_row_values(
                query, row.get('clicks'), row.get('impressions'),
                row.get('position')
            )
            if not is_valid:
                self.log.error(f"Rejected row {i}: {error}")
                raise ValidationError(f"Row {i}: {error}")

            records.append({
                'query': entity_key(query),
                'page': page.strip(),
                'clicks': float(row['clicks']),
                'impressions': float(row['impressions']),
                'position': float(row['position'])
            })

        if skipped:
            self.log.debug(f"Skipped {skipped} rows without query or page")

        return pd.DataFrame(
            records,
            columns=['query', 'page', 'clicks', 'impressions', 'position']
        )

    def score_pages(self, pages: pd.DataFrame) -> pd.DataFrame:
        """
        Score the pages competing for one query.

        Args:
            pages: Per-page aggregates of a single query

        Returns:
            Pages with a score column, best first
        """
        max_impressions = pages['impressions'].max() or 1
        max_clicks = pages['clicks'].max() or 1
        min_position = pages['position'].min() or 1

        pages = pages.copy()
        pages['score'] = (
            self.weights['impressions'] * pages['impressions'] / max_impressions +
            self.weights['clicks'] * pages['clicks'] / max_clicks +
            self.weights['position'] * min_position / pages['position']
        )
        return pages.sort_values(
            ['score', 'page'], ascending=[False, True], kind='mergesort'
        )

    def find_cannibal_clusters(
        self,
        rows: Iterable[Mapping[str, Any]],
        min_pages: Optional[int] = None,
        min_impressions: Optional[float] = None
    ) -> List[CannibalCluster]:
        """
        Find queries served by multiple pages.

        Args:
            rows: Rows carrying query, page, clicks, impressions, position
            min_pages: Minimum competing pages per query
            min_impressions: Minimum total impressions per query

        Returns:
            Clusters sorted by total impressions (desc)

        Raises:
            ValidationError: If a row with query and page has bad metrics
        """
        if min_pages is None:
            min_pages = self.config.cannibalization_min_pages
        if min_impressions is None:
            min_impressions = self.config.cannibalization_min_impressions

        df = self._rows_to_frame(rows)
        if df.empty:
            return []

        per_page = df.groupby(['query', 'page'], sort=False).agg(
            clicks=('clicks', 'sum'),
            impressions=('impressions', 'sum'),
            position=('position', 'mean')
        ).reset_index()

        clusters = []
        for query, pages in per_page.groupby('query', sort=False):
            total_impressions = float(pages['impressions'].sum())
            if len(pages) < min_pages or total_impressions < min_impressions:
                continue

            scored = self.score_pages(pages)
            cannibal_pages = tuple(
                CannibalPage(
                    page=p.page,
                    clicks=float(p.clicks),
                    impressions=float(p.impressions),
                    ctr=float(p.clicks / p.impressions) if p.impressions > 0 else 0.0,
                    position=float(p.position),
                    score=round(float(p.score), 4)
                )
                for p in scored.itertuples(index=False)
            )
            primary = cannibal_pages[0]

            clusters.append(CannibalCluster(
                query=query,
                pages=cannibal_pages,
                primary_candidate=primary.page,
                rationale=(
                    f"{len(cannibal_pages) - 1} page(s) competing. Primary has "
                    f"{primary.clicks:.0f} clicks, pos {primary.position:.1f}"
                ),
                total_impressions=total_impressions,
                page_count=len(cannibal_pages)
            ))

        clusters.sort(key=lambda c: (-c.total_impressions, c.query))

        self.log.info(
            f"Found {len(clusters)} cannibalization clusters "
            f"across {df['query'].nunique()} queries"
        )
        return clusters

    def clusters_to_frame(self, clusters: Iterable[CannibalCluster]) -> pd.DataFrame:
        """
        Flatten clusters to one row per competing page.

        Args:
            clusters: CannibalCluster list

        Returns:
            DataFrame with query, page metrics and an is_primary flag
        """
        records = []
        for cluster in clusters:
            for page in cluster.pages:
                records.append({
                    'query': cluster.query,
                    'page': page.page,
                    'clicks': page.clicks,
                    'impressions': page.impressions,
                    'ctr': page.ctr,
                    'position': page.position,
                    'score': page.score,
                    'is_primary': page.page == cluster.primary_candidate
                })

        return pd.DataFrame(records, columns=[
            'query', 'page', 'clicks', 'impressions', 'ctr',
            'position', 'score', 'is_primary'
        ])


def find_cannibal_clusters(
    rows: Iterable[Mapping[str, Any]],
    min_pages: Optional[int] = None,
    min_impressions: Optional[float] = None
) -> List[CannibalCluster]:
    """Find cannibalization clusters with the default detector."""
    return CannibalizationDetector().find_cannibal_clusters(
        rows, min_pages, min_impressions
    )
