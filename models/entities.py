"""
Value objects passed into and returned by the scoring engine.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class CompetitionLevel(Enum):
    """Qualitative keyword difficulty tiers."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class AlertType(Enum):
    """Metric regressions reported by the anomaly detector."""
    CLICKS_DROP = "CLICKS_DROP"
    CTR_DROP = "CTR_DROP"
    POSITION_DROP = "POSITION_DROP"


class AlertSeverity(Enum):
    """Alert severity levels."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


class GapType(Enum):
    """Content gap categories."""
    MISSING = "missing"
    UNDERPERFORMING = "underperforming"
    OPPORTUNITY = "opportunity"


ENTITY_FIELDS = ('entity', 'query', 'page', 'keyword')


@dataclass(frozen=True)
class PerformanceRow:
    """One search performance observation for a query or page."""
    entity: str
    clicks: float
    impressions: float
    ctr: float = 0.0
    position: float = 1.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PerformanceRow':
        """
        Build a row from a mapping.

        The entity may be given as ``entity`` or under a Search Console
        dimension name (``query``, ``page``, ``keyword``). Values are taken
        as-is; validation happens in the normalizer.
        """
        entity = None
        for name in ENTITY_FIELDS:
            if data.get(name) is not None:
                entity = data[name]
                break
        return cls(
            entity=entity,
            clicks=data.get('clicks'),
            impressions=data.get('impressions'),
            ctr=data.get('ctr', 0.0),
            position=data.get('position')
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AggregateMetric:
    """Per-entity totals over a reporting period."""
    entity: str
    total_clicks: float
    total_impressions: float
    avg_ctr: float
    avg_position: float
    row_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class KeywordDifficultyInput:
    """Demand and competition signals for a keyword."""
    keyword: str
    search_volume: int = 0
    cpc: float = 0.0
    competition: float = 0.0


@dataclass(frozen=True)
class Benchmark:
    """Averages observed across the pages ranking for a keyword."""
    avg_domain_authority: float = 0.0
    avg_backlinks: int = 0
    avg_content_length: int = 0
    top_ranking_pages: int = 0


@dataclass(frozen=True)
class DifficultyResult:
    """Keyword difficulty score and effort estimates."""
    difficulty: int
    competition_level: CompetitionLevel
    estimated_time_to_rank: int
    required_backlinks: int
    breakdown: Dict[str, float] = field(default_factory=dict)
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'difficulty': self.difficulty,
            'competition_level': self.competition_level.value,
            'estimated_time_to_rank': self.estimated_time_to_rank,
            'required_backlinks': self.required_backlinks,
            'breakdown': dict(self.breakdown),
            'recommendations': list(self.recommendations)
        }


@dataclass(frozen=True)
class CtrInput:
    """SERP context for a click prediction."""
    current_position: float
    search_volume: int = 0
    has_rich_snippet: bool = False
    has_sitelinks: bool = False
    serp_features: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CtrResult:
    """Predicted clicks and the CTR behind them."""
    potential_clicks: int
    expected_ctr: float = 0.0
    baseline_ctr: float = 0.0
    ctr_by_position: Tuple[Tuple[int, float], ...] = ()
    improvement_opportunity: int = 0
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'potential_clicks': self.potential_clicks,
            'expected_ctr': self.expected_ctr,
            'baseline_ctr': self.baseline_ctr,
            'ctr_by_position': [
                {'position': pos, 'ctr': ctr}
                for pos, ctr in self.ctr_by_position
            ],
            'improvement_opportunity': self.improvement_opportunity,
            'recommendations': list(self.recommendations)
        }


@dataclass(frozen=True)
class ContentRequirements:
    """Production requirements for a piece of content."""
    required_word_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Alert:
    """A period-over-period regression of one metric."""
    type: AlertType
    severity: AlertSeverity
    change: float
    item: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'severity': self.severity.value,
            'change': self.change,
            'item': self.item
        }


@dataclass(frozen=True)
class ContentGap:
    """A keyword a competitor ranks for where the site is absent or behind."""
    keyword: str
    competitor_ranking: int
    your_ranking: Optional[float]
    search_volume: int
    difficulty: int
    difficulty_level: CompetitionLevel
    estimated_time_to_rank: int
    potential_clicks: int
    required_backlinks: int
    required_word_count: int
    gap_type: GapType
    priority_score: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['difficulty_level'] = self.difficulty_level.value
        data['gap_type'] = self.gap_type.value
        return data


@dataclass(frozen=True)
class CannibalPage:
    """One page competing for a query."""
    page: str
    clicks: float
    impressions: float
    ctr: float
    position: float
    score: float = 0.0


@dataclass(frozen=True)
class CannibalCluster:
    """A query for which several pages of the same site rank."""
    query: str
    pages: Tuple[CannibalPage, ...]
    primary_candidate: str
    rationale: str
    total_impressions: float
    page_count: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['pages'] = [asdict(p) for p in self.pages]
        return data
