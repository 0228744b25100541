"""
Engine value objects and boundary schemas.
"""

from models.entities import (
    AggregateMetric,
    Alert,
    AlertSeverity,
    AlertType,
    Benchmark,
    CannibalCluster,
    CannibalPage,
    CompetitionLevel,
    ContentGap,
    ContentRequirements,
    CtrInput,
    CtrResult,
    DifficultyResult,
    GapType,
    KeywordDifficultyInput,
    PerformanceRow
)
from models.schemas import (
    parse_benchmark,
    parse_keyword_data,
    parse_performance_rows
)

__all__ = [
    'AggregateMetric',
    'Alert',
    'AlertSeverity',
    'AlertType',
    'Benchmark',
    'CannibalCluster',
    'CannibalPage',
    'CompetitionLevel',
    'ContentGap',
    'ContentRequirements',
    'CtrInput',
    'CtrResult',
    'DifficultyResult',
    'GapType',
    'KeywordDifficultyInput',
    'PerformanceRow',
    'parse_benchmark',
    'parse_keyword_data',
    'parse_performance_rows'
]
