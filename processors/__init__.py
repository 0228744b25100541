"""
Data processors for normalization, scoring, and analysis.
"""

from processors.metrics_normalizer import (
    MetricsNormalizer,
    group_by_entity,
    merge_aggregates
)
from processors.keyword_difficulty import (
    KeywordDifficultyScorer,
    calculate_keyword_difficulty
)
from processors.ctr_predictor import CtrPredictor, analyze_ctr
from processors.content_quality import (
    ContentQualityAnalyzer,
    analyze_content_quality
)
from processors.anomaly_detector import AnomalyDetector, detect_anomalies
from processors.gap_priority_scorer import (
    ContentGapAnalyzer,
    GapPriorityScorer,
    calculate_gap_priority_score,
    classify_gap_type
)
from processors.cannibalization import (
    CannibalizationDetector,
    find_cannibal_clusters
)

__all__ = [
    'MetricsNormalizer',
    'KeywordDifficultyScorer',
    'CtrPredictor',
    'ContentQualityAnalyzer',
    'AnomalyDetector',
    'GapPriorityScorer',
    'ContentGapAnalyzer',
    'CannibalizationDetector',
    'group_by_entity',
    'merge_aggregates',
    'calculate_keyword_difficulty',
    'analyze_ctr',
    'analyze_content_quality',
    'detect_anomalies',
    'calculate_gap_priority_score',
    'classify_gap_type',
    'find_cannibal_clusters'
]
