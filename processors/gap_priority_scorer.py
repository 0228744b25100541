"""
Content gap prioritization.
Combines difficulty, click potential and competitor standing into a
single ranked opportunity score.
"""

import pandas as pd
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from config.settings import Settings, settings
from models.entities import (
    AggregateMetric,
    Benchmark,
    ContentGap,
    CtrInput,
    GapType,
    KeywordDifficultyInput
)
from processors.content_quality import ContentQualityAnalyzer
from processors.ctr_predictor import CtrPredictor
from processors.keyword_difficulty import KeywordDifficultyScorer
from utils.helpers import (
    clamp,
    normalize_keyword,
    round_half_up,
    safe_float,
    safe_int
)
from utils.logger import get_logger

GAP_COLUMNS = [
    'keyword', 'competitor_ranking', 'your_ranking', 'search_volume',
    'difficulty', 'difficulty_level', 'estimated_time_to_rank',
    'potential_clicks', 'required_backlinks', 'required_word_count',
    'gap_type', 'priority_score'
]


def _gap_type_value(gap_type: Union[GapType, str, None]) -> str:
    if isinstance(gap_type, GapType):
        return gap_type.value
    if isinstance(gap_type, str):
        return gap_type.strip().lower()
    return ''


class GapPriorityScorer:
    """
    Scores content gaps for ranking.
    Close competitive races outrank blank slates.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        custom_weights: Dict[str, float] = None
    ):
        """
        Initialize scorer with configurable weights.

        Args:
            config: Settings holding gap base scores and weights
            custom_weights: Optional custom term weights
        """
        self.config = config or settings
        self.weights = custom_weights or self.config.gap_weights

    def calculate_gap_type_score(self, gap_type: Union[GapType, str]) -> float:
        """Base score for the gap type; unknown types get the lowest."""
        scores = self.config.gap_type_scores
        return scores.get(_gap_type_value(gap_type), min(scores.values()))

    def calculate_difficulty_score(self, difficulty: float) -> float:
        """Easier keywords score higher (0-100)."""
        return 100 - clamp(safe_float(difficulty), 0.0, 100.0)

    def calculate_volume_score(self, search_volume: float) -> float:
        """Search volume score, capped at 100."""
        volume = max(0.0, safe_float(search_volume))
        return min(100.0, volume / self.config.gap_volume_unit * 10)

    def calculate_competitor_score(self, competitor_position: float) -> float:
        """
        Competitor standing score.

        Only a competitor inside the horizon (top 20) counts.

        Args:
            competitor_position: Competitor's ranking

        Returns:
            Competitor score (0-100)
        """
        position = safe_float(competitor_position, None)
        horizon = self.config.competitor_position_horizon
        if position is None or position < 1 or position > horizon:
            return 0.0
        return (horizon - position) / horizon * 100

    def calculate_clicks_score(self, potential_clicks: float) -> float:
        """Potential clicks score, capped at 100."""
        clicks = max(0.0, safe_float(potential_clicks))
        return min(100.0, clicks / self.config.gap_clicks_divisor)

    def calculate_gap_priority_score(
        self,
        gap_type: Union[GapType, str],
        difficulty: float,
        search_volume: float,
        competitor_position: float,
        potential_clicks: float,
        your_position: Optional[float] = None
    ) -> int:
        """
        Calculate composite gap priority.

        Args:
            gap_type: missing, underperforming or opportunity
            difficulty: Keyword difficulty (0-100)
            search_volume: Monthly search volume
            competitor_position: Competitor's ranking
            potential_clicks: Predicted clicks at the competitor's position
            your_position: Site's ranking; informational, already reflected
                in the gap type

        Returns:
            Priority score (0-100)
        """
        total = (
            self.calculate_gap_type_score(gap_type) +
            self.calculate_difficulty_score(difficulty) *
            self.weights['difficulty'] +
            self.calculate_volume_score(search_volume) *
            self.weights['search_volume'] +
            self.calculate_competitor_score(competitor_position) *
            self.weights['competitor_position'] +
            self.calculate_clicks_score(potential_clicks) *
            self.weights['potential_clicks']
        )
        return int(clamp(round_half_up(total), 0, 100))


class ContentGapAnalyzer:
    """
    Builds ranked content gaps from the site's query aggregates and
    competitor rankings.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        difficulty_scorer: Optional[KeywordDifficultyScorer] = None,
        ctr_predictor: Optional[CtrPredictor] = None,
        content_analyzer: Optional[ContentQualityAnalyzer] = None,
        priority_scorer: Optional[GapPriorityScorer] = None,
        log=None
    ):
        self.config = config or settings
        self.log = log or get_logger("content_gaps")
        self.difficulty_scorer = difficulty_scorer or KeywordDifficultyScorer(
            self.config, log=self.log
        )
        self.ctr_predictor = ctr_predictor or CtrPredictor(
            self.config, log=self.log
        )
        self.content_analyzer = content_analyzer or ContentQualityAnalyzer(
            self.config
        )
        self.priority_scorer = priority_scorer or GapPriorityScorer(self.config)

    def default_benchmark(self) -> Benchmark:
        """Benchmark assumed when no SERP crawl is available."""
        values = self.config.default_benchmark
        return Benchmark(
            avg_domain_authority=values['avg_domain_authority'],
            avg_backlinks=int(values['avg_backlinks']),
            avg_content_length=int(values['avg_content_length']),
            top_ranking_pages=int(values['top_ranking_pages'])
        )

    def classify_gap_type(
        self,
        your_position: Optional[float],
        competitor_position: float,
        your_clicks: Optional[float] = None
    ) -> GapType:
        """
        Classify a gap.

        Args:
            your_position: Site's ranking, None when not ranking
            competitor_position: Competitor's ranking
            your_clicks: Site's clicks for the keyword, if known

        Returns:
            GapType
        """
        position = safe_float(your_position, None)
        if position is None or position < 1 or position > self.config.unranked_position:
            return GapType.MISSING

        if your_clicks is not None and safe_float(your_clicks) <= 0:
            return GapType.MISSING

        competitor = safe_float(competitor_position, None)
        if competitor is None:
            return GapType.OPPORTUNITY

        if position > competitor + self.config.underperforming_position_gap:
            return GapType.UNDERPERFORMING

        return GapType.OPPORTUNITY

    def analyze_gap(
        self,
        keyword: str,
        competitor_position: float,
        your_position: Optional[float] = None,
        search_volume: int = 0,
        your_clicks: Optional[float] = None,
        keyword_input: Optional[KeywordDifficultyInput] = None,
        benchmark: Optional[Benchmark] = None
    ) -> ContentGap:
        """
        Score one content gap.

        Args:
            keyword: Keyword or query
            competitor_position: Competitor's ranking
            your_position: Site's ranking, None when not ranking
            search_volume: Volume used when no keyword data is given
            your_clicks: Site's clicks for the keyword
            keyword_input: Keyword demand/competition signals
            benchmark: Averages of the ranking pages

        Returns:
            ContentGap
        """
        if keyword_input is None:
            keyword_input = KeywordDifficultyInput(
                keyword=keyword,
                search_volume=max(0, safe_int(search_volume)),
                cpc=0.0,
                competition=self.config.default_competition
            )
        benchmark = benchmark or self.default_benchmark()
        volume = max(0, safe_int(keyword_input.search_volume))

        gap_type = self.classify_gap_type(
            your_position, competitor_position, your_clicks
        )

        difficulty = self.difficulty_scorer.calculate_keyword_difficulty(
            keyword_input, benchmark
        )
        ctr = self.ctr_predictor.analyze_ctr(CtrInput(
            current_position=competitor_position,
            search_volume=volume
        ))
        content = self.content_analyzer.analyze_content_quality(
            difficulty.difficulty
        )

        priority = self.priority_scorer.calculate_gap_priority_score(
            gap_type=gap_type,
            difficulty=difficulty.difficulty,
            search_volume=volume,
            competitor_position=competitor_position,
            potential_clicks=ctr.potential_clicks,
            your_position=your_position
        )

        your_ranking = safe_float(your_position, None)
        if your_ranking is not None and your_ranking > self.config.unranked_position:
            your_ranking = None

        return ContentGap(
            keyword=keyword,
            competitor_ranking=safe_int(competitor_position),
            your_ranking=your_ranking,
            search_volume=volume,
            difficulty=difficulty.difficulty,
            difficulty_level=difficulty.competition_level,
            estimated_time_to_rank=difficulty.estimated_time_to_rank,
            potential_clicks=ctr.potential_clicks,
            required_backlinks=difficulty.required_backlinks,
            required_word_count=content.required_word_count,
            gap_type=gap_type,
            priority_score=priority
        )

    def analyze_gaps(
        self,
        aggregates: Iterable[AggregateMetric],
        competitor_rankings: Mapping[str, float],
        benchmark: Optional[Benchmark] = None,
        keyword_data: Optional[Mapping[str, KeywordDifficultyInput]] = None,
        benchmarks: Optional[Mapping[str, Benchmark]] = None
    ) -> List[ContentGap]:
        """
        Build gaps for every query a competitor ranks for.

        Args:
            aggregates: Site's per-query aggregates
            competitor_rankings: Competitor position per keyword
            benchmark: SERP benchmark shared by all keywords
            keyword_data: Keyword signals per keyword
            benchmarks: SERP benchmarks per keyword, overriding benchmark

        Returns:
            Gaps sorted by priority (desc)
        """
        rankings = {
            normalize_keyword(k): v for k, v in competitor_rankings.items()
        }
        keyword_data = {
            normalize_keyword(k): v for k, v in (keyword_data or {}).items()
        }
        benchmarks = {
            normalize_keyword(k): v for k, v in (benchmarks or {}).items()
        }

        gaps = []
        skipped = 0
        for agg in aggregates:
            key = normalize_keyword(agg.entity)
            if key not in rankings:
                skipped += 1
                continue

            gaps.append(self.analyze_gap(
                keyword=agg.entity,
                competitor_position=rankings[key],
                your_position=agg.avg_position,
                your_clicks=agg.total_clicks,
                search_volume=safe_int(agg.total_impressions),
                keyword_input=keyword_data.get(key),
                benchmark=benchmarks.get(key, benchmark)
            ))

        gaps.sort(key=lambda g: (-g.priority_score, g.keyword))

        self.log.info(
            f"Analyzed {len(gaps)} content gaps "
            f"({skipped} queries without competitor ranking)"
        )
        return gaps

    def gaps_to_frame(self, gaps: Iterable[ContentGap]) -> pd.DataFrame:
        """
        Convert gaps to a DataFrame.

        Args:
            gaps: ContentGap list

        Returns:
            DataFrame with one row per gap
        """
        return pd.DataFrame([g.to_dict() for g in gaps], columns=GAP_COLUMNS)

    def summarize_gaps(self, gaps: Iterable[ContentGap]) -> Dict[str, Any]:
        """
        Summarize gap findings.

        Args:
            gaps: ContentGap list

        Returns:
            Counts per gap type, total potential clicks and quick wins
        """
        gaps = list(gaps)
        summary = {t.value: 0 for t in GapType}
        for gap in gaps:
            summary[gap.gap_type.value] += 1

        summary['total_potential_clicks'] = sum(g.potential_clicks for g in gaps)
        summary['quick_wins'] = sum(
            1 for g in gaps
            if g.difficulty < self.config.quick_win_max_difficulty
            and g.potential_clicks > self.config.quick_win_min_clicks
        )
        return summary


def calculate_gap_priority_score(
    gap_type: Union[GapType, str],
    difficulty: float,
    search_volume: float,
    competitor_position: float,
    potential_clicks: float,
    your_position: Optional[float] = None
) -> int:
    """Score a gap with the default scorer."""
    return GapPriorityScorer().calculate_gap_priority_score(
        gap_type=gap_type,
        difficulty=difficulty,
        search_volume=search_volume,
        competitor_position=competitor_position,
        potential_clicks=potential_clicks,
        your_position=your_position
    )


def classify_gap_type(
    your_position: Optional[float],
    competitor_position: float,
    your_clicks: Optional[float] = None
) -> GapType:
    """Classify a gap with the default analyzer."""
    return ContentGapAnalyzer().classify_gap_type(
        your_position, competitor_position, your_clicks
    )
