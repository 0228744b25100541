"""
Keyword difficulty scoring model.
Estimates how hard a keyword is to rank for from its competition signal
and the benchmarks of the pages already ranking.
"""

import numpy as np
from typing import Dict, List, Optional

from config.settings import Settings, settings
from models.entities import (
    Benchmark,
    CompetitionLevel,
    DifficultyResult,
    KeywordDifficultyInput
)
from utils.helpers import clamp, round_half_up, safe_count, safe_float
from utils.logger import get_logger


class KeywordDifficultyScorer:
    """
    Calculates keyword difficulty as a weighted composite of
    competition, competitor authority, backlinks and content length.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        custom_weights: Dict[str, float] = None,
        log=None
    ):
        """
        Initialize scorer with configurable weights.

        Args:
            config: Settings holding the scoring constants
            custom_weights: Optional custom sub-score weights
            log: Logger sink
        """
        self.config = config or settings
        self.weights = custom_weights or self.config.difficulty_weights
        self.log = log or get_logger("keyword_difficulty")

    def calculate_competition_score(self, competition: float) -> float:
        """
        Provider competition fraction as a 0-100 score.

        Args:
            competition: Competition level (0-1)

        Returns:
            Competition score (0-100)
        """
        competition = clamp(safe_float(competition), 0.0, 1.0)
        return competition * 100

    def calculate_authority_score(self, avg_domain_authority: float) -> float:
        """
        Average domain authority of ranking pages.

        Args:
            avg_domain_authority: Average DA (0-100)

        Returns:
            Authority score (0-100)
        """
        return clamp(safe_float(avg_domain_authority), 0.0, 100.0)

    def calculate_backlink_score(self, avg_backlinks: float) -> float:
        """
        Backlink requirement score.

        Args:
            avg_backlinks: Average backlinks of ranking pages

        Returns:
            Backlink score (0-100)
        """
        backlinks = max(0.0, safe_float(avg_backlinks))

        # Log scale normalization (backlink counts are heavy-tailed)
        score = np.log10(backlinks + 1) * self.config.backlink_log_multiplier
        return clamp(float(score), 0.0, 100.0)

    def calculate_content_score(self, avg_content_length: float) -> float:
        """
        Content length requirement score.

        Args:
            avg_content_length: Average word count of ranking pages

        Returns:
            Content score (0-100)
        """
        length = max(0.0, safe_float(avg_content_length))
        divisor = self.config.content_length_divisor
        if divisor <= 0:
            return 0.0
        return clamp(length / divisor, 0.0, 100.0)

    def classify_competition(self, difficulty: float) -> CompetitionLevel:
        """Map a difficulty score onto its competition tier."""
        return CompetitionLevel(self.config.classify_difficulty(difficulty))

    def estimate_time_to_rank(self, difficulty: int) -> int:
        """
        Estimate months needed to rank.

        Args:
            difficulty: Difficulty score (0-100)

        Returns:
            Months, at least 1
        """
        horizon = self.config.time_to_rank_horizon_months
        return max(1, round_half_up(difficulty / 100 * horizon))

    def estimate_required_backlinks(
        self,
        avg_backlinks: float,
        difficulty: int
    ) -> int:
        """
        Estimate backlinks needed to compete.

        Args:
            avg_backlinks: Average backlinks of ranking pages
            difficulty: Difficulty score (0-100)

        Returns:
            Backlink count, never negative
        """
        backlinks = max(0.0, safe_float(avg_backlinks))
        return max(0, round_half_up(backlinks * (difficulty / 100)))

    def calculate_keyword_difficulty(
        self,
        keyword: KeywordDifficultyInput,
        benchmark: Benchmark
    ) -> DifficultyResult:
        """
        Calculate keyword difficulty and effort estimates.

        Args:
            keyword: Keyword demand/competition signals
            benchmark: Averages of the currently ranking pages

        Returns:
            DifficultyResult
        """
        competition_score = self.calculate_competition_score(
            keyword.competition
        )
        authority_score = self.calculate_authority_score(
            benchmark.avg_domain_authority
        )
        backlink_score = self.calculate_backlink_score(benchmark.avg_backlinks)
        content_score = self.calculate_content_score(
            benchmark.avg_content_length
        )

        # Weighted sum
        total = (
            competition_score * self.weights['competition'] +
            authority_score * self.weights['authority'] +
            backlink_score * self.weights['backlinks'] +
            content_score * self.weights['content']
        )
        difficulty = int(clamp(round_half_up(total), 0, 100))

        competition_level = self.classify_competition(difficulty)
        time_to_rank = self.estimate_time_to_rank(difficulty)
        required_backlinks = self.estimate_required_backlinks(
            benchmark.avg_backlinks, difficulty
        )

        recommendations = self.generate_recommendations(
            difficulty=difficulty,
            search_volume=safe_count(keyword.search_volume),
            avg_content_length=round_half_up(
                max(0.0, safe_float(benchmark.avg_content_length))
            ),
            required_backlinks=required_backlinks
        )

        self.log.debug(
            f"Difficulty for '{keyword.keyword}': {difficulty} "
            f"({competition_level.value})"
        )

        return DifficultyResult(
            difficulty=difficulty,
            competition_level=competition_level,
            estimated_time_to_rank=time_to_rank,
            required_backlinks=required_backlinks,
            breakdown={
                'competition_score': round(competition_score, 2),
                'authority_score': round(authority_score, 2),
                'backlink_score': round(backlink_score, 2),
                'content_score': round(content_score, 2)
            },
            recommendations=tuple(recommendations)
        )

    def generate_recommendations(
        self,
        difficulty: int,
        search_volume: int,
        avg_content_length: int,
        required_backlinks: int
    ) -> List[str]:
        """
        Generate keyword strategy recommendations.

        Args:
            difficulty: Difficulty score
            search_volume: Monthly search volume
            avg_content_length: Average competitor word count
            required_backlinks: Estimated backlinks needed

        Returns:
            List of recommendations
        """
        recommendations = []
        level = self.classify_competition(difficulty)

        if level == CompetitionLevel.VERY_HIGH:
            recommendations.extend([
                'Very competitive keyword - consider long-tail variations',
                f'Build {required_backlinks}+ high-quality backlinks before targeting',
                'Establish domain authority in related niches first'
            ])
        elif level == CompetitionLevel.HIGH:
            recommendations.extend([
                'Competitive keyword - create exceptional content',
                f'Target content length: {round_half_up(avg_content_length * 1.2)}+ words',
                f'Acquire {required_backlinks}+ relevant backlinks'
            ])
        elif level == CompetitionLevel.MEDIUM:
            recommendations.extend([
                'Moderate competition - good opportunity with quality content',
                f'Create comprehensive content ({avg_content_length}+ words)',
                'Focus on on-page optimization and user experience'
            ])
        else:
            recommendations.extend([
                'Low competition - quick-win opportunity',
                'Focus on high-quality content and basic on-page SEO',
                'Can rank with minimal backlink building'
            ])

        if search_volume < self.config.low_search_volume:
            recommendations.append(
                'Low search volume - consider combining with related keywords'
            )
        elif search_volume > self.config.high_search_volume:
            recommendations.append(
                'High search volume - significant traffic potential'
            )

        return recommendations


def calculate_keyword_difficulty(
    keyword: KeywordDifficultyInput,
    benchmark: Benchmark
) -> DifficultyResult:
    """Score a keyword with the default scorer."""
    return KeywordDifficultyScorer().calculate_keyword_difficulty(
        keyword, benchmark
    )
