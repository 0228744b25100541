"""
Content production requirements for a content gap.
"""

from typing import Optional

from config.settings import Settings, settings
from models.entities import ContentRequirements
from utils.helpers import clamp, round_half_up, safe_float


class ContentQualityAnalyzer:
    """Scales content requirements with keyword difficulty."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    def required_word_count(self, difficulty: float) -> int:
        """
        Word count needed to compete at a difficulty.

        Args:
            difficulty: Difficulty score (0-100)

        Returns:
            Required word count
        """
        difficulty = clamp(safe_float(difficulty), 0.0, 100.0)
        return round_half_up(
            self.config.base_word_count +
            difficulty * self.config.words_per_difficulty_point
        )

    def analyze_content_quality(self, difficulty: float) -> ContentRequirements:
        return ContentRequirements(
            required_word_count=self.required_word_count(difficulty)
        )


def analyze_content_quality(difficulty: float) -> ContentRequirements:
    """Content requirements with the default analyzer."""
    return ContentQualityAnalyzer().analyze_content_quality(difficulty)
