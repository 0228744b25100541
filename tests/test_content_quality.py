"""
Test Suite for Content Requirements
"""

import pytest

from config.settings import Settings
from processors.content_quality import ContentQualityAnalyzer, analyze_content_quality


class TestContentRequirements:
    """Test required word count."""

    @pytest.mark.parametrize("difficulty,words", [
        (0, 2000),
        (30, 2600),
        (69, 3380),
        (100, 4000),
        (45.5, 2910),
    ])
    def test_word_count_scales_with_difficulty(self, difficulty, words):
        """Word count is 2000 plus 20 per difficulty point."""
        assert analyze_content_quality(difficulty).required_word_count == words

    @pytest.mark.parametrize("difficulty,words", [
        (-20, 2000),
        (250, 4000),
        (None, 2000),
        (float("nan"), 2000),
    ])
    def test_difficulty_is_clamped(self, difficulty, words):
        """Out-of-range or missing difficulty is clamped first."""
        assert analyze_content_quality(difficulty).required_word_count == words

    def test_configurable_slope(self):
        """Base and slope come from settings."""
        analyzer = ContentQualityAnalyzer(
            Settings(base_word_count=1000, words_per_difficulty_point=10)
        )

        assert analyzer.required_word_count(50) == 1500

    def test_to_dict(self):
        """Serialized requirements expose the word count."""
        assert analyze_content_quality(0).to_dict() == {"required_word_count": 2000}
