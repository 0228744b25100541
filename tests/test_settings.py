"""
Test Suite for Settings and Logging
"""

import pytest

from config.settings import Settings
from processors.anomaly_detector import AnomalyDetector
from utils.logger import get_logger, logger


class TestSettings:
    """Test configuration defaults, validation and overrides."""

    def test_ctr_lookup(self, config):
        """Curve lookup rounds the position and falls back past 20."""
        assert config.get_expected_ctr(1) == 0.28
        assert config.get_expected_ctr(3.6) == 0.08
        assert config.get_expected_ctr(25) == config.ctr_beyond_curve
        assert config.get_expected_ctr(None) == config.ctr_beyond_curve

    def test_curve_is_non_increasing(self, config):
        """Better positions never have a lower expected CTR."""
        ctrs = [config.get_expected_ctr(p) for p in range(1, 30)]

        assert ctrs == sorted(ctrs, reverse=True)

    @pytest.mark.parametrize("difficulty,tier", [
        (10, "low"), (30, "medium"), (60, "high"), (80, "very_high")
    ])
    def test_classify_difficulty(self, config, difficulty, tier):
        """Tier lower bounds are inclusive."""
        assert config.classify_difficulty(difficulty) == tier

    def test_env_override(self, monkeypatch):
        """Prefixed environment variables override defaults."""
        monkeypatch.setenv("SEO_ENGINE_ANOMALY_THRESHOLD", "0.3")
        monkeypatch.setenv(
            "SEO_ENGINE_GAP_TYPE_SCORES",
            '{"opportunity": 40, "underperforming": 25, "missing": 20}'
        )
        config = Settings()

        assert config.anomaly_threshold == 0.3
        assert config.gap_type_scores["opportunity"] == 40

    def test_injected_threshold_is_used(self, monkeypatch, current_period,
                                        previous_period):
        """A tuned settings object changes detection without code changes."""
        monkeypatch.setenv("SEO_ENGINE_ANOMALY_THRESHOLD", "0.7")
        detector = AnomalyDetector(Settings())

        assert detector.detect_anomalies(current_period, previous_period) == []

    def test_weights_must_not_exceed_one(self):
        """Weights summing past 1 are rejected."""
        with pytest.raises(ValueError):
            Settings(difficulty_weights={
                "competition": 0.9, "authority": 0.5, "backlinks": 0.2, "content": 0.1
            })

    def test_negative_weights_rejected(self):
        """Negative weights are rejected."""
        with pytest.raises(ValueError):
            Settings(gap_weights={
                "difficulty": -0.1, "search_volume": 0.2,
                "competitor_position": 0.15, "potential_clicks": 0.1
            })

    def test_increasing_curve_rejected(self):
        """A CTR curve that rises with position is rejected."""
        with pytest.raises(ValueError):
            Settings(expected_ctr_by_position={1: 0.2, 2: 0.3})


class TestLogger:
    """Test component-bound logging."""

    def test_component_is_bound(self):
        """Records carry the component name they were logged under."""
        messages = []
        handler_id = logger.add(
            messages.append, format="{extra[component]}|{message}", level="INFO"
        )
        try:
            get_logger("ctr_predictor").info("predicted")
            logger.info("plain")
        finally:
            logger.remove(handler_id)

        assert messages[0].strip() == "ctr_predictor|predicted"
        assert messages[1].strip() == "engine|plain"
