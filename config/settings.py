"""
Engine settings and configuration.
Contains the CTR curve, scoring weights, thresholds and other tunable
parameters of the scoring model.
"""

import math
import os
from pathlib import Path
from typing import Dict, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Engine settings management with Pydantic validation"""

    # Application
    app_name: str = "SEO Metrics Engine"
    app_version: str = "1.0.0"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_to_file: bool = False

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    log_dir: Path = base_dir / ".logs"

    # CTR Benchmarks by Position (based on industry studies)
    expected_ctr_by_position: Dict[int, float] = {
        1: 0.28, 2: 0.15, 3: 0.10, 4: 0.08, 5: 0.07,
        6: 0.05, 7: 0.04, 8: 0.03, 9: 0.03, 10: 0.02,
        11: 0.01, 12: 0.009, 13: 0.008, 14: 0.007, 15: 0.006,
        16: 0.005, 17: 0.004, 18: 0.004, 19: 0.003, 20: 0.003
    }
    ctr_beyond_curve: float = 0.002

    # CTR adjustments (relative)
    rich_snippet_boost: float = 0.15
    sitelinks_boost: float = 0.08
    serp_feature_penalty: float = 0.05
    max_ctr: float = 0.35
    ctr_curve_display_positions: int = 10

    # Keyword Difficulty Weights
    difficulty_weights: Dict[str, float] = {
        "competition": 0.35,
        "authority": 0.30,
        "backlinks": 0.20,
        "content": 0.15
    }
    backlink_log_multiplier: float = 20.0
    content_length_divisor: float = 30.0

    # Difficulty tiers (lower bounds)
    difficulty_tier_medium: int = 30
    difficulty_tier_high: int = 60
    difficulty_tier_very_high: int = 80
    time_to_rank_horizon_months: int = 12

    # Search volume bands for recommendations
    low_search_volume: int = 100
    high_search_volume: int = 10000

    # Content requirements
    base_word_count: int = 2000
    words_per_difficulty_point: int = 20

    # Anomaly Detection
    anomaly_threshold: float = 0.2
    high_severity_threshold: float = 0.5
    ctr_epsilon: float = 1e-6

    # Content Gap Priority
    gap_type_scores: Dict[str, float] = {
        "opportunity": 30,
        "underperforming": 25,
        "missing": 20
    }
    gap_weights: Dict[str, float] = {
        "difficulty": 0.25,
        "search_volume": 0.20,
        "competitor_position": 0.15,
        "potential_clicks": 0.10
    }
    gap_volume_unit: float = 1000.0
    gap_clicks_divisor: float = 5.0
    competitor_position_horizon: int = 20
    underperforming_position_gap: int = 5
    unranked_position: int = 100
    quick_win_max_difficulty: int = 30
    quick_win_min_clicks: int = 50

    # Assumed competition when a gap has no keyword or SERP data
    default_competition: float = 0.5
    default_benchmark: Dict[str, float] = {
        "avg_domain_authority": 50,
        "avg_backlinks": 100,
        "avg_content_length": 2000,
        "top_ranking_pages": 10
    }

    # Cannibalization Settings
    cannibalization_min_pages: int = 2
    cannibalization_min_impressions: int = 50
    cannibalization_score_weights: Dict[str, float] = {
        "impressions": 0.5,
        "clicks": 0.7,
        "position": 0.6
    }

    @field_validator("difficulty_weights", "gap_weights")
    @classmethod
    def check_weights(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Weights must be non-negative and sum to at most 1"""
        if any(w < 0 for w in v.values()):
            raise ValueError("weights cannot be negative")
        if sum(v.values()) > 1.0 + 1e-9:
            raise ValueError("weights must sum to at most 1")
        return v

    @field_validator("expected_ctr_by_position")
    @classmethod
    def check_ctr_curve(cls, v: Dict[int, float]) -> Dict[int, float]:
        """CTR curve must not increase with position"""
        ctrs = [v[pos] for pos in sorted(v)]
        if any(later > earlier for earlier, later in zip(ctrs, ctrs[1:])):
            raise ValueError("CTR curve must be non-increasing in position")
        return v

    def get_expected_ctr(self, position: Optional[float]) -> float:
        """Get expected CTR for a given position"""
        if position is None or not math.isfinite(position):
            return self.ctr_beyond_curve
        pos_int = max(int(math.floor(position + 0.5)), 1)
        max_pos = max(self.expected_ctr_by_position)
        if pos_int > max_pos:
            return self.ctr_beyond_curve
        return self.expected_ctr_by_position.get(pos_int, self.ctr_beyond_curve)

    def classify_difficulty(self, difficulty: float) -> str:
        """Classify a difficulty score into a competition tier"""
        if difficulty >= self.difficulty_tier_very_high:
            return "very_high"
        elif difficulty >= self.difficulty_tier_high:
            return "high"
        elif difficulty >= self.difficulty_tier_medium:
            return "medium"
        else:
            return "low"

    class Config:
        case_sensitive = False
        env_prefix = "SEO_ENGINE_"


# Singleton instance
settings = Settings()
