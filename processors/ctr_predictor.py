"""
Click-through rate prediction.
Estimates achievable clicks at a SERP position, adjusted for the
listing's enhancements and the SERP features competing with it.
"""

from typing import Iterable, List, Optional, Tuple

from config.settings import Settings, settings
from models.entities import CtrInput, CtrResult
from utils.helpers import clamp, round_half_up, safe_count, safe_float
from utils.logger import get_logger


class CtrPredictor:
    """
    Predicts CTR and potential clicks from the position curve.
    """

    def __init__(self, config: Optional[Settings] = None, log=None):
        """
        Initialize predictor.

        Args:
            config: Settings holding the CTR curve and adjustments
            log: Logger sink
        """
        self.config = config or settings
        self.log = log or get_logger("ctr_predictor")

    def get_baseline_ctr(self, position: float) -> float:
        """
        Get benchmark CTR for a position.

        Args:
            position: Average position

        Returns:
            Baseline CTR value
        """
        return self.config.get_expected_ctr(safe_float(position, None))

    @staticmethod
    def count_serp_features(serp_features: Optional[Iterable[str]]) -> int:
        """Count distinct, non-empty SERP features."""
        if not serp_features:
            return 0
        if isinstance(serp_features, str):
            serp_features = [serp_features]
        return len({
            feature.strip().lower()
            for feature in serp_features
            if isinstance(feature, str) and feature.strip()
        })

    def calculate_multiplier(
        self,
        has_rich_snippet: bool = False,
        has_sitelinks: bool = False,
        serp_features: Optional[Iterable[str]] = None
    ) -> float:
        """
        Calculate the relative CTR adjustment.

        Args:
            has_rich_snippet: Listing shows a rich snippet
            has_sitelinks: Listing shows sitelinks
            serp_features: SERP features present on the page

        Returns:
            Multiplier applied to the baseline CTR
        """
        multiplier = 1.0

        if has_rich_snippet:
            multiplier *= 1 + self.config.rich_snippet_boost
        if has_sitelinks:
            multiplier *= 1 + self.config.sitelinks_boost

        # Every feature beyond the first takes organic real estate
        competing = max(0, self.count_serp_features(serp_features) - 1)
        multiplier *= (1 - self.config.serp_feature_penalty) ** competing

        return multiplier

    def adjusted_ctr(self, baseline: float, multiplier: float) -> float:
        """Apply the multiplier and clamp to the allowed CTR range."""
        return clamp(baseline * multiplier, 0.0, self.config.max_ctr)

    def build_ctr_curve(self, multiplier: float) -> Tuple[Tuple[int, float], ...]:
        """
        Adjusted CTR for the first positions of the curve.

        Args:
            multiplier: Relative CTR adjustment

        Returns:
            Tuple of (position, ctr) pairs
        """
        positions = sorted(self.config.expected_ctr_by_position)
        positions = positions[:self.config.ctr_curve_display_positions]
        return tuple(
            (pos, round(self.adjusted_ctr(
                self.config.expected_ctr_by_position[pos], multiplier
            ), 4))
            for pos in positions
        )

    def analyze_ctr(self, ctr_input: CtrInput) -> CtrResult:
        """
        Predict CTR and potential clicks.

        Args:
            ctr_input: Position, volume and SERP context

        Returns:
            CtrResult
        """
        search_volume = safe_count(ctr_input.search_volume)
        baseline = self.get_baseline_ctr(ctr_input.current_position)
        multiplier = self.calculate_multiplier(
            ctr_input.has_rich_snippet,
            ctr_input.has_sitelinks,
            ctr_input.serp_features
        )
        expected_ctr = self.adjusted_ctr(baseline, multiplier)
        potential_clicks = round_half_up(search_volume * expected_ctr)

        # Position 1 with every listing enhancement and a clean SERP
        best_ctr = self.adjusted_ctr(
            self.get_baseline_ctr(1),
            self.calculate_multiplier(True, True, None)
        )
        improvement = max(0, round_half_up((best_ctr - expected_ctr) * 100))

        recommendations = self.generate_recommendations(ctr_input)

        return CtrResult(
            potential_clicks=potential_clicks,
            expected_ctr=round(expected_ctr, 4),
            baseline_ctr=baseline,
            ctr_by_position=self.build_ctr_curve(multiplier),
            improvement_opportunity=improvement,
            recommendations=tuple(recommendations)
        )

    def generate_recommendations(self, ctr_input: CtrInput) -> List[str]:
        """
        Generate CTR optimization recommendations.

        Args:
            ctr_input: Position and SERP context

        Returns:
            List of recommendations
        """
        recommendations = []
        position = safe_float(ctr_input.current_position, None)

        if position is None:
            recommendations.append('Not ranking yet - target the top 10 first')
        elif position > 5:
            recommendations.append(
                f'Improve ranking from #{round_half_up(position)} to top 5 '
                'for a 2-5x CTR increase'
            )
        elif position > 3:
            recommendations.append(
                'Aim for the top 3 positions to double the current CTR'
            )
        elif position >= 1.5:
            recommendations.append(
                f'Target #1 for maximum CTR '
                f'({self.get_baseline_ctr(1) * 100:.0f}% average)'
            )

        if not ctr_input.has_rich_snippet:
            recommendations.append(
                'Implement schema markup for rich snippets '
                f'(+{self.config.rich_snippet_boost * 100:.0f}% CTR)'
            )

        if not ctr_input.has_sitelinks:
            recommendations.append(
                'Optimize site structure to earn sitelinks '
                f'(+{self.config.sitelinks_boost * 100:.0f}% CTR)'
            )

        serp_features = ctr_input.serp_features or ()
        if isinstance(serp_features, str):
            serp_features = [serp_features]
        features = {
            f.strip().lower() for f in serp_features if isinstance(f, str)
        }
        if 'featured_snippet' in features:
            recommendations.append(
                'Optimize content to capture the featured snippet position'
            )
        if 'people_also_ask' in features:
            recommendations.append('Structure content to answer PAA questions')

        return recommendations


def analyze_ctr(ctr_input: CtrInput) -> CtrResult:
    """Predict clicks with the default predictor."""
    return CtrPredictor().analyze_ctr(ctr_input)
