"""
Test Suite for Content Gap Prioritization

Tests gap scoring and the gap analyzer:
- Composite priority score and its bounds
- Gap type classification
- Gap construction from keyword, CTR and content models
- Ranking of many gaps
"""

import pytest

from models.entities import Benchmark, CompetitionLevel, GapType, KeywordDifficultyInput
from processors.gap_priority_scorer import (
    GAP_COLUMNS,
    ContentGapAnalyzer,
    GapPriorityScorer,
    calculate_gap_priority_score,
    classify_gap_type
)


@pytest.fixture
def site_aggregates(aggregate_factory):
    """Site's query aggregates for a CRM vendor."""
    return [
        aggregate_factory("crm software", 40, 2000, 14),
        aggregate_factory("crm pricing", 0, 300, 45),
        aggregate_factory("crm demo", 30, 800, 4),
        aggregate_factory("unrelated", 5, 100, 2),
    ]


@pytest.fixture
def competitor_rankings():
    """Competitor positions keyed with inconsistent casing."""
    return {"CRM Software": 2, "crm  pricing": 4, "crm demo ": 3}


class TestPriorityScore:
    """Test the composite priority score."""

    def test_reference_score(self):
        """All five terms add up as documented."""
        score = calculate_gap_priority_score(
            gap_type="opportunity",
            difficulty=40,
            search_volume=5000,
            competitor_position=3,
            potential_clicks=500
        )

        assert score == 78

    def test_best_case_stays_in_range(self):
        """Even the best inputs never exceed 100."""
        score = calculate_gap_priority_score(
            GapType.OPPORTUNITY, 0, 10 ** 7, 1, 10 ** 6
        )

        assert score == 99

    def test_worst_case(self):
        """A hard missing keyword with no volume keeps only its base."""
        score = calculate_gap_priority_score(GapType.MISSING, 100, 0, 50, 0)

        assert score == 20

    @pytest.mark.parametrize("position", [0, -3, 21, 80, None, float("nan")])
    def test_competitor_outside_top_twenty(self, position):
        """Competitors outside positions 1-20 add nothing."""
        assert GapPriorityScorer().calculate_competitor_score(position) == 0

    def test_gap_type_ordering(self):
        """Opportunity outranks underperforming, which outranks missing."""
        scores = [
            calculate_gap_priority_score(gap_type, 50, 1000, 5, 100)
            for gap_type in (GapType.OPPORTUNITY, GapType.UNDERPERFORMING, GapType.MISSING)
        ]

        assert scores == sorted(scores, reverse=True)
        assert len(set(scores)) == 3

    def test_unknown_gap_type_gets_lowest_base(self):
        """Unrecognized gap types score like a missing keyword."""
        assert calculate_gap_priority_score("weird", 50, 1000, 5, 100) == \
            calculate_gap_priority_score("missing", 50, 1000, 5, 100)

    @pytest.mark.parametrize("difficulty,volume,position,clicks", [
        (-50, -1000, -2, -10),
        (500, 10 ** 9, 1, 10 ** 9),
        (float("nan"), float("inf"), float("nan"), float("nan")),
    ])
    def test_bad_inputs_stay_in_range(self, difficulty, volume, position, clicks):
        """Garbage inputs still produce a score in [0, 100]."""
        score = calculate_gap_priority_score(
            "opportunity", difficulty, volume, position, clicks
        )

        assert 0 <= score <= 100

    def test_custom_weights(self):
        """Only the base remains when every term weight is zero."""
        scorer = GapPriorityScorer(custom_weights={
            "difficulty": 0, "search_volume": 0,
            "competitor_position": 0, "potential_clicks": 0
        })

        assert scorer.calculate_gap_priority_score("underperforming", 0, 10 ** 6, 1, 10 ** 6) == 25


class TestGapType:
    """Test gap classification."""

    @pytest.mark.parametrize("your_position,competitor,clicks,expected", [
        (None, 3, 10, GapType.MISSING),
        (150, 3, 10, GapType.MISSING),
        (12, 3, 0, GapType.MISSING),
        (12, 3, 5, GapType.UNDERPERFORMING),
        (12, 3, None, GapType.UNDERPERFORMING),
        (8, 3, 5, GapType.OPPORTUNITY),
        (2, 5, 5, GapType.OPPORTUNITY),
    ])
    def test_classification(self, your_position, competitor, clicks, expected):
        """Unranked or clickless is missing; over five behind is underperforming."""
        assert classify_gap_type(your_position, competitor, clicks) == expected


class TestAnalyzeGap:
    """Test single gap construction."""

    def test_missing_keyword(self):
        """A keyword the site does not rank for."""
        gap = ContentGapAnalyzer().analyze_gap(
            "best crm", competitor_position=3, search_volume=5000
        )

        assert gap.gap_type == GapType.MISSING
        assert gap.your_ranking is None
        assert gap.difficulty == 51
        assert gap.difficulty_level == CompetitionLevel.MEDIUM
        assert gap.potential_clicks == 500
        assert gap.required_word_count == 3020
        assert gap.required_backlinks == 51
        assert gap.estimated_time_to_rank == 6
        assert gap.priority_score == 65

    def test_keyword_input_overrides_volume(self):
        """Provider keyword data replaces the fallback volume."""
        gap = ContentGapAnalyzer().analyze_gap(
            "best crm",
            competitor_position=3,
            search_volume=5000,
            keyword_input=KeywordDifficultyInput(
                "best crm", search_volume=20000, competition=0.1
            ),
            benchmark=Benchmark()
        )

        assert gap.search_volume == 20000
        assert gap.difficulty < 30
        assert gap.difficulty_level == CompetitionLevel.LOW

    def test_unranked_position_is_cleared(self):
        """Positions beyond 100 are reported as not ranking."""
        gap = ContentGapAnalyzer().analyze_gap(
            "best crm", competitor_position=3, your_position=120, your_clicks=0
        )

        assert gap.your_ranking is None

    def test_to_dict(self):
        """Serialized gap carries enum values."""
        data = ContentGapAnalyzer().analyze_gap("best crm", 3).to_dict()

        assert data["gap_type"] == "missing"
        assert data["difficulty_level"] == "medium"


class TestAnalyzeGaps:
    """Test ranking of many gaps."""

    def test_ranked_by_priority(self, site_aggregates, competitor_rankings):
        """Gaps are ordered by priority, highest first."""
        gaps = ContentGapAnalyzer().analyze_gaps(site_aggregates, competitor_rankings)

        assert [g.keyword for g in gaps] == ["crm software", "crm demo", "crm pricing"]
        assert [g.priority_score for g in gaps] == [61, 58, 45]
        assert [g.gap_type for g in gaps] == [
            GapType.UNDERPERFORMING, GapType.OPPORTUNITY, GapType.MISSING
        ]

    def test_queries_without_competitor_are_skipped(self, site_aggregates,
                                                    competitor_rankings):
        """Only queries a competitor ranks for become gaps."""
        gaps = ContentGapAnalyzer().analyze_gaps(site_aggregates, competitor_rankings)

        assert "unrelated" not in {g.keyword for g in gaps}

    def test_volume_defaults_to_impressions(self, site_aggregates, competitor_rankings):
        """Without keyword data, impressions stand in for search volume."""
        gaps = ContentGapAnalyzer().analyze_gaps(site_aggregates, competitor_rankings)

        assert {g.keyword: g.search_volume for g in gaps} == {
            "crm software": 2000, "crm demo": 800, "crm pricing": 300
        }

    def test_keyword_data_by_keyword(self, site_aggregates, competitor_rankings):
        """Keyword data is matched after normalization."""
        gaps = ContentGapAnalyzer().analyze_gaps(
            site_aggregates,
            competitor_rankings,
            keyword_data={"CRM Demo": KeywordDifficultyInput("crm demo", search_volume=20000)}
        )

        assert {g.keyword: g.search_volume for g in gaps}["crm demo"] == 20000

    def test_shared_and_per_keyword_benchmarks(self, site_aggregates,
                                               competitor_rankings):
        """A per-keyword benchmark overrides the shared one."""
        gaps = ContentGapAnalyzer().analyze_gaps(
            site_aggregates,
            competitor_rankings,
            benchmark=Benchmark(),
            benchmarks={"crm demo": Benchmark(
                avg_domain_authority=100,
                avg_backlinks=10 ** 6,
                avg_content_length=9000
            )}
        )
        difficulty = {g.keyword: g.difficulty for g in gaps}

        assert difficulty["crm software"] == 18
        assert difficulty["crm pricing"] == 18
        assert difficulty["crm demo"] == 83

    def test_no_rankings(self, site_aggregates):
        """Without competitor data there are no gaps."""
        assert ContentGapAnalyzer().analyze_gaps(site_aggregates, {}) == []


class TestGapReporting:
    """Test gap tables and summaries."""

    def test_summary(self, site_aggregates, competitor_rankings):
        """Summary counts types and totals potential clicks."""
        analyzer = ContentGapAnalyzer()
        summary = analyzer.summarize_gaps(
            analyzer.analyze_gaps(site_aggregates, competitor_rankings)
        )

        assert summary["missing"] == 1
        assert summary["underperforming"] == 1
        assert summary["opportunity"] == 1
        assert summary["total_potential_clicks"] == 404
        assert summary["quick_wins"] == 0

    def test_quick_wins(self, site_aggregates, competitor_rankings):
        """Easy gaps with enough clicks are quick wins."""
        analyzer = ContentGapAnalyzer()
        gaps = analyzer.analyze_gaps(
            site_aggregates, competitor_rankings, benchmark=Benchmark()
        )

        assert analyzer.summarize_gaps(gaps)["quick_wins"] == 2

    def test_frame(self, site_aggregates, competitor_rankings):
        """One row per gap with string enum columns."""
        analyzer = ContentGapAnalyzer()
        df = analyzer.gaps_to_frame(
            analyzer.analyze_gaps(site_aggregates, competitor_rankings)
        )

        assert list(df.columns) == GAP_COLUMNS
        assert list(df["gap_type"]) == ["underperforming", "opportunity", "missing"]
