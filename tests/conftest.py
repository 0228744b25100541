"""
Pytest Configuration and Shared Fixtures

Provides common fixtures for all test modules.
"""

import pytest
from typing import Any, Dict, List
from unittest.mock import MagicMock

from config.settings import Settings
from models.entities import (
    AggregateMetric,
    Benchmark,
    KeywordDifficultyInput,
    PerformanceRow
)


# ============================================================================
# Configuration
# ============================================================================

@pytest.fixture
def config() -> Settings:
    """Fresh settings instance with default values."""
    return Settings()


@pytest.fixture
def mock_log() -> MagicMock:
    """Logger sink that records calls."""
    return MagicMock()


# ============================================================================
# Performance Rows
# ============================================================================

@pytest.fixture
def performance_rows() -> List[PerformanceRow]:
    """Query rows spread over several days, mixed case."""
    return [
        PerformanceRow("seo tools", clicks=50, impressions=1000, ctr=0.05, position=3.0),
        PerformanceRow("SEO Tools ", clicks=30, impressions=500, ctr=0.06, position=2.0),
        PerformanceRow("keyword research", clicks=20, impressions=800, ctr=0.025, position=6.0),
        PerformanceRow("rank tracker", clicks=0, impressions=0, ctr=0.0, position=40.0),
        PerformanceRow("rank tracker", clicks=0, impressions=0, ctr=0.0, position=20.0),
        PerformanceRow("backlink checker", clicks=20, impressions=200, ctr=0.1, position=4.0),
    ]


@pytest.fixture
def mapping_rows() -> List[Dict[str, Any]]:
    """Rows as plain dicts with Search Console field names."""
    return [
        {"query": "content gap", "clicks": 10, "impressions": 100, "ctr": 0.1, "position": 5},
        {"query": "Content Gap", "clicks": 5, "impressions": 100, "ctr": 0.05, "position": 7},
        {"query": "site audit", "clicks": 1, "impressions": 50, "ctr": 0.02, "position": 12},
    ]


# ============================================================================
# Keyword Difficulty
# ============================================================================

@pytest.fixture
def keyword_input() -> KeywordDifficultyInput:
    """Competitive commercial keyword."""
    return KeywordDifficultyInput(
        keyword="x", search_volume=1000, cpc=2.0, competition=0.8
    )


@pytest.fixture
def benchmark() -> Benchmark:
    """Benchmarks of a moderately strong SERP."""
    return Benchmark(
        avg_domain_authority=60,
        avg_backlinks=500,
        avg_content_length=2500,
        top_ranking_pages=10
    )


# ============================================================================
# Anomaly Periods
# ============================================================================

@pytest.fixture
def previous_period() -> List[Dict[str, Any]]:
    """Previous period aggregates in camelCase, as the dashboard sends them."""
    return [
        {"entity": "kw", "totalClicks": 100, "totalImpressions": 1000,
         "avgCtr": 0.10, "avgPosition": 5},
        {"entity": "stable", "totalClicks": 200, "totalImpressions": 4000,
         "avgCtr": 0.05, "avgPosition": 2},
    ]


@pytest.fixture
def current_period() -> List[Dict[str, Any]]:
    """Current period aggregates with one regressed entity."""
    return [
        {"entity": "kw", "totalClicks": 40, "totalImpressions": 1000,
         "avgCtr": 0.04, "avgPosition": 8},
        {"entity": "stable", "totalClicks": 210, "totalImpressions": 4100,
         "avgCtr": 0.0512, "avgPosition": 2},
        {"entity": "brand new", "totalClicks": 0, "totalImpressions": 10,
         "avgCtr": 0.0, "avgPosition": 90},
    ]


@pytest.fixture
def aggregate_factory():
    """Build AggregateMetric objects with consistent CTR."""
    def _make(entity: str, clicks: float, impressions: float,
              position: float, row_count: int = 1) -> AggregateMetric:
        ctr = clicks / impressions if impressions > 0 else 0.0
        return AggregateMetric(
            entity=entity,
            total_clicks=clicks,
            total_impressions=impressions,
            avg_ctr=ctr,
            avg_position=position,
            row_count=row_count
        )
    return _make


# ============================================================================
# Search Console Payloads
# ============================================================================

@pytest.fixture
def gsc_payload() -> Dict[str, Any]:
    """Search Console searchanalytics.query response by query and page."""
    return {
        "rows": [
            {"keys": ["seo tools", "https://example.com/tools"],
             "clicks": 50, "impressions": 1000, "ctr": 0.05, "position": 3.2},
            {"keys": ["seo tools", "https://example.com/blog/seo-tools"],
             "clicks": 5, "impressions": 400, "ctr": 0.0125, "position": 8.1},
        ],
        "responseAggregationType": "byPage"
    }


@pytest.fixture
def cannibal_rows() -> List[Dict[str, Any]]:
    """Query/page rows with one cannibalized query."""
    return [
        {"query": "seo audit", "page": "https://example.com/audit",
         "clicks": 40, "impressions": 800, "position": 4.0},
        {"query": "SEO audit", "page": "https://example.com/audit",
         "clicks": 10, "impressions": 200, "position": 6.0},
        {"query": "seo audit", "page": "https://example.com/blog/audit-guide",
         "clicks": 5, "impressions": 300, "position": 9.0},
        {"query": "seo audit", "page": "https://example.com/services",
         "clicks": 0, "impressions": 20, "position": 30.0},
        {"query": "link building", "page": "https://example.com/links",
         "clicks": 30, "impressions": 600, "position": 3.0},
        {"query": "rare term", "page": "https://example.com/a",
         "clicks": 0, "impressions": 10, "position": 15.0},
        {"query": "rare term", "page": "https://example.com/b",
         "clicks": 0, "impressions": 5, "position": 25.0},
    ]
