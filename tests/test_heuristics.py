"""
Heuristic scorer tests.

Covers:
- Heading hierarchy (proper / skipped levels)
- Flesch-Kincaid readability and level buckets
- Domain-authority bounds and monotonicity, backlink/traffic curves
- Vitals estimators (bounds, determinism) and page-speed clamps
"""

import random

import pytest

from pageaudit.heuristics import (
    VITALS_JITTER_BOUNDS,
    AuthoritySignals,
    RandomVitalsEstimator,
    StaticVitalsEstimator,
    count_syllables,
    estimate_backlinks,
    estimate_domain_authority,
    estimate_organic_traffic,
    estimate_page_speed,
    heading_structure,
    readability,
    reading_level,
    round_half_up,
    social_sharing,
    vitals_from_pagespeed,
)
from pageaudit.models import (
    FieldVitals,
    Headings,
    PerformanceData,
    PerformanceMetrics,
)


def _headings(*counts):
    levels = ("h1", "h2", "h3", "h4", "h5", "h6")
    return Headings(**{lvl: ["x"] * n for lvl, n in zip(levels, counts)})


# ===========================================================================
# Heading hierarchy
# ===========================================================================


class TestHeadingStructure:
    def test_gap_between_h2_and_h4(self):
        s = heading_structure(_headings(1, 3, 0, 2))
        assert s.h1_count == 1
        assert s.proper_hierarchy is False
        assert s.skipped_levels is True

    def test_contiguous_levels_are_proper(self):
        s = heading_structure(_headings(1, 2, 4, 1))
        assert s.proper_hierarchy is True
        assert s.skipped_levels is False

    def test_h1_only_is_proper(self):
        s = heading_structure(_headings(1))
        assert s.proper_hierarchy is True
        assert s.skipped_levels is False

    def test_multiple_h1_is_not_proper(self):
        s = heading_structure(_headings(2, 1))
        assert s.proper_hierarchy is False
        assert s.has_h1 is True

    def test_h1_followed_directly_by_h3_is_skipped(self):
        s = heading_structure(_headings(1, 0, 1))
        assert s.skipped_levels is True
        assert s.proper_hierarchy is False

    def test_no_headings(self):
        s = heading_structure(Headings())
        assert s.has_h1 is False
        assert s.proper_hierarchy is False
        assert s.skipped_levels is False


# ===========================================================================
# Readability
# ===========================================================================


class TestReadability:
    def test_simple_sentences(self):
        score = readability("The cat sat. The cat ran.")
        assert score.avg_words_per_sentence == 3.0
        # 0.39*3 + 11.8*1 - 15.59 = -2.62
        assert score.flesch_kincaid == -2.6
        assert score.reading_level == "Easy"

    def test_empty_text(self):
        score = readability("")
        assert score.flesch_kincaid == 0.0
        assert score.reading_level == "Easy"
        assert score.avg_words_per_sentence == 0.0

    def test_text_without_terminator_is_one_sentence(self):
        score = readability("one two three four")
        assert score.avg_words_per_sentence == 4.0

    def test_syllables_at_least_one(self):
        assert count_syllables("rhythm") == 1  # y counts as a vowel
        assert count_syllables("psst") == 1
        assert count_syllables("banana") == 3

    @pytest.mark.parametrize(
        "grade, level",
        [
            (12.5, "Very Difficult"),
            (12.0, "Difficult"),
            (10.01, "Difficult"),
            (8.04, "Fairly Difficult"),
            (8.0, "Standard"),
            (6.5, "Standard"),
            (4.1, "Fairly Easy"),
            (4.0, "Easy"),
            (-3.0, "Easy"),
        ],
    )
    def test_level_buckets_use_strict_thresholds(self, grade, level):
        assert reading_level(grade) == level

    def test_round_half_up(self):
        assert round_half_up(2.25, 1) == 2.3
        assert round_half_up(-2.62, 1) == -2.6
        assert round_half_up(12.5) == 13


# ===========================================================================
# Domain authority
# ===========================================================================


FULL_SIGNALS = AuthoritySignals(
    is_https=True,
    title_length=55,
    meta_description_length=140,
    has_structured_data=True,
    h1_count=1,
    has_canonical=True,
    has_robots_meta=True,
    has_viewport_meta=True,
    content_length=5000,
    h2_count=5,
    image_count=10,
    external_link_count=10,
    internal_link_count=30,
    open_graph_count=5,
    twitter_count=4,
)


class TestDomainAuthority:
    def test_base_score(self):
        assert estimate_domain_authority(AuthoritySignals()) == 30

    def test_all_bonuses(self):
        assert estimate_domain_authority(FULL_SIGNALS) == 90

    def test_overlong_title_earns_nothing(self):
        signals = FULL_SIGNALS.model_copy(update={"title_length": 61})
        assert estimate_domain_authority(signals) == 85

    @pytest.mark.parametrize(
        "field, value",
        [
            ("is_https", True),
            ("has_structured_data", True),
            ("content_length", 1001),
            ("h2_count", 4),
            ("twitter_count", 3),
        ],
    )
    def test_adding_a_signal_never_decreases(self, field, value):
        base = AuthoritySignals()
        improved = base.model_copy(update={field: value})
        assert estimate_domain_authority(improved) >= estimate_domain_authority(base)

    def test_bounds(self):
        for signals in (AuthoritySignals(), FULL_SIGNALS):
            assert 1 <= estimate_domain_authority(signals) <= 100

    def test_backlinks_and_traffic_curves(self):
        assert estimate_backlinks(50) == 2795
        assert estimate_organic_traffic(50) == 12500
        assert estimate_backlinks(1) == 0
        assert estimate_backlinks(90) > estimate_backlinks(50)


# ===========================================================================
# Vitals and page speed
# ===========================================================================


class TestVitals:
    @pytest.mark.parametrize("da", [10, 70, 71, 100])
    def test_random_estimates_stay_in_bounds(self, da):
        estimator = RandomVitalsEstimator(random.Random(1234))
        bounds = VITALS_JITTER_BOUNDS[da > 70]
        for _ in range(200):
            v = estimator.estimate(da)
            assert v.source == "simulated"
            assert bounds["lcp"][0] <= v.lcp <= bounds["lcp"][1]
            assert bounds["inp"][0] <= v.inp <= bounds["inp"][1]
            assert bounds["cls"][0] <= v.cls <= bounds["cls"][1]

    def test_seeded_estimator_is_reproducible(self):
        a = RandomVitalsEstimator(random.Random(7)).estimate(50)
        b = RandomVitalsEstimator(random.Random(7)).estimate(50)
        assert a == b

    def test_static_estimator(self):
        v = StaticVitalsEstimator(lcp=1.2, inp=90, cls=0.05).estimate(99)
        assert (v.lcp, v.inp, v.cls, v.source) == (1.2, 90, 0.05, "simulated")

    def test_measured_vitals_prefer_field_inp(self):
        data = PerformanceData(
            url="https://acme.test/",
            strategy="mobile",
            scores={"performance": 80},
            metrics=PerformanceMetrics(
                largest_contentful_paint_ms=2345,
                total_blocking_time_ms=120,
                cumulative_layout_shift=0.123,
            ),
            field_vitals=FieldVitals(inp_ms=180),
        )
        v = vitals_from_pagespeed(data)
        assert v.source == "measured"
        assert v.lcp == 2.3
        assert v.inp == 180
        assert v.cls == 0.12

    def test_measured_vitals_fall_back_to_tbt(self):
        data = PerformanceData(
            url="https://acme.test/",
            strategy="mobile",
            scores={"performance": 80},
            metrics=PerformanceMetrics(total_blocking_time_ms=75),
        )
        assert vitals_from_pagespeed(data).inp == 75


class TestPageSpeedEstimate:
    def test_formula(self):
        est = estimate_page_speed(2.0, 50)
        assert est.desktop == 70
        assert est.mobile == 50
        assert est.desktop_source == "estimated"

    def test_high_authority_bonus(self):
        est = estimate_page_speed(2.0, 71)
        assert est.desktop == 80
        assert est.mobile == 55

    def test_clamps(self):
        slow = estimate_page_speed(10.0, 10)
        assert slow.desktop == 40
        assert slow.mobile == 30
        fast = estimate_page_speed(0.0, 90)
        assert fast.desktop == 100
        assert fast.mobile == 85


def test_social_sharing_thresholds():
    s = social_sharing({"title": "a", "type": "b", "url": "c"}, {"card": "x"})
    assert s.facebook_shareable is True
    assert s.linkedin_shareable is True
    assert s.twitter_shareable is False
