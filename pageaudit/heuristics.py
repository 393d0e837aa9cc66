"""
Heuristic scorers over extracted facts.

Everything here is a pure function of its inputs except
``RandomVitalsEstimator``, which is the only source of randomness and is
injected by callers through the ``VitalsEstimator`` protocol.
"""

import math
import random
import re
from typing import Dict, Optional, Protocol, Tuple

from pydantic import BaseModel

from .models import (
    CoreWebVitals,
    HeadingStructure,
    Headings,
    PageMarkup,
    PageSpeedEstimate,
    PerformanceData,
    ReadabilityScore,
    SocialSharing,
)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_NON_VOWELS = re.compile(r"[^aeiouy]")

READING_LEVELS = (
    (12, "Very Difficult"),
    (10, "Difficult"),
    (8, "Fairly Difficult"),
    (6, "Standard"),
    (4, "Fairly Easy"),
)

HIGH_AUTHORITY = 70

# Inclusive output ranges of RandomVitalsEstimator, keyed by "DA > 70"
VITALS_JITTER_BOUNDS: Dict[bool, Dict[str, Tuple[float, float]]] = {
    True: {"lcp": (0.5, 2.5), "inp": (50, 250), "cls": (0.03, 0.23)},
    False: {"lcp": (1.5, 3.5), "inp": (150, 350), "cls": (0.07, 0.27)},
}


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ─── Heading Hierarchy ────────────────────────────────────────────────


def heading_structure(headings: Headings) -> HeadingStructure:
    """
    Validate heading nesting.

    The hierarchy is proper iff there is exactly one H1 and the non-empty
    levels below it form a contiguous prefix (H2 present, H3 absent, H4
    present is not). A level counts as skipped when a present level is
    followed by an empty one and some deeper level is used again.
    """
    counts = headings.counts()
    h1_count = counts[0]

    contiguous = True
    for idx in range(1, 6):
        if counts[idx] == 0 and any(counts[idx + 1:]):
            contiguous = False
            break

    skipped = any(
        counts[idx] > 0 and counts[idx + 1] == 0 and any(counts[idx + 2:])
        for idx in range(0, 4)
    )

    return HeadingStructure(
        has_h1=h1_count > 0,
        h1_count=h1_count,
        h2_count=counts[1],
        h3_count=counts[2],
        h4_count=counts[3],
        h5_count=counts[4],
        h6_count=counts[5],
        proper_hierarchy=h1_count == 1 and contiguous,
        skipped_levels=skipped,
    )


# ─── Readability ──────────────────────────────────────────────────────


def count_syllables(word: str) -> int:
    """Vowel-character approximation, at least one per word."""
    return max(1, len(_NON_VOWELS.sub("", word.lower())))


def reading_level(grade: float) -> str:
    for threshold, label in READING_LEVELS:
        if grade > threshold:
            return label
    return "Easy"


def readability(text: str) -> ReadabilityScore:
    """Flesch-Kincaid grade level of ``text``."""
    words = text.split()
    if not words:
        return ReadabilityScore()

    sentences = [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]
    sentence_count = len(sentences) or 1
    syllables = sum(count_syllables(w) for w in words)

    avg_words = len(words) / sentence_count
    avg_syllables = syllables / len(words)
    grade = 0.39 * avg_words + 11.8 * avg_syllables - 15.59

    return ReadabilityScore(
        flesch_kincaid=round_half_up(grade, 1),
        reading_level=reading_level(grade),
        avg_words_per_sentence=round_half_up(avg_words, 1),
    )


# ─── Domain Authority Estimate ────────────────────────────────────────


class AuthoritySignals(BaseModel):
    is_https: bool = False
    title_length: int = 0
    meta_description_length: int = 0
    has_structured_data: bool = False
    h1_count: int = 0
    has_canonical: bool = False
    has_robots_meta: bool = False
    has_viewport_meta: bool = False
    content_length: int = 0
    h2_count: int = 0
    image_count: int = 0
    external_link_count: int = 0
    internal_link_count: int = 0
    open_graph_count: int = 0
    twitter_count: int = 0

    @classmethod
    def from_page(cls, page: PageMarkup) -> "AuthoritySignals":
        external = sum(1 for link in page.links if link.is_external)
        return cls(
            is_https=page.url.startswith("https://"),
            title_length=len(page.title),
            meta_description_length=len(page.meta_description),
            has_structured_data=page.structured_data.has_json_ld,
            h1_count=len(page.headings.h1),
            has_canonical=bool(page.meta.canonical),
            has_robots_meta=bool(page.meta.robots),
            has_viewport_meta=bool(page.meta.viewport),
            content_length=len(page.content),
            h2_count=len(page.headings.h2),
            image_count=len(page.images),
            external_link_count=external,
            internal_link_count=len(page.links) - external,
            open_graph_count=len(page.meta.open_graph),
            twitter_count=len(page.meta.twitter),
        )


def estimate_domain_authority(signals: AuthoritySignals) -> int:
    """Additive on-page score in [1, 100]; an illustrative estimate only."""
    bonuses = (
        (signals.is_https, 10),
        (0 < signals.title_length <= 60, 5),
        (0 < signals.meta_description_length <= 160, 5),
        (signals.has_structured_data, 8),
        (signals.h1_count == 1, 5),
        (signals.has_canonical, 3),
        (signals.has_robots_meta, 2),
        (signals.has_viewport_meta, 2),
        (signals.content_length > 1000, 5),
        (signals.h2_count > 3, 3),
        (signals.image_count > 3, 2),
        (signals.external_link_count > 5, 3),
        (signals.internal_link_count > 10, 2),
        (signals.open_graph_count > 3, 3),
        (signals.twitter_count > 2, 2),
    )
    score = 30 + sum(points for applies, points in bonuses if applies)
    return int(clamp(score, 1, 100))


def estimate_backlinks(domain_authority: int) -> int:
    return math.floor((domain_authority / 10) ** 2.5 * 50)


def estimate_organic_traffic(domain_authority: int) -> int:
    return math.floor((domain_authority / 10) ** 3 * 100)


# ─── Core Web Vitals ──────────────────────────────────────────────────


class VitalsEstimator(Protocol):
    def estimate(self, domain_authority: int) -> CoreWebVitals:
        ...


class RandomVitalsEstimator:
    """Placeholder vitals jittered around a DA-dependent centre."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def estimate(self, domain_authority: int) -> CoreWebVitals:
        high = domain_authority > HIGH_AUTHORITY
        rng = self._rng
        return CoreWebVitals(
            lcp=round_half_up(rng.random() * 2 + 1 + (-0.5 if high else 0.5), 1),
            inp=float(math.floor(rng.random() * 200 + 100 + (-50 if high else 50))),
            cls=round_half_up(rng.random() * 0.2 + 0.05 + (-0.02 if high else 0.02), 2),
            source="simulated",
        )


class StaticVitalsEstimator:
    """Deterministic estimator returning the same simulated vitals every time."""

    def __init__(self, lcp: float = 2.0, inp: float = 200.0, cls: float = 0.1):
        self._vitals = CoreWebVitals(lcp=lcp, inp=inp, cls=cls, source="simulated")

    def estimate(self, domain_authority: int) -> CoreWebVitals:
        return self._vitals.model_copy()


def vitals_from_pagespeed(data: PerformanceData) -> CoreWebVitals:
    """
    Measured vitals from a PageSpeed document. INP is field-only, so total
    blocking time stands in when the origin has no CrUX data.
    """
    inp = data.field_vitals.inp_ms or data.metrics.total_blocking_time_ms
    return CoreWebVitals(
        lcp=round_half_up(data.metrics.largest_contentful_paint_ms / 1000, 1),
        inp=float(round_half_up(inp)),
        cls=round_half_up(data.metrics.cumulative_layout_shift, 2),
        source="measured",
    )


def estimate_page_speed(lcp: float, domain_authority: int) -> PageSpeedEstimate:
    high = domain_authority > HIGH_AUTHORITY
    return PageSpeedEstimate(
        desktop=clamp(90 - lcp * 10 + (10 if high else 0), 40, 100),
        mobile=clamp(80 - lcp * 15 + (5 if high else 0), 30, 100),
    )


def social_sharing(open_graph: dict, twitter: dict) -> SocialSharing:
    return SocialSharing(
        facebook_shareable=len(open_graph) > 2,
        twitter_shareable=len(twitter) > 1,
        linkedin_shareable=len(open_graph) > 1,
    )
