"""
PageSpeed Insights aggregation.

The service is reached through the ``PerformanceService`` protocol so tests and
callers can swap in their own source. ``normalize_pagespeed`` is pure; the
``get_*`` entry points never raise and substitute ``PerformanceData.empty``
for any failed strategy.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from . import config
from .extractor import normalize_url
from .heuristics import estimate_page_speed, round_half_up, vitals_from_pagespeed
from .models import (
    DisplayMetrics,
    FieldVitals,
    ImageOpportunities,
    ImageSummary,
    PageSpeedReport,
    PerformanceData,
    PerformanceImage,
    PerformanceMetrics,
    ResourceBreakdown,
    Screenshot,
    WebsiteContent,
)

logger = logging.getLogger(__name__)

STRATEGIES = ("mobile", "desktop")
CATEGORIES = ("performance", "accessibility", "best-practices", "seo")

# metric field -> Lighthouse audit id
METRIC_AUDITS = {
    "server_response_time": "server-response-time",
    "first_contentful_paint": "first-contentful-paint",
    "largest_contentful_paint": "largest-contentful-paint",
    "speed_index": "speed-index",
    "time_to_interactive": "interactive",
    "total_blocking_time": "total-blocking-time",
}

RESOURCE_BUCKETS = {
    "Document": "html",
    "Script": "js",
    "Stylesheet": "css",
    "Image": "images",
    "Font": "fonts",
    "Media": "media",
    "XHR": "xhr",
    "Fetch": "xhr",
}

IMAGE_OPPORTUNITY_AUDITS = {
    "oversized_images": "uses-responsive-images",
    "next_gen_formats": "uses-webp-images",
    "lazy_loading_issues": "offscreen-images",
    "image_compression_issues": "uses-optimized-images",
}


class PerformanceService(Protocol):
    async def run(self, url: str, strategy: str) -> Dict[str, Any]:
        ...


class PageSpeedInsightsClient:
    """Google PageSpeed Insights v5 over httpx."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = config.PAGESPEED_TIMEOUT,
        endpoint: str = config.PAGESPEED_ENDPOINT,
    ):
        self.api_key = api_key if api_key is not None else config.PAGESPEED_API_KEY
        self._client = client
        self.timeout = timeout
        self.endpoint = endpoint

    async def run(self, url: str, strategy: str) -> Dict[str, Any]:
        params: List[tuple] = [("url", url), ("strategy", strategy)]
        params.extend(("category", category) for category in CATEGORIES)
        if self.api_key:
            params.append(("key", self.api_key))

        if self._client is not None:
            response = await self._client.get(self.endpoint, params=params, timeout=self.timeout)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.endpoint, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()


# ─── Normalization ────────────────────────────────────────────────────


def _items(audits: Dict[str, Any], audit_id: str) -> List[dict]:
    details = (audits.get(audit_id) or {}).get("details") or {}
    return list(details.get("items") or [])


def _numeric(audits: Dict[str, Any], audit_id: str) -> float:
    value = (audits.get(audit_id) or {}).get("numericValue")
    return float(value) if value is not None else 0.0


def _kb(size: float) -> float:
    return round_half_up(size / 1024, 2)


def _field_vitals(payload: Dict[str, Any]) -> FieldVitals:
    metrics = (payload.get("loadingExperience") or {}).get("metrics") or {}

    def percentile(*keys: str) -> float:
        for key in keys:
            value = (metrics.get(key) or {}).get("percentile")
            if value is not None:
                return float(value)
        return 0.0

    return FieldVitals(
        lcp_ms=percentile("LARGEST_CONTENTFUL_PAINT_MS"),
        # CrUX reports CLS x100 as an integer percentile
        cls=percentile("CUMULATIVE_LAYOUT_SHIFT_SCORE") / 100,
        inp_ms=percentile("INTERACTION_TO_NEXT_PAINT_MS", "FIRST_INPUT_DELAY_MS"),
    )


def _resource_breakdown(network_items: List[dict]) -> ResourceBreakdown:
    breakdown = ResourceBreakdown(total_requests=len(network_items))
    totals: Dict[str, float] = {}
    for req in network_items:
        name = RESOURCE_BUCKETS.get(req.get("resourceType") or "", "other")
        bucket = getattr(breakdown, name)
        bucket.count += 1
        totals[name] = totals.get(name, 0.0) + float(req.get("transferSize") or 0)
    for name, size in totals.items():
        getattr(breakdown, name).size_kb = _kb(size)
    return breakdown


def _images(network_items: List[dict]) -> List[PerformanceImage]:
    images = []
    for req in network_items:
        if req.get("resourceType") != "Image":
            continue
        transfer = float(req.get("transferSize") or 0)
        original = float(req.get("resourceSize") or 0)
        images.append(
            PerformanceImage(
                url=req.get("url") or "",
                format=req.get("mimeType") or "",
                transfer_size_kb=_kb(transfer),
                original_size_kb=_kb(original),
                compression_percent=round_half_up(100 - transfer / original * 100, 2) if original else 0.0,
            )
        )
    return images


def _image_summary(network_items: List[dict]) -> ImageSummary:
    image_reqs = [req for req in network_items if req.get("resourceType") == "Image"]
    transfer = sum(float(req.get("transferSize") or 0) for req in image_reqs)
    original = sum(float(req.get("resourceSize") or 0) for req in image_reqs)
    return ImageSummary(
        total_images=len(image_reqs),
        total_transfer_size_mb=round_half_up(transfer / 1024 / 1024, 2),
        total_original_size_mb=round_half_up(original / 1024 / 1024, 2),
        avg_image_size_kb=_kb(transfer / len(image_reqs)) if image_reqs else 0.0,
    )


def normalize_pagespeed(payload: Dict[str, Any], url: str, strategy: str) -> PerformanceData:
    """
    Flatten a raw PageSpeed Insights v5 response into ``PerformanceData``.

    Raises:
        ValueError: If the payload carries no Lighthouse result.
    """
    lighthouse = payload.get("lighthouseResult")
    if not isinstance(lighthouse, dict):
        raise ValueError("PageSpeed payload has no lighthouseResult")

    audits = lighthouse.get("audits") or {}
    categories = lighthouse.get("categories") or {}

    raw = {f"{field}_ms": _numeric(audits, audit_id) for field, audit_id in METRIC_AUDITS.items()}
    cls = round_half_up(_numeric(audits, "cumulative-layout-shift"), 2)
    metrics = PerformanceMetrics(**raw, cumulative_layout_shift=cls)
    display = DisplayMetrics(
        **{field: round_half_up(raw[f"{field}_ms"] / 1000, 2) for field in METRIC_AUDITS},
        cumulative_layout_shift=cls,
    )

    scores = {
        name: int(round_half_up(float(category.get("score") or 0) * 100))
        for name, category in categories.items()
        if isinstance(category, dict)
    }

    network_items = _items(audits, "network-requests")
    thumbnails = _items(audits, "screenshot-thumbnails")
    screenshot = Screenshot()
    if thumbnails:
        last = thumbnails[-1]
        screenshot = Screenshot(data=last.get("data") or "", timing=float(last.get("timing") or 0))

    return PerformanceData(
        url=lighthouse.get("finalUrl") or lighthouse.get("finalDisplayedUrl") or url,
        strategy=strategy,
        scores=scores,
        metrics=metrics,
        display_metrics=display,
        field_vitals=_field_vitals(payload),
        resource_breakdown=_resource_breakdown(network_items),
        images=_images(network_items),
        image_summary=_image_summary(network_items),
        image_opportunities=ImageOpportunities(
            **{field: _items(audits, audit_id) for field, audit_id in IMAGE_OPPORTUNITY_AUDITS.items()}
        ),
        screenshot=screenshot,
    )


# ─── Entry Points ─────────────────────────────────────────────────────


async def get_pagespeed_data(
    url: str,
    strategy: str = "mobile",
    service: Optional[PerformanceService] = None,
    timeout: float = config.PAGESPEED_TIMEOUT,
) -> PerformanceData:
    """
    Run one strategy. Any failure is logged and replaced by the empty
    document, so the caller always gets a complete ``PerformanceData``.
    """
    url = normalize_url(url)
    service = service or PageSpeedInsightsClient(timeout=timeout)
    try:
        payload = await asyncio.wait_for(service.run(url, strategy), timeout=timeout)
        return normalize_pagespeed(payload, url, strategy)
    except asyncio.TimeoutError:
        logger.warning(f"PageSpeed {strategy} run for {url} timed out after {timeout}s")
    except Exception as e:
        logger.warning(f"PageSpeed {strategy} run for {url} failed: {e}")
    return PerformanceData.empty(url, strategy)


async def get_pagespeed_report(
    url: str,
    service: Optional[PerformanceService] = None,
    timeout: float = config.PAGESPEED_TIMEOUT,
) -> PageSpeedReport:
    """Run mobile and desktop concurrently; each falls back independently."""
    service = service or PageSpeedInsightsClient(timeout=timeout)
    mobile, desktop = await asyncio.gather(
        *(get_pagespeed_data(url, strategy, service, timeout) for strategy in STRATEGIES)
    )
    return PageSpeedReport(mobile=mobile, desktop=desktop)


def merge_pagespeed(content: WebsiteContent, report: PageSpeedReport) -> WebsiteContent:
    """
    Replace simulated vitals and estimated speed scores with measured values
    wherever the corresponding strategy succeeded. Returns a new fact tree.
    """
    technical = content.technical
    vitals = technical.core_web_vitals
    if not report.mobile.is_empty:
        vitals = vitals_from_pagespeed(report.mobile)

    page_speed = estimate_page_speed(vitals.lcp, technical.domain_authority)
    for strategy in STRATEGIES:
        data: PerformanceData = getattr(report, strategy)
        if not data.is_empty:
            page_speed = page_speed.model_copy(
                update={
                    strategy: float(data.scores.get("performance", 0)),
                    f"{strategy}_source": "measured",
                }
            )

    technical = technical.model_copy(update={"core_web_vitals": vitals, "page_speed": page_speed})
    return content.model_copy(update={"technical": technical})
