"""
Compact, prompt-ready summaries of audit facts.

Keeps the small, high-signal parts of the fact tree and truncates the bulky
ones so the result fits comfortably in a text-generation prompt.
"""

from typing import Any, Dict, Optional

from .models import PerformanceData, SitemapFacts, WebsiteContent

CONTENT_LIMIT = 1000
LINK_SAMPLE = 5
MAX_SCHEMA_TYPES = 5
MAX_RESOURCE_BUCKETS = 3


def summarize_content(content: WebsiteContent) -> Dict[str, Any]:
    text = content.content
    if len(text) > CONTENT_LIMIT:
        text = text[:CONTENT_LIMIT] + "..."

    links = content.links
    technical = content.technical
    performance = content.performance.model_dump()
    performance["structured_data_types"] = list(content.performance.structured_data_types[:MAX_SCHEMA_TYPES])

    return {
        "url": content.url,
        "title": content.title,
        "meta_description": content.meta_description,
        "lang": technical.technical_seo.lang_attribute,
        "technical": {
            "has_https": technical.has_https,
            "has_h1": technical.has_h1,
            "has_multiple_h1": technical.has_multiple_h1,
            "has_title": technical.has_title,
            "has_meta_description": technical.has_meta_description,
            "title_length": technical.title_length,
            "meta_description_length": technical.meta_description_length,
            "images_without_alt": technical.images_without_alt,
            "images_with_alt": technical.images_with_alt,
            "heading_structure": technical.heading_structure.model_dump(),
            "readability_score": technical.readability_score.model_dump(),
            "technical_seo": technical.technical_seo.model_dump(),
        },
        "headings": content.headings.model_dump(),
        "content": text,
        "images": [
            {
                "src": img.src,
                "alt": img.alt,
                "width": img.width,
                "height": img.height,
                "loading": img.loading,
            }
            for img in content.images
        ],
        "links": {
            "total": len(links),
            "internal": sum(1 for link in links if not link.is_external),
            "external": sum(1 for link in links if link.is_external),
            "nofollow": sum(1 for link in links if link.is_nofollow),
            "sample": [
                {
                    "is_external": link.is_external,
                    "has_text": bool(link.text.strip()),
                    "is_nofollow": link.is_nofollow,
                }
                for link in links[:LINK_SAMPLE]
            ],
        },
        "performance": performance,
        "meta": content.meta.model_dump(),
        "sitemap": summarize_sitemap(content.sitemaps),
    }


def summarize_pagespeed(data: PerformanceData) -> Optional[Dict[str, Any]]:
    """None for the empty fallback document."""
    if data.is_empty:
        return None

    display = data.display_metrics
    buckets = sorted(
        data.resource_breakdown.buckets().items(),
        key=lambda item: item[1].size_kb,
        reverse=True,
    )
    return {
        "strategy": data.strategy,
        "performance_score": data.scores.get("performance"),
        "core_web_vitals": {
            "lcp_s": display.largest_contentful_paint,
            "cls": display.cumulative_layout_shift,
            "fcp_s": display.first_contentful_paint,
            "ttfb_s": display.server_response_time,
            "tbt_s": display.total_blocking_time,
        },
        "largest_resources": [
            {"type": name, "count": bucket.count, "size_kb": bucket.size_kb}
            for name, bucket in buckets[:MAX_RESOURCE_BUCKETS]
            if bucket.count
        ],
    }


def summarize_sitemap(sitemaps: Optional[SitemapFacts]) -> Optional[Dict[str, Any]]:
    if sitemaps is None:
        return None
    return {
        "found": sitemaps.xml_sitemap_exists,
        "url": sitemaps.xml_sitemap_url,
        "url_count": sitemaps.url_count,
        "last_modified": sitemaps.last_modified,
    }
