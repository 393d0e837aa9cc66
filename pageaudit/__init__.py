"""
pageaudit — single-page SEO audit engine.

Usage:
    from pageaudit import scrape_website, run_onpage_seo_analysis

    content = await scrape_website("example.com")
    analysis = run_onpage_seo_analysis(content)

    # Scrape + PageSpeed + rules in one call
    from pageaudit import SEOAnalyzer, PageSpeedInsightsClient

    analyzer = SEOAnalyzer(pagespeed_service=PageSpeedInsightsClient(api_key))
    report = await analyzer.audit("example.com")
"""

from .errors import PageAuditError, ScrapeError
from .extractor import extract_page
from .heuristics import (
    RandomVitalsEstimator,
    StaticVitalsEstimator,
    VitalsEstimator,
)
from .models import (
    PageSpeedReport,
    PerformanceData,
    WebsiteContent,
)
from .onpage import (
    AuditReport,
    CheckStatus,
    OnPageFacts,
    OnPageSEOAnalysis,
    SEOAnalyzer,
    run_onpage_seo_analysis,
)
from .pagespeed import (
    PageSpeedInsightsClient,
    PerformanceService,
    get_pagespeed_data,
    get_pagespeed_report,
    merge_pagespeed,
)
from .scraper import build_website_content, scrape_website

__all__ = [
    # Main entry points
    "scrape_website",
    "run_onpage_seo_analysis",
    "get_pagespeed_data",
    "get_pagespeed_report",
    "SEOAnalyzer",
    # Building blocks
    "extract_page",
    "build_website_content",
    "merge_pagespeed",
    "PageSpeedInsightsClient",
    "PerformanceService",
    "VitalsEstimator",
    "RandomVitalsEstimator",
    "StaticVitalsEstimator",
    # Results
    "WebsiteContent",
    "PerformanceData",
    "PageSpeedReport",
    "OnPageFacts",
    "OnPageSEOAnalysis",
    "CheckStatus",
    "AuditReport",
    # Errors
    "PageAuditError",
    "ScrapeError",
]
