"""
SEOAnalyzer: the single-page audit façade.

Runs the page scrape and the PageSpeed pair concurrently, merges measured
performance into the fact tree and evaluates the on-page rules.
"""

import asyncio
import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from .. import config
from ..extractor import extract_page, normalize_url
from ..heuristics import VitalsEstimator
from ..models import PageSpeedReport, WebsiteContent
from ..pagespeed import PerformanceService, get_pagespeed_report, merge_pagespeed
from ..scraper import build_website_content, scrape_website
from .checks import run_onpage_seo_analysis
from .models import OnPageSEOAnalysis

logger = logging.getLogger(__name__)


class AuditReport(BaseModel):
    url: str
    content: WebsiteContent
    on_page: OnPageSEOAnalysis
    pagespeed: Optional[PageSpeedReport] = None


class SEOAnalyzer:
    """
    Single-page SEO audit.

    Usage, live page:
        analyzer = SEOAnalyzer(pagespeed_service=PageSpeedInsightsClient(api_key))
        report = await analyzer.audit("example.com")

    Usage, markup already in hand (no network):
        on_page = SEOAnalyzer().analyze_html(url, html)
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        pagespeed_service: Optional[PerformanceService] = None,
        download_images: bool = config.DOWNLOAD_IMAGES,
        estimator: Optional[VitalsEstimator] = None,
        pagespeed_timeout: float = config.PAGESPEED_TIMEOUT,
    ):
        self.client = client
        self.pagespeed_service = pagespeed_service
        self.download_images = download_images
        self.estimator = estimator
        self.pagespeed_timeout = pagespeed_timeout

    async def audit(self, url: str) -> AuditReport:
        """
        Scrape, measure and evaluate one page.

        PageSpeed only runs when a service was configured. If the scrape fails
        the pending PageSpeed task is cancelled and the ScrapeError propagates.
        """
        url = normalize_url(url)
        pagespeed_task = None
        if self.pagespeed_service is not None:
            pagespeed_task = asyncio.ensure_future(
                get_pagespeed_report(url, self.pagespeed_service, self.pagespeed_timeout)
            )

        try:
            content = await scrape_website(
                url,
                client=self.client,
                download_images=self.download_images,
                estimator=self.estimator,
            )
        except BaseException:
            if pagespeed_task is not None:
                pagespeed_task.cancel()
                await asyncio.gather(pagespeed_task, return_exceptions=True)
            raise

        report = None
        if pagespeed_task is not None:
            report = await pagespeed_task
            content = merge_pagespeed(content, report)

        on_page = self.analyze_content(content)
        logger.info(f"Audit complete for {content.url}: {on_page.status_counts()}")
        return AuditReport(url=content.url, content=content, on_page=on_page, pagespeed=report)

    def analyze_content(self, content: WebsiteContent) -> OnPageSEOAnalysis:
        return run_onpage_seo_analysis(content)

    def analyze_html(
        self, url: str, raw_html: str, x_robots_tag: Optional[str] = None
    ) -> OnPageSEOAnalysis:
        """
        Evaluate markup without any network access. Probe-backed groups
        (crawlers, sitemaps) are reported as not assessed.
        """
        page = extract_page(url, raw_html, x_robots_tag)
        content = build_website_content(page, estimator=self.estimator)
        return self.analyze_content(content)
