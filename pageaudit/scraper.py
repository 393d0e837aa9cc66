"""
Single-page scrape orchestration.

Fetches the page, extracts markup facts, then runs the auxiliary probes and
image downloads concurrently before assembling the frozen ``WebsiteContent``.
"""

import asyncio
import logging
from typing import List, Optional

import httpx

from . import config
from .errors import ScrapeError
from .extractor import extract_page, normalize_url
from .heuristics import (
    AuthoritySignals,
    RandomVitalsEstimator,
    VitalsEstimator,
    estimate_backlinks,
    estimate_domain_authority,
    estimate_organic_traffic,
    estimate_page_speed,
    heading_structure,
    readability,
    social_sharing,
)
from .images import process_images
from .models import (
    CrawlerFacts,
    ImageFact,
    PageMarkup,
    PerformanceFacts,
    SitemapFacts,
    TechnicalFacts,
    TechnicalSEO,
    UsabilityFacts,
    WebsiteContent,
)
from .probes import detect_analytics, probe_resources, security_facts

logger = logging.getLogger(__name__)


def _client(timeout: float = config.PAGE_TIMEOUT) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={
            "User-Agent": config.USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        },
    )


def build_website_content(
    page: PageMarkup,
    images: Optional[List[ImageFact]] = None,
    crawlers: Optional[CrawlerFacts] = None,
    sitemaps: Optional[SitemapFacts] = None,
    estimator: Optional[VitalsEstimator] = None,
) -> WebsiteContent:
    """
    Assemble the fact tree from extracted markup plus optional probe results.

    Pure: everything network-bound is passed in. ``crawlers``/``sitemaps``
    left as None mark those groups as not assessed.
    """
    images = page.images if images is None else images
    estimator = estimator or RandomVitalsEstimator()

    links = page.links
    external = [link for link in links if link.is_external]
    nofollow = [link for link in links if link.is_nofollow]
    structure = heading_structure(page.headings)
    h1_count = structure.h1_count
    has_lang = page.lang is not None

    performance = PerformanceFacts(
        content_length=len(page.content),
        word_count=len(page.content.split()),
        heading_count=page.headings.total,
        image_count=len(images),
        link_count=len(links),
        internal_link_count=len(links) - len(external),
        external_link_count=len(external),
        nofollow_link_count=len(nofollow),
        has_structured_data=page.structured_data.has_json_ld,
        has_viewport_meta=bool(page.meta.viewport),
        has_robots_meta=bool(page.meta.robots),
        has_canonical=bool(page.meta.canonical),
        has_open_graph=bool(page.meta.open_graph),
        has_twitter_cards=bool(page.meta.twitter),
        structured_data_types=list(page.structured_data.schema_types),
    )

    domain_authority = estimate_domain_authority(AuthoritySignals.from_page(page))
    vitals = estimator.estimate(domain_authority)
    with_alt = sum(1 for image in images if image.has_alt)

    technical = TechnicalFacts(
        has_https=page.url.startswith("https://"),
        has_h1=h1_count > 0,
        has_multiple_h1=h1_count > 1,
        has_title=bool(page.title),
        has_meta_description=bool(page.meta_description),
        title_length=len(page.title),
        meta_description_length=len(page.meta_description),
        images_without_alt=len(images) - with_alt,
        images_with_alt=with_alt,
        images_without_dimensions=sum(1 for image in images if not image.has_dimensions),
        heading_structure=structure,
        domain_authority=domain_authority,
        estimated_backlinks=estimate_backlinks(domain_authority),
        estimated_organic_traffic=estimate_organic_traffic(domain_authority),
        core_web_vitals=vitals,
        mobile_friendliness=bool(page.meta.viewport),
        page_speed=estimate_page_speed(vitals.lcp, domain_authority),
        readability_score=readability(page.content),
        social_sharing=social_sharing(page.meta.open_graph, page.meta.twitter),
        technical_seo=TechnicalSEO(
            has_robots_txt=bool(crawlers and crawlers.robots_txt_exists),
            has_sitemap=page.has_sitemap_link or bool(sitemaps and sitemaps.xml_sitemap_exists),
            has_favicon=page.has_favicon,
            has_manifest=page.has_manifest,
            language_declared=has_lang,
            lang_attribute=page.lang,
        ),
    )

    usability = UsabilityFacts(
        viewport=page.meta.viewport,
        mobile_friendly=bool(page.meta.viewport),
        has_favicon=page.has_favicon,
        language_declared=has_lang,
        lazy_loaded_images=sum(1 for image in images if image.loading.lower() == "lazy"),
    )

    return WebsiteContent(
        url=page.url,
        title=page.title,
        meta_description=page.meta_description,
        headings=page.headings,
        content=page.content,
        images=images,
        links=links,
        meta=page.meta,
        performance=performance,
        technical=technical,
        security=security_facts(page.url),
        crawlers=crawlers,
        sitemaps=sitemaps,
        analytics=detect_analytics(page.script_sources, page.inline_scripts),
        structured_data=page.structured_data,
        usability=usability,
    )


async def _fetch(client: httpx.AsyncClient, url: str, timeout: float) -> httpx.Response:
    try:
        response = await client.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Fetch failed for {url}: {e}")
        raise ScrapeError(url, e) from e
    return response


async def scrape_website(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    download_images: bool = config.DOWNLOAD_IMAGES,
    run_probes: bool = True,
    estimator: Optional[VitalsEstimator] = None,
    timeout: float = config.PAGE_TIMEOUT,
    probe_timeout: float = config.PROBE_TIMEOUT,
    image_timeout: float = config.IMAGE_TIMEOUT,
) -> WebsiteContent:
    """
    Scrape one page into a complete ``WebsiteContent``.

    Args:
        url: Page URL; bare domains are coerced to https://.
        client: Optional shared httpx client (one is created otherwise).
        download_images: Fetch image bytes after classification.
        run_probes: Probe robots.txt, sitemap.xml and llms.txt.
        estimator: Source of simulated Core Web Vitals.

    Raises:
        ScrapeError: The page itself could not be fetched.
    """
    url = normalize_url(url)
    if client is None:
        async with _client(timeout) as own_client:
            return await scrape_website(
                url,
                client=own_client,
                download_images=download_images,
                run_probes=run_probes,
                estimator=estimator,
                timeout=timeout,
                probe_timeout=probe_timeout,
                image_timeout=image_timeout,
            )

    logger.info(f"Scraping {url}")
    response = await _fetch(client, url, timeout)
    final_url = str(response.url)
    if final_url != url:
        logger.debug(f"{url} redirected to {final_url}")

    page = extract_page(final_url, response.text, response.headers.get("x-robots-tag"))

    async def no_probes():
        return None, None

    (crawlers, sitemaps), images = await asyncio.gather(
        probe_resources(client, final_url, probe_timeout) if run_probes else no_probes(),
        process_images(client, page.images, final_url, download_images, image_timeout),
    )

    content = build_website_content(
        page,
        images=images,
        crawlers=crawlers,
        sitemaps=sitemaps,
        estimator=estimator,
    )
    logger.info(
        f"Scraped {final_url}: {content.performance.word_count} words, "
        f"{content.performance.image_count} images, {content.performance.link_count} links"
    )
    return content
