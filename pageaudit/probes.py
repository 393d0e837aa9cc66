"""
Auxiliary resource probes.

Checks robots.txt, sitemap.xml and llms.txt at the page origin, and derives
the security and analytics facts that need no extra request. A probe never
raises: any transport error, timeout or non-2xx status reads as "not found".
"""

import asyncio
import logging
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import httpx
from lxml import etree

from . import config
from .extractor import page_origin
from .models import AnalyticsFacts, CrawlerFacts, SecurityFacts, SitemapFacts

logger = logging.getLogger(__name__)

# (tool name, script substrings)
ANALYTICS_SIGNATURES = (
    ("Google Analytics", ("google-analytics.com", "googletagmanager.com/gtag/js")),
    ("Google Tag Manager", ("googletagmanager.com/gtm.js",)),
    ("Plausible", ("plausible.io",)),
    ("Matomo", ("matomo.js", "piwik.js")),
    ("Hotjar", ("static.hotjar.com",)),
    ("Microsoft Clarity", ("clarity.ms",)),
    ("Fathom", ("usefathom.com",)),
    ("Segment", ("cdn.segment.com",)),
    ("Mixpanel", ("mxpnl.com", "mixpanel.com")),
    ("Adobe Analytics", ("assets.adobedtm.com",)),
)


# ─── robots.txt ───────────────────────────────────────────────────────


def _directive(line: str, name: str) -> Optional[str]:
    """Value of ``name:`` on a robots.txt line, comments stripped."""
    line = line.split("#", 1)[0].strip()
    key, sep, value = line.partition(":")
    if not sep or key.strip().lower() != name:
        return None
    return value.strip()


def parse_disallow_rules(robots_txt: str) -> List[str]:
    """
    Non-empty Disallow values that apply to every crawler: those in a
    ``User-agent: *`` group, plus any that precede the first group.
    Groups naming only specific bots (``GPTBot``, ``Googlebot``) are skipped.
    """
    rules: List[str] = []
    agents: List[str] = []
    in_header = False
    for line in robots_txt.splitlines():
        agent = _directive(line, "user-agent")
        if agent is not None:
            # consecutive User-agent lines share one group
            if not in_header:
                agents = []
            agents.append(agent)
            in_header = True
        elif line.split("#", 1)[0].strip():
            in_header = False
            value = _directive(line, "disallow")
            if value and (not agents or "*" in agents):
                rules.append(value)
    return rules


def parse_sitemap_declarations(robots_txt: str) -> List[str]:
    declared: List[str] = []
    for line in robots_txt.splitlines():
        value = _directive(line, "sitemap")
        if value and value not in declared:
            declared.append(value)
    return declared


def is_path_blocked(path: str, rules: List[str]) -> bool:
    """
    Slash-bounded prefix match. A rule ending in ``/`` (including a bare
    ``/``) blocks the paths under it: ``/blog/`` blocks ``/blog/post-1`` but
    not ``/blog`` or ``/blogger``. Any other rule blocks itself and its
    subpaths: ``/tmp`` blocks ``/tmp`` and ``/tmp/x`` but not ``/tmpfiles``.
    """
    path = path or "/"
    for rule in rules:
        if rule.endswith("/"):
            if path.startswith(rule):
                return True
        elif path == rule or path.startswith(rule + "/"):
            return True
    return False


# ─── sitemap.xml ──────────────────────────────────────────────────────


def parse_sitemap(xml_text: str) -> Tuple[int, Optional[str]]:
    """Return (number of <url> entries, first <lastmod> value)."""
    parser = etree.XMLParser(recover=True, resolve_entities=False)
    try:
        root = etree.fromstring(xml_text.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as e:
        logger.debug(f"Unparsable sitemap: {e}")
        return 0, None
    if root is None:
        return 0, None

    url_count = len(root.xpath('//*[local-name()="url"]'))
    lastmods = root.xpath('//*[local-name()="lastmod"]/text()')
    return url_count, (str(lastmods[0]).strip() if lastmods else None)


# ─── Probing ──────────────────────────────────────────────────────────


async def _probe(client: httpx.AsyncClient, url: str, timeout: float) -> Optional[str]:
    """GET ``url``; the body on 2xx, otherwise None."""
    try:
        response = await client.get(url, timeout=timeout, follow_redirects=True)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.debug(f"Probe failed for {url}: {e}")
        return None
    if not response.is_success:
        logger.debug(f"Probe {url} returned HTTP {response.status_code}")
        return None
    return response.text


async def probe_resources(
    client: httpx.AsyncClient,
    page_url: str,
    timeout: float = config.PROBE_TIMEOUT,
) -> Tuple[CrawlerFacts, SitemapFacts]:
    """
    Probe the three well-known resources concurrently.

    Args:
        client: Shared async client for the audit.
        page_url: Final URL of the audited page.
        timeout: Per-probe timeout in seconds.

    Returns:
        (CrawlerFacts, SitemapFacts) for the page origin.
    """
    origin = page_origin(page_url)
    robots_url = f"{origin}/robots.txt"
    sitemap_url = f"{origin}/sitemap.xml"
    llms_url = f"{origin}/llms.txt"

    robots_txt, sitemap_xml, llms_txt = await asyncio.gather(
        _probe(client, robots_url, timeout),
        _probe(client, sitemap_url, timeout),
        _probe(client, llms_url, timeout),
    )

    rules = parse_disallow_rules(robots_txt) if robots_txt is not None else []
    crawlers = CrawlerFacts(
        robots_txt_url=robots_url if robots_txt is not None else None,
        robots_txt_exists=robots_txt is not None,
        blocked_by_robots=is_path_blocked(urlparse(page_url).path, rules),
        disallowed_paths=rules,
        llms_txt_url=llms_url if llms_txt is not None else None,
        llms_txt_exists=llms_txt is not None,
    )

    url_count, last_modified = parse_sitemap(sitemap_xml) if sitemap_xml else (0, None)
    sitemaps = SitemapFacts(
        xml_sitemap_url=sitemap_url if sitemap_xml is not None else None,
        xml_sitemap_exists=sitemap_xml is not None,
        url_count=url_count,
        last_modified=last_modified,
        declared_in_robots=parse_sitemap_declarations(robots_txt) if robots_txt else [],
    )

    logger.debug(
        f"Probes for {origin}: robots={crawlers.robots_txt_exists} "
        f"sitemap={sitemaps.xml_sitemap_exists} llms={crawlers.llms_txt_exists}"
    )
    return crawlers, sitemaps


# ─── Derived Without Requests ─────────────────────────────────────────


def security_facts(final_url: str) -> SecurityFacts:
    secure = final_url.startswith("https://")
    return SecurityFacts(ssl_enabled=secure, https_redirect=secure)


def detect_analytics(script_sources: List[str], inline_scripts: List[str]) -> AnalyticsFacts:
    """Match known analytics snippets against script sources and inline bodies."""
    haystacks = [s.lower() for s in script_sources] + [s.lower() for s in inline_scripts]
    tools = [
        name
        for name, needles in ANALYTICS_SIGNATURES
        if any(needle in hay for hay in haystacks for needle in needles)
    ]
    return AnalyticsFacts(
        has_analytics=bool(tools),
        analytics_type=", ".join(tools) or None,
        tools=tools,
    )
