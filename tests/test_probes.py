"""
Auxiliary probe tests.

Covers:
- robots.txt parsing and slash-bounded blocking
- sitemap.xml counting
- Concurrent probing against a MockTransport, incl. failures
- Security and analytics detection
"""

import httpx
import pytest

from pageaudit.probes import (
    detect_analytics,
    is_path_blocked,
    parse_disallow_rules,
    parse_sitemap,
    parse_sitemap_declarations,
    probe_resources,
    security_facts,
)


ROBOTS_TXT = """# robots for acme
User-agent: *
Disallow: /blog/   # private drafts
Disallow:
Disallow: /tmp
Sitemap: https://acme.test/sitemap.xml
Sitemap: https://acme.test/news-sitemap.xml
"""

SITEMAP_XML = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://acme.test/</loc><lastmod>2024-05-01</lastmod></url>
  <url><loc>https://acme.test/about</loc><lastmod>2024-04-01</lastmod></url>
  <url><loc>https://acme.test/contact</loc></url>
</urlset>
"""


# ===========================================================================
# robots.txt
# ===========================================================================


class TestRobotsParsing:
    def test_disallow_rules_strip_comments_and_empties(self):
        assert parse_disallow_rules(ROBOTS_TXT) == ["/blog/", "/tmp"]

    def test_sitemap_declarations(self):
        assert parse_sitemap_declarations(ROBOTS_TXT) == [
            "https://acme.test/sitemap.xml",
            "https://acme.test/news-sitemap.xml",
        ]

    @pytest.mark.parametrize(
        "path, blocked",
        [
            ("/blog", False),
            ("/blog/", True),
            ("/blog/post-1", True),
            ("/blogger", False),
            ("/tmp", True),
            ("/tmpfiles", False),
            ("/", False),
            ("", False),
        ],
    )
    def test_slash_bounded_prefix(self, path, blocked):
        assert is_path_blocked(path, ["/blog/", "/tmp"]) is blocked

    def test_root_rule_blocks_everything(self):
        assert is_path_blocked("/anything/at/all", ["/"]) is True

    def test_no_rules(self):
        assert is_path_blocked("/blog", []) is False

    def test_rules_for_specific_bots_are_ignored(self):
        robots = "User-agent: GPTBot\nDisallow: /\n\nUser-agent: *\nDisallow: /admin\n"
        assert parse_disallow_rules(robots) == ["/admin"]
        assert parse_disallow_rules("User-agent: GPTBot\nDisallow: /\n") == []

    def test_wildcard_in_shared_group(self):
        robots = (
            "User-agent: Googlebot\n"
            "User-agent: *\n"
            "Disallow: /search\n"
            "\n"
            "User-agent: CCBot\n"
            "Disallow: /\n"
        )
        assert parse_disallow_rules(robots) == ["/search"]

    def test_rules_before_any_group_apply(self):
        assert parse_disallow_rules("Disallow: /drafts\nUser-agent: Bingbot\nDisallow: /\n") == [
            "/drafts"
        ]


class TestSitemapParsing:
    def test_counts_urls_and_first_lastmod(self):
        assert parse_sitemap(SITEMAP_XML) == (3, "2024-05-01")

    def test_garbage(self):
        assert parse_sitemap("this is not xml") == (0, None)


# ===========================================================================
# Probing
# ===========================================================================


class TestProbeResources:
    @pytest.mark.asyncio
    async def test_all_found(self, transport):
        routes = {
            "https://acme.test/robots.txt": httpx.Response(200, text=ROBOTS_TXT),
            "https://acme.test/sitemap.xml": httpx.Response(200, text=SITEMAP_XML),
            "https://acme.test/llms.txt": httpx.Response(200, text="# Acme\n"),
        }
        async with httpx.AsyncClient(transport=transport(routes)) as client:
            crawlers, sitemaps = await probe_resources(client, "https://acme.test/blog/post-1")

        assert crawlers.robots_txt_exists is True
        assert crawlers.robots_txt_url == "https://acme.test/robots.txt"
        assert crawlers.blocked_by_robots is True
        assert crawlers.disallowed_paths == ("/blog/", "/tmp")
        assert crawlers.llms_txt_exists is True
        assert sitemaps.xml_sitemap_exists is True
        assert sitemaps.url_count == 3
        assert sitemaps.last_modified == "2024-05-01"
        assert len(sitemaps.declared_in_robots) == 2

    @pytest.mark.asyncio
    async def test_failures_read_as_not_found(self, transport):
        def explode(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        routes = {
            "https://acme.test/robots.txt": httpx.Response(500),
            "https://acme.test/sitemap.xml": explode,
            # llms.txt falls through to 404
        }
        async with httpx.AsyncClient(transport=transport(routes)) as client:
            crawlers, sitemaps = await probe_resources(client, "https://acme.test/")

        assert crawlers.robots_txt_exists is False
        assert crawlers.robots_txt_url is None
        assert crawlers.blocked_by_robots is False
        assert crawlers.llms_txt_exists is False
        assert sitemaps.xml_sitemap_exists is False
        assert sitemaps.url_count == 0

    @pytest.mark.asyncio
    async def test_unblocked_sibling_path(self, transport):
        routes = {"https://acme.test/robots.txt": httpx.Response(200, text=ROBOTS_TXT)}
        async with httpx.AsyncClient(transport=transport(routes)) as client:
            crawlers, _ = await probe_resources(client, "https://acme.test/blogger")
        assert crawlers.blocked_by_robots is False

    @pytest.mark.asyncio
    async def test_bot_specific_block_does_not_block_page(self, transport):
        robots = "User-agent: GPTBot\nDisallow: /\n"
        routes = {"https://acme.test/robots.txt": httpx.Response(200, text=robots)}
        async with httpx.AsyncClient(transport=transport(routes)) as client:
            crawlers, _ = await probe_resources(client, "https://acme.test/pricing")
        assert crawlers.robots_txt_exists is True
        assert crawlers.blocked_by_robots is False
        assert crawlers.disallowed_paths == ()


# ===========================================================================
# Derived facts
# ===========================================================================


class TestSecurityAndAnalytics:
    def test_security_from_final_url(self):
        assert security_facts("https://acme.test/").ssl_enabled is True
        insecure = security_facts("http://acme.test/")
        assert insecure.ssl_enabled is False
        assert insecure.https_redirect is False

    def test_detects_sources_and_inline_snippets(self):
        facts = detect_analytics(
            ["https://www.googletagmanager.com/gtag/js?id=G-1", "/static/app.js"],
            ["(function(c,l,a,r,i,t,y){ t.src='https://www.clarity.ms/tag/'+i })()"],
        )
        assert facts.has_analytics is True
        assert facts.tools == ("Google Analytics", "Microsoft Clarity")
        assert facts.analytics_type == "Google Analytics, Microsoft Clarity"

    def test_no_analytics(self):
        facts = detect_analytics(["/static/app.js"], [])
        assert facts.has_analytics is False
        assert facts.analytics_type is None
