"""
On-page SEO rule evaluation.

Nineteen independent, total check functions over ``OnPageFacts``. Nothing here
performs I/O or raises on missing data; absent fact groups yield a warning
that says the fact was not assessed.
"""

import re
from typing import Any, Mapping, Optional, Union

from ..heuristics import round_half_up
from ..models import (
    AnalyticsFacts,
    CrawlerFacts,
    Headings,
    SecurityFacts,
    SitemapFacts,
    StructuredDataFacts,
    WebsiteContent,
)
from .models import (
    AnalyticsCheck,
    BlockedByRobotsCheck,
    CanonicalTagCheck,
    CheckStatus,
    ContentAmountCheck,
    HeadersCheck,
    HreflangCheck,
    HttpsRedirectCheck,
    IdentitySchemaCheck,
    ImageAltCheck,
    ImageAltEntry,
    LanguageCheck,
    LlmsTxtCheck,
    MetaDescriptionCheck,
    NoindexHeaderCheck,
    NoindexTagCheck,
    OnPageFacts,
    OnPageSEOAnalysis,
    RobotsTxtCheck,
    SchemaOrgCheck,
    SSLCheck,
    TitleTagCheck,
    XmlSitemapCheck,
)

TITLE_MIN, TITLE_MAX = 50, 60
DESCRIPTION_MIN, DESCRIPTION_MAX = 120, 160
WORDS_MIN, WORDS_MAX = 300, 3500

# BCP 47-shaped: primary subtag plus optional subtags
_LANG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}(-[a-zA-Z0-9]{1,8})*$")


def _not_assessed(what: str) -> str:
    return f"{what} was not assessed for this page."


# ─── Markup Checks ────────────────────────────────────────────────────


def check_title_tag(title: str) -> TitleTagCheck:
    """Title length should be 50-60 characters."""
    title = title or ""
    if not title.strip():
        return TitleTagCheck(
            status=CheckStatus.ERROR,
            message="Your page is missing a Title Tag. Title tags are crucial for "
            "search engines to understand your page content.",
        )

    length = len(title)
    if length < TITLE_MIN:
        status = CheckStatus.WARNING
        message = (
            f"Your Title Tag is too short ({length} characters). It should be between "
            f"{TITLE_MIN} and {TITLE_MAX} characters (including spaces)."
        )
    elif length > TITLE_MAX:
        status = CheckStatus.WARNING
        message = (
            f"Your Title Tag is too long ({length} characters). It should be between "
            f"{TITLE_MIN} and {TITLE_MAX} characters (including spaces) to avoid "
            f"truncation in search results."
        )
    else:
        status = CheckStatus.GOOD
        message = f"Your Title Tag length is optimal ({length} characters)."

    return TitleTagCheck(
        exists=True,
        title=title,
        length=length,
        is_optimal_length=status == CheckStatus.GOOD,
        status=status,
        message=message,
    )


def check_meta_description(description: str) -> MetaDescriptionCheck:
    """Meta description length should be 120-160 characters."""
    description = description or ""
    if not description.strip():
        return MetaDescriptionCheck(
            status=CheckStatus.ERROR,
            message="Your page is missing a Meta Description. Meta descriptions are "
            "important for search engines to understand your page content.",
        )

    length = len(description)
    if length < DESCRIPTION_MIN:
        status = CheckStatus.WARNING
        message = (
            f"Your Meta Description is too short ({length} characters). It should be "
            f"between {DESCRIPTION_MIN} and {DESCRIPTION_MAX} characters (including spaces)."
        )
    elif length > DESCRIPTION_MAX:
        status = CheckStatus.WARNING
        message = (
            f"Your Meta Description is too long ({length} characters). It should be "
            f"between {DESCRIPTION_MIN} and {DESCRIPTION_MAX} characters (including "
            f"spaces) to avoid truncation in search results."
        )
    else:
        status = CheckStatus.GOOD
        message = f"Your Meta Description length is optimal ({length} characters)."

    return MetaDescriptionCheck(
        exists=True,
        description=description,
        length=length,
        is_optimal_length=status == CheckStatus.GOOD,
        status=status,
        message=message,
    )


def check_hreflang(entries: list) -> HreflangCheck:
    entries = [e for e in (entries or []) if e]
    if not entries:
        return HreflangCheck(
            status=CheckStatus.WARNING,
            message="Your page is not making use of Hreflang attributes. Hreflang tags "
            "help search engines show the correct language/content for your users.",
        )
    return HreflangCheck(
        has_hreflang=True,
        hreflang_entries=entries,
        status=CheckStatus.GOOD,
        message=f"Your page uses {len(entries)} Hreflang attribute(s) for "
        f"language/regional targeting.",
    )


def check_language(lang: Optional[str]) -> LanguageCheck:
    value = (lang or "").strip()
    if not value:
        return LanguageCheck(
            status=CheckStatus.WARNING,
            message="Your page is not using the Lang Attribute. Declaring a language "
            "helps search engines and assistive technologies understand your content.",
        )
    if not _LANG_PATTERN.match(value):
        return LanguageCheck(
            has_lang_attribute=True,
            declared_language=value,
            status=CheckStatus.WARNING,
            message=f"Your page declares a Lang Attribute that is not a valid "
            f"language code: {value}",
        )
    return LanguageCheck(
        has_lang_attribute=True,
        declared_language=value,
        is_valid=True,
        status=CheckStatus.GOOD,
        message=f"Your page is using the Lang Attribute. Declared: {value}",
    )


def check_headers(headings: Headings) -> HeadersCheck:
    """Exactly one H1 is good, several is a warning, none is an error."""
    counts = headings.counts()
    frequency = {f"h{idx + 1}": count for idx, count in enumerate(counts)}
    h1_count, h2_count, h3_count = counts[0], counts[1], counts[2]

    if h1_count == 0:
        return HeadersCheck(
            header_frequency=frequency,
            status=CheckStatus.ERROR,
            message="Your page is missing an H1 Tag. H1 tags help search engines "
            "understand the main topic of your page.",
        )

    if h1_count > 1:
        return HeadersCheck(
            has_h1=True,
            h1_tags=headings.h1,
            header_frequency=frequency,
            has_multiple_h1=True,
            status=CheckStatus.WARNING,
            message=f"Your page has {h1_count} H1 Tags. Ideally, you should have only "
            f"one H1 tag per page for better SEO structure.",
        )

    if h2_count or h3_count:
        message = (
            f"Your page has {h1_count} H1 Tag and uses multiple levels of Header Tags "
            f"(H2: {h2_count}, H3: {h3_count})."
        )
    else:
        message = f"Your page has {h1_count} H1 Tag."
    return HeadersCheck(
        has_h1=True,
        h1_tags=headings.h1,
        header_frequency=frequency,
        status=CheckStatus.GOOD,
        message=message,
    )


def check_content_amount(word_count: int) -> ContentAmountCheck:
    word_count = max(0, word_count or 0)
    if word_count < WORDS_MIN:
        return ContentAmountCheck(
            word_count=word_count,
            status=CheckStatus.WARNING,
            message=f"Your page has {word_count} words, which is below the recommended "
            f"minimum of {WORDS_MIN} words. Adding more content can improve your "
            f"ranking potential.",
        )
    if word_count > WORDS_MAX:
        return ContentAmountCheck(
            word_count=word_count,
            status=CheckStatus.WARNING,
            message=f"Your page has {word_count} words, which exceeds the recommended "
            f"maximum of {WORDS_MAX} words. Consider breaking up lengthy content into "
            f"multiple pages.",
        )
    return ContentAmountCheck(
        word_count=word_count,
        status=CheckStatus.GOOD,
        message=f"Your page has a good level of textual content ({word_count} words), "
        f"which will assist in its ranking potential.",
    )


def check_image_alt(images: list) -> ImageAltCheck:
    """
    An image has alt text iff its alt is non-blank. Up to half missing is a
    warning; more than half is an error.
    """
    entries = [
        ImageAltEntry(src=img.src, alt=img.alt, has_alt=img.has_alt) for img in images or []
    ]
    total = len(entries)
    with_alt = sum(1 for e in entries if e.has_alt)
    without_alt = total - with_alt
    missing = int(round_half_up(without_alt / total * 100)) if total else 0

    if without_alt == 0:
        status = CheckStatus.GOOD
        message = (
            f"You do not have any images missing Alt Attributes on your page. "
            f"All {total} images have proper alt text."
        )
    elif missing <= 50:
        status = CheckStatus.WARNING
        message = (
            f"{without_alt} image(s) on your page are missing Alt Attributes "
            f"({missing}% of total). Adding alt text improves accessibility and SEO."
        )
    else:
        status = CheckStatus.ERROR
        message = (
            f"{without_alt} image(s) on your page are missing Alt Attributes "
            f"({missing}% of total). This significantly impacts accessibility and SEO."
        )

    return ImageAltCheck(
        total_images=total,
        images_with_alt=with_alt,
        images_without_alt=without_alt,
        missing_percentage=missing,
        images=entries,
        status=status,
        message=message,
    )


def check_canonical_tag(canonical: str) -> CanonicalTagCheck:
    value = (canonical or "").strip()
    if not value:
        return CanonicalTagCheck(
            status=CheckStatus.WARNING,
            message="Your page is not using a Canonical Tag. Canonical tags help "
            "prevent duplicate content issues.",
        )
    return CanonicalTagCheck(
        has_canonical=True,
        canonical_url=value,
        status=CheckStatus.GOOD,
        message=f"Your page is using the Canonical Tag: {value}",
    )


def check_noindex_tag(robots_content: str) -> NoindexTagCheck:
    if "noindex" in (robots_content or "").lower():
        return NoindexTagCheck(
            has_noindex=True,
            status=CheckStatus.WARNING,
            message="Your page is using the Noindex Tag which prevents indexing. "
            "This means search engines will not index this page.",
        )
    return NoindexTagCheck(
        status=CheckStatus.GOOD,
        message="Your page is not using the Noindex Tag which allows indexing.",
    )


def check_noindex_header(x_robots_tag: str) -> NoindexHeaderCheck:
    if "noindex" in (x_robots_tag or "").lower():
        return NoindexHeaderCheck(
            has_noindex_in_header=True,
            status=CheckStatus.WARNING,
            message="Your page is using the Noindex Header which prevents indexing.",
        )
    return NoindexHeaderCheck(
        status=CheckStatus.GOOD,
        message="Your page is not using the Noindex Header which allows indexing.",
    )


# ─── Probe-Backed Checks ──────────────────────────────────────────────


def check_ssl(security: Optional[SecurityFacts]) -> SSLCheck:
    if security is None:
        return SSLCheck(status=CheckStatus.WARNING, message=_not_assessed("SSL"))
    if security.ssl_enabled:
        return SSLCheck(
            is_ssl_enabled=True,
            status=CheckStatus.GOOD,
            message="Your website has SSL enabled.",
        )
    return SSLCheck(
        status=CheckStatus.ERROR,
        message="Your website does not have SSL enabled. This can affect security and SEO.",
    )


def check_https_redirect(security: Optional[SecurityFacts]) -> HttpsRedirectCheck:
    if security is None:
        return HttpsRedirectCheck(
            status=CheckStatus.WARNING, message=_not_assessed("HTTPS redirection")
        )
    if security.https_redirect:
        return HttpsRedirectCheck(
            is_https_redirect=True,
            status=CheckStatus.GOOD,
            message="Your page successfully redirects to a HTTPS (SSL secure) version.",
        )
    return HttpsRedirectCheck(
        status=CheckStatus.WARNING,
        message="Your page does not redirect to HTTPS. Consider redirecting to the "
        "secure version.",
    )


def check_robots_txt(crawlers: Optional[CrawlerFacts]) -> RobotsTxtCheck:
    if crawlers is None:
        return RobotsTxtCheck(status=CheckStatus.WARNING, message=_not_assessed("robots.txt"))
    if crawlers.robots_txt_exists:
        return RobotsTxtCheck(
            has_robots_txt=True,
            robots_txt_url=crawlers.robots_txt_url,
            status=CheckStatus.GOOD,
            message=f"Your website appears to have a robots.txt file. "
            f"{crawlers.robots_txt_url or ''}".strip(),
        )
    return RobotsTxtCheck(
        status=CheckStatus.WARNING,
        message="Your website does not appear to have a robots.txt file.",
    )


def check_blocked_by_robots(crawlers: Optional[CrawlerFacts]) -> BlockedByRobotsCheck:
    if crawlers is None:
        return BlockedByRobotsCheck(
            status=CheckStatus.WARNING, message=_not_assessed("Blocking by robots.txt")
        )
    if crawlers.blocked_by_robots:
        return BlockedByRobotsCheck(
            is_blocked=True,
            status=CheckStatus.WARNING,
            message="Your page appears to be blocked by robots.txt.",
        )
    return BlockedByRobotsCheck(
        status=CheckStatus.GOOD,
        message="Your page does not appear to be blocked by robots.txt.",
    )


def check_llms_txt(crawlers: Optional[CrawlerFacts]) -> LlmsTxtCheck:
    if crawlers is None:
        return LlmsTxtCheck(status=CheckStatus.WARNING, message=_not_assessed("llms.txt"))
    if crawlers.llms_txt_exists:
        return LlmsTxtCheck(
            has_llms_txt=True,
            llms_txt_url=crawlers.llms_txt_url,
            status=CheckStatus.GOOD,
            message=f"Your website has an llms.txt file. {crawlers.llms_txt_url or ''}".strip(),
        )
    return LlmsTxtCheck(
        status=CheckStatus.WARNING,
        message="We have not detected or been able to retrieve an llms.txt file successfully.",
    )


def check_xml_sitemap(sitemaps: Optional[SitemapFacts]) -> XmlSitemapCheck:
    if sitemaps is None:
        return XmlSitemapCheck(status=CheckStatus.WARNING, message=_not_assessed("XML Sitemap"))
    if sitemaps.xml_sitemap_exists:
        return XmlSitemapCheck(
            has_xml_sitemap=True,
            xml_sitemap_url=sitemaps.xml_sitemap_url,
            status=CheckStatus.GOOD,
            message=f"Your website appears to have an XML Sitemap. "
            f"{sitemaps.xml_sitemap_url or ''}".strip(),
        )
    return XmlSitemapCheck(
        status=CheckStatus.WARNING,
        message="Your website does not appear to have an XML Sitemap.",
    )


def check_analytics(analytics: Optional[AnalyticsFacts]) -> AnalyticsCheck:
    if analytics is None:
        return AnalyticsCheck(status=CheckStatus.WARNING, message=_not_assessed("Analytics"))
    if analytics.has_analytics:
        suffix = f" {analytics.analytics_type}" if analytics.analytics_type else ""
        return AnalyticsCheck(
            has_analytics=True,
            analytics_type=analytics.analytics_type,
            status=CheckStatus.GOOD,
            message=f"Your page is using an analytics tool.{suffix}",
        )
    return AnalyticsCheck(
        status=CheckStatus.WARNING,
        message="Your page is not using an analytics tool. Consider adding analytics "
        "to track performance.",
    )


def check_schema_org(structured_data: Optional[StructuredDataFacts]) -> SchemaOrgCheck:
    if structured_data is None:
        return SchemaOrgCheck(
            status=CheckStatus.WARNING, message=_not_assessed("Structured data")
        )
    if structured_data.has_json_ld:
        types = list(structured_data.schema_types)
        suffix = f" Types: {', '.join(types)}" if types else ""
        return SchemaOrgCheck(
            has_json_ld=True,
            schema_types=types,
            status=CheckStatus.GOOD,
            message=f"You are using JSON-LD Schema on your page.{suffix}",
        )
    return SchemaOrgCheck(
        status=CheckStatus.WARNING,
        message="Your page is not using JSON-LD Schema markup.",
    )


def check_identity_schema(structured_data: Optional[StructuredDataFacts]) -> IdentitySchemaCheck:
    if structured_data is None:
        return IdentitySchemaCheck(
            status=CheckStatus.WARNING, message=_not_assessed("Identity schema")
        )
    if structured_data.has_organization_schema or structured_data.has_person_schema:
        name = structured_data.organization_name
        return IdentitySchemaCheck(
            has_organization_schema=structured_data.has_organization_schema,
            has_person_schema=structured_data.has_person_schema,
            organization_name=name,
            status=CheckStatus.GOOD,
            message=f"Organization or Person Schema identified on the page. {name or ''}".strip(),
        )
    return IdentitySchemaCheck(
        status=CheckStatus.WARNING,
        message="No Organization or Person Schema identified on the page.",
    )


# ─── Main Entry Point ─────────────────────────────────────────────────


def _as_facts(facts: Union[OnPageFacts, WebsiteContent, Mapping[str, Any], None]) -> OnPageFacts:
    if isinstance(facts, OnPageFacts):
        return facts
    if isinstance(facts, WebsiteContent):
        return OnPageFacts.from_website_content(facts)
    return OnPageFacts.model_validate(dict(facts or {}))


def run_onpage_seo_analysis(
    facts: Union[OnPageFacts, WebsiteContent, Mapping[str, Any], None],
) -> OnPageSEOAnalysis:
    """
    Evaluate all on-page checks.

    Args:
        facts: ``OnPageFacts``, a full ``WebsiteContent``, or a plain mapping
            with ``OnPageFacts`` keys (missing keys take empty defaults).

    Returns:
        OnPageSEOAnalysis with every check populated.
    """
    f = _as_facts(facts)
    return OnPageSEOAnalysis(
        title_tag=check_title_tag(f.title),
        meta_description=check_meta_description(f.meta_description),
        hreflang=check_hreflang(f.hreflang),
        language=check_language(f.lang),
        headers=check_headers(f.headings),
        content_amount=check_content_amount(f.word_count),
        image_alt=check_image_alt(f.images),
        canonical_tag=check_canonical_tag(f.canonical),
        noindex_tag=check_noindex_tag(f.robots_content),
        noindex_header=check_noindex_header(f.x_robots_tag),
        ssl_enabled=check_ssl(f.security),
        https_redirect=check_https_redirect(f.security),
        robots_txt=check_robots_txt(f.crawlers),
        blocked_by_robots=check_blocked_by_robots(f.crawlers),
        llms_txt=check_llms_txt(f.crawlers),
        xml_sitemap=check_xml_sitemap(f.sitemaps),
        analytics=check_analytics(f.analytics),
        schema_org=check_schema_org(f.structured_data),
        identity_schema=check_identity_schema(f.structured_data),
    )
