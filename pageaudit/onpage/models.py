"""
On-page SEO report models.

Every check carries ``status`` and a human-readable ``message`` plus the facts
it was judged on. ``OnPageSEOAnalysis`` always holds all nineteen checks.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models import (
    AnalyticsFacts,
    CrawlerFacts,
    Headings,
    ImageFact,
    SecurityFacts,
    SitemapFacts,
    StructuredDataFacts,
    WebsiteContent,
)


class CheckStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"


class _Check(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: CheckStatus = CheckStatus.WARNING
    message: str = ""


# ─── Per-Check Results ────────────────────────────────────────────────


class TitleTagCheck(_Check):
    exists: bool = False
    title: str = ""
    length: int = 0
    is_optimal_length: bool = False
    min_length: int = 50
    max_length: int = 60


class MetaDescriptionCheck(_Check):
    exists: bool = False
    description: str = ""
    length: int = 0
    is_optimal_length: bool = False
    min_length: int = 120
    max_length: int = 160


class HreflangCheck(_Check):
    has_hreflang: bool = False
    hreflang_entries: List[str] = Field(default_factory=list)


class LanguageCheck(_Check):
    has_lang_attribute: bool = False
    declared_language: Optional[str] = None
    is_valid: bool = False


class HeadersCheck(_Check):
    has_h1: bool = False
    h1_tags: List[str] = Field(default_factory=list)
    header_frequency: Dict[str, int] = Field(default_factory=dict)
    has_multiple_h1: bool = False


class ContentAmountCheck(_Check):
    word_count: int = 0
    min_words: int = 300
    max_words: int = 3500


class ImageAltEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    src: str = ""
    alt: str = ""
    has_alt: bool = False


class ImageAltCheck(_Check):
    total_images: int = 0
    images_with_alt: int = 0
    images_without_alt: int = 0
    missing_percentage: int = 0
    images: List[ImageAltEntry] = Field(default_factory=list)


class CanonicalTagCheck(_Check):
    has_canonical: bool = False
    canonical_url: Optional[str] = None


class NoindexTagCheck(_Check):
    has_noindex: bool = False


class NoindexHeaderCheck(_Check):
    has_noindex_in_header: bool = False


class SSLCheck(_Check):
    is_ssl_enabled: bool = False


class HttpsRedirectCheck(_Check):
    is_https_redirect: bool = False


class RobotsTxtCheck(_Check):
    has_robots_txt: bool = False
    robots_txt_url: Optional[str] = None


class BlockedByRobotsCheck(_Check):
    is_blocked: bool = False


class LlmsTxtCheck(_Check):
    has_llms_txt: bool = False
    llms_txt_url: Optional[str] = None


class XmlSitemapCheck(_Check):
    has_xml_sitemap: bool = False
    xml_sitemap_url: Optional[str] = None


class AnalyticsCheck(_Check):
    has_analytics: bool = False
    analytics_type: Optional[str] = None


class SchemaOrgCheck(_Check):
    has_json_ld: bool = False
    schema_types: List[str] = Field(default_factory=list)


class IdentitySchemaCheck(_Check):
    has_organization_schema: bool = False
    has_person_schema: bool = False
    organization_name: Optional[str] = None


# ─── Report ───────────────────────────────────────────────────────────


class OnPageSEOAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    title_tag: TitleTagCheck
    meta_description: MetaDescriptionCheck
    hreflang: HreflangCheck
    language: LanguageCheck
    headers: HeadersCheck
    content_amount: ContentAmountCheck
    image_alt: ImageAltCheck
    canonical_tag: CanonicalTagCheck
    noindex_tag: NoindexTagCheck
    noindex_header: NoindexHeaderCheck
    ssl_enabled: SSLCheck
    https_redirect: HttpsRedirectCheck
    robots_txt: RobotsTxtCheck
    blocked_by_robots: BlockedByRobotsCheck
    llms_txt: LlmsTxtCheck
    xml_sitemap: XmlSitemapCheck
    analytics: AnalyticsCheck
    schema_org: SchemaOrgCheck
    identity_schema: IdentitySchemaCheck

    def _with_status(self, status: CheckStatus) -> List[str]:
        found = []
        for field_name in type(self).model_fields:
            val = getattr(self, field_name)
            if val.status == status:
                found.append(f"{field_name}: {val.message}")
        return found

    @property
    def errors(self) -> List[str]:
        return self._with_status(CheckStatus.ERROR)

    @property
    def warnings(self) -> List[str]:
        return self._with_status(CheckStatus.WARNING)

    def status_counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in CheckStatus}
        for field_name in type(self).model_fields:
            counts[getattr(self, field_name).status.value] += 1
        return counts


# ─── Evaluator Input ──────────────────────────────────────────────────


def _without_nulls(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _without_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_without_nulls(v) for v in value if v is not None]
    return value


class OnPageFacts(BaseModel):
    """
    The subset of page facts the rule evaluator reads. Optional groups left
    as None are reported as not assessed rather than as failures.

    Mapping input may carry None for any fact; those keys take their empty
    defaults, at any depth.
    """

    title: str = ""
    meta_description: str = ""
    headings: Headings = Field(default_factory=Headings)
    canonical: str = ""
    robots_content: str = ""
    x_robots_tag: str = ""
    hreflang: List[str] = Field(default_factory=list)
    lang: Optional[str] = None
    word_count: int = 0
    images: List[ImageFact] = Field(default_factory=list)
    security: Optional[SecurityFacts] = None
    crawlers: Optional[CrawlerFacts] = None
    sitemaps: Optional[SitemapFacts] = None
    analytics: Optional[AnalyticsFacts] = None
    structured_data: Optional[StructuredDataFacts] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_null_facts(cls, data: Any) -> Any:
        return _without_nulls(data) if isinstance(data, Mapping) else data

    @classmethod
    def from_website_content(cls, content: WebsiteContent) -> "OnPageFacts":
        return cls(
            title=content.title,
            meta_description=content.meta_description,
            headings=content.headings,
            canonical=content.meta.canonical,
            robots_content=content.meta.robots,
            x_robots_tag=content.meta.x_robots_tag,
            hreflang=[entry.lang for entry in content.meta.hreflang],
            lang=content.technical.technical_seo.lang_attribute,
            word_count=content.performance.word_count,
            images=content.images,
            security=content.security,
            crawlers=content.crawlers,
            sitemaps=content.sitemaps,
            analytics=content.analytics,
            structured_data=content.structured_data,
        )
