"""
Fact-tree data models.

One ``WebsiteContent`` is built per audited page. Optional fact groups
(``crawlers``, ``sitemaps``) are ``None`` when the probe that fills them was
not run, so consumers can tell "not assessed" apart from a negative result.

Fact models are frozen and hold tuples, so counts derived at assembly time
keep matching their sequences. ``PageMarkup`` is the extractor's working
copy and stays mutable.
"""

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")


class _Fact(BaseModel):
    model_config = ConfigDict(frozen=True)


# ─── Markup Facts ─────────────────────────────────────────────────────


class Headings(_Fact):
    h1: Tuple[str, ...] = ()
    h2: Tuple[str, ...] = ()
    h3: Tuple[str, ...] = ()
    h4: Tuple[str, ...] = ()
    h5: Tuple[str, ...] = ()
    h6: Tuple[str, ...] = ()

    def counts(self) -> List[int]:
        """Heading counts ordered h1..h6."""
        return [len(getattr(self, level)) for level in HEADING_LEVELS]

    @property
    def total(self) -> int:
        return sum(self.counts())


class ImageFact(_Fact):
    src: str = ""
    alt: str = ""
    title: str = ""
    width: str = ""
    height: str = ""
    loading: str = ""
    css_class: str = ""
    element_id: str = ""
    # Only set when the byte download succeeded
    base64: Optional[str] = None
    size: Optional[int] = None
    format: Optional[str] = None
    is_logo: bool = False
    is_hero: bool = False
    is_product: bool = False

    @property
    def has_alt(self) -> bool:
        return bool(self.alt and self.alt.strip())

    @property
    def has_dimensions(self) -> bool:
        return bool(self.width and self.height)


class LinkFact(_Fact):
    href: str
    text: str = ""
    anchor_text: str = ""
    is_external: bool = False
    is_nofollow: bool = False


class HreflangEntry(_Fact):
    lang: str = ""
    href: str = ""


class MetaTags(_Fact):
    keywords: str = ""
    author: str = ""
    viewport: str = ""
    robots: str = ""
    canonical: str = ""
    open_graph: Dict[str, str] = Field(default_factory=dict)
    twitter: Dict[str, str] = Field(default_factory=dict)
    hreflang: Tuple[HreflangEntry, ...] = ()
    x_robots_tag: str = ""


class StructuredDataFacts(_Fact):
    has_json_ld: bool = False
    schema_types: Tuple[str, ...] = ()
    has_organization_schema: bool = False
    has_person_schema: bool = False
    organization_name: Optional[str] = None
    invalid_blocks: int = 0


class PageMarkup(BaseModel):
    """Everything the extractor reads from the document itself."""

    url: str
    title: str = ""
    meta_description: str = ""
    headings: Headings = Field(default_factory=Headings)
    content: str = ""
    images: List[ImageFact] = Field(default_factory=list)
    links: List[LinkFact] = Field(default_factory=list)
    meta: MetaTags = Field(default_factory=MetaTags)
    structured_data: StructuredDataFacts = Field(default_factory=StructuredDataFacts)
    lang: Optional[str] = None
    script_sources: List[str] = Field(default_factory=list)
    inline_scripts: List[str] = Field(default_factory=list)
    has_favicon: bool = False
    has_manifest: bool = False
    has_sitemap_link: bool = False


# ─── Derived Facts ────────────────────────────────────────────────────


class PerformanceFacts(_Fact):
    content_length: int = 0
    word_count: int = 0
    heading_count: int = 0
    image_count: int = 0
    link_count: int = 0
    internal_link_count: int = 0
    external_link_count: int = 0
    nofollow_link_count: int = 0
    has_structured_data: bool = False
    has_viewport_meta: bool = False
    has_robots_meta: bool = False
    has_canonical: bool = False
    has_open_graph: bool = False
    has_twitter_cards: bool = False
    structured_data_types: Tuple[str, ...] = ()


class HeadingStructure(_Fact):
    has_h1: bool = False
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    h4_count: int = 0
    h5_count: int = 0
    h6_count: int = 0
    proper_hierarchy: bool = False
    skipped_levels: bool = False


class CoreWebVitals(_Fact):
    lcp: float = 0.0  # seconds
    inp: float = 0.0  # milliseconds
    cls: float = 0.0
    source: Literal["measured", "simulated"] = "simulated"


class PageSpeedEstimate(_Fact):
    desktop: float = 0.0
    mobile: float = 0.0
    desktop_source: Literal["measured", "estimated"] = "estimated"
    mobile_source: Literal["measured", "estimated"] = "estimated"


class ReadabilityScore(_Fact):
    flesch_kincaid: float = 0.0
    reading_level: str = "Easy"
    avg_words_per_sentence: float = 0.0


class SocialSharing(_Fact):
    facebook_shareable: bool = False
    twitter_shareable: bool = False
    linkedin_shareable: bool = False


class TechnicalSEO(_Fact):
    has_robots_txt: bool = False
    has_sitemap: bool = False
    has_favicon: bool = False
    has_manifest: bool = False
    language_declared: bool = False
    lang_attribute: Optional[str] = None


class TechnicalFacts(_Fact):
    has_https: bool = False
    has_h1: bool = False
    has_multiple_h1: bool = False
    has_title: bool = False
    has_meta_description: bool = False
    title_length: int = 0
    meta_description_length: int = 0
    images_without_alt: int = 0
    images_with_alt: int = 0
    images_without_dimensions: int = 0
    heading_structure: HeadingStructure = Field(default_factory=HeadingStructure)
    # Bounded illustrative estimates, not measured data
    domain_authority: int = 1
    estimated_backlinks: int = 0
    estimated_organic_traffic: int = 0
    core_web_vitals: CoreWebVitals = Field(default_factory=CoreWebVitals)
    mobile_friendliness: bool = False
    page_speed: PageSpeedEstimate = Field(default_factory=PageSpeedEstimate)
    readability_score: ReadabilityScore = Field(default_factory=ReadabilityScore)
    social_sharing: SocialSharing = Field(default_factory=SocialSharing)
    technical_seo: TechnicalSEO = Field(default_factory=TechnicalSEO)


# ─── Probe Facts ──────────────────────────────────────────────────────


class SecurityFacts(_Fact):
    ssl_enabled: bool = False
    https_redirect: bool = False


class CrawlerFacts(_Fact):
    robots_txt_url: Optional[str] = None
    robots_txt_exists: bool = False
    blocked_by_robots: bool = False
    disallowed_paths: Tuple[str, ...] = ()
    llms_txt_url: Optional[str] = None
    llms_txt_exists: bool = False


class SitemapFacts(_Fact):
    xml_sitemap_url: Optional[str] = None
    xml_sitemap_exists: bool = False
    url_count: int = 0
    last_modified: Optional[str] = None
    declared_in_robots: Tuple[str, ...] = ()


class AnalyticsFacts(_Fact):
    has_analytics: bool = False
    analytics_type: Optional[str] = None
    tools: Tuple[str, ...] = ()


class UsabilityFacts(_Fact):
    viewport: str = ""
    mobile_friendly: bool = False
    has_favicon: bool = False
    language_declared: bool = False
    lazy_loaded_images: int = 0


# ─── Fact Tree ────────────────────────────────────────────────────────


class WebsiteContent(_Fact):
    """The complete fact tree for one page audit."""

    url: str
    title: str = ""
    meta_description: str = ""
    headings: Headings = Field(default_factory=Headings)
    content: str = ""
    images: Tuple[ImageFact, ...] = ()
    links: Tuple[LinkFact, ...] = ()
    meta: MetaTags = Field(default_factory=MetaTags)
    performance: PerformanceFacts = Field(default_factory=PerformanceFacts)
    technical: TechnicalFacts = Field(default_factory=TechnicalFacts)
    security: SecurityFacts = Field(default_factory=SecurityFacts)
    crawlers: Optional[CrawlerFacts] = None
    sitemaps: Optional[SitemapFacts] = None
    analytics: AnalyticsFacts = Field(default_factory=AnalyticsFacts)
    structured_data: StructuredDataFacts = Field(default_factory=StructuredDataFacts)
    usability: UsabilityFacts = Field(default_factory=UsabilityFacts)


# ─── PageSpeed ────────────────────────────────────────────────────────


class PerformanceMetrics(BaseModel):
    """Raw lab metrics, milliseconds except CLS."""

    server_response_time_ms: float = 0.0
    first_contentful_paint_ms: float = 0.0
    largest_contentful_paint_ms: float = 0.0
    speed_index_ms: float = 0.0
    time_to_interactive_ms: float = 0.0
    total_blocking_time_ms: float = 0.0
    cumulative_layout_shift: float = 0.0


class DisplayMetrics(BaseModel):
    """The same lab metrics in seconds (2 decimals) for UI consumption."""

    server_response_time: float = 0.0
    first_contentful_paint: float = 0.0
    largest_contentful_paint: float = 0.0
    speed_index: float = 0.0
    time_to_interactive: float = 0.0
    total_blocking_time: float = 0.0
    cumulative_layout_shift: float = 0.0


class FieldVitals(BaseModel):
    """Real-user (CrUX) percentiles; zero when the origin has no field data."""

    lcp_ms: float = 0.0
    cls: float = 0.0
    inp_ms: float = 0.0


class ResourceBucket(BaseModel):
    count: int = 0
    size_kb: float = 0.0


class ResourceBreakdown(BaseModel):
    total_requests: int = 0
    html: ResourceBucket = Field(default_factory=ResourceBucket)
    js: ResourceBucket = Field(default_factory=ResourceBucket)
    css: ResourceBucket = Field(default_factory=ResourceBucket)
    images: ResourceBucket = Field(default_factory=ResourceBucket)
    fonts: ResourceBucket = Field(default_factory=ResourceBucket)
    media: ResourceBucket = Field(default_factory=ResourceBucket)
    xhr: ResourceBucket = Field(default_factory=ResourceBucket)
    other: ResourceBucket = Field(default_factory=ResourceBucket)

    def buckets(self) -> Dict[str, ResourceBucket]:
        return {
            name: getattr(self, name)
            for name in ("html", "js", "css", "images", "fonts", "media", "xhr", "other")
        }


class PerformanceImage(BaseModel):
    url: str = ""
    format: str = ""
    transfer_size_kb: float = 0.0
    original_size_kb: float = 0.0
    compression_percent: float = 0.0


class ImageSummary(BaseModel):
    total_images: int = 0
    total_transfer_size_mb: float = 0.0
    total_original_size_mb: float = 0.0
    avg_image_size_kb: float = 0.0


class ImageOpportunities(BaseModel):
    oversized_images: List[dict] = Field(default_factory=list)
    next_gen_formats: List[dict] = Field(default_factory=list)
    lazy_loading_issues: List[dict] = Field(default_factory=list)
    image_compression_issues: List[dict] = Field(default_factory=list)


class Screenshot(BaseModel):
    data: str = ""
    timing: float = 0.0


class PerformanceData(BaseModel):
    url: str
    strategy: Literal["mobile", "desktop"]
    scores: Dict[str, int] = Field(default_factory=dict)
    metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    display_metrics: DisplayMetrics = Field(default_factory=DisplayMetrics)
    field_vitals: FieldVitals = Field(default_factory=FieldVitals)
    resource_breakdown: ResourceBreakdown = Field(default_factory=ResourceBreakdown)
    images: List[PerformanceImage] = Field(default_factory=list)
    image_summary: ImageSummary = Field(default_factory=ImageSummary)
    image_opportunities: ImageOpportunities = Field(default_factory=ImageOpportunities)
    screenshot: Screenshot = Field(default_factory=Screenshot)

    @classmethod
    def empty(cls, url: str, strategy: str) -> "PerformanceData":
        """The zero-value document substituted when the service fails."""
        return cls(url=url, strategy=strategy)

    @property
    def is_empty(self) -> bool:
        return not self.scores


class PageSpeedReport(BaseModel):
    mobile: PerformanceData
    desktop: PerformanceData
