"""
pageaudit.onpage — on-page SEO rule evaluation and the audit façade.

Usage:
    from pageaudit.onpage import SEOAnalyzer, run_onpage_seo_analysis

    report = await SEOAnalyzer().audit("example.com")
    analysis = run_onpage_seo_analysis(website_content)
"""

from .analyzer import AuditReport, SEOAnalyzer
from .checks import run_onpage_seo_analysis
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

__all__ = [
    # Main entry points
    "SEOAnalyzer",
    "AuditReport",
    "run_onpage_seo_analysis",
    # Input and report
    "CheckStatus",
    "OnPageFacts",
    "OnPageSEOAnalysis",
    # Per-check results
    "TitleTagCheck",
    "MetaDescriptionCheck",
    "HreflangCheck",
    "LanguageCheck",
    "HeadersCheck",
    "ContentAmountCheck",
    "ImageAltCheck",
    "CanonicalTagCheck",
    "NoindexTagCheck",
    "NoindexHeaderCheck",
    "SSLCheck",
    "HttpsRedirectCheck",
    "RobotsTxtCheck",
    "BlockedByRobotsCheck",
    "LlmsTxtCheck",
    "XmlSitemapCheck",
    "AnalyticsCheck",
    "SchemaOrgCheck",
    "IdentitySchemaCheck",
]
