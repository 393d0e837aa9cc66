"""
Markup extraction.

Turns a fetched HTML document into a ``PageMarkup`` fact set. Pure: no I/O,
never raises on missing or malformed optional markup.
"""

import json
import logging
import re
from typing import Any, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from .models import (
    HEADING_LEVELS,
    Headings,
    HreflangEntry,
    ImageFact,
    LinkFact,
    MetaTags,
    PageMarkup,
    StructuredDataFacts,
)

logger = logging.getLogger(__name__)

_INVISIBLE_TAGS = {"script", "style", "noscript", "template"}
_ORGANIZATION_TYPES = {"Organization", "ProfessionalService"}
_WHITESPACE = re.compile(r"\s+")


def normalize_url(url: str) -> str:
    """Coerce bare domains to https://."""
    value = (url or "").strip()
    return value if value.startswith("http") else f"https://{value}"


def page_origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _empty_document() -> HtmlElement:
    return lxml_html.document_fromstring("<html><body></body></html>")


def _parse_html(raw_html: str) -> HtmlElement:
    """
    Parse HTML into a full document tree, degrading to an empty document.

    Always parsed as a document so that markup without <html>/<body> (legal
    in HTML5) still gets a <body> holding its text.
    """
    if not (raw_html or "").strip():
        return _empty_document()
    try:
        return lxml_html.document_fromstring(raw_html)
    except ValueError:
        # str input carrying an XML encoding declaration
        try:
            return lxml_html.document_fromstring(raw_html.encode("utf-8"))
        except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
            logger.debug(f"Unparsable document, treating as empty: {e}")
            return _empty_document()
    except (etree.ParserError, etree.XMLSyntaxError) as e:
        logger.debug(f"Unparsable document, treating as empty: {e}")
        return _empty_document()


def _first(values: List[Any]) -> str:
    return str(values[0]).strip() if values else ""


def _text(el: HtmlElement) -> str:
    return (el.text_content() or "").strip()


# ─── Individual Extractors ────────────────────────────────────────────


def extract_title(tree: HtmlElement) -> str:
    titles = tree.xpath("//title")
    return _text(titles[0]) if titles else ""


def extract_meta(tree: HtmlElement) -> MetaTags:
    """Collect the named meta tags, Open Graph, Twitter Card and hreflang."""
    open_graph = {}
    for el in tree.xpath('//meta[starts-with(@property, "og:")]'):
        key = (el.get("property") or "")[3:]
        content = el.get("content") or ""
        if key and content:
            open_graph[key] = content

    twitter = {}
    for el in tree.xpath('//meta[starts-with(@name, "twitter:")]'):
        key = (el.get("name") or "")[8:]
        content = el.get("content") or ""
        if key and content:
            twitter[key] = content

    hreflang: List[HreflangEntry] = []
    for link in tree.xpath('//link[@rel="alternate"][@hreflang]'):
        lang = (link.get("hreflang") or "").strip()
        href = (link.get("href") or "").strip()
        if lang and href:
            hreflang.append(HreflangEntry(lang=lang, href=href))

    return MetaTags(
        keywords=_first(tree.xpath('//meta[@name="keywords"]/@content')),
        author=_first(tree.xpath('//meta[@name="author"]/@content')),
        viewport=_first(tree.xpath('//meta[@name="viewport"]/@content')),
        robots=_first(tree.xpath('//meta[@name="robots"]/@content')),
        canonical=_first(tree.xpath('//link[@rel="canonical"]/@href')),
        open_graph=open_graph,
        twitter=twitter,
        hreflang=hreflang,
    )


def extract_headings(tree: HtmlElement) -> Headings:
    return Headings(
        **{level: [_text(el) for el in tree.xpath(f"//{level}")] for level in HEADING_LEVELS}
    )


def _visible_parts(el: HtmlElement) -> Iterable[str]:
    if isinstance(el.tag, str) and el.tag not in _INVISIBLE_TAGS:
        if el.text:
            yield el.text
        for child in el:
            yield from _visible_parts(child)
    if el.tail:
        yield el.tail


def extract_content(tree: HtmlElement) -> str:
    """Flattened visible body text with whitespace runs collapsed."""
    body = tree.xpath("//body")
    root = body[0] if body else tree
    parts = []
    if root.text:
        parts.append(root.text)
    for child in root:
        if not body and child.tag == "head":
            continue
        parts.extend(_visible_parts(child))
    return _WHITESPACE.sub(" ", " ".join(parts)).strip()


def extract_images(tree: HtmlElement) -> List[ImageFact]:
    return [
        ImageFact(
            src=img.get("src") or "",
            alt=img.get("alt") or "",
            title=img.get("title") or "",
            width=img.get("width") or "",
            height=img.get("height") or "",
            loading=img.get("loading") or "",
            css_class=img.get("class") or "",
            element_id=img.get("id") or "",
        )
        for img in tree.xpath("//img")
    ]


def extract_links(tree: HtmlElement, page_url: str) -> List[LinkFact]:
    """
    Collect anchors. A link is external when its href is absolute and does
    not contain the page origin as a substring; subdomains of the origin
    therefore count as internal.
    """
    origin = page_origin(page_url)
    links: List[LinkFact] = []
    for a in tree.xpath("//a[@href]"):
        href = a.get("href") or ""
        text = _text(a)
        rel = (a.get("rel") or "").lower()
        links.append(
            LinkFact(
                href=href,
                text=text,
                anchor_text=text or (a.get("title") or ""),
                is_external=href.startswith("http") and origin not in href,
                is_nofollow="nofollow" in rel,
            )
        )
    return links


def _schema_entries(data: Any) -> Iterable[dict]:
    if isinstance(data, list):
        for item in data:
            yield from _schema_entries(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            for item in graph:
                yield from _schema_entries(item)


def _schema_types(entry: dict) -> List[str]:
    value = entry.get("@type")
    if isinstance(value, list):
        return [str(t) for t in value if t]
    return [str(value)] if value else []


def extract_structured_data(tree: HtmlElement) -> StructuredDataFacts:
    """
    Parse JSON-LD blocks. Blocks that are not valid JSON are counted and
    skipped; the remaining blocks are still processed.
    """
    blocks = tree.xpath('//script[@type="application/ld+json"]')
    schema_types: List[str] = []
    has_organization = has_person = False
    organization_name: Optional[str] = None
    invalid_blocks = 0

    for block in blocks:
        try:
            data = json.loads(block.text_content() or "")
        except ValueError:
            invalid_blocks += 1
            logger.debug("Skipping invalid JSON-LD block")
            continue

        for entry in _schema_entries(data):
            types = _schema_types(entry)
            schema_types.extend(types)
            if _ORGANIZATION_TYPES.intersection(types):
                has_organization = True
                name = entry.get("name")
                if organization_name is None and isinstance(name, str) and name:
                    organization_name = name
            if "Person" in types:
                has_person = True

    return StructuredDataFacts(
        has_json_ld=bool(blocks),
        schema_types=schema_types,
        has_organization_schema=has_organization,
        has_person_schema=has_person,
        organization_name=organization_name,
        invalid_blocks=invalid_blocks,
    )


def extract_scripts(tree: HtmlElement) -> Tuple[List[str], List[str]]:
    """Return (external script sources, inline script bodies)."""
    sources: List[str] = []
    inline: List[str] = []
    for script in tree.xpath("//script"):
        src = script.get("src")
        if src:
            sources.append(src.strip())
        elif (script.get("type") or "").lower() != "application/ld+json":
            body = script.text_content() or ""
            if body.strip():
                inline.append(body)
    return sources, inline


def _has_link_rel(tree: HtmlElement, *rels: str) -> bool:
    for value in tree.xpath("//link/@rel"):
        if str(value).strip().lower() in rels:
            return True
    return False


# ─── Main Extraction ──────────────────────────────────────────────────


def extract_page(url: str, raw_html: str, x_robots_tag: Optional[str] = None) -> PageMarkup:
    """
    Extract every markup-level fact from one document.

    Args:
        url: The page URL (protocol-normalized if bare).
        raw_html: The full HTML body.
        x_robots_tag: The X-Robots-Tag response header, if any.

    Returns:
        PageMarkup with all fields populated (empty defaults where absent).
    """
    url = normalize_url(url)
    tree = _parse_html(raw_html)

    meta = extract_meta(tree)
    if x_robots_tag:
        meta = meta.model_copy(update={"x_robots_tag": x_robots_tag.strip()})

    sources, inline = extract_scripts(tree)
    lang = _first(tree.xpath("//html/@lang")) or None

    return PageMarkup(
        url=url,
        title=extract_title(tree),
        meta_description=_first(tree.xpath('//meta[@name="description"]/@content')),
        headings=extract_headings(tree),
        content=extract_content(tree),
        images=extract_images(tree),
        links=extract_links(tree, url),
        meta=meta,
        structured_data=extract_structured_data(tree),
        lang=lang,
        script_sources=sources,
        inline_scripts=inline,
        has_favicon=_has_link_rel(tree, "icon", "shortcut icon", "apple-touch-icon"),
        has_manifest=_has_link_rel(tree, "manifest"),
        has_sitemap_link=_has_link_rel(tree, "sitemap")
        or bool(tree.xpath('//link[@type="application/xml"]')),
    )
