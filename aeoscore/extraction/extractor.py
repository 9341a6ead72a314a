"""Content extractor: raw HTML or plain text to a ContentDocument."""

import json
import re
from dataclasses import dataclass

import structlog
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from aeoscore.extraction.cleaner import (
    block_text,
    clean_soup,
    is_boilerplate_element,
    is_json_ld,
    normalize_whitespace,
)
from aeoscore.extraction.document import ContentDocument, NodeType

logger = structlog.get_logger(__name__)

HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

# Block-level elements that carry prose directly
PARAGRAPH_TAGS = frozenset(["p", "blockquote", "pre", "address", "figcaption", "dd"])

LIST_TAGS = frozenset(["ul", "ol", "dl"])

# Document metadata, read separately from the head
METADATA_TAGS = frozenset(["title", "meta", "link", "base"])

# Elements whose children are walked for further blocks
CONTAINER_TAGS = frozenset(
    [
        "html",
        "body",
        "main",
        "article",
        "section",
        "div",
        "header",
        "hgroup",
        "figure",
        "center",
        "fieldset",
        "picture",
    ]
)

QUESTION_PATTERN = re.compile(
    r"^(what|how|why|when|where|who|whom|whose|which|can|could|does|do|did|is|are|was|"
    r"were|should|will|would|has|have|may)\b",
    re.I,
)

MARKDOWN_HEADING = re.compile(r"^(#{1,6})\s+(.+?)\s*#*$")
PRICE_PATTERN = re.compile(r"[$€£]\s?\d[\d,]*(\.\d{2})?")

# Elements read as calls to action, in collection order
CTA_SELECTORS = (
    "button",
    'a[class*="btn"]',
    'a[class*="button"]',
    'a[class*="cta"]',
    '[class*="call-to-action"]',
)
CTA_MIN_CHARS = 3
CTA_MAX_CHARS = 49


def is_question(text: str) -> bool:
    """Check if heading or summary text is phrased as a question."""
    text = text.strip()
    if not text:
        return False
    return text.endswith("?") or bool(QUESTION_PATTERN.match(text))


@dataclass
class ExtractorConfig:
    """Configuration for content extraction."""

    remove_boilerplate: bool = True
    max_content_length: int = 500_000  # Characters of markup parsed
    max_list_items: int = 50
    max_call_to_actions: int = 10


class ContentExtractor:
    """Builds a ContentDocument from raw markup."""

    def __init__(self, config: ExtractorConfig | None = None):
        self.config = config or ExtractorConfig()

    def extract(self, html: str, url: str) -> ContentDocument:
        """
        Extract a structured document from HTML or plain text.

        Malformed markup never raises; unparseable structured-data blocks are
        recorded as issues on the document.

        Args:
            html: Raw HTML or plain text
            url: Page URL

        Returns:
            ContentDocument in document order
        """
        raw = html[: self.config.max_content_length]
        doc = ContentDocument(url=url, html_size=len(html.encode("utf-8")))

        soup = BeautifulSoup(raw, "html.parser")
        if soup.find(True) is None:
            self._extract_plain_text(raw, doc)
        else:
            self._extract_head(soup, doc)
            self._collect_signals(soup, doc)
            removed = clean_soup(soup)
            pending: list[str] = []
            self._walk(soup, doc, pending)
            self._flush(doc, pending)
            logger.debug("markup_cleaned", url=url, removed_elements=removed)

        doc.text_size = len(doc.full_text().encode("utf-8"))

        logger.info(
            "content_extracted",
            url=url,
            nodes=len(doc.nodes),
            words=doc.word_count,
            headings=len(doc.headings),
            faq_items=len(doc.faq_items),
            schema_blocks=len(doc.schema_blocks),
            issues=len(doc.issues),
        )
        return doc

    # -- head & signals ---------------------------------------------------

    def _extract_head(self, soup: BeautifulSoup, doc: ContentDocument) -> None:
        if soup.title and soup.title.string:
            doc.title = normalize_whitespace(soup.title.string) or None
        if not doc.title:
            og_title = soup.find("meta", attrs={"property": "og:title"})
            if og_title and og_title.get("content"):
                doc.title = normalize_whitespace(str(og_title["content"])) or None

        for attrs in ({"name": "description"}, {"property": "og:description"}):
            meta = soup.find("meta", attrs=attrs)
            if meta and meta.get("content"):
                doc.meta_description = normalize_whitespace(str(meta["content"])) or None
                break

    def _collect_signals(self, soup: BeautifulSoup, doc: ContentDocument) -> None:
        """Record page-type hints that cleaning would otherwise discard."""
        signals: list[str] = []
        if soup.find("article"):
            signals.append("article_tag")
        if soup.find(["time"]) or soup.find("meta", attrs={"property": "article:published_time"}):
            signals.append("publish_date")
        if soup.find(attrs={"rel": "author"}) or soup.find(class_=re.compile(r"\bauthor\b", re.I)):
            signals.append("author")
        if soup.find("form"):
            signals.append("form")
            if soup.find("textarea"):
                signals.append("contact_form")
        if soup.find(string=re.compile(r"add to (cart|bag|basket)", re.I)):
            signals.append("add_to_cart")
        if soup.find(string=PRICE_PATTERN):
            signals.append("price")
        if soup.find("a", href=re.compile(r"^(tel|mailto):", re.I)):
            signals.append("contact_links")
        doc.signals = signals
        doc.call_to_actions = self._collect_call_to_actions(soup)

    def _collect_call_to_actions(self, soup: BeautifulSoup) -> list[str]:
        """Button and CTA link texts, read before cleaning drops buttons."""
        texts: list[str] = []
        for selector in CTA_SELECTORS:
            for element in soup.select(selector):
                text = block_text(element)
                if CTA_MIN_CHARS <= len(text) <= CTA_MAX_CHARS:
                    texts.append(text)
        return list(dict.fromkeys(texts))[: self.config.max_call_to_actions]

    # -- markup walk ------------------------------------------------------

    def _flush(self, doc: ContentDocument, pending: list[str]) -> None:
        """Turn accumulated loose text into a paragraph node."""
        text = normalize_whitespace(" ".join(pending))
        pending.clear()
        if text:
            self._add_paragraph(doc, text)

    def _walk(self, element: Tag, doc: ContentDocument, pending: list[str]) -> None:
        for child in element.children:
            if isinstance(child, NavigableString):
                if not isinstance(child, PreformattedString):
                    pending.append(str(child))
                continue
            if not isinstance(child, Tag):
                continue

            name = child.name
            if name in METADATA_TAGS:
                continue

            if name == "head":
                for script in child.find_all("script"):
                    if is_json_ld(script):
                        self._add_json_ld(doc, script)
                continue

            if is_json_ld(child):
                self._add_json_ld(doc, child)
                continue

            if self.config.remove_boilerplate and is_boilerplate_element(child):
                # Structured data is often placed in the footer
                for script in child.find_all("script"):
                    if is_json_ld(script):
                        self._add_json_ld(doc, script)
                continue

            if name in HEADING_TAGS:
                self._flush(doc, pending)
                doc.add_node(
                    NodeType.HEADING,
                    block_text(child),
                    level=HEADING_TAGS[name],
                )
            elif name in PARAGRAPH_TAGS:
                self._flush(doc, pending)
                self._add_paragraph(doc, block_text(child))
                self._add_images(doc, child)
            elif name in LIST_TAGS:
                self._flush(doc, pending)
                self._add_list(doc, child)
            elif name == "table":
                self._flush(doc, pending)
                self._add_table(doc, child)
            elif name == "details":
                self._flush(doc, pending)
                self._add_details(doc, child, pending)
            elif name == "img":
                self._add_image(doc, child)
            elif name == "br":
                pending.append(" ")
            elif name in CONTAINER_TAGS or name == "li":
                self._flush(doc, pending)
                self._add_microdata(doc, child)
                self._walk(child, doc, pending)
                self._flush(doc, pending)
            else:
                # Inline or unknown element: its text joins the surrounding run
                self._add_microdata(doc, child)
                if child.find(["p", "div", "section", "ul", "ol", "table"] + list(HEADING_TAGS)):
                    self._walk(child, doc, pending)
                else:
                    pending.append(child.get_text(" "))
                    self._add_images(doc, child)

    def _add_paragraph(self, doc: ContentDocument, text: str) -> None:
        if not text:
            return
        # A question heading immediately followed by a paragraph is an FAQ item
        previous = doc.nodes[-1] if doc.nodes else None
        if previous is not None and previous.is_heading and is_question(previous.text):
            doc.add_node(NodeType.FAQ_ITEM, text, question=previous.text, source="heading")
            return
        doc.add_node(NodeType.PARAGRAPH, text)

    def _add_details(self, doc: ContentDocument, details: Tag, pending: list[str]) -> None:
        summary = details.find("summary")
        question = block_text(summary) if summary else ""
        if summary:
            summary.extract()
        answer = block_text(details)
        if question and answer and is_question(question):
            doc.add_node(NodeType.FAQ_ITEM, answer, question=question, source="details")
            return
        if question:
            pending.append(question)
        self._walk(details, doc, pending)
        self._flush(doc, pending)

    def _add_list(self, doc: ContentDocument, element: Tag) -> None:
        if element.name == "dl":
            items = [block_text(t) for t in element.find_all(["dt", "dd"])]
        else:
            items = [block_text(li) for li in element.find_all("li", recursive=False)]
            if not items:
                # Malformed lists without direct <li> children
                items = [block_text(li) for li in element.find_all("li")]
        items = [item for item in items if item][: self.config.max_list_items]
        if items:
            doc.add_node(NodeType.LIST, "\n".join(items), items=items, ordered=element.name == "ol")
        self._add_images(doc, element)

    def _add_table(self, doc: ContentDocument, table: Tag) -> None:
        rows: list[str] = []
        for tr in table.find_all("tr"):
            cells = [block_text(c) for c in tr.find_all(["th", "td"])]
            cells = [c for c in cells if c]
            if cells:
                rows.append(" | ".join(cells))
        if rows:
            doc.add_node(NodeType.TABLE, "\n".join(rows), rows=len(rows), has_header=table.find("th") is not None)

    def _add_images(self, doc: ContentDocument, element: Tag) -> None:
        for img in element.find_all("img"):
            self._add_image(doc, img)

    def _add_image(self, doc: ContentDocument, img: Tag) -> None:
        alt = img.get("alt")
        alt_text = normalize_whitespace(alt) if isinstance(alt, str) else ""
        src = img.get("src")
        doc.add_node(
            NodeType.IMAGE,
            alt_text,
            src=src if isinstance(src, str) else "",
            has_alt=bool(alt_text),
        )

    # -- structured data --------------------------------------------------

    def _add_json_ld(self, doc: ContentDocument, script: Tag) -> None:
        raw = script.string or script.get_text() or ""
        raw = raw.strip()
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            node = doc.add_node(NodeType.SCHEMA_BLOCK, "", format="json-ld", data=None, error=str(e), raw=raw[:500])
            node.issues.append("schema_parse_error")
            doc.add_issue(node.index, "schema_parse_error", f"Invalid JSON-LD block: {e}")
            logger.debug("json_ld_parse_failed", url=doc.url, error=str(e))
            return
        doc.add_node(NodeType.SCHEMA_BLOCK, "", format="json-ld", data=data, error=None)

    def _add_microdata(self, doc: ContentDocument, element: Tag) -> None:
        """Emit a block for a top-level schema.org microdata scope."""
        if not element.has_attr("itemscope"):
            return
        itemtype = element.get("itemtype")
        if not isinstance(itemtype, str) or "schema.org" not in itemtype:
            return
        if element.find_parent(attrs={"itemscope": True}) is not None:
            return
        doc.add_node(NodeType.SCHEMA_BLOCK, "", format="microdata", data=_microdata_item(element), error=None)

    # -- plain text -------------------------------------------------------

    def _extract_plain_text(self, text: str, doc: ContentDocument) -> None:
        """Plain-text input: blank-line separated paragraphs, '#' headings."""
        for block in re.split(r"\n\s*\n", text):
            lines = [line.strip() for line in block.strip().splitlines() if line.strip()]
            if not lines:
                continue
            heading = MARKDOWN_HEADING.match(lines[0])
            if heading:
                doc.add_node(NodeType.HEADING, heading.group(2), level=len(heading.group(1)))
                lines = lines[1:]
            if lines:
                self._add_paragraph(doc, normalize_whitespace(" ".join(lines)))


def _microdata_item(scope: Tag) -> dict:
    """Flatten a microdata scope into a JSON-LD-like dict."""
    itemtype = str(scope.get("itemtype", ""))
    item: dict = {"@type": itemtype.rstrip("/").rsplit("/", 1)[-1]}
    for prop in scope.find_all(attrs={"itemprop": True}):
        # Only properties owned by this scope, not nested ones
        owner = prop.find_parent(attrs={"itemscope": True})
        if owner is not scope:
            continue
        name = str(prop.get("itemprop"))
        if prop.has_attr("itemscope"):
            value: object = _microdata_item(prop)
        elif prop.has_attr("content"):
            value = prop.get("content")
        elif prop.name in ("a", "link") and prop.has_attr("href"):
            value = prop.get("href")
        elif prop.name in ("img", "meta") and prop.has_attr("src"):
            value = prop.get("src")
        else:
            value = block_text(prop)
        if name in item:
            existing = item[name]
            item[name] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            item[name] = value
    return item


def extract_document(html: str, url: str, remove_boilerplate: bool = True) -> ContentDocument:
    """
    Convenience function to extract a document.

    Args:
        html: HTML or plain text content
        url: Page URL
        remove_boilerplate: Whether to skip navigation/footer/aside regions

    Returns:
        ContentDocument
    """
    extractor = ContentExtractor(ExtractorConfig(remove_boilerplate=remove_boilerplate))
    return extractor.extract(html, url)
