"""HTML cleaning and boilerplate detection."""

import re

from bs4 import BeautifulSoup, Comment, Tag

# Regions that typically contain boilerplate content
BOILERPLATE_TAGS = frozenset(
    [
        "nav",
        "footer",
        "aside",
        "menu",
    ]
)

# Tags to completely remove (including content)
REMOVE_TAGS = frozenset(
    [
        "script",
        "style",
        "noscript",
        "iframe",
        "object",
        "embed",
        "svg",
        "canvas",
        "video",
        "audio",
        "source",
        "track",
        "template",
        "slot",
        "dialog",
        "form",
        "button",
    ]
)

JSON_LD_TYPE = "application/ld+json"

# Class/ID tokens that indicate boilerplate
BOILERPLATE_PATTERNS = [
    re.compile(r"^(nav|navbar|navigation|menu|sidebar|breadcrumbs?)$", re.I),
    re.compile(r"^(cookie|consent|popup|modal|overlay)(-.*)?$", re.I),
    re.compile(r"^(share|social|newsletter|subscribe)(-.*)?$", re.I),
]

BOILERPLATE_ROLES = frozenset(["navigation", "contentinfo", "complementary"])


def _attr_tokens(tag: Tag) -> list[str]:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    tokens = list(classes)
    tag_id = tag.get("id")
    if isinstance(tag_id, str) and tag_id:
        tokens.append(tag_id)
    return tokens


def is_json_ld(tag: Tag) -> bool:
    kind = tag.get("type")
    return tag.name == "script" and isinstance(kind, str) and kind.strip().lower() == JSON_LD_TYPE


def is_boilerplate_element(tag: Tag) -> bool:
    """Check if an element is likely boilerplate based on tag/role/class/id."""
    if tag.name in BOILERPLATE_TAGS:
        return True

    role = tag.get("role")
    if isinstance(role, str) and role.lower() in BOILERPLATE_ROLES:
        return True

    return any(pattern.match(token) for token in _attr_tokens(tag) for pattern in BOILERPLATE_PATTERNS)


def clean_soup(soup: BeautifulSoup) -> int:
    """
    Strip non-content markup from a parsed document in place.

    Structured-data scripts are kept so they can be extracted as blocks.

    Returns:
        Number of elements removed
    """
    removed = 0
    for tag in soup.find_all(REMOVE_TAGS):
        if tag.decomposed or is_json_ld(tag):
            continue
        tag.decompose()
        removed += 1

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    return removed


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def block_text(tag: Tag) -> str:
    """Visible text of an element with inline boundaries collapsed."""
    text = normalize_whitespace(tag.get_text(" "))
    return re.sub(r"\s+([.,;:!?)])", r"\1", text)
