"""
Structural extraction: raw markup -> title, meta description, headings,
top-level content blocks and image sources. Pure, no I/O.
"""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from inspired2site.models import ContentBlock, Heading

MAX_BLOCKS = 20
MAX_BLOCK_TEXT = 500
MAX_BLOCK_HTML = 800
HEADING_LEVELS = (1, 2, 3, 4)
HEAD_ONLY_TAGS = frozenset({"head", "title", "meta", "link", "base", "style"})


@dataclass
class Extraction:
    title: str = ""
    meta_desc: str = ""
    headings: list[Heading] = field(default_factory=list)
    blocks: list[ContentBlock] = field(default_factory=list)
    images: list[str] = field(default_factory=list)


def extract_structure(markup: str) -> Extraction:
    soup = BeautifulSoup(markup or "", "html.parser")
    return Extraction(
        title=extract_title(soup),
        meta_desc=extract_meta_description(soup),
        headings=extract_headings(soup),
        blocks=extract_blocks(soup),
        images=extract_images(soup),
    )


def extract_title(soup: BeautifulSoup) -> str:
    tag = soup.find("title")
    return tag.get_text() if tag else ""


def extract_meta_description(soup: BeautifulSoup) -> str:
    tag = soup.find("meta", attrs={"name": "description"})
    if not tag:
        return ""
    return tag.get("content") or ""


def extract_headings(soup: BeautifulSoup) -> list[Heading]:
    """
    All h1s first, then all h2s, and so on. Within a level, document order.
    Consumers rely on this level-batched order; it is not document order.
    """
    headings = []
    for level in HEADING_LEVELS:
        for el in soup.find_all(f"h{level}"):
            headings.append(Heading(level=level, text=el.get_text().strip()))
    return headings


def _block_children(soup: BeautifulSoup) -> list[Tag]:
    container = soup.find("main") or soup.body
    if container is not None:
        return container.find_all(recursive=False)
    # html.parser never implies <body>: take what a browser would put there
    root = soup.html or soup
    return [
        node for node in root.find_all(recursive=False)
        if node.name not in HEAD_ONLY_TAGS
    ]


def _class_list(node: Tag) -> tuple[str, ...]:
    raw = node.get("class") or []
    if isinstance(raw, str):
        raw = raw.split()
    seen = []
    for name in raw:
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def extract_blocks(soup: BeautifulSoup) -> list[ContentBlock]:
    children = _block_children(soup)
    blocks = []
    for node in children[:MAX_BLOCKS]:
        blocks.append(ContentBlock(
            tag=node.name or "div",
            classes=_class_list(node),
            id=node.get("id") or None,
            text=node.get_text().strip()[:MAX_BLOCK_TEXT],
            html_snippet=node.decode_contents()[:MAX_BLOCK_HTML],
        ))
    return blocks


def extract_images(soup: BeautifulSoup) -> list[str]:
    images = []
    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src")
        if src:
            images.append(src)
    return images
