"""
Preview and export synthesis.

Functions:
  render_blocks()          : the one block renderer, preview card or export section
  build_preview()          : Analysis -> ordered preview sections
  project_from_analysis()  : Analysis -> editable Project (what the preview shows)
  build_index_html()       : Project -> index.html, pure string concatenation
  build_bundle()           : Project -> zip (index.html, miracle.css, plugin-list.txt, README.md)

All interpolated text goes through escape(). Block `content` / captured
html snippets are already markup and are embedded as-is.
"""

import html
import io
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable

from inspired2site.errors import SynthesisError
from inspired2site.models import (
    Analysis,
    Bundle,
    ContentBlock,
    PreviewSection,
    Project,
    ProjectBlock,
)

STYLESHEET_PATH = Path(__file__).parent / "assets" / "miracle.css"

PREVIEW_HEADING_LIMIT = 6
PREVIEW_BLOCK_LIMIT = 6
PREVIEW_TEXT_CHARS = 120
PROJECT_TEXT_CHARS = 400

NO_PLUGINS_REPORT = "No plugins detected"
NO_PLUGINS_PREVIEW = "None detected"

# Fixed mtime for archive entries so identical input zips identically
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def escape(value) -> str:
    """Escape &, < and >. None becomes the empty string."""
    return html.escape("" if value is None else str(value), quote=False)


# ---------------------------------------------------------------
# Shared block rendering
# ---------------------------------------------------------------

class RenderMode(str, Enum):
    PREVIEW_CARD = "preview_card"
    EXPORT_SECTION = "export_section"


@dataclass(frozen=True)
class RenderBlock:
    heading: str = ""
    text: str = ""
    markup: str = ""

    @classmethod
    def from_content_block(cls, block: ContentBlock) -> "RenderBlock":
        return cls(
            heading=" ".join(block.classes) or block.tag,
            text=block.text,
            markup=block.html_snippet,
        )

    @classmethod
    def from_project_block(cls, block: ProjectBlock) -> "RenderBlock":
        return cls(
            heading=block.title or "",
            text=block.text or "",
            markup=block.content or "",
        )


def render_block(block: RenderBlock, mode: RenderMode) -> str:
    if mode is RenderMode.PREVIEW_CARD:
        return (
            '<article class="preview-card">'
            f"<h4>{escape(block.heading)}</h4>"
            f"<p>{escape(block.text[:PREVIEW_TEXT_CHARS])}</p>"
            "</article>"
        )

    heading = f"<h2>{escape(block.heading)}</h2>" if block.heading else ""
    body = block.markup or f"<p>{escape(block.text or '...')}</p>"
    return (
        '<section class="miracle-section"><div class="container">'
        f"{heading}{body}"
        "</div></section>"
    )


def render_blocks(blocks: Iterable[RenderBlock], mode: RenderMode) -> str:
    """Render blocks in the given order. Same order for preview and export."""
    return "".join(render_block(b, mode) for b in blocks)


# ---------------------------------------------------------------
# Preview
# ---------------------------------------------------------------

def _panel(title: str, inner: str) -> str:
    return f'<section><div class="hero-preview"><h3>{title}</h3>{inner}</div></section>'


def _preview_blocks(analysis: Analysis) -> list[RenderBlock]:
    return [RenderBlock.from_content_block(b) for b in analysis.blocks[:PREVIEW_BLOCK_LIMIT]]


def build_preview(analysis: Analysis) -> list[PreviewSection]:
    sections = [
        PreviewSection(
            kind="header",
            html=(
                '<header class="hero-preview">'
                f"<h1>{escape(analysis.title or 'Inspired site')}</h1>"
                f"<p>{escape(analysis.meta_desc or 'Generated from inspiration.')}</p>"
                "</header>"
            ),
        ),
        PreviewSection(
            kind="hero",
            html=_panel("Hero", "<p>Auto-generated hero based on headings.</p>"),
        ),
    ]

    if analysis.headings:
        items = "".join(
            f"<li>{escape(h.text)}</li>"
            for h in analysis.headings[:PREVIEW_HEADING_LIMIT]
        )
        sections.append(PreviewSection(kind="headings", html=_panel("Key headings", f"<ul>{items}</ul>")))

    if analysis.blocks:
        cards = render_blocks(_preview_blocks(analysis), RenderMode.PREVIEW_CARD)
        sections.append(PreviewSection(kind="blocks", html=_panel("Content Blocks", cards)))

    plugins = ", ".join(f"{p.name} by {p.author}" for p in analysis.plugin_signatures)
    sections.append(PreviewSection(
        kind="plugins",
        html=_panel("Plugins", f"<p>{escape(plugins or NO_PLUGINS_PREVIEW)}</p>"),
    ))
    return sections


def render_preview(sections: Iterable[PreviewSection]) -> str:
    return "".join(s.html for s in sections)


def project_from_analysis(analysis: Analysis) -> Project:
    """The editable project behind a preview: same blocks, same order."""
    blocks = [
        ProjectBlock(title=b.heading, content=b.markup, text=b.text[:PROJECT_TEXT_CHARS])
        for b in _preview_blocks(analysis)
    ]
    return Project(
        title=analysis.title,
        meta_desc=analysis.meta_desc,
        blocks=blocks,
        plugins=list(analysis.plugin_signatures),
    )


# ---------------------------------------------------------------
# Export
# ---------------------------------------------------------------

def build_index_html(project: Project) -> str:
    head = (
        '<!doctype html><html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width,initial-scale=1">'
        f"<title>{escape(project.title or 'Inspired Export')}</title>"
        '<link rel="stylesheet" href="miracle.css"></head><body><div class="site">'
    )
    if project.blocks:
        body = render_blocks(
            (RenderBlock.from_project_block(b) for b in project.blocks),
            RenderMode.EXPORT_SECTION,
        )
    else:
        body = (
            '<main class="container">'
            f"<h1>{escape(project.title or 'Generated site')}</h1>"
            f"<p>{escape(project.meta_desc or '')}</p>"
            "</main>"
        )
    return head + body + "</div></body></html>"


def build_plugin_report(project: Project) -> str:
    lines = [f"{p.name} — {p.author}" for p in project.plugins]
    return "\n".join(lines) or NO_PLUGINS_REPORT


def build_readme(generated_at: datetime) -> str:
    return (
        "Inspired2Site export\n"
        f"GeneratedAt: {generated_at.isoformat()}\n"
        "Notes: verify assets/licenses."
    )


def read_stylesheet(path: Path | None = None) -> str:
    path = path or STYLESHEET_PATH
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise SynthesisError(f"Stylesheet asset unreadable: {e}")


def _zip_entries(entries: list[tuple[str, str]]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, text in entries:
            info = zipfile.ZipInfo(name, date_time=_ZIP_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            zf.writestr(info, text.encode("utf-8"))
    return buf.getvalue()


def build_bundle(
    project: Project,
    generated_at: datetime | None = None,
    stylesheet_path: Path | None = None,
) -> Bundle:
    generated_at = generated_at or datetime.now(timezone.utc)
    content = _zip_entries([
        ("index.html", build_index_html(project)),
        ("miracle.css", read_stylesheet(stylesheet_path)),
        ("plugin-list.txt", build_plugin_report(project)),
        ("README.md", build_readme(generated_at)),
    ])
    return Bundle(content=content)
