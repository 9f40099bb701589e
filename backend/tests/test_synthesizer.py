import io
import zipfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from inspired2site.errors import SynthesisError
from inspired2site.models import Analysis, ContentBlock, Heading, PluginSignature, Project
from inspired2site.synthesizer import (
    NO_PLUGINS_REPORT,
    RenderBlock,
    RenderMode,
    build_bundle,
    build_index_html,
    build_plugin_report,
    build_preview,
    project_from_analysis,
    render_block,
    render_preview,
)

STAMP = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _entries(bundle) -> dict:
    with zipfile.ZipFile(io.BytesIO(bundle.content)) as zf:
        return {name: zf.read(name).decode("utf-8") for name in zf.namelist()}


def _analysis(**overrides) -> Analysis:
    data = dict(
        url="https://example.com/",
        title="Acme <Widgets>",
        meta_desc="Tools & parts",
        headings=[Heading(level=1, text=f"H{i}") for i in range(8)],
        blocks=[
            ContentBlock(tag="section", classes=("hero", "dark"), text="Hello " * 40, html_snippet="<p>raw</p>"),
            ContentBlock(tag="div", text="plain <b>text</b>"),
        ],
        plugin_signatures=[PluginSignature(slug="elementor", name="Elementor", author="Elementor Ltd")],
        analyzed_at=STAMP,
    )
    data.update(overrides)
    return Analysis(**data)


# ---------------------------------------------------------------
# Export
# ---------------------------------------------------------------

def test_demo_project_bundle():
    project = Project.model_validate({"title": "Demo", "blocks": [{"title": "A", "text": "hello"}]})
    entries = _entries(build_bundle(project, generated_at=STAMP))

    assert set(entries) == {"index.html", "miracle.css", "plugin-list.txt", "README.md"}
    index = entries["index.html"]
    assert index.count('<section class="miracle-section">') == 1
    assert "<h2>A</h2><p>hello</p>" in index
    assert "<title>Demo</title>" in index
    assert entries["plugin-list.txt"] == "No plugins detected"
    assert "GeneratedAt: 2024-01-02T03:04:05+00:00" in entries["README.md"]
    assert entries["miracle.css"].strip()


def test_bundle_metadata():
    bundle = build_bundle(Project(), generated_at=STAMP)
    assert bundle.filename == "inspired2site-export.zip"
    assert bundle.media_type == "application/zip"


def test_export_idempotent():
    payload = {
        "title": "Same",
        "metaDesc": "d",
        "blocks": [{"title": "X", "content": "<ul><li>1</li></ul>"}, {"text": "t"}],
        "plugins": [{"slug": "woocommerce", "name": "WooCommerce", "author": "Automattic"}],
    }
    first = _entries(build_bundle(Project.model_validate(payload), generated_at=STAMP))
    second = _entries(build_bundle(Project.model_validate(payload)))
    assert first["index.html"] == second["index.html"]
    assert first["plugin-list.txt"] == second["plugin-list.txt"]


def test_whole_archive_stable_for_same_timestamp():
    project = Project(title="Stable", blocks=[{"title": "a", "text": "b"}])
    assert build_bundle(project, generated_at=STAMP).content == build_bundle(project, generated_at=STAMP).content


def test_export_escapes_text_but_not_content():
    project = Project.model_validate({
        "title": "<script>x</script>",
        "blocks": [
            {"title": "a & b", "text": "1 < 2"},
            {"title": "", "content": "<em>kept</em>", "text": "ignored"},
        ],
    })
    index = build_index_html(project)
    assert "<title>&lt;script&gt;x&lt;/script&gt;</title>" in index
    assert "<h2>a &amp; b</h2><p>1 &lt; 2</p>" in index
    assert '<div class="container"><em>kept</em></div>' in index
    assert "ignored" not in index


def test_block_without_text_uses_placeholder():
    index = build_index_html(Project(blocks=[{}]))
    assert '<div class="container"><p>...</p></div>' in index


def test_no_blocks_falls_back_to_main():
    index = build_index_html(Project(title="Solo", meta_desc="About <us>"))
    assert '<main class="container"><h1>Solo</h1><p>About &lt;us&gt;</p></main>' in index
    assert "miracle-section" not in index


def test_defaults_for_empty_project():
    index = build_index_html(Project())
    assert "<title>Inspired Export</title>" in index
    assert "<h1>Generated site</h1>" in index


def test_plugin_report_lines():
    project = Project(plugins=[
        PluginSignature(slug="a", name="Alpha", author="A Co"),
        PluginSignature(name="Beta", author="B Co"),
    ])
    assert build_plugin_report(project) == "Alpha — A Co\nBeta — B Co"
    assert build_plugin_report(Project()) == NO_PLUGINS_REPORT


def test_missing_stylesheet_raises(tmp_path):
    with pytest.raises(SynthesisError):
        build_bundle(Project(), stylesheet_path=Path(tmp_path) / "nope.css")


# ---------------------------------------------------------------
# Preview
# ---------------------------------------------------------------

def test_preview_sections_in_order():
    sections = build_preview(_analysis())
    assert [s.kind for s in sections] == ["header", "hero", "headings", "blocks", "plugins"]


def test_preview_header_escaped():
    header = build_preview(_analysis())[0].html
    assert "<h1>Acme &lt;Widgets&gt;</h1>" in header
    assert "<p>Tools &amp; parts</p>" in header


def test_preview_limits_headings_to_six():
    headings = build_preview(_analysis())[2].html
    assert headings.count("<li>") == 6
    assert "H5" in headings and "H6" not in headings


def test_preview_cards():
    blocks_html = build_preview(_analysis())[3].html
    assert "<h4>hero dark</h4>" in blocks_html
    assert "<h4>div</h4>" in blocks_html
    assert "<p>plain &lt;b&gt;text&lt;/b&gt;</p>" in blocks_html
    assert ("Hello " * 40)[:120] in blocks_html
    assert ("Hello " * 40)[:126] not in blocks_html


def test_preview_without_headings_or_blocks():
    sections = build_preview(_analysis(headings=[], blocks=[], plugin_signatures=[]))
    assert [s.kind for s in sections] == ["header", "hero", "plugins"]
    assert "None detected" in sections[-1].html


def test_preview_plugins_listed():
    assert "Elementor by Elementor Ltd" in build_preview(_analysis())[-1].html


def test_render_preview_joins_sections():
    sections = build_preview(_analysis())
    assert render_preview(sections) == "".join(s.html for s in sections)


def test_preview_and_export_share_block_order():
    analysis = _analysis(blocks=[
        ContentBlock(tag="div", classes=(f"b{i}",), text=f"t{i}") for i in range(9)
    ])
    project = project_from_analysis(analysis)
    assert [b.title for b in project.blocks] == [f"b{i}" for i in range(6)]

    preview = build_preview(analysis)[3].html
    index = build_index_html(project)
    preview_order = [preview.index(f"<h4>b{i}</h4>") for i in range(6)]
    export_order = [index.index(f"<h2>b{i}</h2>") for i in range(6)]
    assert preview_order == sorted(preview_order)
    assert export_order == sorted(export_order)


def test_project_from_analysis_keeps_snippets_verbatim():
    project = project_from_analysis(_analysis())
    assert project.title == "Acme <Widgets>"
    assert project.blocks[0].content == "<p>raw</p>"
    assert project.plugins[0].name == "Elementor"
    assert "<h2>hero dark</h2><p>raw</p>" in build_index_html(project)


def test_render_block_modes():
    block = RenderBlock(heading="H", text="x < y", markup="")
    assert render_block(block, RenderMode.PREVIEW_CARD) == (
        '<article class="preview-card"><h4>H</h4><p>x &lt; y</p></article>'
    )
    assert render_block(block, RenderMode.EXPORT_SECTION) == (
        '<section class="miracle-section"><div class="container"><h2>H</h2><p>x &lt; y</p></div></section>'
    )
