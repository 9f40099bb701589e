"""
Analysis pipeline: validate, robots gate, fetch, extract, detect, assemble.

Functions:
  assemble_analysis()  : pure composition into a frozen Analysis
  analyze()            : full single-page pipeline, then best-effort persistence
"""

from datetime import datetime, timezone

import httpx

from inspired2site.config import Settings, get_settings
from inspired2site.database import AnalysisSink, NullSink
from inspired2site.errors import PolicyError
from inspired2site.extractor import Extraction, extract_structure
from inspired2site.fetcher import fetch_markup
from inspired2site.models import Analysis, BridgeFinding, PageTarget, PluginSignature
from inspired2site.robots import check_robots
from inspired2site.signatures import (
    DEFAULT_BRIDGE_CHECKS,
    DEFAULT_REGISTRY,
    BridgeCheck,
    SignatureRegistry,
    detect_signatures,
)


def assemble_analysis(
    target: PageTarget,
    extraction: Extraction,
    plugins: list[PluginSignature],
    bridges: list[BridgeFinding],
    analyzed_at: datetime | None = None,
) -> Analysis:
    return Analysis(
        url=target.url,
        title=extraction.title,
        meta_desc=extraction.meta_desc,
        headings=extraction.headings,
        blocks=extraction.blocks,
        images=extraction.images,
        plugin_signatures=plugins,
        bridge_findings=bridges,
        analyzed_at=analyzed_at or datetime.now(timezone.utc),
    )


async def persist_analysis(sink: AnalysisSink, analysis: Analysis) -> None:
    """Mirror to the sink. Failures are reported and swallowed."""
    try:
        await sink.save_analysis(analysis)
    except Exception as e:
        print(f"[persist] Insert failed for {analysis.url}: {e}")


async def analyze(
    url: str | None,
    *,
    client: httpx.AsyncClient | None = None,
    sink: AnalysisSink | None = None,
    settings: Settings | None = None,
    registry: SignatureRegistry = DEFAULT_REGISTRY,
    bridge_checks: tuple[BridgeCheck, ...] = DEFAULT_BRIDGE_CHECKS,
) -> Analysis:
    """
    Analyze one page. Raises ValidationError, PolicyError or
    UpstreamFetchError; the page itself is never requested when robots
    disallows the origin.
    """
    target = PageTarget.parse(url)
    settings = settings or get_settings()
    sink = sink or NullSink()

    if client is None:
        async with httpx.AsyncClient() as owned:
            analysis = await _run(target, owned, settings, registry, bridge_checks)
    else:
        analysis = await _run(target, client, settings, registry, bridge_checks)

    await persist_analysis(sink, analysis)
    return analysis


async def _run(
    target: PageTarget,
    client: httpx.AsyncClient,
    settings: Settings,
    registry: SignatureRegistry,
    bridge_checks: tuple[BridgeCheck, ...],
) -> Analysis:
    decision = await check_robots(target, client, timeout=settings.robots_timeout)
    if not decision.allowed:
        raise PolicyError("Page disallowed by robots.txt")

    print(f"[analyze] Fetching {target.url}")
    fetched = await fetch_markup(
        target,
        client,
        timeout=settings.fetch_timeout,
        user_agent=settings.user_agent,
    )

    extraction = extract_structure(fetched.markup)
    plugins, bridges = detect_signatures(fetched.markup, registry, bridge_checks)
    analysis = assemble_analysis(target, extraction, plugins, bridges)
    print(
        f"[analyze] {target.url}: {len(analysis.headings)} headings, "
        f"{len(analysis.blocks)} blocks, {len(analysis.plugin_signatures)} plugins"
    )
    return analysis
