"""
Signature detection over raw markup.

Plain substring matching on the lowercased page: no word boundaries, no
fuzzy matching. A page that mentions "woocommerce" in prose is reported as
running WooCommerce.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from inspired2site.models import BridgeFinding, PluginSignature

SignatureRegistry = Mapping[str, PluginSignature]


def make_registry(entries: Mapping[str, PluginSignature]) -> SignatureRegistry:
    """Freeze a token -> signature table. Tokens are matched lowercased."""
    return MappingProxyType({token.lower(): sig for token, sig in entries.items()})


DEFAULT_REGISTRY = make_registry({
    "elementor": PluginSignature(slug="elementor", name="Elementor", author="Elementor Ltd"),
    "metform": PluginSignature(slug="metform", name="MetForm", author="WpMet"),
    "woocommerce": PluginSignature(slug="woocommerce", name="WooCommerce", author="Automattic"),
    "contact-form-7": PluginSignature(slug="contact-form-7", name="Contact Form 7", author="Takayuki Miyoshi"),
})


@dataclass(frozen=True)
class BridgeCheck:
    needle: str
    finding: BridgeFinding


DEFAULT_BRIDGE_CHECKS: tuple[BridgeCheck, ...] = (
    BridgeCheck(
        needle="rev_slider",
        finding=BridgeFinding(
            issue_id="revslider",
            description="RevSlider-like content found",
            severity="recommended",
        ),
    ),
    BridgeCheck(
        needle="metform",
        finding=BridgeFinding(
            issue_id="metform",
            description="MetForm-like form found",
            severity="required",
        ),
    ),
)


def token_forms(token: str) -> tuple[str, ...]:
    """The token itself and the token with hyphens removed."""
    collapsed = token.replace("-", "")
    return (token,) if collapsed == token else (token, collapsed)


def detect_plugins(
    markup: str,
    registry: SignatureRegistry = DEFAULT_REGISTRY,
) -> list[PluginSignature]:
    """Registry entries whose token appears in the markup, one per slug, in registry order."""
    lower = (markup or "").lower()
    found: dict[str, PluginSignature] = {}
    for token, signature in registry.items():
        if signature.slug in found:
            continue
        if any(form in lower for form in token_forms(token)):
            found[signature.slug] = signature
    return list(found.values())


def detect_bridges(
    markup: str,
    checks: Iterable[BridgeCheck] = DEFAULT_BRIDGE_CHECKS,
) -> list[BridgeFinding]:
    lower = (markup or "").lower()
    return [check.finding for check in checks if check.needle in lower]


def detect_signatures(
    markup: str,
    registry: SignatureRegistry = DEFAULT_REGISTRY,
    checks: Iterable[BridgeCheck] = DEFAULT_BRIDGE_CHECKS,
) -> tuple[list[PluginSignature], list[BridgeFinding]]:
    return detect_plugins(markup, registry), detect_bridges(markup, checks)
