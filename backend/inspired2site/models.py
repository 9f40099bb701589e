"""
Data model shared by the pipeline and the API.

Wire names are camelCase (what the browser client reads and sends back);
attributes are snake_case. Models accept either on input.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, computed_field

from inspired2site.errors import ValidationError


# ---------------------------------------------------------------------------
# Target
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageTarget:
    url: str
    scheme: str
    netloc: str

    @classmethod
    def parse(cls, url: str | None) -> "PageTarget":
        """Validate an absolute http(s) URL. Raises ValidationError before any I/O."""
        url = (url or "").strip()
        if not url:
            raise ValidationError("url required", code="missing_url")
        try:
            parsed = urlparse(url)
            # Accessing .port validates it (raises ValueError on junk)
            parsed.port
        except ValueError:
            raise ValidationError(f"Malformed URL: {url}", code="invalid_url")
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValidationError(
                "Enter a valid http(s) URL.", code="invalid_url"
            )
        return cls(url=url, scheme=parsed.scheme, netloc=parsed.netloc.rsplit("@", 1)[-1])

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.netloc}"

    @property
    def robots_url(self) -> str:
        return self.origin + "/robots.txt"


@dataclass(frozen=True)
class RobotsDecision:
    allowed: bool


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Heading(_Record):
    level: int = Field(ge=1, le=4)
    text: str

    @computed_field
    @property
    def tag(self) -> str:
        return f"h{self.level}"


class ContentBlock(_Record):
    tag: str
    classes: tuple[str, ...] = ()
    id: str | None = None
    text: str = ""
    html_snippet: str = Field(default="", alias="htmlSnippet")


class PluginSignature(_Record):
    slug: str = ""
    name: str
    author: str = ""


Severity = Literal["informational", "recommended", "required"]


class BridgeFinding(_Record):
    issue_id: str = Field(alias="issueId")
    description: str
    severity: Severity


class Analysis(_Record):
    url: str
    title: str = ""
    meta_desc: str = Field(default="", alias="metaDesc")
    headings: tuple[Heading, ...] = ()
    blocks: tuple[ContentBlock, ...] = ()
    images: tuple[str, ...] = ()
    plugin_signatures: tuple[PluginSignature, ...] = Field(default=(), alias="pluginSignatures")
    bridge_findings: tuple[BridgeFinding, ...] = Field(default=(), alias="bridgeDetections")
    analyzed_at: datetime = Field(alias="analyzedAt")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Project (client-editable, untrusted)
# ---------------------------------------------------------------------------

class ProjectBlock(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    content: str | None = None
    text: str | None = None


class Project(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    meta_desc: str | None = Field(default=None, alias="metaDesc")
    blocks: list[ProjectBlock] = Field(default_factory=list)
    plugins: list[PluginSignature] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Synthesis outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Bundle:
    content: bytes
    filename: str = "inspired2site-export.zip"
    media_type: str = "application/zip"


class PreviewSection(BaseModel):
    kind: Literal["header", "hero", "headings", "blocks", "plugins"]
    html: str


class GeneratedImage(BaseModel):
    mime: str
    data: str
    source: Literal["external-model", "fallback-demo"]


class UploadedImage(BaseModel):
    data: str
