"""
Minimal robots.txt check. Only a bare `Disallow: /` blocks the origin;
user-agent groups, wildcards and path prefixes are not interpreted.
Fails open: any error reading the policy means allowed.
"""

import re

import httpx

from inspired2site.config import get_settings
from inspired2site.models import PageTarget, RobotsDecision

_DISALLOW_RE = re.compile(r"^Disallow:", re.IGNORECASE)
_LINE_SPLIT_RE = re.compile(r"\r?\n")


def parse_robots(body: str) -> RobotsDecision:
    """Interpret a robots policy body. Empty body allows everything."""
    if not body:
        return RobotsDecision(allowed=True)
    for line in _LINE_SPLIT_RE.split(body):
        line = line.strip()
        if not _DISALLOW_RE.match(line):
            continue
        path = line.split(":")[1].strip()
        if path == "/":
            return RobotsDecision(allowed=False)
    return RobotsDecision(allowed=True)


async def check_robots(
    target: PageTarget,
    client: httpx.AsyncClient,
    timeout: float | None = None,
) -> RobotsDecision:
    """Fetch and interpret <origin>/robots.txt, following redirects. Never raises."""
    if timeout is None:
        timeout = get_settings().robots_timeout
    try:
        resp = await client.get(target.robots_url, timeout=timeout, follow_redirects=True)
        if not resp.is_success:
            return RobotsDecision(allowed=True)
        return parse_robots(resp.text)
    except Exception as e:
        print(f"  [robots] {target.robots_url} unreadable, allowing: {e}")
        return RobotsDecision(allowed=True)
