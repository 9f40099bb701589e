"""Single-shot page fetch with a fixed identity header. No retries."""

from dataclasses import dataclass

import httpx

from inspired2site.config import get_settings
from inspired2site.errors import UpstreamFetchError
from inspired2site.models import PageTarget


@dataclass(frozen=True)
class FetchResult:
    markup: str
    status: int
    final_url: str


async def fetch_markup(
    target: PageTarget,
    client: httpx.AsyncClient,
    timeout: float | None = None,
    user_agent: str | None = None,
) -> FetchResult:
    """GET the target page. Timeouts, transport errors and non-2xx raise UpstreamFetchError."""
    settings = get_settings()
    timeout = settings.fetch_timeout if timeout is None else timeout
    user_agent = user_agent or settings.user_agent
    try:
        resp = await client.get(
            target.url,
            headers={"User-Agent": user_agent},
            timeout=timeout,
            follow_redirects=True,
        )
    except httpx.TimeoutException:
        raise UpstreamFetchError(f"Timed out fetching {target.url} after {timeout:g}s")
    except httpx.HTTPError as e:
        raise UpstreamFetchError(f"Failed to fetch {target.url}: {e}")

    if not resp.is_success:
        raise UpstreamFetchError(
            f"Failed to fetch {target.url}: HTTP {resp.status_code}"
        )

    return FetchResult(markup=resp.text, status=resp.status_code, final_url=str(resp.url))
