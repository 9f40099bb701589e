import httpx
import pytest

from inspired2site.config import Settings


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(str(request.url))
        if handler is None:
            return httpx.Response(404, text="")
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(request)
        return handler

    def calls_to(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url) == url)


@pytest.fixture
def settings():
    return Settings(_env_file=None, supabase_url="", supabase_key="", hf_api_key="")


@pytest.fixture
def make_client():
    def _make(routes: dict):
        transport = RecordingTransport(routes)
        return httpx.AsyncClient(transport=transport), transport

    return _make


SAMPLE_PAGE = """<!doctype html>
<html>
<head>
  <title>Acme Widgets</title>
  <meta name="description" content="Widgets for everyone">
  <link rel="stylesheet" href="/wp-content/plugins/elementor/assets/css/frontend.min.css">
</head>
<body>
  <header class="site-header top" id="masthead"><h1>Acme</h1></header>
  <main>
    <section class="hero"><h2>Build faster</h2><p>Fast &amp; simple.</p></section>
    <section class="features grid"><h2>Features</h2><img src="/a.png"><img data-src="/b.png"></section>
    <div id="contact"><h3>Contact</h3><form class="wpcf7-form contactform7"></form></div>
  </main>
  <footer><h4>Footer</h4><img alt="no source"></footer>
</body>
</html>
"""


@pytest.fixture
def sample_page():
    return SAMPLE_PAGE
