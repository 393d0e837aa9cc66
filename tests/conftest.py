"""Shared fixtures: sample markup and a routing httpx.MockTransport."""

from typing import Callable, Dict, Union

import httpx
import pytest

from pageaudit.heuristics import StaticVitalsEstimator


SAMPLE_HTML = """<!DOCTYPE html>
<html lang="en-US">
<head>
  <title>Acme Widgets - Durable Industrial Widgets for Every Workshop</title>
  <meta name="description" content="Acme builds durable industrial widgets.">
  <meta name="keywords" content="widgets, industrial">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <meta name="robots" content="index, follow">
  <meta property="og:title" content="Acme Widgets">
  <meta property="og:type" content="website">
  <meta property="og:url" content="https://acme.test/">
  <meta name="twitter:card" content="summary">
  <meta name="twitter:site" content="@acme">
  <link rel="canonical" href="https://acme.test/">
  <link rel="alternate" hreflang="en" href="https://acme.test/">
  <link rel="alternate" hreflang="de" href="https://acme.test/de/">
  <link rel="icon" href="/favicon.ico">
  <script src="https://www.googletagmanager.com/gtag/js?id=G-1"></script>
  <script type="application/ld+json">
    {"@context": "https://schema.org", "@type": "Organization", "name": "Acme Inc"}
  </script>
  <script type="application/ld+json">{not valid json</script>
  <style>.hidden { display: none }</style>
</head>
<body>
  <h1>Acme Widgets</h1>
  <h2>Why Acme</h2>
  <p>We build widgets. They last for years!</p>
  <script>console.log("not visible text")</script>
  <h2>Products</h2>
  <h3>Gears</h3>
  <img src="/img/hero.jpg" alt="Workshop" width="1200px" height="600">
  <img src="/img/logo.png" alt="" class="site-logo">
  <img src="/products/gear.png" alt="Gear">
  <a href="/about">About us</a>
  <a href="https://acme.test/contact">Contact</a>
  <a href="https://other.test/" rel="nofollow noopener" title="Partner site"></a>
</body>
</html>
"""


Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def make_transport(routes: Dict[str, Route], default_status: int = 404) -> httpx.MockTransport:
    """Route by full URL (without query); unknown URLs get ``default_status``."""

    def handler(request: httpx.Request) -> httpx.Response:
        key = str(request.url.copy_with(query=None))
        route = routes.get(key)
        if route is None and request.url.path == "/":
            route = routes.get(key.rstrip("/") + "/") or routes.get(key.rstrip("/"))
        if route is None:
            return httpx.Response(default_status)
        if callable(route):
            return route(request)
        return route

    return httpx.MockTransport(handler)


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture
def static_estimator() -> StaticVitalsEstimator:
    return StaticVitalsEstimator(lcp=2.0, inp=200.0, cls=0.1)


@pytest.fixture
def transport() -> Callable[..., httpx.MockTransport]:
    return make_transport
