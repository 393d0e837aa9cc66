"""CLI tests; the audit itself is patched so no network is touched."""

import json

import pytest

from pageaudit import cli
from pageaudit.errors import ScrapeError
from pageaudit.extractor import extract_page
from pageaudit.onpage import AuditReport, run_onpage_seo_analysis
from pageaudit.scraper import build_website_content


@pytest.fixture
def fake_audit(monkeypatch, sample_html, static_estimator):
    calls = {}

    async def audit(self, url):
        calls["url"] = url
        calls["pagespeed_service"] = self.pagespeed_service
        calls["download_images"] = self.download_images
        content = build_website_content(extract_page(url, sample_html), estimator=static_estimator)
        return AuditReport(url=content.url, content=content, on_page=run_onpage_seo_analysis(content))

    monkeypatch.setattr(cli.SEOAnalyzer, "audit", audit)
    return calls


class TestMain:
    def test_full_report(self, fake_audit, capsys):
        assert cli.main(["acme.test", "--no-pagespeed", "--no-images"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["on_page"]["title_tag"]["status"] == "good"
        assert out["content"]["title"].startswith("Acme Widgets")
        assert fake_audit["pagespeed_service"] is None
        assert fake_audit["download_images"] is False

    def test_digest(self, fake_audit, capsys):
        assert cli.main(["https://acme.test/", "--digest", "--no-pagespeed"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert set(out) == {"content", "on_page", "pagespeed"}
        assert out["pagespeed"] is None
        assert out["content"]["links"]["total"] == 3

    def test_api_key_enables_pagespeed(self, fake_audit, capsys):
        assert cli.main(["acme.test", "--api-key", "k-1"]) == 0
        assert fake_audit["pagespeed_service"].api_key == "k-1"

    def test_scrape_error_exits_1(self, monkeypatch, capsys):
        async def audit(self, url):
            raise ScrapeError(url, RuntimeError("boom"))

        monkeypatch.setattr(cli.SEOAnalyzer, "audit", audit)
        assert cli.main(["acme.test", "--no-pagespeed"]) == 1
        err = capsys.readouterr().err
        assert "Failed to scrape website acme.test: boom" in err
