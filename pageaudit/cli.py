"""
Command-line entry point.

    python -m pageaudit example.com
    python -m pageaudit https://example.com/pricing --digest --no-images
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from . import config
from .digest import summarize_content, summarize_pagespeed
from .errors import ScrapeError
from .onpage import SEOAnalyzer
from .pagespeed import PageSpeedInsightsClient

logger = logging.getLogger("pageaudit")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pageaudit", description="Run a single-page SEO audit.")
    p.add_argument("url")
    p.add_argument("--digest", action="store_true", help="Print the compact prompt-ready summary")
    p.add_argument("--no-images", action="store_true", help="Skip image downloads")
    p.add_argument("--no-pagespeed", action="store_true", help="Skip PageSpeed Insights")
    p.add_argument("--api-key", default=config.PAGESPEED_API_KEY, help="PageSpeed Insights API key")
    p.add_argument("--log-level", default=config.LOG_LEVEL)
    return p


async def run(args: argparse.Namespace) -> dict:
    service = None
    if args.api_key and not args.no_pagespeed:
        service = PageSpeedInsightsClient(api_key=args.api_key)
    elif not args.no_pagespeed:
        logger.info("No PAGESPEED_API_KEY set; using estimated performance values")

    analyzer = SEOAnalyzer(pagespeed_service=service, download_images=not args.no_images)
    report = await analyzer.audit(args.url)

    if args.digest:
        return {
            "content": summarize_content(report.content),
            "on_page": report.on_page.model_dump(mode="json"),
            "pagespeed": {
                "mobile": summarize_pagespeed(report.pagespeed.mobile),
                "desktop": summarize_pagespeed(report.pagespeed.desktop),
            }
            if report.pagespeed
            else None,
        }
    return report.model_dump(mode="json")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    try:
        result = asyncio.run(run(args))
    except ScrapeError as e:
        logger.error(f"Audit failed: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
