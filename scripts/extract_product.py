"""Manual product extractor for testing and debugging strategies.

Runs the extraction engine against a live page or a saved HTML file and
prints the message the popup / backend would receive.

Usage:
    python scripts/extract_product.py --url https://www.amazon.com/dp/B0EXAMPLE
    python scripts/extract_product.py --file page.html --url https://www.ebay.com/itm/1
    python scripts/extract_product.py --file page.html --url https://shop.example.com/p/1 --detect
"""

import argparse
import asyncio
import json
import logging
import os
import sys

import structlog

# Add backend to path so we can import savecart modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from savecart.config import settings
from savecart.core.exceptions import FetchError, RateLimitError
from savecart.extraction.dispatcher import get_product_extractor
from savecart.extraction.fetcher import PageFetcher
from savecart.schemas.product_info import TriggerRequest
from savecart.services.detection_service import DetectionService


def configure_logging() -> None:
    level = logging.INFO if settings.DEBUG else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Log events go to stderr so stdout stays valid JSON
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


async def run_extraction(url: str, html_path: str = None, detect: bool = False) -> int:
    """Extract a product and print the result.

    Args:
        url: Page location (fetched unless html_path is given)
        html_path: Optional saved HTML file to read instead of fetching
        detect: Run the gated automatic flow instead of "extract now"

    Returns:
        Process exit code
    """
    html = None
    if html_path:
        with open(html_path, encoding="utf-8") as f:
            html = f.read()

    request = TriggerRequest(
        action="detect_on_navigation" if detect else "extract_now",
        tab_id=0,
        url=url,
        html=html,
    )

    async with PageFetcher() as fetcher:
        service = DetectionService(
            extractor=get_product_extractor(),
            fetcher=fetcher,
            settings=settings,
        )
        try:
            response = await service.handle(request)
        except (FetchError, RateLimitError) as e:
            print(f"❌ {e.message}", file=sys.stderr)
            return 1

    if not response.found:
        print(f"⚠️  No product detected ({response.reason})")
        return 2

    print(json.dumps(response.product_info.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    return 0


def main():
    """Parse arguments and run the extractor."""
    parser = argparse.ArgumentParser(
        description="Extract product data from an e-commerce page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/extract_product.py --url https://www.amazon.com/dp/B0EXAMPLE
  python scripts/extract_product.py --file page.html --url https://www.ebay.com/itm/1
  python scripts/extract_product.py --file page.html --url https://shop.example.com/p/1 --detect
        """,
    )

    parser.add_argument(
        "--url",
        required=True,
        help="Page URL (also used for store name and relative links with --file)",
    )

    parser.add_argument(
        "--file",
        help="Read page markup from a saved HTML file instead of fetching it",
    )

    parser.add_argument(
        "--detect",
        action="store_true",
        help="Run the automatic on-navigation flow (product-page gate applies)",
    )

    args = parser.parse_args()
    configure_logging()

    sys.exit(asyncio.run(run_extraction(args.url, args.file, args.detect)))


if __name__ == "__main__":
    main()
