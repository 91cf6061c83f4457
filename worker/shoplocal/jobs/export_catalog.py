"""CLI job to page through the storefront catalog and export normalized products."""

import argparse
import json
import logging
import sys
import time
from typing import Optional, TextIO

from shoplocal.core.config import get_settings
from shoplocal.vendors import storefront_api

logger = logging.getLogger(__name__)


def export_catalog(
    *,
    out: TextIO,
    max_pages: int,
    per_page: Optional[int] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    search: Optional[str] = None,
) -> int:
    """Write one JSON object per normalized product and return how many were written."""
    if max_pages <= 0:
        raise ValueError("max_pages must be positive")

    settings = get_settings()
    written = 0
    page = 1

    while page <= max_pages:
        products, _ = storefront_api.list_products(
            settings,
            page=page,
            per_page=per_page,
            category=category,
            brand=brand,
            search=search,
        )
        if not products:
            logger.info("Page %d is empty; stopping", page)
            break

        for product in products:
            out.write(json.dumps(product.to_dict(), ensure_ascii=False))
            out.write("\n")
            written += 1

        page += 1
        if page <= max_pages:
            time.sleep(0.5)

    logger.info("Exported %d products from %d page(s)", written, page - 1)
    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export normalized storefront products as JSON Lines")
    parser.add_argument("--pages", dest="max_pages", type=int, default=1, help="Maximum number of pages to fetch")
    parser.add_argument(
        "--per-page",
        dest="per_page",
        type=int,
        default=get_settings().default_per_page,
        help="Products per page",
    )
    parser.add_argument("--category", dest="category", help="Category filter")
    parser.add_argument("--brand", dest="brand", help="Brand filter")
    parser.add_argument("--search", dest="search", help="Search term")
    parser.add_argument("--output", dest="output", help="Write to this file instead of stdout")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    kwargs = dict(
        max_pages=args.max_pages,
        per_page=args.per_page,
        category=args.category,
        brand=args.brand,
        search=args.search,
    )
    try:
        if args.output:
            with open(args.output, "w", encoding="utf-8") as fh:
                export_catalog(out=fh, **kwargs)
        else:
            export_catalog(out=sys.stdout, **kwargs)
    except storefront_api.StorefrontAPIError as exc:
        logger.error("Catalog export failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
