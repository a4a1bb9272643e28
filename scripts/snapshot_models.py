#!/usr/bin/env python3
"""Script to fetch the upstream listing once and print it normalized."""

import argparse
import asyncio
import json
import sys
import time
from typing import Any, Dict, List, Optional
import structlog

from libs.catalog import SelectionMode, create_normalizer, to_payload
from libs.catalog.views import CatalogQuery, apply_query
from libs.common.config import BaseConfig
from libs.common.logging import configure_logging, log_performance
from libs.common.metrics import measure_time
from service_dashboard.app.upstream.client import UpstreamClient, UpstreamError

logger = structlog.get_logger("snapshot_models")


@measure_time("snapshot_models")
async def snapshot_models(
    mode: str = SelectionMode.FASTEST.value,
    query: Optional[CatalogQuery] = None,
    config: Optional[BaseConfig] = None
) -> List[Dict[str, Any]]:
    """Fetch, normalize and optionally filter the listing.

    Raises
    - UpstreamError: the single fetch attempt failed
    """
    if not config:
        config = BaseConfig()

    normalizer = create_normalizer(mode)
    async with UpstreamClient(url=config.mb_upstream_url) as client:
        raw_models = await client.fetch_models()

    start_time = time.time()
    models = normalizer.normalize(raw_models)
    log_performance("normalize", (time.time() - start_time) * 1000, mode=mode, count=len(models))

    if query is not None and not query.is_empty():
        models = apply_query(models, query)
    return to_payload(models)


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Print the normalized upstream model listing")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in SelectionMode],
        default=SelectionMode.FASTEST.value,
        help="Provider selection mode"
    )
    parser.add_argument("--category", help="Tab key (chat, audio, embedding, image) or type tag")
    parser.add_argument("--search", default="", help="Substring of model name or provider id")
    parser.add_argument(
        "--capability",
        action="append",
        default=[],
        help="Required capability flag (repeatable)"
    )
    parser.add_argument("--sort", help="Column to sort by")
    parser.add_argument("--desc", action="store_true", help="Sort descending")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")

    args = parser.parse_args()

    config = BaseConfig()
    configure_logging("snapshot_models", config.mb_log_level, "console", stream=sys.stderr)

    try:
        query = CatalogQuery(
            category=args.category,
            search=args.search,
            capabilities=tuple(args.capability),
            sort_field=args.sort,
            ascending=not args.desc,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        payload = asyncio.run(snapshot_models(args.mode, query, config))
    except UpstreamError as e:
        logger.error("Snapshot failed", error=str(e), status_code=e.status_code)
        sys.exit(1)

    print(json.dumps(payload, indent=args.indent))


if __name__ == "__main__":
    main()
