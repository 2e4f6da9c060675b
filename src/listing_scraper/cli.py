"""Command line interface for testing integrations and running syncs."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from .integrations import BUILTIN_INTEGRATIONS, get_builtin_integration, load_integration_config
from .models import IntegrationConfig, SyncType
from .service import IntegrationBuilderService
from .sync import ListingSyncRunner


def _print_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, ensure_ascii=False, default=str)
    sys.stdout.write("\n")


def _load_integration(args: argparse.Namespace, parser: argparse.ArgumentParser) -> IntegrationConfig:
    if args.config:
        integration = load_integration_config(Path(args.config))
        if integration is None:
            parser.error(f"Config file not found: {args.config}")
        return integration
    if args.platform:
        integration = get_builtin_integration(args.platform)
        if integration is None:
            parser.error(
                f"Unknown platform: {args.platform} (choose from {', '.join(BUILTIN_INTEGRATIONS)})"
            )
        return integration
    parser.error("either --config or --platform is required")


def _add_integration_args(subparser: argparse.ArgumentParser) -> None:
    group = subparser.add_mutually_exclusive_group()
    group.add_argument("--config", type=str, help="Path to an integration config JSON file")
    group.add_argument("--platform", type=str, help="Name of a built-in platform template")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="listing-scraper",
        description="Test field mappings against listing pages and run integration syncs.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    selector = subparsers.add_parser("test-selector", help="Count matches of a CSS selector")
    selector.add_argument("selector", type=str, help="CSS selector to test")
    source = selector.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", type=str, help="Page URL to fetch")
    source.add_argument("--html-file", type=str, help="Local HTML file to test against")

    preview = subparsers.add_parser("preview", help="Preview field extractions on a URL")
    preview.add_argument("url", type=str, help="Page URL")
    _add_integration_args(preview)

    fetch = subparsers.add_parser("fetch", help="Fetch a page and print its raw HTML info")
    fetch.add_argument("url", type=str, help="Page URL")

    batch = subparsers.add_parser("batch-test", help="Preview field extractions on up to 10 URLs")
    batch.add_argument("urls", nargs="+", help="Page URLs")
    _add_integration_args(batch)

    sync = subparsers.add_parser("sync", help="Run a sync for an integration")
    _add_integration_args(sync)
    sync.add_argument(
        "--type",
        dest="sync_type",
        choices=[t.value for t in SyncType],
        default=SyncType.FULL_SYNC.value,
        help="Sync type (default: full_sync)",
    )
    sync.add_argument("--url", type=str, help="Detail page URL (single_url syncs)")

    subparsers.add_parser("platforms", help="List built-in platform templates")

    return parser


async def run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """Execute a parsed command and return the exit code."""
    service = IntegrationBuilderService()

    if args.command == "platforms":
        _print_json({name: config.display_name for name, config in BUILTIN_INTEGRATIONS.items()})
        return 0

    if args.command == "test-selector":
        body: dict[str, Any] = {"selector": args.selector}
        if args.html_file:
            body["html"] = Path(args.html_file).read_text(encoding="utf-8")
        else:
            body["url"] = args.url
        response = await service.test_selector(body)

    elif args.command == "preview":
        integration = _load_integration(args, parser)
        response = await service.preview({
            "url": args.url,
            "fieldMappings": [m.to_dict() for m in integration.field_mappings],
        })

    elif args.command == "fetch":
        response = await service.fetch_page({"url": args.url})
        if response["success"]:
            # Raw HTML is too large for the terminal
            response["data"].pop("html")

    elif args.command == "batch-test":
        integration = _load_integration(args, parser)
        response = await service.batch_test({
            "urls": args.urls,
            "fieldMappings": [m.to_dict() for m in integration.field_mappings],
        })

    else:
        integration = _load_integration(args, parser)
        if args.sync_type == SyncType.SINGLE_URL.value and not args.url:
            parser.error("--url is required for single_url syncs")
        result = await ListingSyncRunner().run(integration, SyncType(args.sync_type), args.url)
        _print_json(result.model_dump(mode="json"))
        return 0 if result.success else 1

    _print_json(response)
    return 0 if response["success"] else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return asyncio.run(run(args, parser))


if __name__ == "__main__":
    sys.exit(main())
