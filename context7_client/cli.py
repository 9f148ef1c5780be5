"""CLI commands for querying the Context7 API."""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="context7-fetch",
        description="Query the Context7 documentation API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every request and retry (DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # search subcommand
    search_parser = subparsers.add_parser("search", help="Search for libraries")
    search_parser.add_argument("query", help="Search query (e.g., react)")
    search_parser.add_argument("--page", type=int, default=None, help="Page number")
    search_parser.add_argument("--per-page", type=int, default=None, help="Results per page")
    search_parser.add_argument("--language", default=None, help="Only libraries in this language")
    search_parser.add_argument(
        "--sort",
        choices=["relevance", "stars", "updated", "name"],
        default=None,
        help="Sort key",
    )
    search_parser.add_argument(
        "--tag",
        action="append",
        default=[],
        help="Tag filter (repeatable)",
    )
    search_parser.add_argument(
        "--include-metadata",
        action="store_true",
        default=None,
        help="Include extended library metadata",
    )

    # docs subcommand
    docs_parser = subparsers.add_parser("docs", help="Fetch documentation for a library")
    docs_parser.add_argument("library_id", help="Library ID (e.g., /vercel/next.js)")
    docs_parser.add_argument("--topic", default=None, help="Focus on a topic (e.g., routing)")
    docs_parser.add_argument("--tokens", type=int, default=None, help="Maximum tokens to return")
    docs_parser.add_argument(
        "--format",
        choices=["markdown", "text", "html"],
        default=None,
        help="Output format",
    )
    docs_parser.add_argument("--version", default=None, help="Library version to pin")
    docs_parser.add_argument(
        "--include-examples",
        action="store_true",
        default=None,
        help="Inline code examples",
    )

    # examples subcommand
    examples_parser = subparsers.add_parser("examples", help="Find code examples for a symbol")
    examples_parser.add_argument("library_id", help="Library ID")
    examples_parser.add_argument("symbol", help="Function or symbol name (e.g., useState)")
    examples_parser.add_argument("--page", type=int, default=None, help="Page number")
    examples_parser.add_argument("--per-page", type=int, default=None, help="Results per page")
    examples_parser.add_argument(
        "--filter",
        choices=["popular", "recent", "recommended"],
        default=None,
        help="Example filter",
    )
    examples_parser.add_argument(
        "--include-description",
        action="store_true",
        default=None,
        help="Include example descriptions",
    )

    # rate-limit subcommand
    subparsers.add_parser("rate-limit", help="Show current rate limit quota")

    return parser


async def _run(args: argparse.Namespace):
    from . import client as client_mod
    from .options import CodeExampleOptions, DocumentationOptions, SearchOptions

    async with client_mod.Context7Client() as client:
        if args.command == "search":
            options = SearchOptions(
                page=args.page,
                per_page=args.per_page,
                language=args.language,
                sort=args.sort,
                tags=args.tag or None,
                include_metadata=args.include_metadata,
            )
            return await client.search_libraries(args.query, options)
        if args.command == "docs":
            options = DocumentationOptions(
                topic=args.topic,
                tokens=args.tokens,
                format=args.format,
                version=args.version,
                include_examples=args.include_examples,
            )
            return await client.get_library_documentation(args.library_id, options)
        if args.command == "examples":
            options = CodeExampleOptions(
                page=args.page,
                per_page=args.per_page,
                filter=args.filter,
                include_description=args.include_description,
            )
            return await client.find_code_examples(args.library_id, args.symbol, options)
        return await client.get_rate_limit_snapshot()


def main():
    from .models import Unavailable
    from .settings import get_settings

    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    level = logging.DEBUG if args.verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="[context7] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    result = asyncio.run(_run(args))

    if isinstance(result, Unavailable):
        sys.stderr.write(f"unavailable: {result.reason.value} ({result.detail})\n")
        sys.exit(1)

    if isinstance(result, str):
        sys.stdout.write(result)
        if not result.endswith("\n"):
            sys.stdout.write("\n")
    elif dataclasses.is_dataclass(result):
        json.dump(dataclasses.asdict(result), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        json.dump(result.model_dump(mode="json", by_alias=True), sys.stdout, indent=2)
        sys.stdout.write("\n")


if __name__ == "__main__":
    main()
