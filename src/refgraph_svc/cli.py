#!/usr/bin/env python3
"""
CLI tool for interacting with the refgraph service.

Usage:
    python -m refgraph_svc.cli thing T1 --fields "uuid atClass key { email }"
    python -m refgraph_svc.cli query '{ action(id: "A1") { uuid things { object { uuid } } } }'
    python -m refgraph_svc.cli subquery "uuid key { uuid token }"
    python -m refgraph_svc.cli serve --config config.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Any

from colorama import Fore, Style, init as colorama_init

from .federation.peer import PeerClient, PeerError
from .schema.reprojection import get_sub_query, parse_selections


DEFAULT_FIELDS = {
    "thing": "uuid atContext atClass creationTimeUnix lastUpdateTimeUnix key { uuid email }",
    "action": "uuid atContext atClass creationTimeUnix things { object { uuid } subject { uuid } } key { uuid email }",
    "key": "uuid email ipOrigin keyExpiresUnix read write execute delete parent { uuid }",
}


def colorize(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}"


def print_json(data: Any, indent: int = 2) -> None:
    output = json.dumps(data, indent=indent, default=str)
    print(output)


def print_result(body: dict[str, Any]) -> int:
    """Print a GraphQL response; returns the exit code."""
    print(colorize("\nData:", Style.BRIGHT))
    print_json(body.get("data"))

    errors = body.get("errors") or []
    if errors:
        print(colorize("\nErrors:", Style.BRIGHT))
        for error in errors:
            path = ".".join(str(p) for p in error.get("path") or [])
            code = (error.get("extensions") or {}).get("code", "")
            print(f"  {colorize(path or '(query)', Fore.YELLOW)} {colorize(code, Fore.RED)} {error.get('message')}")
        return 1
    return 0


def _client(args) -> PeerClient:
    return PeerClient(api_key=args.api_key, scheme=args.scheme)


async def cmd_query(args):
    """Run a raw GraphQL query."""
    try:
        body = await _client(args).query(args.host, args.text)
    except PeerError as e:
        print(colorize(f"Error: {e}", Fore.RED), file=sys.stderr)
        return 1
    return print_result(body)


async def cmd_fetch(args):
    """Fetch a single thing, action or key by id."""
    fields = args.fields or DEFAULT_FIELDS[args.command]
    query = f"{{ {args.command}(id: {json.dumps(args.id)}) {{ {fields} }} }}"
    try:
        body = await _client(args).query(args.host, query)
    except PeerError as e:
        print(colorize(f"Error: {e}", Fore.RED), file=sys.stderr)
        return 1
    return print_result(body)


async def cmd_subquery(args):
    """Print the reprojection of a field list."""
    print(get_sub_query(parse_selections(args.fields)))
    return 0


def cmd_serve(args):
    """Run the service with uvicorn."""
    import uvicorn

    from .config import Config

    if args.config:
        os.environ["REFGRAPH_CONFIG"] = args.config
    config = Config.from_file(args.config) if args.config else Config()
    uvicorn.run(
        "refgraph_svc.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
    )
    return 0


def main():
    colorama_init()

    parser = argparse.ArgumentParser(
        description="CLI tool for the RefGraph Service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("REFGRAPH_HOST", "localhost:8060"),
        help="host[:port] of the refgraph node",
    )
    parser.add_argument(
        "--scheme",
        default="http",
        help="URL scheme used to reach the node",
    )
    parser.add_argument(
        "--api-key",
        default=os.environ.get("REFGRAPH_API_KEY"),
        help="API key sent as X-API-KEY",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    query_parser = subparsers.add_parser("query", help="Run a GraphQL query")
    query_parser.add_argument("text", help="GraphQL query text")

    for kind in ("thing", "action", "key"):
        fetch_parser = subparsers.add_parser(kind, help=f"Fetch a {kind} by id")
        fetch_parser.add_argument("id", help=f"Id of the {kind}")
        fetch_parser.add_argument("--fields", help="Field selection (without outer braces)")

    sub_parser = subparsers.add_parser("subquery", help="Reproject a field selection")
    sub_parser.add_argument("fields", help="Field selection, e.g. 'uuid key { uuid }'")

    serve_parser = subparsers.add_parser("serve", help="Run the service")
    serve_parser.add_argument("--config", help="YAML or JSON config file")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "serve":
        return cmd_serve(args)

    commands = {
        "query": cmd_query,
        "thing": cmd_fetch,
        "action": cmd_fetch,
        "key": cmd_fetch,
        "subquery": cmd_subquery,
    }
    return asyncio.run(commands[args.command](args))


if __name__ == "__main__":
    sys.exit(main())
