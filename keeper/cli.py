#!/usr/bin/env python3
"""Command line entry points for running the keeper locally"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .abi import FLUID_PROPOSALS_ABI
from .config import ConfigurationError, settings
from .core.execution import CallOutcome, ContractInterface
from .logging_config import setup_logging


def cli_functions() -> int:
    """Print the functions the cron endpoint can invoke"""
    interface = ContractInterface(FLUID_PROPOSALS_ABI)
    for name, call in sorted(interface.callable_functions.items()):
        print(f"{name:<16} {call.selector}")
    return 0


async def cli_call(function_name: str) -> int:
    """Run one keeper call without the HTTP server"""
    from .main import build_keeper

    keeper = build_keeper(settings)
    try:
        status = await keeper.call(function_name)
    finally:
        await keeper.connection.close()

    print(json.dumps(CallOutcome(status=status).to_dict()))
    return 0 if status else 1


def cli_serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run(
        "keeper.main:app",
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fluid Keeper CLI")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the cron HTTP endpoint")
    serve_parser.add_argument("--host", default=settings.host, help="Bind host")
    serve_parser.add_argument("--port", type=int, default=settings.port, help="Bind port")

    call_parser = subparsers.add_parser("call", help="Invoke a zero-argument function once")
    call_parser.add_argument("function_name", help="Function to call, e.g. execute")

    subparsers.add_parser("functions", help="List invocable functions")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    if args.command == "functions":
        return cli_functions()

    if args.command == "serve":
        return cli_serve(args.host, args.port)

    setup_logging()
    try:
        return asyncio.run(cli_call(args.function_name))
    except ConfigurationError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
