"""
prompt-config CLI

Command-line host for the config cache fetcher.

Usage:
    # Print the config (cached while fresh, fetched otherwise)
    prompt-config get

    # Show cache age and freshness
    prompt-config status

    # Force a fetch
    prompt-config refresh

    # Drop the cached entry
    prompt-config clear

Output is JSON for easy parsing by scripts.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path

from prompt_config.common.exceptions import PromptConfigError
from prompt_config.common.settings import Settings, load_settings
from prompt_config.fetcher import ConfigCacheFetcher


async def get_config(settings: Settings) -> dict:
    """Run get() and wrap the payload"""
    async with ConfigCacheFetcher.from_settings(settings) as fetcher:
        payload = await fetcher.get()
    return {"success": payload is not None, "config": payload}


async def refresh_config(settings: Settings) -> dict:
    """Force a fetch and report the outcome"""
    async with ConfigCacheFetcher.from_settings(settings) as fetcher:
        result = await fetcher.refresh()
    return {"success": result.ok, **result.to_dict()}


def cache_status(settings: Settings) -> dict:
    fetcher = ConfigCacheFetcher.from_settings(settings)
    return {"success": True, **fetcher.status().to_dict()}


def clear_cache(settings: Settings) -> dict:
    fetcher = ConfigCacheFetcher.from_settings(settings)
    fetcher.clear()
    return {"success": True}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prompt-config",
        description="Fetch the remote prompt config with a local cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Settings YAML file")
    parser.add_argument("--url", help="Override the config URL")
    parser.add_argument("--state-file", help="Override the cache state file")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    subparsers.add_parser("get", help="Print the config")
    subparsers.add_parser("status", help="Show cache age and freshness")
    subparsers.add_parser("refresh", help="Fetch now, ignoring freshness")
    subparsers.add_parser("clear", help="Drop the cached config")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args.config)
        if args.url:
            settings = replace(settings, url=args.url)
        if args.state_file:
            settings = replace(settings, state_file=Path(args.state_file).expanduser())

        if args.command == "get":
            result = asyncio.run(get_config(settings))
        elif args.command == "refresh":
            result = asyncio.run(refresh_config(settings))
        elif args.command == "status":
            result = cache_status(settings)
        else:
            result = clear_cache(settings)
    except PromptConfigError as e:
        result = {"success": False, "error": e.message}

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
