#!/usr/bin/env python3
"""Main entry point for Prompt Browser CLI."""

import argparse
import logging
import sys


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Prompt Browser - Search, view and copy reusable prompts"
    )
    parser.add_argument(
        "--data",
        help="Prompt source (.json or .duckdb); defaults to $PROMPT_BROWSER_DATA or the bundled set"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # TUI command (default)
    subparsers.add_parser("tui", help="Launch the TUI interface")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search prompts by heading")
    search_parser.add_argument("query", nargs="?", default="", help="Search query")
    search_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Limit results (default: 20)"
    )

    # Show command
    show_parser = subparsers.add_parser("show", help="Show a prompt's full content")
    show_parser.add_argument("id", help="Prompt id")

    # Copy command
    copy_parser = subparsers.add_parser("copy", help="Copy a prompt's content to the clipboard")
    copy_parser.add_argument("id", help="Prompt id")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from .dataset import DatasetError, get_data_path, load_dataset

    try:
        dataset = load_dataset(get_data_path(args.data))
    except DatasetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command is None or args.command == "tui":
        from .tui import main as tui_main
        tui_main(dataset)

    elif args.command == "search":
        from .state import filter_records, format_result_count, truncate

        prompts = filter_records(dataset, args.query)
        if not prompts:
            print("No prompts found.")
            return 0

        print(format_result_count(len(prompts)))
        for i, prompt in enumerate(prompts[:args.limit], 1):
            content = truncate(prompt.content.replace("\n", " "), 80)
            print(f"{i:3}. [{prompt.id}] {prompt.heading}")
            print(f"     {content}")

    elif args.command == "show":
        prompt = dataset.get(args.id)
        if prompt is None:
            print(f"Unknown prompt id: {args.id}", file=sys.stderr)
            return 1

        print(prompt.heading)
        print("=" * min(len(prompt.heading), 40))
        print(prompt.content)

    elif args.command == "copy":
        from .clipboard import Clipboard, ClipboardWriteFailure

        prompt = dataset.get(args.id)
        if prompt is None:
            print(f"Unknown prompt id: {args.id}", file=sys.stderr)
            return 1

        try:
            Clipboard().copy(prompt.content)
        except ClipboardWriteFailure as e:
            logging.debug("failed to copy %s to clipboard", prompt.id, exc_info=True)
            print(f"Failed to copy to clipboard: {e}", file=sys.stderr)
            return 1
        print(f"Copied {prompt.heading!r} to clipboard")

    return 0


if __name__ == "__main__":
    sys.exit(main())
