#!/usr/bin/env python3
"""Book Finder CLI - search the catalog and keep favorites."""
import argparse
import asyncio
import json
import shlex
import sys
import logging
from tabulate import tabulate
from book_finder.app import BookFinder
from book_finder.config import Config
from book_finder.errors import SessionRequiredError
from book_finder.models import PageDirection, SearchStatus, SortOption

logger = logging.getLogger(__name__)

SHELL_HELP = """Commands:
  search TEXT        search by title or author
  sort relevance|newest
  next / prev        change page
  view N             show details for result N
  close              close the details view
  fav N              add result N to favorites
  favorites          list favorites
  recent             list recently viewed books
  help               show this help
  quit               leave"""


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def display_books(books, format_type: str = "table", start: int = 1):
    """Display books in specified format."""
    if not books:
        print("(none)")
        return

    if format_type == "table":
        headers = ["#", "Title", "Authors", "Published"]
        rows = [
            [
                i,
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.authors_str[:30] + "..." if len(book.authors_str) > 30 else book.authors_str,
                book.published_date or "Unknown"
            ]
            for i, book in enumerate(books, start)
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([book.to_dict() for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, start):
            print(f"{i}. {book.title} - {book.authors_str}")


def display_details(book):
    print("\n" + "=" * 50)
    print(book.title)
    print("=" * 50)
    print(f"Authors: {book.authors_str}")
    print(f"Published Date: {book.published_date or 'Unknown'}")
    print(f"Description: {book.description or 'No description.'}")
    print("=" * 50 + "\n")


def display_search(finder: BookFinder, format_type: str = "table"):
    state = finder.search_state
    if state.status in (SearchStatus.ERROR, SearchStatus.EMPTY):
        print(f"⚠️  {state.error_message}")
        return
    print(f"Page {state.page_number} ({state.sort_option.value})")
    display_books(state.page, format_type)


def pick(finder: BookFinder, arg: str):
    """Resolve a 1-based result number on the current page."""
    page = finder.search_state.page
    try:
        index = int(arg) - 1
    except ValueError:
        index = -1
    if not 0 <= index < len(page):
        print(f"Pick a result between 1 and {len(page)}")
        return None
    return page[index]


async def turn_page(finder: BookFinder, direction):
    """Move one page; returns a notice when nothing was fetched."""
    before = finder.search_state.offset
    if finder.paginate(direction) is None:
        if finder.search_state.offset == before:
            return "Already on the first page"
        return "Enter a search first"
    await finder.settle()
    return None


async def run_search(args, config: Config):
    """One-shot search printing the first page."""
    async with BookFinder.from_config(config) as finder:
        finder.login(args.name)
        finder.set_sort_option(args.sort)
        # A blank query fetches nothing; submitting records the empty-query error
        if finder.set_query(args.query) is None:
            finder.submit_search()
        await finder.settle()
        display_search(finder, args.format)


async def run_shell(args, config: Config):
    """Interactive session over the same intents the core exposes."""
    async with BookFinder.from_config(config) as finder:
        name = args.name
        while finder.login(name) is None:
            print(finder.error_message)
            name = await asyncio.to_thread(input, "Enter your name: ")

        print(f"Welcome, {finder.session.display_name}! Type 'help' for commands.")

        while True:
            try:
                line = await asyncio.to_thread(input, "> ")
            except EOFError:
                break

            parts = shlex.split(line) if line.strip() else []
            if not parts:
                continue
            command, rest = parts[0].lower(), " ".join(parts[1:])

            if command in ("quit", "exit"):
                break
            elif command == "help":
                print(SHELL_HELP)
            elif command == "search":
                # A non-blank query fetches as soon as it is set
                if finder.set_query(rest) is None:
                    finder.submit_search()
                await finder.settle()
                display_search(finder)
            elif command == "sort":
                try:
                    finder.set_sort_option(SortOption(rest.lower()))
                except ValueError:
                    print("Sort must be 'relevance' or 'newest'")
                    continue
                await finder.settle()
                display_search(finder)
            elif command in ("next", "prev"):
                direction = PageDirection.NEXT if command == "next" else PageDirection.PREVIOUS
                notice = await turn_page(finder, direction)
                if notice:
                    print(notice)
                    continue
                display_search(finder)
            elif command == "view":
                book = pick(finder, rest)
                if book:
                    finder.select_book(book)
                    display_details(book)
            elif command == "close":
                finder.close_details()
            elif command == "fav":
                book = pick(finder, rest)
                if book:
                    if finder.add_favorite(book):
                        print(f"✅ Added {book.title} to favorites")
                    else:
                        print(f"❌ {finder.error_message}")
            elif command == "favorites":
                display_books(finder.favorites, "compact")
            elif command == "recent":
                display_books(finder.recently_viewed, "compact")
            else:
                print(f"Unknown command: {command}")


def show_favorites(args, config: Config):
    """List persisted favorites without touching the network."""
    async def _list():
        async with BookFinder.from_config(config) as finder:
            display_books(finder.favorites, args.format)

    asyncio.run(_list())


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Book Finder - search books and keep favorites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One-shot search
  %(prog)s search "dune" --sort newest

  # Interactive session
  %(prog)s shell --name Ada

  # List saved favorites
  %(prog)s favorites --format json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search for books")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--sort", choices=[o.value for o in SortOption], default="relevance", help="Result order")
    search_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    search_parser.add_argument("--name", default="cli", help="Display name for the session")

    # Shell command
    shell_parser = subparsers.add_parser("shell", help="Interactive session")
    shell_parser.add_argument("--name", default="", help="Display name (prompted if omitted)")

    # Favorites command
    favorites_parser = subparsers.add_parser("favorites", help="List saved favorites")
    favorites_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()
    configure_logging(config.LOG_LEVEL)

    try:
        if args.command == "search":
            asyncio.run(run_search(args, config))

        elif args.command == "shell":
            asyncio.run(run_shell(args, config))

        elif args.command == "favorites":
            show_favorites(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except SessionRequiredError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
