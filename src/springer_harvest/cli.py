import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from springer_harvest.config import DEFAULT_TIMEOUT, HarvestConfig
from springer_harvest.data.session import HarvestSession
from springer_harvest.harvest import Harvester
from springer_harvest.models.document import NamingPolicy
from springer_harvest.output.reporter import ConsoleReporter

logger = logging.getLogger(__name__)
console = Console()

NAMING_CHOICES = {
    "title": NamingPolicy.FROM_TITLE,
    "positional": NamingPolicy.POSITIONAL,
}


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="springer-harvest",
        description="Download open-access PDFs from Springer Link search listings",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("."),
        help="Directory to save downloaded PDFs",
    )
    p.add_argument(
        "--start-page",
        type=_positive_int,
        default=1,
        help="The starting page number",
    )
    p.add_argument(
        "--end-page",
        type=_positive_int,
        default=10,
        help="The ending page number (inclusive)",
    )
    p.add_argument(
        "--naming",
        choices=sorted(NAMING_CHOICES),
        default="title",
        help="Name files by document title or by page/position",
    )
    p.add_argument(
        "--journal-id",
        default=None,
        help="Springer journal id to list (default: 146)",
    )
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Per-request timeout in seconds",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return p


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.end_page < args.start_page:
        parser.error(
            f"--end-page ({args.end_page}) must be >= --start-page ({args.start_page})"
        )
    if args.timeout <= 0:
        parser.error("--timeout must be positive")
    return args


def build_config(args: argparse.Namespace) -> HarvestConfig:
    config = HarvestConfig(timeout=args.timeout)
    if args.journal_id:
        config = config.with_journal(args.journal_id)
    return config


def _run_harvest(args: argparse.Namespace) -> None:
    """Create the output directory and harvest the requested pages."""
    output_dir: Path = args.output
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        console.print(
            f"[red]Failed to create output directory {output_dir}:[/red] "
            f"{escape(str(e))}"
        )
        sys.exit(1)

    config = build_config(args)
    reporter = ConsoleReporter(console)
    logger.debug(
        "Harvesting pages %d..%d into %s", args.start_page, args.end_page, output_dir
    )

    with HarvestSession(config) as session:
        harvester = Harvester(
            session,
            output_dir,
            reporter,
            config=config,
            naming=NAMING_CHOICES[args.naming],
        )
        harvester.run(args.start_page, args.end_page)

    reporter.print_summary()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        _run_harvest(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
