"""CLI entrypoints for tdcrawl commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import load_config
from .crawler import Crawler
from .errors import TdcrawlError
from .logging import configure_logging
from .report import render_json, render_text


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        default=".",
        help="Path to .tdcrawl.yml or the directory containing it (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tdcrawl",
        description="Collect @TestData methods from Bitbucket repositories, grouped by feature.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl_parser = subparsers.add_parser(
        "crawl",
        help="Crawl matching repositories and print methods grouped by feature.",
    )
    _add_verbose_option(crawl_parser, suppress_default=True)
    _add_config_option(crawl_parser)
    crawl_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format (defaults to text).",
    )
    crawl_parser.add_argument(
        "-o",
        "--output",
        help="Write the report to this file instead of stdout.",
    )
    crawl_parser.add_argument(
        "--log-file",
        help="Also write detailed logs to this file.",
    )

    repos_parser = subparsers.add_parser(
        "repos",
        help="List the repositories a crawl would visit.",
    )
    _add_verbose_option(repos_parser, suppress_default=True)
    _add_config_option(repos_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tdcrawl commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = getattr(args, "log_file", None)
    configure_logging(
        verbose=bool(args.verbose), log_file=Path(log_file) if log_file else None
    )

    try:
        config = load_config(Path(args.config)).validate()
    except TdcrawlError as exc:
        parser.exit(1, f"{exc}\n")

    crawler = Crawler(config)

    if args.command == "repos":
        try:
            repositories = crawler.discover()
        except TdcrawlError as exc:
            parser.exit(1, f"tdcrawl repos failed: {exc}\n")
        for repo in repositories:
            print(f"{repo.slug}\t{repo.name}")
    elif args.command == "crawl":
        try:
            result = crawler.run()
        except TdcrawlError as exc:
            parser.exit(1, f"tdcrawl crawl failed: {exc}\nRun with --verbose for more details.\n")

        if args.format == "json":
            report = render_json(result.features)
        else:
            report = render_text(result.features, marker=config.marker)

        if args.output:
            Path(args.output).write_text(report, encoding="utf-8")
            print(f"Report written to {args.output}")
        else:
            sys.stdout.write(report)

        if result.failures:
            print(f"{len(result.failures)} tasks failed:", file=sys.stderr)
            for name, message in result.failures:
                print(f"  {name}: {message}", file=sys.stderr)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
