"""
Command line interface for reference-tool.

Fetches a paper's references from INSPIRE-HEP or builds a citation
network around it, writing JSON or BibTeX.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from .config import APP_NAME, APP_VERSION, Settings, load_settings, save_settings
from .core import (
    BuildErrorKind,
    CancelToken,
    NetworkBuildError,
    PaperLookupError,
    ReferenceService,
)
from .output import OutputFormat, OutputWriter

logger = logging.getLogger("reference-tool")

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def _global_options(in_subcommand: bool) -> argparse.ArgumentParser:
    """
    Options accepted before or after the subcommand.

    Subcommand copies default to SUPPRESS so they only set a value when
    given, leaving one passed before the subcommand in place.
    """
    options = argparse.ArgumentParser(add_help=False)
    unset = argparse.SUPPRESS if in_subcommand else None

    options.add_argument(
        "--arxiv-id", dest="global_arxiv_id", default=unset, help="ArXiv ID of the paper"
    )
    options.add_argument(
        "--format",
        type=OutputFormat,
        choices=list(OutputFormat),
        metavar="{json,bibtex}",
        default=unset,
        help="Output format (default: from config, else json)",
    )
    options.add_argument(
        "--output", type=Path, default=unset, help="Output file path (default: stdout)"
    )
    options.add_argument("--categories", default=unset, help="Categories to filter (comma-separated)")
    options.add_argument("--config", type=Path, default=unset, help="Path to the TOML config file")
    options.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if in_subcommand else False,
        help="Enable verbose logging",
    )
    return options


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Fetch paper references and citation networks via the INSPIRE-HEP API",
        parents=[_global_options(in_subcommand=False)],
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    subparsers = parser.add_subparsers(dest="command")
    shared = [_global_options(in_subcommand=True)]

    network = subparsers.add_parser("network", help="Build citation network", parents=shared)
    network.add_argument("arxiv_id", nargs="?", help="ArXiv ID of the root paper")
    network.add_argument("--depth", type=int, default=None, help="Depth of the citation network")
    network.add_argument("--max-nodes", type=int, default=None, help="Stop after this many papers")

    subparsers.add_parser("config", help="Show current configuration", parents=shared)
    subparsers.add_parser("init-config", help="Initialize configuration file", parents=shared)

    return parser


def _setup_logging(verbose: bool) -> None:
    # stdout carries the results, logs go to stderr
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


async def _fetch_references(
    arxiv_id: Optional[str],
    args: argparse.Namespace,
    settings: Settings,
    service: ReferenceService,
) -> int:
    if not arxiv_id:
        logger.error("ArXiv ID is required")
        return EXIT_FAILURE

    logger.info(f"Fetching references for paper: {arxiv_id}")
    references = await service.get_references(
        arxiv_id,
        categories=settings.effective_categories(args.categories),
    )

    writer = OutputWriter(
        settings.effective_format(args.format),
        settings.effective_output_path(args.output, "references." + _suffix(args, settings)),
    )
    await writer.write_references(references)
    logger.info(f"Successfully processed {len(references)} references")
    return 0


async def _build_network(
    arxiv_id: Optional[str],
    args: argparse.Namespace,
    settings: Settings,
    service: ReferenceService,
) -> int:
    if not arxiv_id:
        logger.error("ArXiv ID is required")
        return EXIT_FAILURE

    depth = args.depth if args.depth is not None else settings.default_network_depth
    max_nodes = args.max_nodes if args.max_nodes is not None else settings.api.max_nodes
    logger.info(f"Building citation network for paper: {arxiv_id} with depth: {depth}")

    cancel_token = CancelToken()
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, cancel_token.cancel)

    try:
        network = await service.build_citation_network(
            arxiv_id,
            depth=depth,
            categories=settings.effective_categories(args.categories),
            max_nodes=max_nodes,
            cancel_token=cancel_token,
        )
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)

    writer = OutputWriter(
        settings.effective_format(args.format),
        settings.effective_output_path(args.output, "network." + _suffix(args, settings)),
    )
    await writer.write_network(network)

    stats = network.get_stats()
    logger.info(
        f"Built network with {stats.total_papers} papers and "
        f"{stats.total_citations} citations ({stats.unresolved_papers} unresolved)"
    )
    if network.truncated:
        logger.warning(f"Network truncated at {max_nodes} papers")
    return 0


def _suffix(args: argparse.Namespace, settings: Settings) -> str:
    fmt = settings.effective_format(args.format)
    return "bib" if fmt is OutputFormat.BIBTEX else "json"


async def _async_main(args: argparse.Namespace, settings: Settings) -> int:
    service = ReferenceService.from_settings(settings)
    try:
        if args.command == "network":
            arxiv_id = args.arxiv_id or args.global_arxiv_id
            return await _build_network(arxiv_id, args, settings, service)
        return await _fetch_references(args.global_arxiv_id, args, settings, service)
    except NetworkBuildError as e:
        if e.kind is BuildErrorKind.CANCELLED:
            logger.warning("Interrupted, no output written")
            return EXIT_CANCELLED
        logger.error(f"Network build failed: {e}")
        return EXIT_FAILURE
    except PaperLookupError as e:
        logger.error(f"Lookup failed: {e}")
        return EXIT_FAILURE
    finally:
        await service.close()


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line tool and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    _setup_logging(settings.effective_verbose(args.verbose))

    if args.command == "config":
        sys.stdout.write("Current configuration:\n")
        sys.stdout.write(settings.to_toml())
        return 0
    if args.command == "init-config":
        path = save_settings(Settings(), args.config)
        logger.info(f"Configuration saved to: {path}")
        return 0

    return asyncio.run(_async_main(args, settings))
