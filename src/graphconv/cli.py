"""CLI entry point."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

from graphconv.errors import GraphConvError
from graphconv.formats import extension_map
from graphconv.hydra_utils import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_CONFIG_PATH,
    compose_config,
    format_config,
    request_from_config,
)
from graphconv.logging_utils import (
    configure_logging,
    log_exception,
    run_with_error_handling,
    verbosity_to_level,
)
from graphconv.pipeline import ASYMMETRIC_POLICIES, ConversionReport, ConversionRequest, convert
from graphconv.registry import default_registry

_SUBCOMMANDS: Sequence[str] = (
    "help",
    "convert",
    "run",
    "cfg",
    "formats",
)

_DIRECTION_HELP = "1=directed, 2=bidirectional, 4=undirected."


def _print_report(report: ConversionReport) -> None:
    print(json.dumps(report.to_dict(), indent=2, sort_keys=True))


def _convert_handler(args: argparse.Namespace) -> None:
    request = ConversionRequest(
        input_path=Path(args.input),
        output_path=Path(args.output),
        input_direction=args.input_direction,
        output_direction=args.output_direction,
        sort=args.sort,
        direct_by_degree=args.directed_degree,
        asymmetric_policy="symmetrize" if args.symmetrize else "error",
        input_format=args.input_format,
        output_format=args.output_format,
        report_path=Path(args.report) if args.report else None,
    )
    report = convert(request)
    if args.json:
        _print_report(report)


def _run_handler(args: argparse.Namespace) -> None:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    report = convert(request_from_config(cfg))
    if args.json:
        _print_report(report)


def _cfg_handler(args: argparse.Namespace) -> None:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    print(format_config(cfg), end="")


def _formats_handler(_args: argparse.Namespace) -> None:
    registry = default_registry()
    by_format: dict[str, list[str]] = {name: [] for name in registry.list("format")}
    for suffix, name in sorted(extension_map(registry).items()):
        by_format.setdefault(name, []).append(suffix)
    for name in sorted(by_format):
        print(f"{name}: {' '.join(by_format[name]) or '-'}")


def _register_help_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    parser: argparse.ArgumentParser,
) -> None:
    def _handler(_args: argparse.Namespace) -> None:
        parser.print_help()

    help_parser = subparsers.add_parser(
        "help",
        help="Show top-level help.",
        description="Show top-level help.",
    )
    help_parser.set_defaults(handler=_handler)


def _register_convert_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    format_names = sorted(default_registry().list("format"))
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert an edge-list graph between formats and directions.",
        description=(
            "Convert an edge-list graph between Matrix Market (.mtx) and SNAP "
            "(.txt) formats. " + _DIRECTION_HELP
        ),
    )
    convert_parser.add_argument("input", help="Input graph path.")
    convert_parser.add_argument("output", help="Output graph path.")
    convert_parser.add_argument(
        "input_direction",
        metavar="input_direction",
        help="How input records are read: " + _DIRECTION_HELP,
    )
    convert_parser.add_argument(
        "output_direction",
        metavar="output_direction",
        help="How output edges are produced: " + _DIRECTION_HELP,
    )
    convert_parser.add_argument(
        "--sort",
        action="store_true",
        help="Sort adjacencies by source, then destination.",
    )
    convert_parser.add_argument(
        "--directed-degree",
        action="store_true",
        help="Orient each edge from its lower-degree to its higher-degree endpoint.",
    )
    convert_parser.add_argument(
        "--symmetrize",
        action="store_true",
        help="With --directed-degree, add missing reverse edges instead of failing.",
    )
    convert_parser.add_argument(
        "--input-format",
        choices=format_names,
        default=None,
        help="Override input format detection.",
    )
    convert_parser.add_argument(
        "--output-format",
        choices=format_names,
        default=None,
        help="Override output format detection.",
    )
    convert_parser.add_argument(
        "--report",
        default=None,
        help="Write a conversion report (.json, or .yaml/.yml).",
    )
    convert_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the conversion report as JSON to stdout.",
    )
    convert_parser.set_defaults(handler=_convert_handler)


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config-path",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the Hydra config directory.",
    )
    parser.add_argument(
        "--config-name",
        default=DEFAULT_CONFIG_NAME,
        help="Hydra config name (without extension).",
    )


def _register_run_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    run_parser = subparsers.add_parser(
        "run",
        help="Run a conversion from a composed Hydra config.",
        description=(
            "Run a conversion from a composed Hydra config "
            "(ex: input=a.mtx output=b.txt direction.output=4)."
        ),
    )
    _add_config_arguments(run_parser)
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the conversion report as JSON to stdout.",
    )
    run_parser.add_argument(
        "overrides",
        nargs=argparse.REMAINDER,
        help=(
            "Hydra overrides; --sort, --directed-degree and --symmetrize are "
            f"also accepted. Asymmetric policies: {', '.join(ASYMMETRIC_POLICIES)}."
        ),
    )
    run_parser.set_defaults(handler=_run_handler)


def _register_cfg_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    cfg_parser = subparsers.add_parser(
        "cfg",
        help="Compose and print Hydra config.",
        description="Compose and print Hydra config.",
    )
    _add_config_arguments(cfg_parser)
    cfg_parser.add_argument(
        "overrides",
        nargs=argparse.REMAINDER,
        help="Hydra overrides (ex: direction.output=4 sort=true).",
    )
    cfg_parser.set_defaults(handler=_cfg_handler)


def _register_formats_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    formats_parser = subparsers.add_parser(
        "formats",
        help="List registered graph formats and their extensions.",
        description="List registered graph formats and their extensions.",
    )
    formats_parser.set_defaults(handler=_formats_handler)


def _build_parser(subcommands: Iterable[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graphconv",
        description="Edge-list graph conversion.",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Show full traceback on errors.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name in subcommands:
        if name == "help":
            _register_help_subcommand(subparsers, parser)
        elif name == "convert":
            _register_convert_subcommand(subparsers)
        elif name == "run":
            _register_run_subcommand(subparsers)
        elif name == "cfg":
            _register_cfg_subcommand(subparsers)
        elif name == "formats":
            _register_formats_subcommand(subparsers)
        else:
            raise ValueError(f"Unknown subcommand: {name!r}")
    return parser


def _cli_main(
    *,
    cli_logger: logging.Logger,
    argv: Optional[Sequence[str]] = None,
) -> None:
    parser = _build_parser(_SUBCOMMANDS)
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        raise SystemExit(2)
    cli_logger.setLevel(verbosity_to_level(args.verbose, args.quiet))
    try:
        args.handler(args)
    except GraphConvError as exc:
        log_exception(cli_logger, exc, show_traceback=args.traceback)
        raise SystemExit(1) from None


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point with standard logging/error handling."""
    logger = configure_logging()
    run_with_error_handling(_cli_main, logger=logger, cli_logger=logger, argv=argv)


if __name__ == "__main__":
    main()
