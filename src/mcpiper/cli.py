"""CLI entry point for mcpiper."""

import argparse
import logging
import sys

import mcpiper.io.logging_setup
import mcpiper.settings
from mcpiper.core.patterns import InvalidPatternError, PatternSyntax, compile_pattern
from mcpiper.core.render import RenderContext
from mcpiper.io.channels import ChannelManager, replay
from mcpiper.io.output import COLOR_MODES, OutputSink, make_console
from mcpiper.palette import resolve_scheme
from mcpiper.pipeline.trace_pipeline import TracePipeline

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Search for PATTERN in each mcrouter debug fifo in FIFO_ROOT (see options list)
directory. If PATTERN is not provided, match everything.
PATTERN is, by default, a basic regular expression (BRE).
"""


def build_parser(defaults: dict | None = None) -> argparse.ArgumentParser:
    defaults = defaults or {}
    parser = argparse.ArgumentParser(
        prog="mcpiper",
        usage="%(prog)s [OPTION]... [PATTERN]",
        description=DESCRIPTION,
    )
    parser.add_argument(
        "match_expression",
        nargs="?",
        default="",
        metavar="PATTERN",
        help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "-f",
        "--fifo-root",
        type=str,
        default=defaults.get("fifo_root", mcpiper.settings.DEFAULT_FIFO_ROOT),
        help="Path of mcrouter fifo's directory. Env: MCPIPER_FIFO_ROOT",
    )
    parser.add_argument(
        "-P",
        "--filename-pattern",
        type=str,
        default="",
        help="Basic regular expression (BRE) to match the name of the fifos.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Doesn't display values.",
    )
    parser.add_argument(
        "-E",
        "--extended-regexp",
        action="store_true",
        default=False,
        help="Interpret patterns as Python regular expressions instead of BRE.",
    )
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        default=defaults.get("color", "auto"),
        help="When to colorize output (default: auto).",
    )
    parser.add_argument(
        "--seed-hue",
        type=float,
        default=defaults.get("seed_hue"),
        help="Seed hue (0-360) for a 24-bit color scheme. Env: MCPIPER_SEED_HUE",
    )
    parser.add_argument(
        "--replay",
        type=str,
        default=None,
        help="Read decoded events from a recorded JSON-lines file ('-' for stdin) "
        "instead of the fifo root.",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=mcpiper.settings.DEFAULT_POLL_INTERVAL,
        help="Seconds between fifo root rescans (default: 1.0).",
    )
    return parser


def parse_settings(argv: list[str] | None = None) -> mcpiper.settings.Settings:
    parser = build_parser(mcpiper.settings.resolve_defaults())
    args = parser.parse_args(argv)
    if not args.fifo_root:
        parser.error("Fifo's directory (--fifo-root) cannot be empty")
    if args.poll_interval <= 0:
        parser.error("--poll-interval must be positive")
    return mcpiper.settings.Settings(
        match_expression=args.match_expression,
        fifo_root=args.fifo_root,
        filename_pattern=args.filename_pattern,
        quiet=args.quiet,
        extended_regexp=args.extended_regexp,
        color=args.color,
        seed_hue=args.seed_hue,
        replay=args.replay,
        poll_interval=args.poll_interval,
    )


def run(settings: mcpiper.settings.Settings, console=None) -> int:
    """Compile patterns, wire the pipeline and read until the input ends.

    Returns the process exit status.
    """
    syntax = PatternSyntax.EXTENDED if settings.extended_regexp else PatternSyntax.BASIC

    try:
        filename_pattern = compile_pattern(settings.filename_pattern, syntax)
    except InvalidPatternError as exc:
        print(f"Invalid filename pattern: {exc}", file=sys.stderr)
        return 1
    try:
        data_pattern = compile_pattern(settings.match_expression, syntax)
    except InvalidPatternError as exc:
        print(f"Invalid pattern: {exc}", file=sys.stderr)
        return 1

    if filename_pattern is not None:
        print(f"Filename pattern: {settings.filename_pattern}", file=sys.stderr)
    if data_pattern is not None:
        print(f"Data pattern: {settings.match_expression}", file=sys.stderr)

    context = RenderContext(scheme=resolve_scheme(settings.seed_hue), quiet=settings.quiet)
    sink = OutputSink(console if console is not None else make_console(settings.color))
    pipeline = TracePipeline(context, sink, data_pattern)

    try:
        if settings.replay is not None:
            if settings.replay == "-":
                replay(sys.stdin.buffer, pipeline, source="stdin")
            else:
                with open(settings.replay, "rb") as stream:
                    replay(stream, pipeline, source=settings.replay)
        else:
            manager = ChannelManager(
                settings.fifo_root,
                pipeline,
                filename_pattern=filename_pattern,
                poll_interval=settings.poll_interval,
            )
            try:
                manager.run_forever()
            finally:
                manager.close()
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        logger.error("%s", exc)
        return 1

    logger.info(
        "done rendered=%d shown=%d suppressed=%d",
        pipeline.rendered,
        pipeline.shown,
        pipeline.suppressed,
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    mcpiper.io.logging_setup.configure()
    settings = parse_settings(argv)
    sys.exit(run(settings))


if __name__ == "__main__":
    main()
