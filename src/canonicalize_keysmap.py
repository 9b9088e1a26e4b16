"""canonicalize-keysmap - reduce a keysmap to its canonical range form.

Reads `<group>:<artifact>:<version> = <fingerprint>` lines, orders each
artifact's versions by Maven rules and writes the smallest equivalent set of
group, artifact and version-range lines.

    Returns:
        int: Exit code
"""
import logging
import os
import sys
from contextlib import ExitStack

from args import parse_args
from cli_config import apply_config_overrides
from common.errors import KeysmapInvariantError
from common.logging_utils import LOG_LEVEL_ENV, Timer, configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes
from keysmap.ranges import canonicalize
from keysmap.parser import read_keysmap
from keysmap.writer import write_keysmap


def run(input_stream, output_stream) -> int:
    """Canonicalize one keysmap from `input_stream` into `output_stream`.

    Returns:
        int: number of lines written
    """
    logger = logging.getLogger(__name__)
    with Timer() as timer:
        keysmap = read_keysmap(input_stream)
        # Nothing is written unless every group canonicalizes cleanly
        lines = list(canonicalize(keysmap))
        written = write_keysmap(lines, output_stream)
    if is_debug_enabled(logger):
        logger.debug(
            "Canonicalization finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="run",
                entries=len(keysmap),
                lines=written,
                duration_ms=timer.duration_ms(),
            ),
        )
    logger.info("Wrote %d canonical lines for %d entries.", written, len(keysmap))
    return written


def _open_streams(stack: ExitStack, args):
    source = sys.stdin
    target = sys.stdout
    if args.INPUT:
        source = stack.enter_context(open(args.INPUT, encoding="utf-8"))
    if args.OUTPUT:
        target = stack.enter_context(open(args.OUTPUT, "w", encoding="utf-8"))
    return source, target


def main(argv=None) -> int:
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    apply_config_overrides(args)
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[LOG_LEVEL_ENV] = args.LOG_LEVEL
    configure_logging(Constants.DEFAULT_LOG_LEVEL, getattr(args, "LOG_FILE", None))

    with ExitStack() as stack:
        try:
            source, target = _open_streams(stack, args)
        except OSError as e:
            logger.error("IO error: %s, aborting", e)
            return ExitCodes.FILE_ERROR.value
        try:
            run(source, target)
        except KeysmapInvariantError:
            logger.critical("Internal invariant violated, aborting", exc_info=True)
            return ExitCodes.INVARIANT_VIOLATION.value
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
