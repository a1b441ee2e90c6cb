"""
Interactive shell for kvtx.

Reads one command per line, hands it to a Session, and prints whatever
the session returns. The loop ends on QUIT or end of input, both with
exit status 0.

Usage:
    python -m kvtx
    python -m kvtx --no-prompt < commands.txt
    python -m kvtx --debug
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from kvtx.config import KVConfig, VALID_LOG_LEVELS
from kvtx.session import MSG_EXITING, Session

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def run_shell(session: Session, stdin: Optional[TextIO] = None,
              stdout: Optional[TextIO] = None, prompt: Optional[str] = None) -> int:
    """
    Run the read-eval-print loop until QUIT or end of input.

    Args:
        session: Session that executes each line
        stdin: Stream to read commands from (default: sys.stdin)
        stdout: Stream to write prompts and results to (default: sys.stdout)
        prompt: Prompt text; None uses the session config, "" disables it

    Returns:
        Process exit status
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    if prompt is None:
        prompt = session.config.prompt

    while True:
        if prompt:
            stdout.write(prompt)
            stdout.flush()

        line = stdin.readline()
        if line == "":
            # End of input behaves like QUIT
            if prompt:
                stdout.write("\n")
            stdout.write(MSG_EXITING + "\n")
            stdout.flush()
            logger.debug("End of input, leaving shell")
            return 0

        result = session.execute_line(line)
        for out_line in result.lines:
            stdout.write(out_line + "\n")
        stdout.flush()

        if result.exit:
            return result.exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kvtx",
        description="Interactive key/value store with nested transactions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Commands (one per line):\n"
            "  READ key | WRITE key value | DELETE key\n"
            "  START | COMMIT | ABORT | QUIT"
        ),
    )
    parser.add_argument(
        "--prompt",
        help="Prompt printed before each command (default: '> ' or $KVTX_PROMPT)"
    )
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Do not print a prompt (useful when piping commands in)"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        help="Log level for diagnostics on stderr (default: WARNING or $KVTX_LOG_LEVEL)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Shortcut for --log-level DEBUG"
    )
    return parser


def build_config(args: argparse.Namespace) -> KVConfig:
    """
    Merge environment settings with command-line flags.

    Flags win over KVTX_* environment variables.
    """
    config = KVConfig.from_env()

    if args.prompt is not None:
        config.prompt = args.prompt
    if args.no_prompt:
        config.prompt = ""
    if args.log_level:
        config.log_level = args.log_level
    if args.debug:
        config.log_level = "DEBUG"

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit status (0 on QUIT or end of input, 1 on bad configuration)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level_value,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    session = Session(config=config)
    logger.debug("Starting shell with config %s", config.to_dict())
    return run_shell(session)
