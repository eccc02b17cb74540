"""Entry point for kanbanwave CLI."""

import logging
import sys

from kanbanwave.cli import build_parser
from kanbanwave.config import ConfigError, load_config


def configure_logging(config_path: str | None) -> None:
    """Send log records to stderr at the configured level."""
    try:
        level = load_config(config_path).level
    except ConfigError:
        # Reported by the command handler
        level = logging.WARNING
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
        level=level,
    )


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    configure_logging(args.config)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
