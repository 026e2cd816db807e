"""Configuration check entry point — wires logging and validates a rule file.

Usage:
    python -m screener.main [CONFIG_PATH]

Loads the configuration (default: settings.config_path), reports what it
defines and which question an interview would open with. Exits 1 with the
ConfigError message when the configuration is rejected.
"""

from __future__ import annotations

import argparse
import logging
import sys

import structlog

from screener.config import settings
from screener.errors import ConfigError
from screener.rules.loader import load_model_file
from screener.session.interview import start_session

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure stdlib logging and structlog at ``level`` (default: settings.log_level).

    Production renders structlog events as JSON lines; elsewhere they go
    through the console renderer.
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        stream=sys.stdout,
    )
    renderer = structlog.processors.JSONRenderer() if settings.is_production else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="screener", description="Validate an eligibility rule configuration.")
    parser.add_argument("config", nargs="?", default=str(settings.config_path), help="Path to the JSON configuration")
    args = parser.parse_args(argv)

    configure_logging()
    log = structlog.get_logger("screener.check")
    logger.info("Checking rule configuration (env=%s)", settings.environment)

    try:
        model = load_model_file(args.config)
    except ConfigError as exc:
        log.error("configuration rejected", path=args.config, error=str(exc))
        return 1

    session = start_session(model)
    log.info(
        "configuration ok",
        path=args.config,
        programs=list(model.program_ids),
        questions=len(model.questions),
        first_question=session.next_question_id,
    )
    for program in model.programs.values():
        logger.info(
            "Program %s (%s): depends on %d questions",
            program.id,
            program.name,
            len(model.program_dependencies[program.id]),
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
