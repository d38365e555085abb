import logging
import sys
from pathlib import Path

from loguru import logger

from src.userstore.runtime.config.config_data import ConfigData
from src.userstore.runtime.context import get_config

FMT_PLAIN = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Redirect standard 'logging' records to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Make Loguru show the original caller (not this handler)
        logger.opt(
            depth=2,
            exception=record.exc_info,
        ).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def configure_logging(config: ConfigData | None = None) -> list[int]:
    """Reset Loguru and install the sinks described by the logging config.

    Returns the ids of the sinks that were added.
    """
    main_config = config or get_config()
    cfg = main_config.logging
    env = main_config.app.environment

    logger.remove()

    backtrace_on = env != "production"
    diagnose_on = env != "production"

    # Console: always human-readable
    sink_ids = [
        logger.add(
            sys.stderr,
            level=cfg.level,
            format=FMT_PLAIN,
            colorize=True,
            serialize=False,
            backtrace=backtrace_on,
            diagnose=diagnose_on,
        )
    ]

    # File: JSON or plain
    if cfg.file:
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        is_json_file = cfg.format == "json"
        sink_ids.append(
            logger.add(
                str(path),
                level=cfg.level,
                format="{message}" if is_json_file else FMT_PLAIN,
                serialize=is_json_file,
                rotation=f"{cfg.max_size_mb} MB",
                retention=cfg.backup_count,
                backtrace=backtrace_on,
                diagnose=diagnose_on,
            )
        )

    # Route stdlib logging (SQLAlchemy) into Loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

    logger.debug("Logging configured at level {} for environment {}", cfg.level, env)
    return sink_ids
