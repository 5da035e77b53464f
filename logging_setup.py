import logging
import json
from logging.handlers import TimedRotatingFileHandler
from datetime import datetime, timezone
from pathlib import Path


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logger(cfg) -> logging.Logger:
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(cfg.LOG_LEVEL).upper(), logging.INFO))

    # Called again (tests, second window) -> don't stack handlers
    if getattr(logger, "_caredesk_configured", False):
        return logger

    if cfg.LOG_TO_FILE:
        log_dir = Path(cfg.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        # Log file rotates daily, keeps 14 days
        handler = TimedRotatingFileHandler(
            filename=str(log_dir / "caredesk.log"),
            when="midnight",
            backupCount=14,
            encoding="utf-8"
        )
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(JsonFormatter())
    logger.addHandler(console)

    logger._caredesk_configured = True
    return logger
