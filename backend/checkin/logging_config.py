"""
Logging configuration for the check-in API.
"""
import logging
import logging.handlers
import os


def setup_logging(level: str = "INFO", to_file: bool = False) -> None:
    """Configure application logging"""
    logger = logging.getLogger()
    logger.handlers = []
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if to_file:
        os.makedirs('logs', exist_ok=True)

        # 10 MB per file, max 5 files
        file_handler = logging.handlers.RotatingFileHandler(
            'logs/checkin.log',
            maxBytes=10 * 1024 * 1024,
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # SQLAlchemy echoes every statement at INFO
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    # geopy logs full request URLs (coordinates) at DEBUG
    logging.getLogger('geopy').setLevel(logging.WARNING)

    logger.info("Logging configured (level=%s, file=%s)", level, to_file)
