import logging

import notifiers.logging

from landed import config

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"


def get_log_handlers(logger):
    """Telegram notifications for warnings and errors, when a bot token is set."""
    if config.TELEGRAM_TOKEN is None:
        return []
    handler = notifiers.logging.NotificationHandler(
        "telegram",
        defaults={
            "token": config.TELEGRAM_TOKEN,
            "chat_id": config.TELEGRAM_CHAT_ID,
        },
    )
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return [handler]


def configure_logging(*loggers):
    logging.getLogger().setLevel(config.OVERRIDE_LOGGING)
    handlers = []
    for logger in loggers:
        logger.setLevel(config.OVERRIDE_LOGGING)
        handlers += get_log_handlers(logger)
    return handlers
