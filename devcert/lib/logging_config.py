"""JSON logging for devcert: one line per event on stderr."""

import logging

from pythonjsonlogger.json import JsonFormatter

LOGGER_NAME = "devcert"


class DevCertJsonFormatter(JsonFormatter):
    """JSON formatter emitting only the fields in OUTPUT_FIELDS.

    levelname is renamed to level. Any extra attributes passed through
    ``extra=`` are dropped.
    """

    OUTPUT_FIELDS = frozenset({"timestamp", "level", "message", "exc_info", "funcName", "lineno"})

    def add_fields(self, log_data, record, message_dict):
        super().add_fields(log_data, record, message_dict)
        for key in [key for key in log_data if key not in self.OUTPUT_FIELDS]:
            del log_data[key]


def _setup_logger() -> logging.Logger:
    """Return the package logger, attaching the JSON handler once."""
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        DevCertJsonFormatter(
            "%(levelname)s %(funcName)s %(lineno)d %(message)s",
            rename_fields={"levelname": "level"},
            timestamp=True,
        )
    )

    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


LOGGER = _setup_logger()
