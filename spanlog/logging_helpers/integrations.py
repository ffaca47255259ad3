"""
Integrations with third-party logging libraries.

Records from loguru are bridged into stdlib logging so they go through the
span event capture and the span-context output like any other record.
"""

import logging

from loguru import logger as loguru_logger


class InterceptHandler(logging.Handler):
    """
    Handler to forward records produced by another logging framework to the
    stdlib logger of the same name.

    Loguru passes its bound ``extra`` values as a single ``extra`` attribute;
    they are flattened onto the record so they become record fields.
    """

    def emit(self, record):
        # Forward to standard logging but avoid infinite loops
        if getattr(record, '_intercepted', False):
            return
        record._intercepted = True

        extra = record.__dict__.pop("extra", None)
        if isinstance(extra, dict):
            for key, value in extra.items():
                if key not in record.__dict__:
                    setattr(record, key, value)

        logging.getLogger(record.name).handle(record)


def bridge_loguru_to_std_logging(level="DEBUG") -> int:
    """
    Bridge loguru logs to standard logging while keeping existing loguru sinks.

    Args:
        level: Minimum loguru level forwarded

    Returns:
        int: Id of the added loguru sink, usable with ``logger.remove``
    """
    return loguru_logger.add(InterceptHandler(), level=level, format="{message}")
