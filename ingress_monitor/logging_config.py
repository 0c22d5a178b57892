"""structlog setup shared by the controller, kopf, uvicorn and the API clients."""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog

# Third party loggers that are only useful when debugging.
NOISY_LOGGERS = ("kubernetes.client.rest", "urllib3", "httpx", "httpcore", "kopf.objects")


def setup_logging(debug: bool = False, log_format: Optional[str] = None) -> None:
    """Configure structlog and route stdlib loggers through the same renderer.

    Debug mode logs at DEBUG level and defaults to console output. Otherwise
    the level comes from LOG_LEVEL and output defaults to JSON. LOG_FORMAT
    (``json`` or ``console``) overrides the format in both modes.
    """
    if debug:
        log_level = "DEBUG"
    else:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    if log_format is None:
        log_format = os.getenv("LOG_FORMAT", "console" if debug else "json")
    log_format = log_format.lower()

    shared_processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level, *shared_processors,
                    structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *_get_renderers(log_format)],
    ))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    logger = structlog.get_logger(__name__)
    logger.info("Logging configured", log_level=log_level, log_format=log_format, debug=debug)


def _get_renderers(log_format: str) -> List[Any]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty(), exception_formatter=structlog.dev.plain_traceback)]


def bind_controller_context(**kwargs: Any) -> None:
    """Attach fields such as provider and namespace to every following log entry."""
    structlog.contextvars.bind_contextvars(**kwargs)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_function_entry(logger: structlog.stdlib.BoundLogger, func_name: str, **kwargs: Any) -> None:
    logger.debug("Function entry", function=func_name, **kwargs)


def log_function_exit(logger: structlog.stdlib.BoundLogger, func_name: str, **kwargs: Any) -> None:
    logger.debug("Function exit", function=func_name, **kwargs)


def log_api_request(logger: structlog.stdlib.BoundLogger, method: str, path: str, **kwargs: Any) -> None:
    """Log an outgoing or incoming HTTP request."""
    logger.debug("API request", method=method, path=path, **kwargs)


def log_api_response(logger: structlog.stdlib.BoundLogger, method: str, path: str, status_code: int, **kwargs: Any) -> None:
    logger.debug("API response", method=method, path=path, status_code=status_code, **kwargs)


def log_k8s_operation(logger: structlog.stdlib.BoundLogger, operation: str, namespace: str, name: str, **kwargs: Any) -> None:
    """Log a read or write of an ingress.

    Args:
        logger: The logger instance
        operation: Kubernetes API operation, e.g. ``read_ingress``
        namespace: Namespace of the ingress
        name: Name of the ingress
        **kwargs: Additional operation details
    """
    logger.debug("Kubernetes operation", operation=operation, namespace=namespace, name=name, **kwargs)


def log_monitor_event(logger: structlog.stdlib.BoundLogger, event_type: str, monitor: str, **kwargs: Any) -> None:
    """Log a monitor lifecycle event (created, updated, deleted)."""
    logger.info("Monitor event", event_type=event_type, monitor=monitor, **kwargs)
