"""
structlog configuration for the API, the CLI and tests.
"""

import logging
from typing import Any

import structlog

from saasdesk.settings import get_settings

AUDIT_LOGGER = "saasdesk.audit"


def setup_logging() -> None:
    """Route structlog through stdlib logging at the configured level and format."""
    observability = get_settings().observability
    logging.basicConfig(format="%(message)s", level=observability.log_level.value)

    processors: list[Any] = []
    if observability.enable_correlation_ids:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[structlog.processors.CallsiteParameter.THREAD_NAME]
            )
        )
    processors += [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    processors.append(
        structlog.processors.JSONRenderer()
        if observability.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def log_audit_event(
    action: str,
    category: str,
    user_id: str | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    **details: Any,
) -> None:
    """
    Write a state change to the audit logger.

    The persisted subscription event is the record of truth; this entry
    lets log pipelines follow the same changes.
    """
    structlog.get_logger(AUDIT_LOGGER).info(
        action,
        audit_category=category,
        audit_user_id=user_id,
        audit_resource_type=resource_type,
        audit_resource_id=resource_id,
        **details,
    )
