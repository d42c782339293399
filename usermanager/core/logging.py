"""Logging configuration and utilities."""
import logging
import sys
from typing import Any, Dict, List

import structlog
from structlog.stdlib import LoggerFactory

from ..config import settings


def configure_logging():
    """Configure structured logging."""

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.monitoring.log_level.upper()),
    )

    # Set third-party log levels
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


class RequestLogger:
    """Request logging utility."""

    @staticmethod
    def log_request(
        method: str,
        path: str,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log incoming request."""
        logger = structlog.get_logger("api.request")
        logger.info(
            "Request started",
            method=method,
            path=path,
            request_id=request_id,
            **(extra_data or {})
        )

    @staticmethod
    def log_response(
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        request_id: str = None
    ):
        """Log response."""
        logger = structlog.get_logger("api.response")
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=response_time_ms,
            request_id=request_id
        )


class BusinessLogger:
    """Business event logging utility."""

    @staticmethod
    def log_user_created(user_id: int, email: str, role: str):
        """Log user creation."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User created",
            event_type="user_created",
            user_id=user_id,
            email=email,
            role=role
        )

    @staticmethod
    def log_user_updated(user_id: int, updated_by: int, fields: List[str]):
        """Log user update."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User updated",
            event_type="user_updated",
            user_id=user_id,
            updated_by=updated_by,
            fields=fields
        )

    @staticmethod
    def log_user_deleted(user_id: int, email: str):
        """Log user deletion."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "User deleted",
            event_type="user_deleted",
            user_id=user_id,
            email=email
        )

    @staticmethod
    def log_user_list(cache_key: str, cache_hit: bool, count: int):
        """Log a user list lookup."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "Users listed",
            event_type="users_listed",
            cache_key=cache_key,
            cache_hit=cache_hit,
            count=count
        )

    @staticmethod
    def log_inactive_users_detected(count: int, threshold_days: int):
        """Log an inactivity sweep."""
        logger = structlog.get_logger("business.user")
        logger.info(
            "Inactive users detected",
            event_type="inactive_users_detected",
            count=count,
            threshold_days=threshold_days
        )

    @staticmethod
    def log_event_publish_failed(topic: str):
        """Log a failed event publication; call from an except block."""
        logger = structlog.get_logger("business.events")
        logger.exception(
            "Event publication failed",
            event_type="event_publish_failed",
            topic=topic
        )

    @staticmethod
    def log_inactive_users_notified(message: str, emails: List[str], file_path: str):
        """Log an inactivity notification as it is recorded."""
        logger = structlog.get_logger("business.notifications")
        logger.warning(
            message,
            event_type="inactive_users_notified",
            emails=emails,
            file_path=file_path
        )

    @staticmethod
    def log_notifications_file_reset(file_path: str, error: str):
        """Log an unreadable notifications file being replaced."""
        logger = structlog.get_logger("business.notifications")
        logger.warning(
            "Starting a fresh notifications file",
            event_type="notifications_file_reset",
            file_path=file_path,
            error=error
        )

    @staticmethod
    def log_admin_seeded(email: str, created: bool):
        """Log the outcome of startup admin seeding."""
        logger = structlog.get_logger("business.seed")
        logger.info(
            "Admin user created" if created else "Admin user already exists",
            event_type="admin_seeded",
            email=email,
            created=created
        )


class SecurityLogger:
    """Security event logging utility."""

    @staticmethod
    def log_login_attempt(
        email: str,
        success: bool,
        method: str = "password",
        failure_reason: str = None
    ):
        """Log login attempt."""
        logger = structlog.get_logger("security.auth")
        logger.info(
            "Login attempt",
            event_type="login_attempt",
            email=email,
            success=success,
            method=method,
            failure_reason=failure_reason
        )

    @staticmethod
    def log_access_denied(
        capability: str,
        user_id: int,
        target_id: int = None,
        reason: str = None
    ):
        """Log a denied authorization check."""
        logger = structlog.get_logger("security.access")
        logger.warning(
            "Access denied",
            event_type="access_denied",
            capability=capability,
            user_id=user_id,
            target_id=target_id,
            reason=reason
        )
