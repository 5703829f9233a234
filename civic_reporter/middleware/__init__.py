"""Middleware components for the application."""

from civic_reporter.middleware.audit_logger import AuditLogMiddleware
from civic_reporter.middleware.request_id import RequestIDMiddleware
from civic_reporter.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "AuditLogMiddleware",
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
]
