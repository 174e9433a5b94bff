"""
Observability module for Médico no Bolso.

Provides structured logging, domain events and health checks
with PHI/PII protection.
"""
from .events import log_domain_event, log_record_write
from .logging import get_sanitized_logger

__all__ = ['log_domain_event', 'log_record_write', 'get_sanitized_logger']
