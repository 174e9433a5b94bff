"""
Structured logging with PHI/PII protection.

Patient records carry names, contact data and free clinical text. None of
that may reach a log sink, so every ``extra=`` payload passes through the
redaction below before it is serialized.
"""
import json
import logging
from datetime import datetime, timezone

from .correlation import get_request_id, get_user_id


# Keys that are never logged verbatim (PHI/PII)
SENSITIVE_FIELDS = {
    'password',
    'token',
    'access',
    'refresh',
    'secret',
    # patient identity and contact
    'patient_name',
    'nome',
    'name',
    'patient_email',
    'email',
    'patient_phone',
    'celular',
    'fixo',
    'phone',
    'patient_address',
    'endereco',
    'patient_cpf',
    'patient_rg',
    'data_nascimento',
    'emergency_contact',
    'health_insurance',
    # free clinical text
    'chief_complaint',
    'illness_history',
    'clinical_notes',
    'diagnosis',
    'treatment_plan',
    'reason_for_visit',
    'note_text',
    'notes',
    'additional_notes',
    'general_instructions',
    'results',
    'q',
    'search',
}

# Attributes every LogRecord has; they are rendered explicitly or skipped.
_RECORD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message', 'asctime',
}


class CorrelationFilter(logging.Filter):
    """
    Logging filter that injects correlation context into log records.
    """

    def filter(self, record):
        if not getattr(record, 'request_id', None):
            record.request_id = get_request_id() or '-'
        if not getattr(record, 'user_id', None):
            record.user_id = get_user_id() or '-'
        return True


class SanitizedJSONFormatter(logging.Formatter):
    """
    JSON formatter that redacts sensitive keys in the record's extras.
    """

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
            'user_id': getattr(record, 'user_id', '-'),
        }

        for key, value in record.__dict__.items():
            if key in log_data or key in _RECORD_ATTRS or key.startswith('_'):
                continue
            if key.lower() in SENSITIVE_FIELDS:
                log_data[key] = '[REDACTED]'
            else:
                log_data[key] = sanitize_value(value)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_sanitized_logger(name):
    """
    Get a logger with correlation filter applied.

    Usage:
        logger = get_sanitized_logger(__name__)
        logger.info('Patient created', extra={'event': 'patient_created', 'entity_id': str(patient.id)})
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationFilter) for f in logger.filters):
        logger.addFilter(CorrelationFilter())

    return logger


def sanitize_value(value):
    """Redact sensitive keys inside nested dicts and lists."""
    if isinstance(value, dict):
        return sanitize_dict(value)
    if isinstance(value, (list, tuple)):
        return [sanitize_value(v) for v in value]
    return value


def sanitize_dict(data):
    """
    Return a copy of ``data`` with sensitive keys replaced by ``[REDACTED]``.

    Non-dict input is returned unchanged.
    """
    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = '[REDACTED]'
        else:
            sanitized[key] = sanitize_value(value)
    return sanitized
