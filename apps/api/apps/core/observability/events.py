"""
Domain events logging helpers.

Domain events are the audit trail of the clinical record: one structured
line per successful write, carrying entity type, entity id and actor.
"""
from typing import Any, Dict, Optional

from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields: Any
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'consultation_created')
        entity_type: Type of entity (e.g., 'Consultation')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, failure, etc.)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'consultation_created',
            entity_type='Consultation',
            entity_id=str(consultation.id),
            entity_ids={'patient_id': str(consultation.patient_id)},
            actor_id=str(doctor.id),
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    event_data.update(sanitize_dict(extra_fields))

    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked', 'not_found']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_record_write(instance, action: str, actor, **extra):
    """
    Audit line for a clinical record write.

    ``action`` is one of created/updated/deleted or a specific transition
    such as ``status_changed``.
    """
    entity_type = instance.__class__.__name__
    entity_ids = {}
    patient_id = getattr(instance, 'patient_id', None)
    if patient_id:
        entity_ids['patient_id'] = str(patient_id)

    log_domain_event(
        f'{entity_type.lower()}_{action}',
        entity_type=entity_type,
        entity_id=str(instance.pk),
        entity_ids=entity_ids,
        action=action,
        actor_id=str(actor.pk) if actor is not None else None,
        **extra
    )
