"""
Alias collapse for dual-named fields.

Older and Portuguese-speaking clients send ``celular`` instead of
``patient_phone`` and so on. Both columns are persisted; the canonical one is
filled from the alias when the client did not provide it.
"""
from apps.clinical.models import Patient, Prescription

# model -> ((alias, canonical), ...)
FIELD_ALIASES = {
    Patient: (
        ('celular', 'patient_phone'),
        ('email', 'patient_email'),
        ('tipo_sanguineo', 'blood_type'),
    ),
    Prescription: (
        ('medicamentos', 'medications'),
    ),
}


def _is_empty(value):
    return value is None or value == '' or value == [] or value == {}


def collapse_aliases(model, data, instance=None):
    """
    Return a copy of validated ``data`` with canonical fields filled from aliases.

    On create the alias wins whenever the canonical value is empty. On update
    the alias is copied whenever the payload does not carry the canonical
    field, so an explicit canonical edit is never overwritten.
    """
    data = dict(data)
    for alias, canonical in FIELD_ALIASES.get(model, ()):
        if _is_empty(data.get(alias)):
            continue
        if instance is None:
            if _is_empty(data.get(canonical)):
                data[canonical] = data[alias]
        elif canonical not in data:
            data[canonical] = data[alias]

    if model is Patient and instance is None and _is_empty(data.get('nome')):
        data['nome'] = data.get('patient_name')
    return data
