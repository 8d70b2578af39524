"""
identity.py — One canonical form for user identities.

Ids reach the services as ints, numeric strings, ORM rows or serialized dicts.
Contribution keys and every membership check use the canonical string form;
SQL filters use the integer primary key.
"""


def normalize_id(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, dict):
        return normalize_id(value.get("id", value.get("_id")))
    if hasattr(value, "id") and not isinstance(value, (int, str)):
        return normalize_id(value.id)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def to_pk(value) -> int | None:
    canonical = normalize_id(value)
    if canonical is None:
        return None
    try:
        return int(canonical)
    except ValueError:
        return None


def same_identity(a, b) -> bool:
    ca = normalize_id(a)
    return ca is not None and ca == normalize_id(b)


def contains_identity(values, target) -> bool:
    return any(same_identity(v, target) for v in values or [])
