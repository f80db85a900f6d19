from typing import Optional


def normalize_tag(value) -> Optional[str]:
    """Trimmed, case-folded tag, or None when there is nothing usable."""
    if not isinstance(value, str):
        return None
    value = value.strip().casefold()
    return value or None


def is_universal(scope) -> bool:
    return scope is None


def matches(scope, scope_tag: Optional[str]) -> bool:
    """
    Universal scope matches everything. A named scope matches only an item
    with the same tag, ignoring case and surrounding whitespace. Blank or
    non-string scopes match nothing.
    """
    if is_universal(scope):
        return True
    wanted = normalize_tag(scope)
    if wanted is None:
        return False
    return wanted == normalize_tag(scope_tag)


def specificity(scope) -> int:
    return 0 if is_universal(scope) else 1
