"""Helper utilities."""

import re
from typing import Any, Iterable, List, Optional, Union


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for storage."""
    # Remove special characters
    sanitized = re.sub(r'[^\w\s.-]', '', filename)
    # Replace spaces with underscores
    sanitized = re.sub(r'\s+', '_', sanitized)
    return sanitized[:255]  # Limit length


def unique_tags(values: Iterable[Any]) -> List[str]:
    """Strip and de-duplicate tags, keeping first occurrence (case-insensitive)."""
    seen = set()
    result = []
    for value in values:
        if value is None:
            continue
        tag = str(value).strip()
        key = tag.lower()
        if tag and key not in seen:
            seen.add(key)
            result.append(tag)
    return result


def split_csv(value: Union[str, Iterable[Any], None]) -> List[str]:
    """Turn "a, b, c" (or an existing list) into a clean tag list."""
    if value is None:
        return []
    if isinstance(value, str):
        return unique_tags(value.split(","))
    return unique_tags(value)


def split_lines(value: Union[str, Iterable[Any], None]) -> List[str]:
    """Turn multi-line form text (or an existing list) into an ordered list of non-empty lines."""
    if value is None:
        return []
    items = value.splitlines() if isinstance(value, str) else value
    return [str(item).strip() for item in items if item is not None and str(item).strip()]


def has_value(v: Any) -> bool:
    """Generic truthy check that handles lists/dicts/strings consistently."""
    if v is None:
        return False
    if isinstance(v, bool):
        return v
    if isinstance(v, (list, dict, tuple, set)):
        return len(v) > 0
    if isinstance(v, str):
        return v.strip() != ""
    return True


def paginate(page: int = 1, page_size: int = 20) -> dict:
    """Helper for pagination."""
    offset = (page - 1) * page_size
    return {
        "offset": offset,
        "limit": page_size,
        "page": page,
        "page_size": page_size,
    }


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Strip a string, mapping blank to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None
