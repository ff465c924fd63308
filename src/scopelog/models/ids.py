"""ULID-based ID generation for correlation identifiers.

ULIDs are 26-character, URL-safe and lexicographically sortable by creation
time (millisecond precision), which makes correlation ids easy to scan in
aggregated logs.
"""

from ulid import ULID


def generate_id() -> str:
    """Generate a new ULID string.

    Example:
        >>> len(generate_id())
        26
    """
    return str(ULID())
