"""
JSON merge patch (RFC 7386) generation.

create_merge_patch() diffs two documents and returns only what changed:
removed keys become null, changed values are replaced whole, nested dicts
are diffed recursively. Lists are values, never merged element-wise.
"""

from __future__ import annotations

from typing import Any


def create_merge_patch(original: dict, modified: dict) -> dict:
    """
    Return the merge patch that turns `original` into `modified`.

    Example:
        >>> create_merge_patch(
        ...     {"metadata": {"name": "a", "finalizers": ["x"]}},
        ...     {"metadata": {"name": "a"}},
        ... )
        {'metadata': {'finalizers': None}}
    """
    patch: dict[str, Any] = {}
    for key, old in original.items():
        if key not in modified:
            patch[key] = None
            continue
        new = modified[key]
        if isinstance(old, dict) and isinstance(new, dict):
            nested = create_merge_patch(old, new)
            if nested:
                patch[key] = nested
        elif old != new:
            patch[key] = new
    for key, new in modified.items():
        if key not in original:
            patch[key] = new
    return patch
