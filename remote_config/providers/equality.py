"""
Change Detection

deep_equal is the default: structural comparison of the decoded payloads.
fingerprint_equal compares a hash of canonical JSON instead, which also
treats configurations differing only in key order as equal.

Both compare pydantic models by their JSON form, so a model built by
model_transform equals the plain mapping a FileCacheProvider reads back.
"""

import hashlib
import json
from typing import Any

from pydantic import BaseModel


def to_plain(config: Any | None) -> Any | None:
    """JSON form of a pydantic model; anything else is returned unchanged"""
    if isinstance(config, BaseModel):
        return config.model_dump(mode="json")
    return config


def _same(source: Any, target: Any) -> bool:
    # bool is an int subclass; true and 1 are different JSON values
    if isinstance(source, bool) or isinstance(target, bool):
        return type(source) is type(target) and source == target
    if isinstance(source, dict):
        return (
            isinstance(target, dict)
            and source.keys() == target.keys()
            and all(_same(source[key], target[key]) for key in source)
        )
    if isinstance(source, (list, tuple)):
        return (
            isinstance(target, (list, tuple))
            and len(source) == len(target)
            and all(_same(a, b) for a, b in zip(source, target))
        )
    return source == target


def deep_equal(source: Any | None, target: Any | None) -> bool:
    """
    Structural equality of two configurations.

    Booleans never equal numbers. Integers and floats compare by value,
    as JSON has a single number type.
    """
    return _same(to_plain(source), to_plain(target))


def compute_fingerprint(config: Any | None) -> str:
    """Hash of the configuration content"""
    # json with sort_keys for consistent ordering
    content_str = json.dumps(to_plain(config), sort_keys=True, default=str)
    return hashlib.md5(content_str.encode()).hexdigest()


def fingerprint_equal(source: Any | None, target: Any | None) -> bool:
    """Compare configurations by content hash"""
    return compute_fingerprint(source) == compute_fingerprint(target)
