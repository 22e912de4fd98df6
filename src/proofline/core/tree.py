"""Copying of JSON-shaped document trees."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = ["clone_tree"]


def clone_tree(value: Any) -> Any:
    """Copy every nested mapping and list in ``value`` without recursing.

    Mappings come back as plain dicts and other values are shared. Repeated
    and cyclic references are reproduced in the copy, as ``copy.deepcopy``
    does, so arbitrarily deep or self-referencing documents are safe to clone.
    """

    if not isinstance(value, (Mapping, list)):
        return value
    copies: dict[int, Any] = {}
    root = _empty_copy(value, copies)
    stack: list[Any] = [value]
    while stack:
        source = stack.pop()
        target = copies[id(source)]
        items = source.items() if isinstance(source, Mapping) else enumerate(source)
        for key, child in items:
            if isinstance(child, (Mapping, list)):
                copied = copies.get(id(child))
                if copied is None:
                    copied = _empty_copy(child, copies)
                    stack.append(child)
                child = copied
            if isinstance(target, list):
                target.append(child)
            else:
                target[key] = child
    return root


def _empty_copy(value: Mapping[str, Any] | list[Any], copies: dict[int, Any]) -> Any:
    container: Any = {} if isinstance(value, Mapping) else []
    copies[id(value)] = container
    return container
