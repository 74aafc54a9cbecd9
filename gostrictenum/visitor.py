#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
gostrictenum/visitor.py
=======================

Traversal infrastructure for the Go syntax tree.

Provides:
- ``iter_child_nodes`` — direct children of a node, in source order
- ``walk`` / ``iter_nodes`` — lazy pre-order traversal, optionally
  filtered by node class
- ``ASTVisitor`` — dispatching base with default implementations
- ``DepthFirstVisitor`` — visitor that descends into all children
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Iterator, Tuple, Type, TypeVar, Union

from gostrictenum import go_ast as A

__all__ = [
    "iter_child_nodes",
    "walk",
    "iter_nodes",
    "ASTVisitor",
    "DepthFirstVisitor",
]

T = TypeVar("T", bound=A.Node)

_FIELDS_CACHE: dict = {}


def _node_fields(cls: type) -> Tuple[str, ...]:
    names = _FIELDS_CACHE.get(cls)
    if names is None:
        names = tuple(
            f.name for f in dataclasses.fields(cls)
            if f.name not in ("loc", "source", "path")
        )
        _FIELDS_CACHE[cls] = names
    return names


def iter_child_nodes(node: A.Node) -> Iterator[A.Node]:
    """Yield the direct child nodes of *node* in field (source) order."""
    for name in _node_fields(type(node)):
        value = getattr(node, name)
        if isinstance(value, A.Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, A.Node):
                    yield item


def walk(node: A.Node) -> Iterator[A.Node]:
    """Pre-order depth-first traversal of *node* and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        children = list(iter_child_nodes(current))
        stack.extend(reversed(children))


def iter_nodes(
    roots: Union[A.Node, Iterable[A.Node]],
    kind: Union[Type[T], Tuple[Type[A.Node], ...]],
) -> Iterator[T]:
    """Lazily yield every node of class *kind* below *roots*.

    Each call starts a fresh traversal, so the sequence can be restarted
    simply by calling again.
    """
    if isinstance(roots, A.Node):
        roots = (roots,)
    for root in roots:
        for node in walk(root):
            if isinstance(node, kind):
                yield node  # type: ignore[misc]


class ASTVisitor:
    """Base class for Go syntax tree visitors.

    ``node.accept(visitor)`` calls ``visit_<snake_case_class_name>`` when
    the subclass defines it, and ``generic_visit`` otherwise.  The default
    ``generic_visit`` does nothing.
    """

    def visit(self, node: A.Node) -> Any:
        """Dispatch to the appropriate visit method."""
        return node.accept(self)

    def generic_visit(self, node: A.Node) -> Any:
        return None


class DepthFirstVisitor(ASTVisitor):
    """Visitor whose ``generic_visit`` descends into every child.

    Subclasses overriding a ``visit_X`` method call ``self.generic_visit``
    themselves to keep descending.
    """

    def generic_visit(self, node: A.Node) -> Any:
        for child in iter_child_nodes(node):
            child.accept(self)
        return None
