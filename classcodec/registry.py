#  -*- coding: utf-8 -*-
"""
Process-wide registry of serialization rules and schemas.

The registry maps class identity to the ordered rules declared directly on
that class. It is filled as a side effect of evaluating class bodies
(``SerializableProperty.__set_name__`` and ``SerializableMetatype``) or by
explicit calls to ``register`` right after a class statement::

    class Point:
        def __init__(self, data):
            self.x, self.y = data['x'], data['y']

    register(Point, 'x')
    register(Point, 'y')
    declare_schema(Point, PointSchema)

Lookups walk the MRO, so subclasses see inherited rules and override them by
registering the same name again.

Ordering policy of ``rules_for``
--------------------------------
Classes are visited from the most derived one upwards. Each class contributes
its names in declaration order, skipping names already contributed by a more
derived class. Directly declared properties therefore come first, followed by
inherited ones.
"""

from __future__ import annotations

import keyword
import logging
import weakref

from classcodec.errors import UnregisteredPropertyError
from classcodec.rules import Rule, as_rule
from classcodec.schema import Schema

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any


logger = logging.getLogger(__name__)

_rules: weakref.WeakKeyDictionary[type, dict[str, Rule]] = weakref.WeakKeyDictionary()
_schemas: weakref.WeakKeyDictionary[type, Schema] = weakref.WeakKeyDictionary()
_classes: weakref.WeakValueDictionary[str, type] = weakref.WeakValueDictionary()


# ========== ========== ========== ========== ========== helpers
def get_full_qualified_name(cls: type) -> str:
    """
    Return the fully qualified class name used by the class index.

    For built-in types (module is ``builtins``), returns ``cls.__qualname__``.
    For user-defined types, returns ``"<module>.<qualname>"``.

    Examples
    --------
    >>> get_full_qualified_name(int)
    'int'
    >>> from collections import OrderedDict
    >>> get_full_qualified_name(OrderedDict)
    'collections.OrderedDict'
    """
    module = cls.__module__

    if module is None or module == 'builtins':
        return cls.__qualname__

    return f"{module}.{cls.__qualname__}"


def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False,
                raise_error: bool = True) -> bool:
    """
    Check whether an object is an instance of expected types.

    Parameters
    ----------
    obj : object
        Value to test.
    types : type or tuple of type
        Expected type(s).
    can_be_none : bool, default False
        If True, ``None`` is accepted.
    raise_error : bool, default True
        If True, raises TypeError when the check fails. If False, returns False
        on mismatch.

    Raises
    ------
    TypeError
        If ``raise_error`` is True and the check fails.

    Examples
    --------
    >>> check_types(1, int)
    True
    >>> check_types(None, int, can_be_none=True)
    True
    >>> check_types("x", int, raise_error=False)
    False
    """
    if can_be_none:
        if isinstance(types, tuple):
            types = (*types, None.__class__)
        else:
            types = (types, None.__class__)

    result = isinstance(obj, types)

    if not result and raise_error:

        if isinstance(types, tuple):
            cls_names = ', '.join(get_full_qualified_name(cls) for cls in types)
        else:
            cls_names = get_full_qualified_name(types)

        error_msg = f"Expected instance of one of the following classes: {cls_names}. " \
                    f"Given {get_full_qualified_name(type(obj))} instead"
        raise TypeError(error_msg)

    return result


# ========== ========== ========== ========== ========== class index
def index_class(cls: type) -> None:
    """Make ``cls`` resolvable by its fully qualified name."""
    _classes[get_full_qualified_name(cls)] = cls


def resolve_class(name: str) -> type:
    """
    Resolve a class from the index.

    ``name`` is either a fully qualified name or a bare class name
    (``__qualname__`` or ``__name__``) matching exactly one indexed class.

    Raises
    ------
    UnregisteredPropertyError
        If no class, or more than one class, matches.
    """
    try:
        return _classes[name]

    except KeyError:
        pass

    candidates = {cls for cls in list(_classes.values())
                  if name in (cls.__qualname__, cls.__name__)}

    if len(candidates) == 1:
        return candidates.pop()

    if not candidates:
        raise UnregisteredPropertyError(f'No serializable class named {name!r} is registered')

    names = ', '.join(sorted(get_full_qualified_name(cls) for cls in candidates))
    raise UnregisteredPropertyError(f'Class name {name!r} is ambiguous: {names}')


def indexed_classes() -> list[type]:
    return list(_classes.values())


# ========== ========== ========== ========== ========== rules
def register(cls: type, name: str, rule: Any = None) -> None:
    """
    Declare property ``name`` of ``cls`` as serializable.

    Parameters
    ----------
    cls : type
        Owner class.
    name : str
        Property name.
    rule : object, optional
        Anything ``as_rule`` accepts. ``None`` means ``Plain``.

    Notes
    -----
    Registering an existing (class, name) pair overwrites the previous rule in
    place, keeping its declaration position.
    """
    check_types(cls, type)

    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise ValueError(f'Invalid property name: {name!r}')

    rule = as_rule(rule)

    _rules.setdefault(cls, {})[name] = rule
    index_class(cls)

    logger.debug('registered %s.%s as %s', get_full_qualified_name(cls), name, rule.kind)


def declared_rules(cls: type) -> dict[str, Rule]:
    """Rules declared directly on ``cls``, without inherited ones."""
    return dict(_rules.get(cls, {}))


def rules_for(cls: type) -> dict[str, Rule]:
    """
    Ordered rules visible from ``cls``, inherited ones included.

    Subclass rules always win over base-class rules for the same name. See the
    module docstring for the ordering policy.
    """
    check_types(cls, type)

    rules: dict[str, Rule] = {}

    for base in cls.__mro__:

        for name, rule in _rules.get(base, {}).items():
            rules.setdefault(name, rule)

    return rules


def rule_owner(cls: type, name: str) -> type | None:
    """Most derived class in ``cls.__mro__`` that registered ``name``."""
    for base in cls.__mro__:
        if name in _rules.get(base, {}):
            return base

    return None


def is_registered(cls: type) -> bool:
    return any(base in _rules for base in cls.__mro__)


# ========== ========== ========== ========== ========== schemas
def declare_schema(cls: type, schema: Any) -> None:
    """Attach a schema (any pydantic-compatible type) to ``cls``."""
    check_types(cls, type)

    _schemas[cls] = Schema(schema)
    index_class(cls)

    logger.debug('declared schema %r for %s', _schemas[cls], get_full_qualified_name(cls))


def schema_for(cls: type) -> Schema | None:
    """Nearest schema declared along ``cls.__mro__``, or None."""
    for base in cls.__mro__:

        schema = _schemas.get(base)

        if schema is not None:
            return schema

    return None


__all__ = [
    'get_full_qualified_name',
    'check_types',
    'index_class',
    'resolve_class',
    'indexed_classes',
    'register',
    'declared_rules',
    'rules_for',
    'rule_owner',
    'is_registered',
    'declare_schema',
    'schema_for',
]
