#  -*- coding: utf-8 -*-
"""
Property guards: schema validation on the read or write path of an accessor.

Guards are decorators for the accessor functions of a ``property`` or a
``SerializableProperty``::

    class Address(Serializable):

        @SerializableProperty
        @validate_with(NonEmptyStr)
        def city(self):
            return self._city

        @city.setter
        @validate_set_with(NonEmptyStr)
        def city(self, value):
            self._city = value

A get-guard validates the stored value every time it is read. A set-guard
validates the incoming value before the wrapped setter runs, so a rejected
assignment raises ``pydantic.ValidationError`` and leaves prior state
untouched. Stacked guards run in the order they are written (top to bottom)
and all of them must pass.

Guards are independent from serialization: they work on properties that are
not serializable, and serializable properties do not need them. The guards of
each class are also recorded in a process-wide binding store keyed by
(class, property name, access kind), see ``validators_for``.
"""

from __future__ import annotations

import enum
import functools
import logging
import weakref

from classcodec.registry import get_full_qualified_name
from classcodec.schema import Schema

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable


logger = logging.getLogger(__name__)

GUARDS_ATTR = '__guards__'
UNGUARDED_ATTR = '__unguarded__'


class AccessKind(str, enum.Enum):
    GET = 'get'
    SET = 'set'


class Guard:
    """A schema fragment bound to one access kind."""

    __slots__ = ('kind', 'schema')

    def __init__(self, kind: AccessKind | str, schema: Any) -> None:
        self.kind: AccessKind = AccessKind(kind)
        self.schema: Schema = Schema(schema)

    def __call__(self, value: Any) -> Any:
        return self.schema.validate(value)

    def __repr__(self) -> str:
        return f'Guard({self.kind.value}, {self.schema!r})'


_bindings: weakref.WeakKeyDictionary[type, dict[tuple[str, AccessKind], tuple[Guard, ...]]] = \
    weakref.WeakKeyDictionary()


# ========== ========== ========== ========== ========== decorators
def _guarded_accessor(kind: AccessKind, schema: Any) -> Callable[[Callable], Callable]:

    guard = Guard(kind, schema)

    def decorator(func: Callable) -> Callable:

        guards = (guard, *getattr(func, GUARDS_ATTR, ()))

        if any(g.kind is not kind for g in guards):
            raise TypeError(f"Cannot mix get and set guards on accessor '{func.__name__}'")

        accessor = getattr(func, UNGUARDED_ATTR, func)

        if kind is AccessKind.GET:

            @functools.wraps(accessor)
            def guarded(instance: object) -> Any:
                value = accessor(instance)

                for g in guards:
                    value = g(value)

                return value

        else:

            @functools.wraps(accessor)
            def guarded(instance: object, value: Any) -> None:

                for g in guards:
                    value = g(value)

                accessor(instance, value)

        setattr(guarded, GUARDS_ATTR, guards)
        setattr(guarded, UNGUARDED_ATTR, accessor)

        return guarded

    return decorator


def validate_with(schema: Any) -> Callable[[Callable], Callable]:
    """
    Guard a getter: every read passes the value through ``schema``.

    Parameters
    ----------
    schema : object
        Any pydantic-compatible type, e.g. ``Annotated[int, Field(ge=0)]``.

    Returns
    -------
    callable
        Decorator for a getter ``fget(instance) -> value``.
    """
    return _guarded_accessor(AccessKind.GET, schema)


def validate_set_with(schema: Any) -> Callable[[Callable], Callable]:
    """
    Guard a setter: every write is validated (and possibly coerced) first.

    Parameters
    ----------
    schema : object
        Any pydantic-compatible type.

    Returns
    -------
    callable
        Decorator for a setter ``fset(instance, value)``. The setter only
        runs with the validated value.
    """
    return _guarded_accessor(AccessKind.SET, schema)


def guards_of(accessor: Callable | None) -> tuple[Guard, ...]:
    return getattr(accessor, GUARDS_ATTR, ())


# ========== ========== ========== ========== ========== binding store
def bind_guards(owner: type,
                name: str,
                fget: Callable | None = None,
                fset: Callable | None = None) -> None:
    """
    Record the guards of a property's accessors under (owner, name, kind).

    Both kinds are recorded, empty ones included, so a subclass redefining a
    property without guards masks the guards of its base class.

    Raises
    ------
    TypeError
        If a getter carries set guards or a setter carries get guards.
    """
    bindings = {}

    for kind, accessor in ((AccessKind.GET, fget), (AccessKind.SET, fset)):

        guards = guards_of(accessor)

        if any(g.kind is not kind for g in guards):
            raise TypeError(f"Accessor '{name}' of {get_full_qualified_name(owner)} "
                            f"carries guards of the wrong kind")

        bindings[(name, kind)] = guards

        if guards:
            logger.debug('bound %d %s guard(s) to %s.%s',
                         len(guards), kind.value, get_full_qualified_name(owner), name)

    _bindings.setdefault(owner, {}).update(bindings)


def register_guards(cls: type) -> type:
    """
    Record the guards of every property defined in the body of ``cls``.

    Called automatically for ``Serializable`` subclasses. Other classes can use
    it as a class decorator to make their guards visible to
    ``validators_for``; guards validate either way.
    """
    for name, attr in vars(cls).items():

        fget = getattr(attr, 'fget', None)
        fset = getattr(attr, 'fset', None)

        if callable(fget) or callable(fset):
            bind_guards(cls, name, fget, fset)

    return cls


def validators_for(cls: type, name: str, kind: AccessKind | str) -> tuple[Guard, ...]:
    """Guards bound to ``name`` for ``kind``, nearest class in the MRO wins."""
    kind = AccessKind(kind)

    for base in cls.__mro__:

        guards = _bindings.get(base, {}).get((name, kind))

        if guards is not None:
            return guards

    return ()


__all__ = [
    'AccessKind',
    'Guard',
    'validate_with',
    'validate_set_with',
    'guards_of',
    'bind_guards',
    'register_guards',
    'validators_for',
]
