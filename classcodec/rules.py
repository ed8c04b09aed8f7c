#  -*- coding: utf-8 -*-
"""
Transform policies of serializable properties.

Every serializable property carries exactly one rule:

- ``Plain``: the value is copied as-is in both directions;
- ``Nested``: the value is itself a serializable instance, serialized
  recursively and rebuilt as an instance of the declared target class;
- ``Custom``: an explicit ``(forward, backward)`` pair supplied by the class
  author, e.g. to map ``serialize``/``deserialize`` over a collection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, TypeAlias


Transform: TypeAlias = Callable[[Any], Any]


class Rule(ABC):
    """Forward (to plain data) and backward (from plain data) transform."""

    kind: str = ''

    @abstractmethod
    def forward(self, value: Any) -> Any:
        ...

    @abstractmethod
    def backward(self, value: Any) -> Any:
        ...


@dataclass(frozen=True)
class Plain(Rule):
    """Identity in both directions."""

    kind = 'plain'

    def forward(self, value: Any) -> Any:
        return value

    def backward(self, value: Any) -> Any:
        return value


@dataclass(frozen=True)
class Nested(Rule):
    """
    The property holds a serializable instance.

    Parameters
    ----------
    spec : type or str
        Target class used when deserializing, or its qualified name (or a
        unique class name) resolved lazily through the registry. Strings allow
        referring to classes defined later in the module.

    Notes
    -----
    Serializing follows the value's own class, so a subclass instance stored
    in the property keeps all of its own serializable properties. Deserializing
    always builds the declared target.
    """

    spec: type | str

    kind = 'nested'

    def __post_init__(self) -> None:
        if not isinstance(self.spec, (type, str)):
            raise TypeError(f'Nested rule expects a class or a class name, '
                            f'got {type(self.spec).__name__} instead')

    @property
    def target(self) -> type:
        if isinstance(self.spec, type):
            return self.spec

        from classcodec.registry import resolve_class
        return resolve_class(self.spec)

    def forward(self, value: Any) -> Any:
        if value is None:
            return None

        from classcodec.serialization import serialize
        return serialize(value)

    def backward(self, value: Any) -> Any:
        if value is None:
            return None

        from classcodec.serialization import deserialize
        return deserialize(value, self.target)


@dataclass(frozen=True)
class Custom(Rule):
    """
    Author-supplied transform pair.

    The functions control any recursion themselves, e.g.::

        Custom(lambda people: [serialize(p) for p in people],
               lambda data: [deserialize(d, Person) for d in data])
    """

    forward_func: Transform
    backward_func: Transform

    kind = 'custom'

    def __post_init__(self) -> None:
        if not (callable(self.forward_func) and callable(self.backward_func)):
            raise TypeError('Custom rule expects a pair of callables')

    def forward(self, value: Any) -> Any:
        return self.forward_func(value)

    def backward(self, value: Any) -> Any:
        return self.backward_func(value)


def as_rule(spec: Any = None) -> Rule:
    """
    Coerce a rule specification into a ``Rule``.

    ``None`` gives ``Plain``; a class or a class name gives ``Nested``; a
    ``(forward, backward)`` pair or a mapping with ``forward`` and ``backward``
    keys gives ``Custom``. ``Rule`` instances are returned unchanged.

    Raises
    ------
    TypeError
        If ``spec`` matches none of the accepted forms.
    """
    if spec is None:
        return Plain()

    if isinstance(spec, Rule):
        return spec

    if isinstance(spec, (type, str)):
        return Nested(spec)

    if isinstance(spec, Mapping) and set(spec) == {'forward', 'backward'}:
        return Custom(spec['forward'], spec['backward'])

    if isinstance(spec, tuple) and len(spec) == 2:
        return Custom(*spec)

    raise TypeError(f'Cannot interpret {spec!r} as a serialization rule')


__all__ = [
    'Rule',
    'Plain',
    'Nested',
    'Custom',
    'as_rule',
]
