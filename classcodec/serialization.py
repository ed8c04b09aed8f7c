#  -*- coding: utf-8 -*-
"""
Declarative serialization of class instances to plain data and back.

This module provides the ``SerializableProperty`` descriptor, the
``Serializable`` base class (with its registering metaclass) and the two
operations of the package:

- ``serialize(instance)`` walks the rules visible from the instance's class
  and returns a ``dict`` of plain data;
- ``deserialize(data, cls)`` validates ``data`` against the schema declared by
  ``cls``, applies the backward transform of every rule (recursing into nested
  serializable classes) and calls ``cls(mapping)``.

Declaring a serializable class
------------------------------
A class declares a schema (any pydantic-compatible type), a constructor that
accepts a mapping matching that schema, and its serializable properties::

    class AddressSchema(TypedDict):
        city: str
        zip: str

    class Address(Serializable):
        schema = AddressSchema

        city = SerializableProperty()
        zip = SerializableProperty()

The ``Serializable`` constructor assigns every key of the mapping it receives,
which is enough for most classes. Subclasses may override ``__init__`` as long
as they keep the single-mapping signature.

Round trip
----------
For any instance ``x`` whose nested properties form a tree,
``serialize(deserialize(serialize(x), type(x))) == serialize(x)``.

Notes
-----
Nested properties are serialized according to the class of the value they
hold, which may be a subclass of the declared target, but deserialized into the
declared target. The serialized form carries no class marker.
"""

from __future__ import annotations

import logging

from abc import ABCMeta
from collections.abc import Mapping

import numpy

from classcodec.errors import UnregisteredPropertyError
from classcodec.guards import bind_guards, register_guards
from classcodec.registry import (check_types,
                                 declare_schema,
                                 get_full_qualified_name,
                                 index_class,
                                 indexed_classes,
                                 is_registered,
                                 register,
                                 resolve_class,
                                 rules_for,
                                 schema_for)
from classcodec.rules import Rule, as_rule

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import TypeVar, Callable, Any, TypeAlias, Self, Type


T = TypeVar('T')
"""Represent the type of the property"""

S = TypeVar('S')
"""Represent a serializable class"""

Getter: TypeAlias = Callable[[object], T]
Setter: TypeAlias = Callable[[object, Any], None]
Deleter: TypeAlias = Callable[[object], None]


logger = logging.getLogger(__name__)


class SerializableProperty:
    """
    Descriptor marking an attribute as serializable.

    ``SerializableProperty`` works like ``property`` and additionally registers
    its name and rule for the owning class when the class body is evaluated.
    It can be used in any class, ``Serializable`` subclasses or not.

    Parameters
    ----------
    fget : callable, optional
        Getter with signature ``fget(instance) -> value``. If omitted, a default
        getter is generated that reads ``self.private_name``.
    fset : callable, optional
        Setter with signature ``fset(instance, value)``. If omitted and the
        property is not read-only, a default setter is generated that writes
        to ``self.private_name``.
    fdel : callable, optional
        Deleter with signature ``fdel(instance)``.
    rule : object, optional
        Serialization rule, anything ``classcodec.rules.as_rule`` accepts:
        None (plain value), a class or class name (nested serializable), or a
        ``(forward, backward)`` pair.
    default : object or callable, optional
        Default value returned when the stored value is missing or None. If a
        callable, must have signature ``default(instance) -> value``.
    readonly : bool, default False
        If True, disallows assignment. Read-only properties are derived values:
        they are serialized but the ``Serializable`` constructor skips them.
    doc : str, optional
        Explicit docstring. If omitted and ``fget`` is provided, uses the
        getter's docstring.

    Attributes
    ----------
    name : str
        Public attribute name (set by ``__set_name__``).
    private_name : str
        Backing storage attribute name (set by ``__set_name__``).
    owner : type
        Owning class (set by ``__set_name__``).

    Notes
    -----
    ``None`` means "unset": reading a None value returns the default
    without storing it, and assigning None stores the default. Errors raised by
    a user-supplied getter propagate unchanged.

    Guards (``validate_with``, ``validate_set_with``) go on the accessor
    functions::

        @SerializableProperty
        @validate_with(PositiveInt)
        def age(self):
            return self._age
    """

    # ========== ========== ========== ========== ========== special methods
    def __init__(self,
                 fget: Getter | None = None,
                 fset: Setter | None = None,
                 fdel: Deleter | None = None,
                 *,
                 rule: Any = None,
                 default: T | Getter | None = None,
                 readonly: bool = False,
                 doc: str | None = None) -> None:

        self.fget: Getter | None = fget
        self.fset: Setter | None = fset
        self.fdel: Deleter | None = fdel

        self.rule: Rule = as_rule(rule)

        self._default: T | Getter | None = default
        self._readonly: bool = readonly

        if self._readonly:
            self.fset = None

        # Use getter docstring if not provided (which can also be None)
        self.__doc__: str | None = fget.__doc__ if doc is None and fget is not None else doc

    def __set_name__(self, owner: type, name: str) -> None:
        """Called when the descriptor is assigned to a class attribute."""
        self.name: str = name
        self.owner: type = owner
        self.private_name: str = f"_serializable_property__{name}"

        if self.fget is None:
            self.fget = lambda obj: getattr(obj, self.private_name, None)

        if self.fset is None and not self._readonly:
            self.fset = lambda obj, value: setattr(obj, self.private_name, value)

        register(owner, name, self.rule)
        bind_guards(owner, name, self.fget, self.fset)

    def __get__(self, instance: object | None, owner: type) -> T | Self:
        """Get the property value."""
        if instance is None:
            # Accessing from class, return descriptor for introspection
            return self

        if self.fget is None:
            raise AttributeError(f"unreadable attribute '{self.name}'")

        value = self.fget(instance)

        if value is None:
            value = self._default_for(instance)

        return value

    def __set__(self, instance: object, value: Any) -> None:
        """Set the property value."""
        if self.fset is None:
            raise AttributeError(
                f"can't set attribute '{self.name}' (read-only property)"
            )

        if value is None:
            value = self._default_for(instance)

        self.fset(instance, value)

    def __delete__(self, instance: object) -> None:
        """Delete the property value."""
        if self.fdel is None:
            raise AttributeError(f"can't delete attribute '{self.name}'")

        self.fdel(instance)

    # ========== ========== ========== ========== ========== private methods
    def _default_for(self, instance: object) -> Any:

        if callable(self._default):
            return self._default(instance)

        return self._default

    def _evolve(self, **changes: Any) -> Self:

        config = {
            'fget': self.fget,
            'fset': self.fset,
            'fdel': self.fdel,
            'rule': self.rule,
            'default': self._default,
            'readonly': self._readonly,
            'doc': self.__doc__,
        }
        config.update(changes)

        fget, fset, fdel = config.pop('fget'), config.pop('fset'), config.pop('fdel')

        return type(self)(fget, fset, fdel, **config)

    # ========== ========== Descriptor protocol methods to work like @property
    def getter(self, fget: Getter) -> Self:
        """Set the getter function."""
        return self._evolve(fget=fget)

    def setter(self, fset: Setter) -> Self:
        """Set the setter function."""
        return self._evolve(fset=fset)

    def deleter(self, fdel: Deleter) -> Self:
        """Set the deleter function."""
        return self._evolve(fdel=fdel)

    def default(self, func: Getter) -> Self:
        """Set the default value factory."""
        return self._evolve(default=func)

    @property
    def readonly(self) -> bool:
        """Check if property is read-only (no setter)."""
        return self._readonly


def serializable_property(rule: Any = None,
                          default: T | Getter | None = None,
                          readonly: bool = False) -> Callable[[Getter], SerializableProperty]:
    """
    Decorator form of ``SerializableProperty`` for getters.

    Parameters
    ----------
    rule : object, optional
        Serialization rule (see ``SerializableProperty``).
    default : object or callable, optional
        Default value or default factory ``default(instance) -> value``.
    readonly : bool, default False
        If True, the resulting property is read-only.

    Examples
    --------
    >>> class Person(Serializable):
    ...     @serializable_property(rule='Address')
    ...     def address(self):
    ...         return self._address
    ...
    ...     @address.setter
    ...     def address(self, value):
    ...         self._address = value
    """
    def decorator(getter: Getter) -> SerializableProperty:
        return SerializableProperty(
            fget=getter,
            rule=rule,
            default=default,
            readonly=readonly,
        )

    return decorator


# ========== ========== ========== ========== ========== ==========
class SerializableMetatype(ABCMeta):
    """
    Metaclass of ``Serializable``.

    When a subclass is created, the metaclass:

    - indexes it by fully qualified name, so that ``Nested`` rules may refer to
      it by name and ``Serializable[qualname]`` resolves it;
    - declares the ``schema`` class attribute, when the class body defines
      one, in the registry;
    - binds the guards of every property in the class body.

    ``SerializableProperty`` descriptors register themselves, so the metaclass
    does not need to collect them.
    """

    # ========== ========== ========== ========== ========== special methods
    def __new__(mcs,
                name: str,
                bases: tuple[type, ...],
                namespace: dict[str, Any],
                **kwargs: Any) -> Type[Serializable]:

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        if name == 'Serializable' and namespace.get('__module__') == __name__:
            return cls

        index_class(cls)

        if namespace.get('schema') is not None:
            declare_schema(cls, namespace['schema'])

        register_guards(cls)

        return cls

    def __getitem__(cls, qualname: str) -> Type[Serializable]:
        """
        Resolve an indexed class by fully qualified name.

        Raises
        ------
        KeyError
            If the class is not indexed, or if called on a subclass.
        """
        if cls is not Serializable:
            raise KeyError(f'Class {cls.__name__} is not subscriptable')

        try:
            return resolve_class(qualname)

        except UnregisteredPropertyError as error:
            raise KeyError(qualname) from error

    def __contains__(cls, subclass: str | type) -> bool:
        """Membership test for the class index (only on ``Serializable``)."""
        if cls is not Serializable:
            raise NotImplementedError()

        if isinstance(subclass, str):

            try:
                resolve_class(subclass)
            except UnregisteredPropertyError:
                return False

            return True

        if isinstance(subclass, type):
            return subclass in indexed_classes()

        raise TypeError('Expected the class full qualified name or the class itself')

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def serializable_types(cls) -> list[Type[Serializable]]:
        """Indexed subclasses of ``Serializable``."""
        return [c for c in indexed_classes() if issubclass(c, Serializable)]

    @property
    def rules(cls) -> dict[str, Rule]:
        """Rules visible from this class, inherited ones included."""
        return rules_for(cls)


class Serializable(metaclass=SerializableMetatype):
    """
    Base class for declaratively serializable objects.

    Class attributes
    ----------------
    schema : object
        pydantic-compatible type describing the mapping accepted by the
        constructor. Inherited by subclasses unless redefined.

    Construction
    ------------
    Serializable(mapping)
    Serializable(**kwargs)
        Assigns every key of the mapping (then of the keyword arguments) with
        ``setattr``, so property setters and their guards run. Read-only
        properties are skipped.

    Equality
    --------
    ``a == b`` compares every serializable property, using
    ``numpy.all(a_value == b_value)`` so array-valued properties compare
    element-wise. Objects of different types are not equal.
    """

    schema: Any = None

    # ========== ========== ========== ========== ========== special methods
    def __init__(self, data: Mapping[str, Any] | None = None, /, **kwargs: Any) -> None:

        if data is None:
            data = {}

        check_types(data, Mapping)

        cls = type(self)

        for key, value in {**data, **kwargs}.items():

            attr = getattr(cls, key, None)

            if isinstance(attr, (property, SerializableProperty)) and attr.fset is None:
                continue  # derived value

            setattr(self, key, value)

    def __eq__(self, other: object) -> bool:

        if type(other) is not type(self):
            return NotImplemented

        for key in rules_for(type(self)):

            other_value = getattr(other, key)
            self_value = getattr(self, key)

            if not numpy.all(other_value == self_value):
                return False

        return True

    def __repr__(self) -> str:
        fields = ', '.join(f'{key}={getattr(self, key)!r}' for key in rules_for(type(self)))
        return f'{type(self).__name__}({fields})'

    def __copy__(self) -> Self:
        return self.copy()

    # ========== ========== ========== ========== ========== public methods
    def to_data(self) -> dict[str, Any]:
        """Shortcut for ``serialize(self)``."""
        return serialize(self)

    @classmethod
    def from_data(cls, data: Any) -> Self:
        """Shortcut for ``deserialize(data, cls)``."""
        return deserialize(data, cls)

    def copy(self) -> Self:
        """
        Create a logical copy through a serialization round trip.

        Raises
        ------
        UnregisteredPropertyError
            If the class declares no schema.
        """
        return deserialize(serialize(self), type(self))


# ========== ========== ========== ========== ========== ==========
def serialize(instance: Any) -> dict[str, Any]:
    """
    Convert an instance into plain data.

    Every rule visible from ``type(instance)`` is applied to the current value
    of its property (reading it runs its get guards). Nested serializable
    values are serialized according to their own class.

    Parameters
    ----------
    instance : object
        Instance of a class with registered rules.

    Returns
    -------
    dict
        Mapping from property name to plain data, in rule order.

    Raises
    ------
    TypeError
        If ``instance`` is a class, or its class has no rules and is not a
        ``Serializable``.
    pydantic.ValidationError
        If a get guard rejects a stored value.
    """
    cls = type(instance)

    if isinstance(instance, type) or not (isinstance(instance, Serializable) or is_registered(cls)):
        raise TypeError(f'No serialization rules are registered for '
                        f'{get_full_qualified_name(cls)}')

    return {name: rule.forward(getattr(instance, name)) for name, rule in rules_for(cls).items()}


def deserialize(data: Any, cls: type[S]) -> S:
    """
    Build an instance of ``cls`` from plain data.

    Steps:

    1. ``data`` is parsed with the schema declared by ``cls``. If it fails, no
       instance is built.
    2. The backward transform of each rule is applied to the parsed value of
       its property, recursing into nested classes.
    3. The parsed mapping, with the transformed values in place, is passed to
       ``cls``.

    Parameters
    ----------
    data : object
        Plain data, typically produced by ``serialize``.
    cls : type
        Target class.

    Returns
    -------
    object
        New instance of ``cls``.

    Raises
    ------
    UnregisteredPropertyError
        If ``cls`` (or a nested target) declares no schema.
    pydantic.ValidationError
        If ``data`` fails the schema, or a set guard rejects a value while
        constructing the instance.
    """
    check_types(cls, type)

    schema = schema_for(cls)

    if schema is None:
        raise UnregisteredPropertyError(f'{get_full_qualified_name(cls)} declares no schema '
                                        f'and cannot be deserialized')

    logger.debug('deserializing %s', get_full_qualified_name(cls))

    parsed = schema.parse(data)

    assembled = dict(parsed)

    for name, rule in rules_for(cls).items():

        if name in parsed:
            assembled[name] = rule.backward(parsed[name])

    return cls(assembled)


__all__ = [
    'SerializableProperty',
    'serializable_property',
    'SerializableMetatype',
    'Serializable',
    'serialize',
    'deserialize',
]
