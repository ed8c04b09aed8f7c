#  -*- coding: utf-8 -*-
"""
Schema capability backed by pydantic.

A schema is any type a :class:`pydantic.TypeAdapter` accepts: a
``TypedDict``, a ``BaseModel``, a dataclass or an ``Annotated`` fragment such as
``Annotated[str, Field(min_length=1)]``. classcodec only relies on two
operations:

- ``validate(value)``: validate (and possibly coerce) a single value, used by
  property guards;
- ``parse(raw)``: validate a whole object and return it as a plain ``dict``,
  used by ``deserialize``.
"""

from __future__ import annotations

import dataclasses

from collections.abc import Mapping

from pydantic import BaseModel, TypeAdapter

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any


class Schema:
    """
    Lazy wrapper around a ``pydantic.TypeAdapter``.

    The adapter is built on first use so that schemas referring to names
    defined later in the same module (forward references) still work.

    Parameters
    ----------
    source : object
        The pydantic-compatible type, or another ``Schema`` (unwrapped).
    """

    __slots__ = ('source', '_adapter')

    def __init__(self, source: Any) -> None:

        if isinstance(source, Schema):
            source = source.source

        self.source: Any = source
        self._adapter: TypeAdapter | None = None

    def __repr__(self) -> str:
        return f'Schema({getattr(self.source, "__qualname__", self.source)!r})'

    @property
    def adapter(self) -> TypeAdapter:
        if self._adapter is None:
            self._adapter = TypeAdapter(self.source)

        return self._adapter

    def validate(self, value: Any) -> Any:
        """
        Validate a single value.

        Returns
        -------
        object
            The validated, possibly coerced, value.

        Raises
        ------
        pydantic.ValidationError
            If the value does not satisfy the schema.
        """
        return self.adapter.validate_python(value)

    def parse(self, raw: Any) -> dict[str, Any]:
        """
        Validate a whole object and return its plain mapping form.

        Raises
        ------
        pydantic.ValidationError
            If ``raw`` does not satisfy the schema.
        TypeError
            If the schema does not describe a mapping-shaped object.
        """
        return as_plain_mapping(self.validate(raw))


def as_plain_mapping(value: Any) -> dict[str, Any]:
    """Convert the output of a schema into a ``dict``."""

    if isinstance(value, BaseModel):
        return value.model_dump()

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)

    if isinstance(value, Mapping):
        return dict(value)

    raise TypeError(f'Schemas of serializable classes must describe a mapping, '
                    f'got {type(value).__name__} instead')


__all__ = [
    'Schema',
    'as_plain_mapping',
]
