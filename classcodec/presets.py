#  -*- coding: utf-8 -*-
"""
Ready-made ``Custom`` rules.

Collections of nested serializable objects and a few scientific types are
common enough to deserve a shared rule instead of a hand-written pair in every
class::

    class Company(Serializable):
        schema = CompanySchema

        people = SerializableProperty(rule=sequence_of(Person))
        founded = SerializableProperty(rule=timestamp_rule())

Time values are stored the same way for ``pandas.Timestamp`` and
``pandas.DatetimeIndex``: nanoseconds since the epoch (UTC) plus the name of
the time zone, if any. ``TimeData`` is the matching schema fragment.
"""

from __future__ import annotations

import numpy
import pandas

from typing_extensions import TypedDict

from classcodec.rules import Custom, Nested

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any

from numpy.typing import DTypeLike


class TimeData(TypedDict):
    """Plain form of ``pandas.Timestamp`` and ``pandas.DatetimeIndex``."""
    values: int | list[int]
    timezone: str | None


# ========== ========== ========== ========== ========== collections
def sequence_of(target: type | str) -> Custom:
    """
    Rule for a list of nested serializable objects.

    Each item is handled as a ``Nested(target)`` value, in order. ``None``
    (for the whole list or for an item) passes through.
    """
    nested = Nested(target)

    def forward(values: Any) -> Any:
        if values is None:
            return None

        return [nested.forward(value) for value in values]

    def backward(data: Any) -> Any:
        if data is None:
            return None

        return [nested.backward(item) for item in data]

    return Custom(forward, backward)


def mapping_of(target: type | str) -> Custom:
    """Rule for a dict whose values are nested serializable objects."""
    nested = Nested(target)

    def forward(values: Any) -> Any:
        if values is None:
            return None

        return {key: nested.forward(value) for key, value in values.items()}

    def backward(data: Any) -> Any:
        if data is None:
            return None

        return {key: nested.backward(item) for key, item in data.items()}

    return Custom(forward, backward)


# ========== ========== ========== ========== ========== numpy
def ndarray_rule(dtype: DTypeLike | None = None) -> Custom:
    """Rule storing a ``numpy.ndarray`` as nested lists."""

    def forward(array: Any) -> Any:
        if array is None:
            return None

        return numpy.asarray(array).tolist()

    def backward(data: Any) -> Any:
        if data is None:
            return None

        return numpy.asarray(data, dtype=dtype)

    return Custom(forward, backward)


# ========== ========== ========== ========== ========== pandas
def _disassemble_time(time: pandas.Timestamp | pandas.DatetimeIndex | None) -> dict[str, Any] | None:

    if time is None:
        return None

    if isinstance(time, pandas.Timestamp):
        values = time.value
    else:
        values = time.as_unit('ns').asi8.tolist()

    timezone = None if time.tz is None else str(time.tz)

    return {'values': values, 'timezone': timezone}


def _assemble_time(data: dict[str, Any] | None) -> pandas.Timestamp | pandas.DatetimeIndex | None:

    if data is None:
        return None

    timezone = data['timezone']

    if timezone is None:
        return pandas.to_datetime(data['values'])

    return pandas.to_datetime(data['values'], utc=True).tz_convert(timezone)


def timestamp_rule() -> Custom:
    """Rule for a ``pandas.Timestamp`` (schema fragment: ``TimeData``)."""
    return Custom(_disassemble_time, _assemble_time)


def datetime_index_rule() -> Custom:
    """Rule for a ``pandas.DatetimeIndex`` (schema fragment: ``TimeData``)."""

    def backward(data: dict[str, Any] | None) -> pandas.DatetimeIndex | None:
        time = _assemble_time(data)
        return None if time is None else pandas.DatetimeIndex(time)

    return Custom(_disassemble_time, backward)


__all__ = [
    'TimeData',
    'sequence_of',
    'mapping_of',
    'ndarray_rule',
    'timestamp_rule',
    'datetime_index_rule',
]
