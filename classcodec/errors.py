#  -*- coding: utf-8 -*-
"""
Error types raised by classcodec.

Schema failures are reported with pydantic's own ``ValidationError``, which is
re-exported here (and aliased ``SchemaValidationError``) so callers can catch
it without importing pydantic themselves. classcodec never wraps it: the
diagnostic produced by the schema engine reaches the caller unchanged.
"""

from __future__ import annotations

from pydantic import ValidationError


SchemaValidationError = ValidationError
"""Alias of :class:`pydantic.ValidationError`."""


class UnregisteredPropertyError(LookupError):
    """
    Configuration error detected while deserializing.

    Raised when a class that is the target of ``deserialize`` (directly or
    through a ``Nested`` rule) declares no schema, or when a ``Nested`` rule
    refers to a class name that cannot be resolved.
    """


__all__ = [
    'ValidationError',
    'SchemaValidationError',
    'UnregisteredPropertyError',
]
