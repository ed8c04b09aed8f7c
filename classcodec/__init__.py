#  -*- coding: utf-8 -*-
"""
classcodec: declarative class serialization with schema validation.

Classes mark selected properties as serializable, optionally attach transform
rules and validation guards, and get two operations: ``serialize`` turns a live
object graph into plain data, ``deserialize`` rebuilds it (with the right
classes at every level) after validating the data against the class schema.
Schemas are pydantic types.

Modules
-------
serialization
    ``SerializableProperty``, ``Serializable``, ``serialize`` and ``deserialize``
registry
    Process-wide rule and schema registry keyed by class
rules
    ``Plain``, ``Nested`` and ``Custom`` transform rules
guards
    ``validate_with`` / ``validate_set_with`` accessor guards
schema
    pydantic-backed schema capability
presets
    Ready-made rules for collections, numpy arrays and pandas time values
display
    Rich description of a class's rules

Examples
--------
>>> from typing_extensions import TypedDict
>>> from classcodec import Serializable, SerializableProperty, serialize, deserialize
>>>
>>> class AddressSchema(TypedDict):
...     city: str
...     zip: str
>>>
>>> class Address(Serializable):
...     schema = AddressSchema
...     city = SerializableProperty()
...     zip = SerializableProperty()
>>>
>>> data = serialize(Address(city='City', zip='12345'))
>>> data
{'city': 'City', 'zip': '12345'}
>>> deserialize(data, Address).city
'City'
"""

import logging

from .errors import *
from .rules import *
from .registry import register, rules_for, declare_schema, schema_for
from .guards import validate_with, validate_set_with, register_guards, validators_for, AccessKind
from .serialization import *
from .presets import *
from .display import DisplaySettings, describe


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    "ValidationError",
    "SchemaValidationError",
    "UnregisteredPropertyError",
    "Rule",
    "Plain",
    "Nested",
    "Custom",
    "register",
    "rules_for",
    "declare_schema",
    "schema_for",
    "validate_with",
    "validate_set_with",
    "register_guards",
    "validators_for",
    "AccessKind",
    "SerializableProperty",
    "serializable_property",
    "Serializable",
    "SerializableMetatype",
    "serialize",
    "deserialize",
    "sequence_of",
    "mapping_of",
    "ndarray_rule",
    "timestamp_rule",
    "datetime_index_rule",
    "TimeData",
    "DisplaySettings",
    "describe",
]


try:
    # this will run if classcodec is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('classcodec')

    __author__ = meta['Author']
    __license__ = meta['License']
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]["text"]
