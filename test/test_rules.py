#  -*- coding: utf-8 -*-
"""
Test suite for transform rules.

Tests cover:
- as_rule coercion of every accepted form
- Plain, Nested and Custom transforms
- Lazy resolution of Nested targets given by name
- Rejection of invalid rule specifications
"""

from __future__ import annotations

import pytest

from typing_extensions import TypedDict

from classcodec.errors import UnregisteredPropertyError
from classcodec.rules import Custom, Nested, Plain, Rule, as_rule
from classcodec.serialization import Serializable, SerializableProperty


class BadgeSchema(TypedDict):
    code: str


class Badge(Serializable):
    schema = BadgeSchema

    code = SerializableProperty()


class TestAsRule:

    def test_none_is_plain(self) -> None:
        assert as_rule() == Plain()
        assert as_rule(None) == Plain()

    def test_class_is_nested(self) -> None:
        rule = as_rule(Badge)

        assert isinstance(rule, Nested)
        assert rule.spec is Badge

    def test_name_is_nested(self) -> None:
        assert as_rule('Badge') == Nested('Badge')

    def test_pair_is_custom(self) -> None:
        rule = as_rule((str, int))

        assert isinstance(rule, Custom)
        assert rule.forward(1) == '1'
        assert rule.backward('1') == 1

    def test_mapping_is_custom(self) -> None:
        rule = as_rule({'forward': str, 'backward': int})

        assert rule == Custom(str, int)

    def test_rule_unchanged(self) -> None:
        rule = Custom(str, int)
        assert as_rule(rule) is rule

    @pytest.mark.parametrize('spec', [
        42,
        (str,),
        (str, int, float),
        {'forward': str},
        ['forward', 'backward'],
    ])
    def test_invalid(self, spec: object) -> None:
        with pytest.raises(TypeError):
            as_rule(spec)


class TestPlain:

    def test_identity(self) -> None:
        value = {'a': [1, 2]}
        rule = Plain()

        assert rule.forward(value) is value
        assert rule.backward(value) is value
        assert rule.kind == 'plain'


class TestNested:

    def test_forward_serializes(self) -> None:
        assert Nested(Badge).forward(Badge(code='X')) == {'code': 'X'}

    def test_backward_deserializes(self) -> None:
        badge = Nested(Badge).backward({'code': 'X'})

        assert type(badge) is Badge
        assert badge.code == 'X'

    def test_none_passes_through(self) -> None:
        rule = Nested(Badge)

        assert rule.forward(None) is None
        assert rule.backward(None) is None

    def test_lazy_target(self) -> None:
        # The name is only resolved when the target is needed
        rule = Nested('DefinedAfterTheRule')

        with pytest.raises(UnregisteredPropertyError):
            rule.target

        class DefinedAfterTheRule(Serializable):
            pass

        assert rule.target is DefinedAfterTheRule

    def test_invalid_spec(self) -> None:
        with pytest.raises(TypeError, match='class or a class name'):
            Nested(42)

    def test_kind(self) -> None:
        assert Nested(Badge).kind == 'nested'


class TestCustom:

    def test_transforms(self) -> None:
        rule = Custom(lambda v: v * 2, lambda v: v // 2)

        assert rule.forward(4) == 8
        assert rule.backward(8) == 4
        assert rule.kind == 'custom'

    def test_not_callable(self) -> None:
        with pytest.raises(TypeError, match='pair of callables'):
            Custom(str, 'int')

    def test_is_a_rule(self) -> None:
        assert isinstance(Custom(str, int), Rule)

    def test_frozen(self) -> None:
        import dataclasses

        rule = Custom(str, int)

        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.forward_func = repr
