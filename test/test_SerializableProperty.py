#  -*- coding: utf-8 -*-
"""
Test suite for SerializableProperty descriptor.

Tests cover:
- Basic descriptor protocol (get/set/delete)
- Default values (static and callable)
- Read-only properties
- Accessor chaining (getter/setter/deleter/default)
- Rule registration as a side effect of class creation
- Edge cases and error conditions
"""

from __future__ import annotations

import pytest

from unittest.mock import Mock

from classcodec import SerializableProperty, serializable_property
from classcodec.registry import rules_for
from classcodec.rules import Custom, Nested, Plain


# ========== ========== ========== ========== Fixtures
@pytest.fixture
def simple_class() -> type:
    """A simple class with a basic SerializableProperty for testing."""

    class Simple:
        value = SerializableProperty()

    return Simple


# ========== ========== ========== ========== Basic Descriptor Protocol
class TestDescriptorProtocol:

    def test_class_access_returns_descriptor(self, simple_class: type) -> None:
        # Accessing from class should return descriptor itself, not value
        assert isinstance(simple_class.value, SerializableProperty)

    def test_unset_value_is_none(self, simple_class: type) -> None:
        assert simple_class().value is None

    def test_set_and_get_value(self, simple_class: type) -> None:
        obj = simple_class()
        obj.value = 100
        assert obj.value == 100

    def test_multiple_instances_independent(self, simple_class: type) -> None:
        obj1 = simple_class()
        obj2 = simple_class()

        obj1.value = 10
        obj2.value = 20

        assert obj1.value == 10
        assert obj2.value == 20

    def test_delete_raises_error(self, simple_class: type) -> None:
        # Deleting without a deleter should raise AttributeError
        obj = simple_class()
        with pytest.raises(AttributeError, match="can't delete attribute"):
            del obj.value

    def test_custom_accessors(self) -> None:
        # Explicit accessors replace the generated private storage
        class Temperature:

            @SerializableProperty
            def celsius(self) -> float:
                return self._kelvin - 273.15

            @celsius.setter
            def celsius(self, value: float) -> None:
                self._kelvin = value + 273.15

            @celsius.deleter
            def celsius(self) -> None:
                del self._kelvin

        obj = Temperature()
        obj.celsius = 25.0

        assert obj._kelvin == pytest.approx(298.15)
        assert obj.celsius == pytest.approx(25.0)

        del obj.celsius

        with pytest.raises(AttributeError):
            obj.celsius

    def test_getter_errors_other_than_attribute_error_propagate(self) -> None:
        class Broken:

            @SerializableProperty
            def value(self) -> int:
                raise RuntimeError('Getter error')

        with pytest.raises(RuntimeError, match='Getter error'):
            Broken().value

    def test_getter_attribute_error_propagates(self) -> None:
        # Only the generated getter treats a missing value as unset
        class Computed:

            @serializable_property(default=0)
            def total(self) -> int:
                return self._missing_helper.compute()

        with pytest.raises(AttributeError, match='_missing_helper'):
            Computed().total


# ========== ========== ========== ========== Default Values
class TestDefaultValues:

    def test_static_default_value(self) -> None:
        class MyClass:
            prop = SerializableProperty(default=42)

        assert MyClass().prop == 42

    def test_callable_default_receives_instance(self) -> None:
        # Callable default should receive the instance as argument
        default_func = Mock(return_value=99)

        class MyClass:
            prop = SerializableProperty(default=default_func)

        obj = MyClass()

        assert obj.prop == 99
        default_func.assert_called_once_with(obj)

    def test_default_is_not_stored(self) -> None:
        # Reading the default leaves the instance untouched
        default_func = Mock(return_value=7)

        class MyClass:
            prop = SerializableProperty(default=default_func)

        obj = MyClass()
        assert obj.prop == 7
        assert obj.prop == 7

        assert default_func.call_count == 2
        assert vars(obj) == {}

    def test_mutable_default_with_callable(self) -> None:
        # Callable defaults should create new instances for each object
        class MyClass:
            items = SerializableProperty(default=lambda self: [])

        obj1 = MyClass()
        obj2 = MyClass()

        assert obj1.items == []
        assert obj1.items is not obj2.items

        obj1.items = [1]
        assert obj1.items == [1]
        assert obj2.items == []

    def test_none_resets_to_default(self) -> None:
        class MyClass:
            prop = SerializableProperty(default=10)

        obj = MyClass()
        obj.prop = 50
        assert obj.prop == 50

        obj.prop = None
        assert obj.prop == 10

    def test_default_decorator_sets_callable_default(self) -> None:
        class MyClass:
            prop = SerializableProperty()

            @prop.default
            def prop(self) -> int:
                return 123

        assert MyClass().prop == 123

    def test_none_default_stays_none(self) -> None:
        class MyClass:
            prop = SerializableProperty(default=None)

        assert MyClass().prop is None


# ========== ========== ========== ========== Read-only
class TestReadOnly:

    def test_readonly_rejects_assignment(self) -> None:
        class MyClass:
            prop = SerializableProperty(default=1, readonly=True)

        obj = MyClass()

        with pytest.raises(AttributeError, match='read-only property'):
            obj.prop = 2

        assert obj.prop == 1

    def test_readonly_flag(self) -> None:
        class MyClass:
            free = SerializableProperty()
            fixed = SerializableProperty(readonly=True)

        assert not MyClass.free.readonly
        assert MyClass.fixed.readonly
        assert MyClass.fixed.fset is None

    def test_readonly_ignores_setter(self) -> None:
        prop = SerializableProperty(fset=lambda obj, value: None, readonly=True)
        assert prop.fset is None

    def test_decorator_form(self) -> None:
        class Circle:
            radius = SerializableProperty(default=2)

            @serializable_property(readonly=True)
            def diameter(self) -> int:
                return 2 * self.radius

        circle = Circle()

        assert circle.diameter == 4

        with pytest.raises(AttributeError):
            circle.diameter = 10

        assert list(rules_for(Circle)) == ['radius', 'diameter']


# ========== ========== ========== ========== Chaining
class TestChaining:

    def test_chaining_creates_new_descriptors(self) -> None:
        # Decorator methods should create new descriptors, not mutate
        base = SerializableProperty(default=1)
        modified = base.default(lambda self: 2)

        assert base is not modified
        assert base._default == 1
        assert callable(modified._default)

    def test_chaining_keeps_configuration(self) -> None:
        rule = Custom(str, int)
        base = SerializableProperty(rule=rule, default=5, doc='Documented')

        modified = base.setter(lambda obj, value: None)

        assert modified.rule is rule
        assert modified._default == 5
        assert modified.__doc__ == 'Documented'

    def test_getter_replaces_fget(self) -> None:
        class MyClass:
            prop = SerializableProperty()

            @prop.getter
            def prop(self) -> str:
                return 'from getter'

        assert MyClass().prop == 'from getter'


# ========== ========== ========== ========== Registration
class TestRegistration:

    def test_registered_on_any_class(self) -> None:
        # No base class is needed for the rules to be registered
        class Plainly:
            a = SerializableProperty()
            b = SerializableProperty(rule='Plainly')

        rules = rules_for(Plainly)

        assert list(rules) == ['a', 'b']
        assert rules['a'] == Plain()
        assert rules['b'] == Nested('Plainly')

    def test_rule_coercion(self) -> None:
        prop = SerializableProperty(rule=(str, int))
        assert isinstance(prop.rule, Custom)

    def test_invalid_rule(self) -> None:
        with pytest.raises(TypeError):
            SerializableProperty(rule=42)

    def test_only_final_descriptor_registers(self) -> None:
        # Chained intermediate descriptors never reach __set_name__
        class MyClass:

            @SerializableProperty
            def prop(self) -> int:
                return self._prop

            @prop.setter
            def prop(self, value: int) -> None:
                self._prop = value

        assert list(rules_for(MyClass)) == ['prop']

    def test_set_name_attributes_exist(self) -> None:
        class MyClass:
            my_property = SerializableProperty()

        descriptor = MyClass.my_property
        assert descriptor.name == 'my_property'
        assert descriptor.owner is MyClass
        assert descriptor.private_name == '_serializable_property__my_property'


# ========== ========== ========== ========== Edge Cases
class TestEdgeCases:

    def test_inheritance_properties_work(self) -> None:
        class Base:
            prop1 = SerializableProperty(default=1)

        class Derived(Base):
            prop2 = SerializableProperty(default=2)

        obj = Derived()
        assert obj.prop1 == 1
        assert obj.prop2 == 2
        assert list(rules_for(Derived)) == ['prop2', 'prop1']

    def test_property_override_in_subclass(self) -> None:
        class Base:
            prop = SerializableProperty(default=10)

        class Derived(Base):
            prop = SerializableProperty(default=20)

        assert Base().prop == 10
        assert Derived().prop == 20

    def test_setter_exceptions_propagate(self) -> None:
        class MyClass:

            @SerializableProperty
            def prop(self) -> int:
                return 0

            @prop.setter
            def prop(self, value: int) -> None:
                raise ValueError('Setter error')

        with pytest.raises(ValueError, match='Setter error'):
            MyClass().prop = 42

    def test_documentation_from_getter(self) -> None:
        class MyClass:

            @SerializableProperty
            def prop(self) -> int:
                """Getter documentation"""
                return 0

        assert MyClass.prop.__doc__ == 'Getter documentation'

    def test_documentation_preserved(self) -> None:
        class MyClass:
            prop = SerializableProperty(doc='This is a documented property')

        assert MyClass.prop.__doc__ == 'This is a documented property'

    def test_none_documentation(self) -> None:
        class MyClass:
            prop = SerializableProperty(doc=None)

        assert MyClass.prop.__doc__ is None
