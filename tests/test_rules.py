"""
Tests for the rule validators: pydantic rule validator, selectors, collection
validator, property chains and the validator factory.
"""
from typing import Optional

import pytest
from pydantic import BaseModel, field_validator

from rulebridge.naming import combine_names, location_to_path
from rulebridge.rules import (
    MODEL_KEY_PREFIX,
    BaseValidator,
    CollectionValidator,
    DefaultValidatorSelector,
    MemberNameValidatorSelector,
    PropertyChain,
    PydanticRuleValidator,
    RulesetValidatorSelector,
    ValidationContext,
    ValidationResult,
    ValidatorFactory,
    rule_error,
)

from conftest import Address, Person, PersonRules, Point


# ============================================================================
# Naming helpers
# ============================================================================

class TestNaming:
    """Test key and path composition."""

    def test_combine_with_empty_prefix(self):
        assert combine_names("", "name") == "name"

    def test_combine_with_prefix(self):
        assert combine_names("person", "name") == "person.name"

    def test_combine_indexer(self):
        assert combine_names("people", "[0].name") == "people[0].name"

    def test_combine_empty_name(self):
        assert combine_names("person", "") == "person"

    def test_location_to_path(self):
        assert location_to_path(("items", 1, "age")) == "items[1].age"
        assert location_to_path((0, "name")) == "[0].name"
        assert location_to_path(()) == ""


class TestPropertyChain:
    """Test property chain rendering."""

    def test_empty_chain(self):
        chain = PropertyChain()
        assert str(chain) == ""
        assert chain.build_property_name("age") == "age"

    def test_member_and_indexer(self):
        chain = PropertyChain()
        chain.add("people")
        chain.add_indexer(2)
        assert chain.build_property_name("age") == "people[2].age"

    def test_copy_is_independent(self):
        chain = PropertyChain(["a"])
        copy = chain.copy()
        copy.add("b")
        assert str(chain) == "a"
        assert str(copy) == "a.b"

    def test_child_context_extends_chain(self):
        context = ValidationContext(object(), selector=RulesetValidatorSelector("x"))
        child = context.for_child("item", "items", "[3]")
        assert str(child.property_chain) == "items[3]"
        assert child.selector is context.selector
        assert child.is_child_context
        assert not context.is_child_context


# ============================================================================
# Selectors
# ============================================================================

class TestSelectors:
    """Test rule selection strategies."""

    def test_default_selector(self):
        selector = DefaultValidatorSelector()
        assert selector.can_execute(None, "name", None)
        assert selector.can_execute("default", "name", None)
        assert not selector.can_execute("contact", "email", None)

    def test_ruleset_selector_parses_comma_list(self):
        selector = RulesetValidatorSelector("contact, billing")
        assert selector.rule_sets == ("contact", "billing")
        assert selector.can_execute("billing", "x", None)
        assert not selector.can_execute(None, "name", None)

    def test_ruleset_selector_default_includes_unassigned(self):
        selector = RulesetValidatorSelector(["default", "contact"])
        assert selector.can_execute(None, "name", None)
        assert selector.can_execute("contact", "email", None)

    def test_ruleset_selector_wildcard(self):
        selector = RulesetValidatorSelector("*")
        assert selector.can_execute(None, "name", None)
        assert selector.can_execute("anything", "x", None)

    def test_member_name_selector(self):
        selector = MemberNameValidatorSelector("name,address")
        assert selector.can_execute(None, "name", None)
        assert selector.can_execute(None, "address.city", None)
        assert selector.can_execute(None, "address[0]", None)
        assert not selector.can_execute(None, "age", None)
        assert not selector.can_execute(None, "names", None)


# ============================================================================
# Pydantic rule validator
# ============================================================================

class TestPydanticRuleValidator:
    """Test validating objects against a pydantic rules model."""

    def test_valid_instance(self, person_validator):
        result = person_validator.validate_instance(Person(name="Ada", age=36))
        assert result.is_valid
        assert result.errors == []

    def test_required_name(self, person_validator):
        result = person_validator.validate_instance(Person(name=None))
        assert not result.is_valid
        assert [(f.property_name, f.error_message) for f in result.errors] == [("name", "Name is required")]

    def test_failure_details(self, person_validator):
        failure = person_validator.validate_instance(Person(name="Ada", age=-1)).errors[0]
        assert failure.property_name == "age"
        assert failure.attempted_value == -1
        assert failure.error_code == "rule"
        assert failure.rule_set is None
        assert str(failure) == "Age must not be negative"

    def test_rule_set_excluded_by_default(self, person_validator):
        result = person_validator.validate_instance(Person(name="Ada", email=None))
        assert result.is_valid

    def test_rule_set_selected(self, person_validator):
        result = person_validator.validate_instance(
            Person(name="Ada", email=None), selector=RulesetValidatorSelector("contact")
        )
        assert [f.property_name for f in result.errors] == ["email"]
        assert result.errors[0].rule_set == "contact"

    def test_member_selector_filters_failures(self, person_validator):
        result = person_validator.validate_instance(
            Person(name=None, age=-3), selector=MemberNameValidatorSelector(["age"])
        )
        assert [f.property_name for f in result.errors] == ["age"]

    def test_property_chain_prefixes_failures(self, person_validator):
        context = ValidationContext(Person(name=None)).for_child(Person(name=None), "owner")
        result = person_validator.validate(context)
        assert result.errors[0].property_name == "owner.name"

    def test_validates_dataclasses(self):
        class PointRules(BaseModel):
            x: int
            y: int

            @field_validator("y")
            @classmethod
            def positive(cls, value):
                if value <= 0:
                    raise rule_error("Y must be positive")
                return value

        validator = PydanticRuleValidator(PointRules, model_type=Point)
        result = validator.validate_instance(Point(x=1, y=0))
        assert [(f.property_name, f.error_message) for f in result.errors] == [("y", "Y must be positive")]

    def test_validates_plain_dicts(self, person_validator):
        result = person_validator.validate_instance({"name": "", "age": 1})
        assert [f.property_name for f in result.errors] == ["name"]

    def test_rules_model_receives_context(self):
        seen = {}

        class CapturingRules(BaseModel):
            name: Optional[str] = None

            @field_validator("name")
            @classmethod
            def capture(cls, value, info):
                seen.update(info.context)
                return value

        PydanticRuleValidator(CapturingRules).validate_instance(Person(name="x"), selector=RulesetValidatorSelector("a"))
        assert seen["rule_sets"] == ("a",)
        assert isinstance(seen["instance"], Person)

    def test_can_validate_instances_of(self, person_validator):
        assert person_validator.can_validate_instances_of(Person)
        assert not person_validator.can_validate_instances_of(Address)
        assert PydanticRuleValidator(PersonRules).can_validate_instances_of(Address)


# ============================================================================
# Collection validator
# ============================================================================

class TestCollectionValidator:
    """Test element-wise collection validation."""

    def test_placeholder_used_without_prefix(self, person_validator):
        validator = CollectionValidator(person_validator, "")
        people = [Person(name="a"), Person(name="b", age=-5), Person(name="c")]

        result = validator.validate_instance(people)

        assert [f.property_name for f in result.errors] == [f"{MODEL_KEY_PREFIX}[1].age"]

    def test_prefix_used_when_given(self, person_validator):
        validator = CollectionValidator(person_validator, "people")
        result = validator.validate_instance([Person(name=None)])
        assert [f.property_name for f in result.errors] == ["people[0].name"]

    def test_null_items_skipped(self, person_validator):
        validator = CollectionValidator(person_validator, "people")
        result = validator.validate_instance([None, Person(name="ok")])
        assert result.is_valid

    def test_none_collection(self, person_validator):
        assert CollectionValidator(person_validator).validate_instance(None).is_valid

    def test_member_selector_applies_to_elements(self, person_validator):
        validator = CollectionValidator(person_validator, "people")
        result = validator.validate_instance(
            [Person(name=None, age=-1)], selector=MemberNameValidatorSelector("age")
        )
        assert [f.property_name for f in result.errors] == ["people[0].age"]


# ============================================================================
# Validator factory
# ============================================================================

class TestValidatorFactory:
    """Test validator registration and lookup."""

    def test_register_and_get(self, person_validator):
        factory = ValidatorFactory()
        factory.register(Person, person_validator)
        assert factory.get_validator(Person) is person_validator
        assert Person in factory
        assert len(factory) == 1

    def test_lookup_is_exact_type(self, person_validator):
        class Employee(Person):
            pass

        factory = ValidatorFactory({Person: person_validator})
        assert factory.get_validator(Employee) is None

    def test_missing_validator(self):
        assert ValidatorFactory().get_validator(Person) is None
        assert list not in ValidatorFactory()

    def test_register_rejects_non_validator(self):
        with pytest.raises(TypeError):
            ValidatorFactory().register(Person, object())

    def test_register_rejects_incompatible_validator(self, person_validator):
        with pytest.raises(ValueError):
            ValidatorFactory().register(Address, person_validator)

    def test_validator_for_decorator(self):
        factory = ValidatorFactory()

        @factory.validator_for(Point)
        class PointValidator(BaseValidator):
            def validate(self, context):
                return ValidationResult()

        assert isinstance(factory.get_validator(Point), PointValidator)

    def test_declared_validator_attribute(self):
        class TagValidator(BaseValidator):
            def validate(self, context):
                return ValidationResult(errors=[self._failure(context, "label", "Label is required")])

        class Tag(BaseModel):
            __validator__ = TagValidator
            label: str = ""

        factory = ValidatorFactory()
        validator = factory.get_validator(Tag)
        assert isinstance(validator, TagValidator)
        assert factory.get_validator(Tag) is validator
        assert validator.validate_instance(Tag()).errors[0].property_name == "label"

    def test_declared_validator_not_inherited(self):
        class TagValidator(BaseValidator):
            def validate(self, context):
                return ValidationResult()

        class Tag(BaseModel):
            __validator__ = TagValidator

        class SpecialTag(Tag):
            pass

        assert ValidatorFactory().get_validator(SpecialTag) is None

    def test_remove(self, factory):
        factory.remove(Person)
        assert factory.get_validator(Person) is None
