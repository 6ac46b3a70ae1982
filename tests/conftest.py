"""Shared models, rules and fixtures for the validation pipeline tests."""

from dataclasses import dataclass
from typing import Optional

import pytest
from pydantic import BaseModel, Field, field_validator

from rulebridge.mvc import ActionContext, ActionDescriptor, ModelMetadataProvider
from rulebridge.rules import PydanticRuleValidator, ValidatorFactory, rule_error


# ============================================================================
# Models
# ============================================================================

class Person(BaseModel):
    name: Optional[str] = None
    age: int = 0
    email: Optional[str] = None


class Address(BaseModel):
    city: str = ""
    postcode: str = Field(default="", max_length=8)


class Unvalidated(BaseModel):
    """A model with no registered rule validator."""

    title: str = Field(default="", max_length=5)


@dataclass
class Point:
    x: int = 0
    y: int = 0


# ============================================================================
# Rules
# ============================================================================

class PersonRules(BaseModel):
    name: Optional[str] = None
    age: int = 0
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, value):
        if not value:
            raise rule_error("Name is required")
        return value

    @field_validator("age")
    @classmethod
    def age_not_negative(cls, value):
        if value < 0:
            raise rule_error("Age must not be negative")
        return value

    @field_validator("email")
    @classmethod
    def email_required_for_contact(cls, value):
        if not value:
            raise rule_error("Email is required", rule_set="contact")
        return value


class AddressRules(BaseModel):
    city: str = ""
    postcode: str = ""

    @field_validator("city")
    @classmethod
    def city_required(cls, value):
        if not value:
            raise rule_error("City is required")
        return value


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def person_validator():
    return PydanticRuleValidator(PersonRules, model_type=Person)


@pytest.fixture
def factory(person_validator):
    factory = ValidatorFactory()
    factory.register(Person, person_validator)
    factory.register(Address, PydanticRuleValidator(AddressRules, model_type=Address))
    return factory


@pytest.fixture
def metadata_provider():
    return ModelMetadataProvider()


@pytest.fixture
def action_context(factory):
    """Context for an action with no declared parameters."""
    return ActionContext(ActionDescriptor(), services={ValidatorFactory: factory})
