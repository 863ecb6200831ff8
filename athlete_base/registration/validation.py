"""Registration payload validation.

Rules are declared as tables rather than procedural branches:
- FIELD_RULES: field -> ordered rules; the first failing rule for a field
  produces that field's error, so length checks only run once the
  required check passed
- CROSS_FIELD_RULES: rules that read several fields (country -> state/region)

Every field and cross-field rule is evaluated on every call so that all
violations are reported in one pass. Validation never raises.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from athlete_base.registration.normalize import to_float
from athlete_base.registration.types import FieldError, ValidationResult

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_SYMBOLS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
PASSWORD_MIN_LENGTH = 8

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
POSITION_MIN_LENGTH = 2
UNIVERSITY_MIN_LENGTH = 2
UNIVERSITY_MAX_LENGTH = 255

GPA_MIN = 0.0
GPA_MAX = 4.0

SEX_OPTIONS = ("male", "female")
COACHING_CATEGORIES = ("mens", "womens")
USA = "USA"

PASSWORD_MESSAGE = "Password must be at least 8 characters and contain uppercase, lowercase, number, and special character"
EMAIL_MESSAGE = "Please enter a valid email address"
EDU_EMAIL_MESSAGE = "Please enter a valid .edu email address"
GPA_MESSAGE = "GPA must be between 0.0 and 4.0"


def validate_required(value: Any) -> bool:
    """A value is present when it is a string with non-whitespace content."""
    return isinstance(value, str) and bool(value.strip())


def validate_email(email: Any) -> bool:
    if not validate_required(email):
        return False
    return EMAIL_PATTERN.match(email.strip()) is not None


def validate_edu_email(email: Any) -> bool:
    """Stricter form-layer rule: a valid email ending in .edu.

    The API rules below use validate_email only.
    """
    if not validate_email(email):
        return False
    return email.strip().lower().endswith(".edu")


def validate_password(password: Any) -> bool:
    if not validate_required(password):
        return False
    has_upper = any(char.isascii() and char.isupper() for char in password)
    has_lower = any(char.isascii() and char.islower() for char in password)
    has_digit = any(char.isascii() and char.isdigit() for char in password)
    has_symbol = any(char in PASSWORD_SYMBOLS for char in password)
    return len(password) >= PASSWORD_MIN_LENGTH and has_upper and has_lower and has_digit and has_symbol


def validate_gpa(gpa: Any) -> bool:
    value = to_float(gpa)
    if value is None:
        return False
    return GPA_MIN <= value <= GPA_MAX


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _length_between(minimum: int, maximum: int | None = None) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        length = len(value.strip())
        if length < minimum:
            return False
        return maximum is None or length <= maximum

    return check


def _one_of(options: tuple[str, ...]) -> Callable[[Any], bool]:
    return lambda value: value.strip().lower() in options


def _non_negative_number(value: Any) -> bool:
    if _is_missing(value):
        return True
    number = to_float(value)
    return number is not None and number >= 0


def _optional_text(value: Any) -> bool:
    return value is None or isinstance(value, str)


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def _all_named(value: Any) -> bool:
    return all(validate_required(item) for item in value)


@dataclass(frozen=True)
class FieldRule:
    predicate: Callable[[Any], bool]
    message: str


@dataclass(frozen=True)
class CrossFieldRule:
    """Rule on ``field`` that only applies when ``applies(payload)`` holds."""

    field: str
    applies: Callable[[Mapping[str, Any]], bool]
    predicate: Callable[[Any], bool]
    message: str


def _required(label: str) -> FieldRule:
    return FieldRule(validate_required, f"{label} is required")


def _name_rules(label: str) -> tuple[FieldRule, ...]:
    return (
        _required(label),
        FieldRule(
            _length_between(NAME_MIN_LENGTH, NAME_MAX_LENGTH),
            f"{label} must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters",
        ),
    )


_ACCOUNT_RULES: dict[str, tuple[FieldRule, ...]] = {
    "firstName": _name_rules("First name"),
    "lastName": _name_rules("Last name"),
    "email": (_required("Email"), FieldRule(validate_email, EMAIL_MESSAGE)),
    "password": (_required("Password"), FieldRule(validate_password, PASSWORD_MESSAGE)),
}

PLAYER_FIELD_RULES: dict[str, tuple[FieldRule, ...]] = {
    **_ACCOUNT_RULES,
    "sex": (_required("Sex"), FieldRule(_one_of(SEX_OPTIONS), 'Sex must be either "male" or "female"')),
    "sport": (_required("Sport"),),
    "position": (
        _required("Position"),
        FieldRule(_length_between(POSITION_MIN_LENGTH), f"Position must be at least {POSITION_MIN_LENGTH} characters"),
    ),
    "gpa": (
        FieldRule(lambda value: not _is_missing(value), "GPA is required"),
        FieldRule(validate_gpa, GPA_MESSAGE),
    ),
    "country": (_required("Country"),),
    "scholarshipAmount": (FieldRule(_non_negative_number, "Scholarship amount must be a non-negative number"),),
    "testScores": (FieldRule(_optional_text, "Test scores must be text"),),
}


def _country_is_usa(payload: Mapping[str, Any]) -> bool:
    return validate_required(payload.get("country")) and payload["country"].strip().upper() == USA


def _country_is_foreign(payload: Mapping[str, Any]) -> bool:
    return validate_required(payload.get("country")) and payload["country"].strip().upper() != USA


PLAYER_CROSS_FIELD_RULES: tuple[CrossFieldRule, ...] = (
    CrossFieldRule("state", _country_is_usa, validate_required, "State is required when country is USA"),
    CrossFieldRule("region", _country_is_foreign, validate_required, "Region is required when country is not USA"),
)

COACH_FIELD_RULES: dict[str, tuple[FieldRule, ...]] = {
    **_ACCOUNT_RULES,
    "coachingCategory": (
        _required("Coaching category"),
        FieldRule(_one_of(COACHING_CATEGORIES), 'Coaching category must be either "mens" or "womens"'),
    ),
    "sports": (
        FieldRule(_non_empty_list, "At least one sport is required"),
        FieldRule(_all_named, "Each sport must be a non-empty name"),
    ),
    "university": (
        _required("University"),
        FieldRule(
            _length_between(UNIVERSITY_MIN_LENGTH, UNIVERSITY_MAX_LENGTH),
            f"University must be between {UNIVERSITY_MIN_LENGTH} and {UNIVERSITY_MAX_LENGTH} characters",
        ),
    ),
}

COACH_CROSS_FIELD_RULES: tuple[CrossFieldRule, ...] = ()


def evaluate_rules(
    payload: Any,
    field_rules: Mapping[str, tuple[FieldRule, ...]],
    cross_field_rules: tuple[CrossFieldRule, ...] = (),
) -> ValidationResult:
    """Evaluate rule tables against a raw payload.

    Args:
        payload: Untrusted request body; non-mappings are treated as empty
        field_rules: Per-field rule chains, first failure wins per field
        cross_field_rules: Conditional rules evaluated after field rules

    Returns:
        ValidationResult with errors in rule evaluation order
    """
    data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
    errors: list[FieldError] = []

    for field_name, rules in field_rules.items():
        value = data.get(field_name)
        for rule in rules:
            if not rule.predicate(value):
                errors.append(FieldError(field_name, rule.message))
                break

    for rule in cross_field_rules:
        if rule.applies(data) and not rule.predicate(data.get(rule.field)):
            errors.append(FieldError(rule.field, rule.message))

    return ValidationResult(errors)


def validate_player_registration(payload: Any) -> ValidationResult:
    return evaluate_rules(payload, PLAYER_FIELD_RULES, PLAYER_CROSS_FIELD_RULES)


def validate_coach_registration(payload: Any) -> ValidationResult:
    return evaluate_rules(payload, COACH_FIELD_RULES, COACH_CROSS_FIELD_RULES)
