"""Field validation store.

Each configured field has an ordered list of rules. A rule is a pure
function ``value -> message | None``; the first message wins. Aggregate
validity is always derived from the current errors mapping.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..domain.models import ValidationState

Rule = Callable[[Any], Optional[str]]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^(\+\d{1,3})?[\s.-]?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}$")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def required(value: Any) -> Optional[str]:
    if _is_empty(value):
        return "This field is required"
    return None


def email(value: Any) -> Optional[str]:
    if _is_empty(value):
        return None
    if not isinstance(value, str):
        return "Invalid email type"
    if not _EMAIL_RE.match(value):
        return "Please enter a valid email address"
    return None


def phone(value: Any) -> Optional[str]:
    if _is_empty(value):
        return None
    if not isinstance(value, str):
        return "Invalid phone type"
    if not _PHONE_RE.match(value):
        return "Please enter a valid phone number"
    return None


def min_length(length: int) -> Rule:
    """Build a rule rejecting strings shorter than length."""

    def rule(value: Any) -> Optional[str]:
        if _is_empty(value):
            return None
        if not isinstance(value, str):
            return "Invalid string type"
        if len(value) < length:
            return f"Must be at least {length} characters"
        return None

    return rule


PERSONAL_DETAILS_RULES: Dict[str, Sequence[Rule]] = {
    "full_name": (required, min_length(2)),
    "email": (required, email),
    "phone": (required, phone),
}


@dataclass
class ValidationStore:
    """Field-level rule evaluation and aggregate validity.

    Attributes:
        rules: Field name -> ordered rules
    """

    rules: Mapping[str, Sequence[Rule]] = field(
        default_factory=lambda: dict(PERSONAL_DETAILS_RULES)
    )

    _state: ValidationState = field(default_factory=ValidationState, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> ValidationState:
        return self._state

    @property
    def errors(self) -> Mapping[str, str]:
        return dict(self._state.errors)

    @property
    def is_valid(self) -> bool:
        return self._state.is_valid

    @staticmethod
    def _first_error(rules: Sequence[Rule], value: Any) -> Optional[str]:
        for rule in rules:
            message = rule(value)
            if message:
                return message
        return None

    def validate_field(self, field_name: str, value: Any) -> bool:
        """Validate one field and update only its entry.

        Fields without configured rules always pass.

        Returns:
            True if the field is valid.
        """
        rules = self.rules.get(field_name)
        if not rules:
            return True

        message = self._first_error(rules, value)
        if message:
            self.set_error(field_name, message)
            return False

        self.clear_error(field_name)
        return True

    def validate_form(self, values: Mapping[str, Any]) -> bool:
        """Re-evaluate every configured field and rebuild the errors mapping.

        Returns:
            True if every field passed.
        """
        errors: Dict[str, str] = {}
        for field_name, rules in self.rules.items():
            message = self._first_error(rules, values.get(field_name))
            if message:
                errors[field_name] = message

        self._state.errors = errors
        if errors:
            self._logger.debug(
                "Form validation failed", extra={"fields": sorted(errors)}
            )
        return self._state.is_valid

    def set_error(self, field_name: str, message: str) -> None:
        self._state.errors = {**self._state.errors, field_name: message}

    def set_errors(self, errors: Mapping[str, str]) -> None:
        self._state.errors = dict(errors)

    def clear_error(self, field_name: str) -> None:
        # Validity is a property of the new mapping, never of a prior copy.
        remaining = dict(self._state.errors)
        remaining.pop(field_name, None)
        self._state.errors = remaining

    def clear_errors(self) -> None:
        self._state.errors = {}

    def reset(self) -> None:
        self._state = ValidationState()
