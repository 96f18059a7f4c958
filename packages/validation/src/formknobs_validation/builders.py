"""Factory functions for reusable travel-form constraints.

Builders are pure: each returns a new immutable constraint. They raise
``ConfigurationError`` only when called with inconsistent arguments, never
for user input.

Example:
    ```python
    schema = (
        FormSchema("trip_request")
        .field("name", [required("Name")])
        .field("email", [required("Email"), email()])
        .field("phone", [phone()])
        .field("interests", [interests(1, 5)])
        .cross_field(date_range())
    )
    ```
"""

from __future__ import annotations

import importlib
import math
import re
import string
from collections.abc import Callable, Mapping
from datetime import date, datetime, time, timezone
from numbers import Real
from typing import Any

from formknobs_common import ConfigurationError

from .constraints import Custom, CrossField, Outcome, Pattern, Required
from .result import CheckResult

EMAIL_PATTERN = re.compile(
    r"^(?!\.)(?!.*\.\.)[A-Za-z0-9_'+\-.]*[A-Za-z0-9_+\-]"
    r"@(?:[A-Za-z0-9][A-Za-z0-9\-]*\.)+[A-Za-z]{2,}\Z"
)
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}\Z"
)

DEFAULT_EMAIL_MESSAGE = "Please enter a valid email address"
DEFAULT_PHONE_MESSAGE = "Phone number must be at least 10 digits"
DEFAULT_DATE_RANGE_MESSAGE = "End date must be after start date"
DEFAULT_BUDGET_MESSAGE = "Maximum budget must be greater than or equal to minimum budget"

MIN_PHONE_DIGITS = 10


def required(label: str) -> Required:
    """Field must be non-empty; fails with ``"{label} is required"``."""
    return Required(message=f"{label} is required")


def email(message: str | None = None) -> Pattern:
    """Field must hold a syntactically valid email address."""
    return Pattern(EMAIL_PATTERN, message=message or DEFAULT_EMAIL_MESSAGE, name="email")


def pattern(regex: str | re.Pattern[str], message: str = "Value has an invalid format") -> Pattern:
    """Field must match ``regex``."""
    return Pattern(regex, message=message)


def phone(message: str | None = None) -> Custom:
    """Field must contain at least ten digits.

    Only digit characters are counted, so spaces, parentheses, dashes and a
    leading ``+`` are ignored.
    """
    failure = message or DEFAULT_PHONE_MESSAGE

    def check(value: Any) -> bool:
        if value is None:
            return True
        digits = sum(1 for ch in str(value) if ch in string.digits)
        return digits >= MIN_PHONE_DIGITS

    return Custom(check, message=failure, name="phone", params={"min_digits": MIN_PHONE_DIGITS})


def password(message: str | None = None) -> Custom:
    """Field must be a strong password.

    At least eight characters, with one lowercase letter, one uppercase
    letter, one digit and one of ``@$!%*?&``.
    """
    strength_message = message or (
        "Password must contain at least one uppercase letter, one lowercase letter, "
        "one number, and one special character"
    )

    def check(value: Any) -> Outcome:
        if value is None:
            return True
        if not isinstance(value, str):
            return CheckResult.failure(value, ["Password must be a string"])
        errors = []
        if len(value) < 8:
            errors.append("Password must be at least 8 characters")
        if not PASSWORD_PATTERN.match(value):
            errors.append(strength_message)
        return CheckResult.from_errors(value, errors)

    return Custom(check, message=strength_message, name="password")


def destination(message: str | None = None) -> Custom:
    """Field must name a destination of 2 to 100 characters."""
    blank_message = message or "Please enter a valid destination"

    def check(value: Any) -> Outcome:
        if value is None:
            return True
        if not isinstance(value, str):
            return CheckResult.failure(value, [blank_message])
        errors = []
        if len(value) < 2:
            errors.append("Destination must be at least 2 characters")
        if len(value) > 100:
            errors.append("Destination cannot exceed 100 characters")
        if not value.strip():
            errors.append(blank_message)
        return CheckResult.from_errors(value, errors)

    return Custom(check, message=blank_message, name="destination")


def number_range(
    min_value: float | None = None,
    max_value: float | None = None,
    message: str | None = None,
) -> Custom:
    """Numeric field must lie within ``[min_value, max_value]``.

    Raises:
        ConfigurationError: If ``min_value`` is greater than ``max_value``
    """
    if min_value is not None and max_value is not None and min_value > max_value:
        raise ConfigurationError(
            f"min_value ({min_value}) cannot be greater than max_value ({max_value})",
            context={"min_value": min_value, "max_value": max_value},
        )

    def check(value: Any) -> Outcome:
        if value is None:
            return True
        if not _is_number(value):
            return CheckResult.failure(value, [message or "Value must be a number"])
        errors = []
        if min_value is not None and value < min_value:
            errors.append(message or f"Value {value} is less than minimum {min_value}")
        if max_value is not None and value > max_value:
            errors.append(message or f"Value {value} is greater than maximum {max_value}")
        return CheckResult.from_errors(value, errors)

    return Custom(
        check,
        message=message or "Value is out of range",
        name="number_range",
        params={"min_value": min_value, "max_value": max_value},
    )


def date_range(
    lower_bound: date | str | None = None,
    upper_bound: date | str | None = None,
    message: str | None = None,
    *,
    enforce_bounds: bool = False,
    start_field: str = "startDate",
    end_field: str = "endDate",
) -> CrossField:
    """End date must fall strictly after start date.

    Dates may be ``date``/``datetime`` objects or ISO-8601 strings. The bounds
    are recorded on the constraint; they only restrict the submitted dates
    when ``enforce_bounds`` is set, in which case the start date may not fall
    before ``lower_bound`` and the end date may not fall after
    ``upper_bound``.

    Raises:
        ConfigurationError: If a bound is not a date, or ``lower_bound`` falls
            after ``upper_bound``
    """
    lower = _bound_to_datetime("lower_bound", lower_bound)
    upper = _bound_to_datetime("upper_bound", upper_bound)
    if lower is not None and upper is not None:
        first, last = _comparable(lower, upper)
        if first > last:
            raise ConfigurationError(
                "lower_bound cannot fall after upper_bound",
                context={"lower_bound": str(lower_bound), "upper_bound": str(upper_bound)},
            )
    failure = message or DEFAULT_DATE_RANGE_MESSAGE

    def check(data: Mapping[str, Any]) -> Outcome:
        raw_start, raw_end = data.get(start_field), data.get(end_field)
        start, end = _to_datetime(raw_start), _to_datetime(raw_end)
        errors = []
        if raw_start is not None and start is None:
            errors.append("Start date must be a valid date")
        if raw_end is not None and end is None:
            errors.append("End date must be a valid date")
        if start is not None and end is not None:
            first, last = _comparable(start, end)
            if last <= first:
                errors.append(failure)
        if enforce_bounds:
            if start is not None and lower is not None:
                first, bound = _comparable(start, lower)
                if first < bound:
                    errors.append(f"Start date cannot be before {lower.date().isoformat()}")
            if end is not None and upper is not None:
                last, bound = _comparable(end, upper)
                if last > bound:
                    errors.append(f"End date cannot be after {upper.date().isoformat()}")
        return CheckResult.from_errors(data, errors)

    return CrossField(
        check,
        message=failure,
        fields=(start_field, end_field),
        target=end_field,
        name="date_range",
        params={
            "lower_bound": lower.isoformat() if lower else None,
            "upper_bound": upper.isoformat() if upper else None,
            "enforce_bounds": enforce_bounds,
        },
    )


def budget_range(
    min_allowed: float = 0,
    max_allowed: float = 1_000_000,
    message: str | None = None,
    *,
    min_field: str = "budgetMin",
    max_field: str = "budgetMax",
) -> CrossField:
    """Maximum budget must not be below minimum; both lie within the allowed range.

    Raises:
        ConfigurationError: If ``min_allowed`` is greater than ``max_allowed``
    """
    if min_allowed > max_allowed:
        raise ConfigurationError(
            f"min_allowed ({min_allowed}) cannot be greater than max_allowed ({max_allowed})",
            context={"min_allowed": min_allowed, "max_allowed": max_allowed},
        )
    failure = message or DEFAULT_BUDGET_MESSAGE

    def check(data: Mapping[str, Any]) -> Outcome:
        errors = []
        values = {}
        for key, label in ((min_field, "Minimum"), (max_field, "Maximum")):
            value = data.get(key)
            if value is None:
                continue
            if not _is_number(value):
                errors.append(f"{label} budget must be a number")
                continue
            if value < min_allowed:
                errors.append(f"{label} budget cannot be less than {min_allowed}")
            if value > max_allowed:
                errors.append(f"{label} budget cannot exceed {max_allowed}")
            values[key] = value
        if min_field in values and max_field in values and values[max_field] < values[min_field]:
            errors.append(failure)
        return CheckResult.from_errors(data, errors)

    return CrossField(
        check,
        message=failure,
        fields=(min_field, max_field),
        target=max_field,
        name="budget_range",
        params={"min_allowed": min_allowed, "max_allowed": max_allowed},
    )


def traveler_count(max_total: int = 20) -> CrossField:
    """Travel party of ``adults``, ``children`` and ``infants`` within limits.

    At least one adult is required, no count may be negative or exceed
    ``max_total`` on its own, and the sum may not exceed ``max_total``.
    Missing counts are treated as zero.

    Raises:
        ConfigurationError: If ``max_total`` is less than one
    """
    if max_total < 1:
        raise ConfigurationError(
            f"max_total must be at least 1, got {max_total}",
            context={"max_total": max_total},
        )
    failure = f"Total travelers cannot exceed {max_total}"

    def check(data: Mapping[str, Any]) -> Outcome:
        errors = []
        total = 0
        for key, label in (("adults", "Adults"), ("children", "Children"), ("infants", "Infants")):
            count = data.get(key) or 0
            if not _is_number(count) or not float(count).is_integer():
                errors.append(f"{label} count must be a whole number")
                continue
            if key == "adults" and count < 1:
                errors.append("At least one adult is required")
            elif count < 0:
                errors.append(f"{label} count cannot be negative")
            if count > max_total:
                errors.append(f"Cannot exceed {max_total} {key}")
            total += count
        if total > max_total:
            errors.append(failure)
        return CheckResult.from_errors(data, errors)

    return CrossField(
        check,
        message=failure,
        fields=("adults", "children", "infants"),
        target="adults",
        name="traveler_count",
        params={"max_total": max_total},
    )


def interests(min_count: int = 1, max_count: int = 10) -> Custom:
    """Between ``min_count`` and ``max_count`` interests must be selected.

    Raises:
        ConfigurationError: If a count is negative or ``max_count < min_count``
    """
    if min_count < 0:
        raise ConfigurationError(
            f"min_count cannot be negative: {min_count}", context={"min_count": min_count}
        )
    if max_count < min_count:
        raise ConfigurationError(
            f"max_count ({max_count}) cannot be less than min_count ({min_count})",
            context={"min_count": min_count, "max_count": max_count},
        )
    too_few = f"Please select at least {min_count} {_plural('interest', min_count)}"
    too_many = f"Please select no more than {max_count} {_plural('interest', max_count)}"

    def check(value: Any) -> Outcome:
        selected = [] if value is None else value
        if isinstance(selected, (str, bytes, Mapping)) or not hasattr(selected, "__len__"):
            return CheckResult.failure(value, ["Interests must be a list of selections"])
        if len(selected) < min_count:
            return CheckResult.failure(value, [too_few])
        if len(selected) > max_count:
            return CheckResult.failure(value, [too_many])
        return True

    return Custom(
        check,
        message=too_few,
        name="interests",
        params={"min_count": min_count, "max_count": max_count},
    )


def custom(validator: Callable[[Any], Outcome] | str, message: str) -> Custom:
    """Field must satisfy ``validator``.

    Args:
        validator: Callable returning bool or CheckResult, or the dotted
            import path of such a callable (used by declarative forms)
        message: Message reported when the validator returns False

    Raises:
        ConfigurationError: If the validator cannot be resolved to a callable
    """
    if isinstance(validator, str):
        validator = _load_callable(validator)
    if not callable(validator):
        raise ConfigurationError(
            "Custom constraint validator must be callable",
            context={"validator": repr(validator)},
        )
    return Custom(validator, message=message)


def _load_callable(path: str) -> Callable[[Any], Outcome]:
    module_path, _, attr = path.rpartition(".")
    if not module_path:
        raise ConfigurationError(f"Invalid validator path: {path}", context={"validator": path})
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(
            f"Failed to import validator {path}: {e}", context={"validator": path}
        ) from e
    try:
        return getattr(module, attr)  # type: ignore[no-any-return]
    except AttributeError as e:
        raise ConfigurationError(
            f"Validator {attr} not found in {module_path}", context={"validator": path}
        ) from e


def _plural(noun: str, count: int) -> str:
    return noun if count == 1 else f"{noun}s"


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def _to_datetime(value: Any) -> datetime | None:
    """Convert a date-like value to a datetime, or None when it is not one."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _bound_to_datetime(name: str, value: Any) -> datetime | None:
    if value is None:
        return None
    converted = _to_datetime(value)
    if converted is None:
        raise ConfigurationError(
            f"{name} must be a date or ISO-8601 string, got {value!r}",
            context={name: repr(value)},
        )
    return converted


def _comparable(first: datetime, second: datetime) -> tuple[datetime, datetime]:
    """Align naive and aware datetimes so they can be compared."""
    if (first.tzinfo is None) == (second.tzinfo is None):
        return first, second
    # Naive values are taken to be UTC
    return (
        first.replace(tzinfo=timezone.utc) if first.tzinfo is None else first,
        second.replace(tzinfo=timezone.utc) if second.tzinfo is None else second,
    )
