"""Common exception hierarchy for all formknobs packages.

Every formknobs package raises exceptions derived from ``FormknobsError``.
Exceptions carry an optional context dictionary so callers can inspect the
field, step or configuration key involved without parsing the message.

The hierarchy follows one propagation rule: problems with *user input* are
never raised, they are recovered into validation results. Exceptions are
reserved for engine misconfiguration and internal failures.

Example:
    ```python
    from formknobs_common.exceptions import ConfigurationError, FormknobsError

    raise ConfigurationError(
        "Custom validator registered for unknown field",
        context={"field": "nickname", "schema": "trip_request"}
    )

    # Catch any formknobs error
    try:
        orchestrator.add_custom_validator("nickname", check_nickname)
    except FormknobsError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class FormknobsError(Exception):
    """Base exception for all formknobs packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (field names, steps, etc.)
        details: Alternative to context (both are supported)

    Example:
        ```python
        error = FormknobsError(
            "Step partition is malformed",
            context={"step": 1, "field": "budgetMax"}
        )
        str(error)
        # 'Step partition is malformed'
        error.context
        # {'step': 1, 'field': 'budgetMax'}
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(FormknobsError):
    """Raised when data must be rejected outright rather than reported.

    Form input problems are reported through validation results; this
    exception is for callers that want to turn a failed result into a hard
    stop, e.g. a route handler refusing to persist an invalid submission.

    Example:
        ```python
        result = await orchestrator.validate_form(data)
        if not result.is_valid:
            raise ValidationError(
                "Trip request rejected",
                context={"errors": result.errors}
            )
        ```
    """

    pass


class ConfigurationError(FormknobsError):
    """Raised when the engine is misconfigured.

    These are programmer mistakes, raised synchronously at construction or
    registration time:
    - A custom validator registered for a field not in the schema
    - A step partition referencing an undeclared field
    - Builder misuse such as ``interests(min_count=5, max_count=1)``
    - An unknown constraint type in a declarative form definition

    Example:
        ```python
        raise ConfigurationError(
            "max_count cannot be less than min_count",
            context={"min_count": 5, "max_count": 1}
        )
        ```
    """

    pass


class NotFoundError(FormknobsError):
    """Raised when a requested item is not found.

    Example:
        ```python
        raise NotFoundError(
            "Form configuration not found",
            context={"type": "forms", "name": "trip_request"}
        )
        ```
    """

    pass


class OperationError(FormknobsError):
    """Raised when an operation fails.

    Used for internal failures that do not fit another category, such as an
    illegal field state transition.

    Example:
        ```python
        raise OperationError(
            "Cannot settle a field that is not validating",
            context={"field": "email", "state": "idle"}
        )
        ```
    """

    pass


__all__ = [
    "FormknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
]
