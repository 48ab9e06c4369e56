"""
client/validation.py — Pre-dispatch input checks.

Runs before any network call. A rejected input never reaches the backend,
so the error is Validation-kind and not retryable: the user has to edit
the input first.
"""
from career_guide.client.flows import Flow
from career_guide.client.state import ErrorInfo, ErrorKind
from career_guide.config import Settings


def _rejected(message: str) -> ErrorInfo:
    return ErrorInfo(kind=ErrorKind.VALIDATION, message=message, retryable=False)


def validate_input(value: str | None, flow: Flow, settings: Settings) -> ErrorInfo | None:
    """
    Check a free-text input against the configured length bounds.
    Returns None when the input is acceptable, otherwise the error to show.
    Lengths are measured after trimming.
    """
    label = flow.input_label
    trimmed = (value or "").strip()

    if not trimmed:
        return _rejected(f"Please enter a {label} to continue.")

    if len(trimmed) < settings.input_min_length:
        return _rejected(
            f"Please enter at least {settings.input_min_length} characters for your {label}."
        )

    if len(trimmed) > settings.input_max_length:
        return _rejected(
            f"Your {label} should be less than {settings.input_max_length} characters."
        )

    return None
