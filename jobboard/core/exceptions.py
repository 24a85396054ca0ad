"""Exceptions raised by services and dependencies and turned into responses in main."""

from typing import Dict, List


FieldErrors = Dict[str, List[str]]


class RecordInvalid(Exception):
    """
    A record failed validation.

    Carries the per-field messages, e.g. ``{"body": ["can't be blank"]}``.
    Nothing has been written when this is raised.
    """

    def __init__(self, errors: FieldErrors):
        self.errors = errors
        super().__init__(", ".join(full_messages(errors)))


class AuthorizationDenied(Exception):
    """The current identity may not reach the requested view."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def full_messages(errors: FieldErrors) -> List[str]:
    """
    Turn field errors into sentences.

    Example:
        full_messages({"job_post": ["must exist"]})  # ["Job post must exist"]
    """
    messages = []
    for field, field_messages in errors.items():
        label = field.replace("_", " ").capitalize()
        for message in field_messages:
            messages.append(f"{label} {message}")
    return messages
