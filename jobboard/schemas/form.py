from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from jobboard.core.exceptions import FieldErrors, full_messages


class FormResponse(BaseModel):
    """
    A form the client can render: where to send it, the current values,
    and the errors from the last submission (if any).
    """

    action: str
    method: str = "post"
    enctype: str = "application/json"
    values: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, List[str]] = Field(default_factory=dict)
    messages: List[str] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        action: str,
        values: Dict[str, Any],
        method: str = "post",
        enctype: str = "application/json",
        errors: Optional[FieldErrors] = None,
    ) -> "FormResponse":
        errors = errors or {}
        return cls(
            action=action,
            method=method,
            enctype=enctype,
            values=values,
            errors=errors,
            messages=full_messages(errors),
        )


class InvalidFormResponse(BaseModel):
    """Body of a 422 response: the submitted form re-shown with its errors."""

    status: str = "error"
    message: str = "Validation failed"
    form: FormResponse
