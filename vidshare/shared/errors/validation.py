# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import ValidationError as PydanticValidationError

from .base import ValidationError


def format_pydantic_errors(exc: PydanticValidationError) -> list[dict[str, Any]]:
    errors_list = []

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc if part is not None)

        error_entry: dict[str, Any] = {
            "field": field_path or "unknown",
            "type": error.get("type", "value_error"),
            "message": error.get("msg", ""),
        }

        ctx = error.get("ctx")
        if ctx:
            error_entry["ctx"] = {key: str(value) for key, value in ctx.items()}

        errors_list.append(error_entry)

    return errors_list


def raise_validation_error(exc: PydanticValidationError) -> NoReturn:
    errors = format_pydantic_errors(exc)
    fields = sorted({entry["field"] for entry in errors})
    message = f"Invalid or missing fields: {', '.join(fields)}" if fields else None
    raise ValidationError(message, errors=errors) from exc


__all__ = [
    "format_pydantic_errors",
    "raise_validation_error",
]
