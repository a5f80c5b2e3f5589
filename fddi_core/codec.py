"""
JSON codec for record trees.

Encoding is deterministic: keys are sorted and absent optional fields are
written as ``null``, so equal records always produce identical text.
"""

from __future__ import annotations

import json
from typing import TypeVar, cast

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError
from .schemas import BaseSchema, Program, missing_names


TRecord = TypeVar("TRecord", bound=BaseSchema)


def _describe_validation_error(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(problems)


def encode(record: BaseSchema, indent: int | None = None) -> str:
    """Render a record tree as JSON text.

    Args:
        record: Root of the tree to encode
        indent: Optional indentation for human-readable output

    Returns:
        JSON text with sorted keys

    Raises:
        EncodeError: If a required name is empty or an extension value has
            no JSON representation
    """
    missing = missing_names(record)
    if missing:
        raise EncodeError(f"Required name is empty at: {', '.join(missing)}")

    try:
        payload = record.model_dump(mode="json", warnings=False)
    except (PydanticSerializationError, TypeError, ValueError) as exc:
        raise EncodeError(f"Cannot encode {type(record).__name__}: {exc}") from exc

    try:
        return json.dumps(payload, sort_keys=True, ensure_ascii=False, allow_nan=False, indent=indent)
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"Cannot encode {type(record).__name__}: {exc}") from exc


def decode(
    text: str | bytes,
    record_type: type[TRecord] = Program,  # type: ignore[assignment]
) -> TRecord:
    """Parse JSON text into a record of ``record_type``.

    Raises:
        DecodeError: If the text is not valid JSON, is not an object, or does
            not satisfy the record schema
    """
    try:
        payload = cast(object, json.loads(text))
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Malformed JSON for {record_type.__name__}: {exc}") from exc

    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected a JSON object for {record_type.__name__}, got {type(payload).__name__}"
        )

    try:
        return record_type.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(
            f"Invalid {record_type.__name__}: {_describe_validation_error(exc)}"
        ) from exc
