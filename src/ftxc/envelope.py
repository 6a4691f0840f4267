"""Response envelope handling.

Every REST response body is wrapped as::

    {"success": true, "result": <T>, "hasMoreData": false}

or, on failure::

    {"success": false, "error": "Not logged in"}
"""

import json
from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from ftxc.errors import ApplicationError, DecodeError
from ftxc.models import loads_exact

T = TypeVar("T")


class ResponseEnvelope(BaseModel, Generic[T]):
    """The ``{success, result}`` wrapper common to all REST responses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    success: bool
    result: T | None = None
    has_more_data: bool | None = None
    error: str | None = None


@lru_cache(maxsize=None)
def _result_adapter(response_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(response_type)


def decode_envelope(raw: str, response_type: Any = Any) -> Any:
    """Unwrap a response body and validate its result.

    Numbers are parsed exactly (see ``loads_exact``). ``result`` must match
    ``response_type``; null is only accepted where the type allows it.

    Args:
        raw: Response body text
        response_type: Type the ``result`` field must validate as

    Returns:
        The validated result

    Raises:
        DecodeError: If the body is not JSON or does not match the shape
        ApplicationError: If the envelope reports ``success: false``
    """
    try:
        envelope = ResponseEnvelope[Any].model_validate(loads_exact(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise DecodeError(raw, e) from e

    if not envelope.success:
        raise ApplicationError(envelope)

    if "result" not in envelope.model_fields_set:
        raise DecodeError(raw, ValueError("successful response has no result field"))

    try:
        return _result_adapter(response_type).validate_python(envelope.result)
    except ValidationError as e:
        raise DecodeError(raw, e) from e
