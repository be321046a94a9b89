from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from cowork_booking.errors import MalformedResponseError

M = TypeVar("M", bound=BaseModel)


def parse_model(model: Type[M], body: Any) -> M:
    """
    Validate one backend record.

    Raises:
        MalformedResponseError: If the body does not match `model`, so callers
            handle it like any other failed call.
    """
    try:
        return model.model_validate(body)
    except ValidationError as err:
        raise MalformedResponseError(
            f"Invalid {model.__name__} payload ({err.error_count()} errors)"
        ) from err


def parse_list(model: Type[M], body: Any) -> List[M]:
    """Validate a JSON array from the backend; a null body is an empty list."""
    if body is None:
        return []
    if not isinstance(body, list):
        raise MalformedResponseError(f"Expected a list of {model.__name__}, got {type(body).__name__}")
    return [parse_model(model, item) for item in body]


def parse_saved(model: Type[M], body: Any, sent: M) -> M:
    # Updates answer with the saved record or with an empty body
    return parse_model(model, body) if body is not None else sent
