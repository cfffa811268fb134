"""
Null-tolerant decoding helpers.

The Patreon API sends explicit ``null`` for attributes the caller did
not request or that are not populated for a resource's current state.
Fields declared with the ``Null*`` types below turn such a ``null``
(or a missing key) into the type's zero value instead of failing the
whole record. A present value of the wrong type is still an error.
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Annotated, Any, Callable, Type, TypeVar, Union

from pydantic import AwareDatetime, BeforeValidator, StrictBool, StrictInt, StrictStr, TypeAdapter, ValidationError

from ..utils.exceptions import DecodeError
from ..utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# "No value reported" sorts before every real timestamp.
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def unix_epoch() -> datetime:
    """Default factory for timestamp fields."""
    return UNIX_EPOCH


def null_default(factory: Callable[[], Any]) -> BeforeValidator:
    """
    Build a before-validator that replaces ``None`` with ``factory()``.

    Every other value is passed through untouched so the regular
    field validation still rejects malformed input.
    """

    def _coerce(value: Any) -> Any:
        if value is None:
            return factory()
        return value

    return BeforeValidator(_coerce)


# Scalars are strict: "500" is not an int and 1 is not a bool.
NullStr = Annotated[StrictStr, null_default(str)]
NullInt = Annotated[StrictInt, null_default(int)]
NullBool = Annotated[StrictBool, null_default(bool)]
# Timestamps must carry an offset so they compare against UNIX_EPOCH.
NullDatetime = Annotated[AwareDatetime, null_default(unix_epoch)]
NullStrList = Annotated[list[StrictStr], null_default(list)]
NullJSON = Any


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


def decode_json(raw: Union[bytes, str, dict, list], target: Type[T]) -> T:
    """
    Decode raw JSON (or an already-parsed structure) into ``target``.

    Args:
        raw: Request/response body, or a parsed JSON value
        target: A pydantic model or any type pydantic can validate

    Returns:
        The validated value

    Raises:
        DecodeError: If the JSON is malformed or does not match the schema
    """
    adapter = _adapter(target)
    try:
        if isinstance(raw, (bytes, bytearray, str)):
            return adapter.validate_json(raw)
        return adapter.validate_python(raw)
    except ValidationError as e:
        errors = e.errors()
        locations = [".".join(str(part) for part in err["loc"]) or "<root>" for err in errors]
        first = errors[0] if errors else {"msg": str(e)}
        name = _type_name(target)
        logger.debug(
            f"Failed to decode {name}",
            extra={"model": name, "error_count": len(errors), "locations": locations},
        )
        raise DecodeError(
            f"Failed to decode {name}: {first['msg']} at {locations[0] if locations else '<root>'}",
            model=name,
            locations=locations,
        ) from e
