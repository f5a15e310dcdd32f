"""Structural decoding of JSON values into typed records.

`decode_as` walks a parsed JSON value alongside a target shape (a dataclass,
`list[...]`, `dict[...]`, a scalar type or `Any`) and builds the typed value.
Unknown object keys are ignored, missing required keys and type mismatches
raise `SerialisationError` with the path of the offending value.
"""

import dataclasses
import types
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin, get_type_hints, overload

from .errors import SerialisationError

__all__ = ["U32", "decode_as"]

T = TypeVar("T")

ROOT_PATH = "payload"

U32_MAX = 0xFFFFFFFF

# Unsigned 32 bits integer, as sent by sway for ids and sizes
U32 = Annotated[int, "u32"]

_SCALARS: dict[type, str] = {
    bool: "boolean",
    int: "integer",
    float: "number",
    str: "string",
}


def _type_name(value: Any) -> str:  # noqa: ANN401
    if value is None:
        return "null"
    for typ, name in _SCALARS.items():
        if isinstance(value, typ):
            return name
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _decode_scalar(value: Any, shape: type, path: str) -> Any:  # noqa: ANN401
    if shape is float:
        # JSON has a single number type: integers are valid floats
        if isinstance(value, int | float) and not isinstance(value, bool):
            return float(value)
    elif shape is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif isinstance(value, shape):
        return value
    msg = f"expected {_SCALARS[shape]}, got {_type_name(value)}"
    raise SerialisationError(msg, path)


def _decode_dataclass(value: Any, shape: type, path: str) -> Any:  # noqa: ANN401
    if not isinstance(value, dict):
        msg = f"expected object, got {_type_name(value)}"
        raise SerialisationError(msg, path)
    hints = get_type_hints(shape, include_extras=True)
    kwargs: dict[str, Any] = {}
    for fld in dataclasses.fields(shape):
        if not fld.init:
            continue
        if fld.name not in value:
            if fld.default is dataclasses.MISSING and fld.default_factory is dataclasses.MISSING:
                msg = f"missing field `{fld.name}`"
                raise SerialisationError(msg, path)
            continue
        kwargs[fld.name] = _decode(value[fld.name], hints[fld.name], f"{path}.{fld.name}")
    return shape(**kwargs)


def _decode(value: Any, shape: Any, path: str) -> Any:  # noqa: ANN401, PLR0911
    if shape is Any:
        return value
    if shape is None or shape is type(None):
        if value is None:
            return None
        msg = f"expected null, got {_type_name(value)}"
        raise SerialisationError(msg, path)

    origin = get_origin(shape)
    if origin is Annotated:
        base, *extras = get_args(shape)
        result = _decode(value, base, path)
        if "u32" in extras and not 0 <= result <= U32_MAX:
            msg = f"expected unsigned 32 bits integer, got {result}"
            raise SerialisationError(msg, path)
        return result
    if origin is list:
        if not isinstance(value, list):
            msg = f"expected array, got {_type_name(value)}"
            raise SerialisationError(msg, path)
        (item_shape,) = get_args(shape) or (Any,)
        return [_decode(item, item_shape, f"{path}[{idx}]") for idx, item in enumerate(value)]
    if origin is dict:
        if not isinstance(value, dict):
            msg = f"expected object, got {_type_name(value)}"
            raise SerialisationError(msg, path)
        _, value_shape = get_args(shape) or (str, Any)
        return {key: _decode(item, value_shape, f"{path}.{key}") for key, item in value.items()}
    if origin is Union or origin is types.UnionType:
        errors = []
        for option in get_args(shape):
            try:
                return _decode(value, option, path)
            except SerialisationError as e:  # noqa: PERF203
                errors.append(str(e))
        raise SerialisationError(" / ".join(errors), path)

    if dataclasses.is_dataclass(shape) and isinstance(shape, type):
        return _decode_dataclass(value, shape, path)
    if shape in _SCALARS:
        return _decode_scalar(value, shape, path)
    if shape is list:
        return _decode(value, list[Any], path)
    if shape is dict:
        return _decode(value, dict[str, Any], path)
    msg = f"unsupported target type {shape!r}"
    raise TypeError(msg)


@overload
def decode_as(value: Any, shape: type[T]) -> T: ...  # noqa: ANN401


@overload
def decode_as(value: Any, shape: Any) -> Any: ...  # noqa: ANN401


def decode_as(value: Any, shape: Any) -> Any:  # noqa: ANN401
    """Convert a parsed JSON value into `shape`.

    Args:
        value: result of `json.loads`
        shape: target type, eg: `list[Output]`

    Returns:
        The typed value

    Raises:
        SerialisationError: on missing fields or mismatching types
        TypeError: if `shape` is not a supported target type
    """
    return _decode(value, shape, ROOT_PATH)
