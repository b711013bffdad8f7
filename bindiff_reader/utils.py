import dataclasses
import datetime
import enum
import json
import typing
from typing import Any

from .algorithms import OtherAlgorithm


def encode_value(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.name
    elif isinstance(value, OtherAlgorithm):
        return {"other": value.code}
    elif isinstance(value, datetime.datetime):
        return value.isoformat()
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        return record_to_dict(value)
    elif isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    elif isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    return value


def record_to_dict(record: Any) -> dict[str, Any]:
    return {f.name: encode_value(getattr(record, f.name)) for f in dataclasses.fields(record)}


def dumps(obj: Any) -> str:
    return json.dumps(encode_value(obj), indent=2)


def unserialize(data: Any, objtype: Any) -> Any:
    def _get_union_args(_objtype: Any) -> tuple[Any, ...]:
        if typing.get_origin(_objtype) is typing.Union:
            return typing.get_args(_objtype)
        return ()

    def _unserialize_algorithm(_data: Any, _enumtype: type[enum.Enum]) -> Any:
        if isinstance(_data, dict):
            if set(_data) != {"other"}:
                raise ValueError(f"bad algorithm value {_data!r}")
            return OtherAlgorithm(str(_data["other"]))
        try:
            return _enumtype[_data]
        except KeyError:
            raise ValueError(f"unknown {_enumtype.__name__} `{_data}`") from None

    def _unserialize_internal(_data: Any, _objtype: Any) -> Any:
        union_args = _get_union_args(_objtype)
        if union_args:
            enumtypes = [a for a in union_args if isinstance(a, type) and issubclass(a, enum.Enum)]
            if enumtypes:  # algorithm variant
                return _unserialize_algorithm(_data, enumtypes[0])
            if _data is None and type(None) in union_args:
                return None
            non_none = [a for a in union_args if a is not type(None)]  # noqa: E721
            assert len(non_none) == 1, _objtype
            return _unserialize_internal(_data, non_none[0])
        elif typing.get_origin(_objtype) is list:
            (item_type,) = typing.get_args(_objtype)
            return [_unserialize_internal(v, item_type) for v in _data]
        elif dataclasses.is_dataclass(_objtype):
            if not isinstance(_data, dict):
                raise ValueError(f"expected object for {_objtype.__name__}, got {type(_data).__name__}")
            field_types = {f.name: f.type for f in dataclasses.fields(_objtype)}
            fields = {}
            for k, v in _data.items():
                if k not in field_types:
                    continue  # XXX: ignore extra items
                fields[k] = _unserialize_internal(v, field_types[k])
            return _objtype(**fields)
        elif _objtype is datetime.datetime:
            return datetime.datetime.fromisoformat(_data)
        elif _objtype is float:
            return float(_data)
        elif _objtype in (int, str, bool):
            if type(_data) is not _objtype:
                raise ValueError(f"expected {_objtype.__name__}, got {type(_data).__name__}")
            return _data
        return _data

    return _unserialize_internal(data, objtype)


def loads(text: str, objtype: Any) -> Any:
    return unserialize(json.loads(text), objtype)
