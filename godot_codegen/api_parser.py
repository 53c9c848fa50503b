"""Models of the Godot extension_api.json file and loading of it."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from .godot_exe import load_extension_api_json
from .watch import StopWatch

R = TypeVar("R")
T = TypeVar("T")

BUILD_CONFIG = "float_64"

_INT_RANGES = {
    "i32": (-(2**31), 2**31 - 1),
    "i64": (-(2**63), 2**63 - 1),
    "usize": (0, 2**64 - 1),
}


def _get(data: Any, key: str, kind: str, *, optional: bool = False) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, found {type(data).__name__}")
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise ValueError(f"missing field '{key}'")

    if kind == "str":
        valid = isinstance(value, str)
    elif kind == "bool":
        valid = isinstance(value, bool)
    else:
        low, high = _INT_RANGES[kind]
        valid = isinstance(value, int) and not isinstance(value, bool) and low <= value <= high
    if not valid:
        raise ValueError(f"field '{key}': invalid {kind} value {value!r}")
    return value


def _get_list(data: Any, key: str, item_type: Any, *, optional: bool = False) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, found {type(data).__name__}")
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise ValueError(f"missing field '{key}'")
    if not isinstance(value, list):
        raise ValueError(f"field '{key}': expected a list, found {type(value).__name__}")
    return [item_type._from_dict(item) for item in value]


@dataclass
class ClassSize:
    name: str
    size: int

    @classmethod
    def _from_dict(cls, data: Any) -> ClassSize:
        return cls(name=_get(data, "name", "str"), size=_get(data, "size", "usize"))


@dataclass
class ClassSizes:
    build_configuration: str
    sizes: list[ClassSize]

    @classmethod
    def _from_dict(cls, data: Any) -> ClassSizes:
        return cls(
            build_configuration=_get(data, "build_configuration", "str"),
            sizes=_get_list(data, "sizes", ClassSize),
        )


@dataclass
class MethodArg:
    name: str
    type_: str

    @classmethod
    def _from_dict(cls, data: Any) -> MethodArg:
        return cls(name=_get(data, "name", "str"), type_=_get(data, "type", "str"))


@dataclass
class MethodReturn:
    type_: str

    @classmethod
    def _from_dict(cls, data: Any) -> MethodReturn:
        return cls(type_=_get(data, "type", "str"))


@dataclass
class Constructor:
    index: int
    arguments: list[MethodArg] | None = None

    @classmethod
    def _from_dict(cls, data: Any) -> Constructor:
        return cls(
            index=_get(data, "index", "usize"),
            arguments=_get_list(data, "arguments", MethodArg, optional=True),
        )


@dataclass
class Operator:
    name: str
    return_type: str
    right_type: str | None = None
    """None for unary operators."""

    @classmethod
    def _from_dict(cls, data: Any) -> Operator:
        return cls(
            name=_get(data, "name", "str"),
            return_type=_get(data, "return_type", "str"),
            right_type=_get(data, "right_type", "str", optional=True),
        )


@dataclass
class BuiltinClass:
    name: str
    constructors: list[Constructor]
    has_destructor: bool
    operators: list[Operator]

    @classmethod
    def _from_dict(cls, data: Any) -> BuiltinClass:
        return cls(
            name=_get(data, "name", "str"),
            constructors=_get_list(data, "constructors", Constructor),
            has_destructor=_get(data, "has_destructor", "bool"),
            operators=_get_list(data, "operators", Operator),
        )


@dataclass
class Constant:
    name: str
    value: int

    @classmethod
    def _from_dict(cls, data: Any) -> Constant:
        return cls(name=_get(data, "name", "str"), value=_get(data, "value", "i32"))


@dataclass
class ClassEnum:
    name: str
    is_bitfield: bool
    values: list[Constant]

    @classmethod
    def _from_dict(cls, data: Any) -> ClassEnum:
        return cls(
            name=_get(data, "name", "str"),
            is_bitfield=_get(data, "is_bitfield", "bool"),
            values=_get_list(data, "values", Constant),
        )


@dataclass
class GlobalEnum:
    name: str
    values: list[Constant]

    @property
    def is_bitfield(self) -> bool:
        """Whether the enum is a set of flags; the JSON does not export this for globals."""
        return "Flag" in self.name

    @classmethod
    def _from_dict(cls, data: Any) -> GlobalEnum:
        return cls(name=_get(data, "name", "str"), values=_get_list(data, "values", Constant))


@dataclass
class Method:
    name: str
    is_const: bool
    is_vararg: bool
    is_virtual: bool
    hash: int | None = None
    arguments: list[MethodArg] | None = None
    return_value: MethodReturn | None = None

    def map_args(self, f: Callable[[list[MethodArg]], R]) -> R:
        """Apply ``f`` to the argument list, an empty list if there is none."""
        return f(self.arguments if self.arguments is not None else [])

    @classmethod
    def _from_dict(cls, data: Any) -> Method:
        return_value = data.get("return_value") if isinstance(data, dict) else None
        return cls(
            name=_get(data, "name", "str"),
            is_const=_get(data, "is_const", "bool"),
            is_vararg=_get(data, "is_vararg", "bool"),
            is_virtual=_get(data, "is_virtual", "bool"),
            hash=_get(data, "hash", "i64", optional=True),
            arguments=_get_list(data, "arguments", MethodArg, optional=True),
            return_value=MethodReturn._from_dict(return_value) if return_value is not None else None,
        )


@dataclass
class Class:
    name: str
    is_refcounted: bool
    is_instantiable: bool
    inherits: str | None = None
    enums: list[ClassEnum] | None = None
    methods: list[Method] | None = None

    @classmethod
    def _from_dict(cls, data: Any) -> Class:
        return cls(
            name=_get(data, "name", "str"),
            is_refcounted=_get(data, "is_refcounted", "bool"),
            is_instantiable=_get(data, "is_instantiable", "bool"),
            inherits=_get(data, "inherits", "str", optional=True),
            enums=_get_list(data, "enums", ClassEnum, optional=True),
            methods=_get_list(data, "methods", Method, optional=True),
        )


@dataclass
class Singleton:
    name: str

    @classmethod
    def _from_dict(cls, data: Any) -> Singleton:
        return cls(name=_get(data, "name", "str"))


@dataclass
class Property:
    type_: str
    name: str
    setter: str
    getter: str
    index: int
    """Can be -1."""

    @classmethod
    def _from_dict(cls, data: Any) -> Property:
        return cls(
            type_=_get(data, "type", "str"),
            name=_get(data, "name", "str"),
            setter=_get(data, "setter", "str"),
            getter=_get(data, "getter", "str"),
            index=_get(data, "index", "i32"),
        )


@dataclass
class Signal:
    name: str
    arguments: list[MethodArg] | None = None

    @classmethod
    def _from_dict(cls, data: Any) -> Signal:
        return cls(
            name=_get(data, "name", "str"),
            arguments=_get_list(data, "arguments", MethodArg, optional=True),
        )


@dataclass
class UtilityFunction:
    name: str
    category: str
    is_vararg: bool
    hash: int
    return_type: str | None = None
    arguments: list[MethodArg] | None = None

    @classmethod
    def _from_dict(cls, data: Any) -> UtilityFunction:
        return cls(
            name=_get(data, "name", "str"),
            category=_get(data, "category", "str"),
            is_vararg=_get(data, "is_vararg", "bool"),
            hash=_get(data, "hash", "i64"),
            return_type=_get(data, "return_type", "str", optional=True),
            arguments=_get_list(data, "arguments", MethodArg, optional=True),
        )


@dataclass
class ExtensionApi:
    builtin_class_sizes: list[ClassSizes]
    builtin_classes: list[BuiltinClass]
    classes: list[Class]
    global_enums: list[GlobalEnum]
    utility_functions: list[UtilityFunction]
    singletons: list[Singleton]

    @classmethod
    def from_dict(cls, data: Any) -> ExtensionApi:
        """Build the model from decoded JSON; raise ValueError on missing or mistyped fields."""
        return cls(
            builtin_class_sizes=_get_list(data, "builtin_class_sizes", ClassSizes),
            builtin_classes=_get_list(data, "builtin_classes", BuiltinClass),
            classes=_get_list(data, "classes", Class),
            global_enums=_get_list(data, "global_enums", GlobalEnum),
            utility_functions=_get_list(data, "utility_functions", UtilityFunction),
            singletons=_get_list(data, "singletons", Singleton),
        )


def parse_extension_api(json_text: str) -> ExtensionApi:
    """Parse the text of extension_api.json."""
    try:
        return ExtensionApi.from_dict(json.loads(json_text))
    except ValueError as e:
        raise ValueError(f"failed to deserialize JSON: {e}") from e


def load_extension_api(
    watch: StopWatch, input_dir: str | os.PathLike[str]
) -> tuple[ExtensionApi, str]:
    """Load the extension API, returning it with the build configuration in use."""
    json_text = load_extension_api_json(watch, input_dir)
    api = parse_extension_api(json_text)
    watch.record("deserialize_json")
    return api, BUILD_CONFIG