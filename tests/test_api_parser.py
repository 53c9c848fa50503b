import copy
import json
import subprocess
from unittest import mock

import pytest

from godot_codegen.api_parser import (
    ExtensionApi,
    GlobalEnum,
    Method,
    MethodArg,
    load_extension_api,
    parse_extension_api,
)
from godot_codegen.watch import StopWatch

SAMPLE = {
    "builtin_class_sizes": [
        {"build_configuration": "float_64", "sizes": [{"name": "int", "size": 8}]}
    ],
    "builtin_classes": [
        {
            "name": "Vector2",
            "constructors": [
                {"index": 0},
                {"index": 1, "arguments": [{"name": "from", "type": "Vector2"}]},
            ],
            "has_destructor": False,
            "operators": [
                {"name": "==", "right_type": "Vector2", "return_type": "bool"},
                {"name": "unary-", "return_type": "Vector2"},
            ],
        }
    ],
    "classes": [
        {
            "name": "Node",
            "is_refcounted": False,
            "is_instantiable": True,
            "inherits": "Object",
            "api_type": "core",
            "enums": [
                {
                    "name": "ProcessMode",
                    "is_bitfield": False,
                    "values": [{"name": "PROCESS_MODE_INHERIT", "value": 0}],
                }
            ],
            "methods": [
                {
                    "name": "get_name",
                    "is_const": True,
                    "is_vararg": False,
                    "is_virtual": False,
                    "hash": 2002593661,
                    "return_value": {"type": "StringName"},
                }
            ],
        },
        {"name": "Object", "is_refcounted": False, "is_instantiable": True},
    ],
    "global_enums": [{"name": "Variant.Type", "values": [{"name": "TYPE_NIL", "value": 0}]}],
    "utility_functions": [
        {
            "name": "sin",
            "return_type": "float",
            "category": "math",
            "is_vararg": False,
            "hash": 2140049587,
            "arguments": [{"name": "angle_rad", "type": "float"}],
        }
    ],
    "singletons": [{"name": "Input", "type": "Input"}],
}


def test_parse_sample():
    api = parse_extension_api(json.dumps(SAMPLE))
    assert api.builtin_class_sizes[0].sizes[0].name == "int"
    assert api.builtin_class_sizes[0].sizes[0].size == 8
    vector2 = api.builtin_classes[0]
    assert [c.index for c in vector2.constructors] == [0, 1]
    assert vector2.constructors[0].arguments is None
    assert vector2.constructors[1].arguments == [MethodArg(name="from", type_="Vector2")]
    assert [op.right_type for op in vector2.operators] == ["Vector2", None]
    assert [s.name for s in api.singletons] == ["Input"]


def test_parse_optional_class_fields():
    api = ExtensionApi.from_dict(SAMPLE)
    node, obj = api.classes
    assert node.inherits == "Object"
    assert node.enums[0].values[0].name == "PROCESS_MODE_INHERIT"
    assert node.methods[0].return_value.type_ == "StringName"
    assert node.methods[0].hash == 2002593661
    assert (obj.inherits, obj.enums, obj.methods) == (None, None, None)


def test_utility_function_fields():
    api = ExtensionApi.from_dict(SAMPLE)
    sin = api.utility_functions[0]
    assert (sin.name, sin.return_type, sin.category, sin.is_vararg) == ("sin", "float", "math", False)
    assert sin.arguments[0].type_ == "float"


def test_missing_required_field():
    data = copy.deepcopy(SAMPLE)
    del data["classes"][0]["is_refcounted"]
    with pytest.raises(ValueError, match="is_refcounted"):
        parse_extension_api(json.dumps(data))


def test_wrong_field_type():
    data = copy.deepcopy(SAMPLE)
    data["global_enums"][0]["values"][0]["value"] = "zero"
    with pytest.raises(ValueError):
        parse_extension_api(json.dumps(data))


def test_invalid_json():
    with pytest.raises(ValueError, match="failed to deserialize JSON"):
        parse_extension_api("{not json")


def test_global_enum_bitfield_from_name():
    assert GlobalEnum(name="MethodFlags", values=[]).is_bitfield is True
    assert GlobalEnum(name="Variant.Type", values=[]).is_bitfield is False


def test_map_args():
    arg = MethodArg(name="x", type_="int")
    without = Method(name="m", is_const=False, is_vararg=False, is_virtual=False)
    with_args = Method(name="m", is_const=False, is_vararg=False, is_virtual=False, arguments=[arg])
    assert without.map_args(len) == 0
    assert with_args.map_args(list) == [arg]


def test_load_extension_api(monkeypatch, tmp_path):
    version = "4.0.alpha.custom_build.faddbcfc0"
    (tmp_path / "extension_api.json").write_text(json.dumps(SAMPLE), encoding="utf-8")
    (tmp_path / "godot_version.txt").write_text(version, encoding="utf-8")
    monkeypatch.setenv("GODOT4_BIN", "godot")

    def run(args, **kwargs):
        return subprocess.CompletedProcess(args, 0, stdout=version.encode(), stderr=b"")

    watch = StopWatch.start()
    with mock.patch("subprocess.run", side_effect=run):
        api, build_config = load_extension_api(watch, tmp_path)

    assert build_config == "float_64"
    assert [c.name for c in api.classes] == ["Node", "Object"]
    assert watch.metrics[-1].name == "deserialize_json"