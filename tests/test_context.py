import pytest

from godot_codegen.api_parser import BuiltinClass, Class, ExtensionApi, Singleton
from godot_codegen.context import Context, InheritanceTree
from godot_codegen.rust_types import RustTy, RustTyKind


def _api():
    return ExtensionApi(
        builtin_class_sizes=[],
        builtin_classes=[
            BuiltinClass(name="Vector2", constructors=[], has_destructor=False, operators=[]),
        ],
        classes=[
            Class(name="Object", is_refcounted=False, is_instantiable=True),
            Class(name="Node", is_refcounted=False, is_instantiable=True, inherits="Object"),
            Class(name="Node2D", is_refcounted=False, is_instantiable=True, inherits="Node"),
        ],
        global_enums=[],
        utility_functions=[],
        singletons=[Singleton(name="Input")],
    )


def test_builtins_include_variant():
    ctx = Context.build_from_api(_api())
    assert ctx.is_builtin("Variant")
    assert ctx.is_builtin("Vector2")
    assert not ctx.is_builtin("Node")


def test_singletons():
    ctx = Context.build_from_api(_api())
    assert ctx.is_singleton("Input")
    assert not ctx.is_singleton("Node")


def test_engine_classes_collected():
    ctx = Context.build_from_api(_api())
    assert ctx.engine_classes == {"Object", "Node", "Node2D"}


def test_inheritance_chain_nearest_first():
    ctx = Context.build_from_api(_api())
    assert ctx.inheritance_tree.map_all_bases("Node2D", str) == ["Node", "Object"]
    assert ctx.inheritance_tree.map_all_bases("Object", str) == []


def test_map_all_bases_applies_function():
    tree = InheritanceTree()
    tree.insert("B", "A")
    tree.insert("C", "B")
    assert tree.map_all_bases("C", str.lower) == ["b", "a"]


def test_duplicate_inheritance_rejected():
    tree = InheritanceTree()
    tree.insert("Node", "Object")
    with pytest.raises(ValueError):
        tree.insert("Node", "RefCounted")


def test_rust_type_cache_roundtrip():
    ctx = Context()
    assert ctx.find_rust_type("int") is None
    ty = RustTy(RustTyKind.BUILTIN_IDENT, "i64")
    ctx.insert_rust_type("int", ty)
    assert ctx.find_rust_type("int") is ty


def test_rust_type_cache_no_overwrite():
    ctx = Context()
    ctx.insert_rust_type("int", RustTy(RustTyKind.BUILTIN_IDENT, "i64"))
    with pytest.raises(ValueError):
        ctx.insert_rust_type("int", RustTy(RustTyKind.BUILTIN_IDENT, "i32"))