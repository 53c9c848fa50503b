from godot_codegen.rust_types import RustTy, RustTyKind


def test_engine_class_returns_option():
    ty = RustTy(RustTyKind.ENGINE_CLASS, "Gd<Node>")
    assert ty.return_decl() == "-> Option<Gd<Node>>"


def test_builtin_returns_plain_type():
    ty = RustTy(RustTyKind.BUILTIN_IDENT, "Vector2")
    assert ty.return_decl() == "-> Vector2"


def test_non_class_kinds_never_wrap_in_option():
    for kind in RustTyKind:
        if kind is RustTyKind.ENGINE_CLASS:
            continue
        ty = RustTy(kind, "Anything")
        assert ty.return_decl() == "-> " + ty.tokens
        assert "Option" not in ty.return_decl()


def test_str_is_tokens():
    ty = RustTy(RustTyKind.ENGINE_ENUM, "global::Error", surrounding_class=None)
    assert str(ty) == ty.tokens
    assert f"{ty}" == "global::Error"


def test_equality_includes_metadata():
    a = RustTy(RustTyKind.ENGINE_ARRAY, "TypedArray<Gd<Node>>", elem_class="Node")
    b = RustTy(RustTyKind.ENGINE_ARRAY, "TypedArray<Gd<Node>>", elem_class="Node")
    c = RustTy(RustTyKind.ENGINE_ARRAY, "TypedArray<Gd<Node>>", elem_class="Object")
    assert a == b
    assert (a == c) is False