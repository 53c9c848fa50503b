"""Naming helpers, enum definitions and the mapping of Godot types to Rust types."""

from __future__ import annotations

import string

from .api_parser import ClassEnum, GlobalEnum
from .context import Context
from .rust_types import RustTy, RustTyKind

_RUST_KEYWORDS = frozenset(
    {
        # Lexer
        "as", "break", "const", "continue", "crate", "else", "enum", "extern", "false", "fn",
        "for", "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut", "pub", "ref",
        "return", "self", "Self", "static", "struct", "super", "trait", "true", "type",
        "unsafe", "use", "where", "while",
        # Lexer 2018+
        "async", "await", "dyn",
        # Reserved
        "abstract", "become", "box", "do", "final", "macro", "override", "priv", "typeof",
        "unsized", "virtual", "yield",
        # Reserved 2018+
        "try",
    }
)

_HARDCODED_RUST_TYPES = {
    "int": "i64",
    "float": "f64",
    "String": "GodotString",
    "enum::Variant.Type": "VariantType",
    "enum::Variant.Operator": "VariantOperator",
    "enum::Vector3.Axis": "Vector3Axis",
}

_UPPER_OR_NUM = frozenset(string.ascii_uppercase + string.digits)
_LOWER = frozenset(string.ascii_lowercase)

_ESCAPES = {"\0": "\\0", "\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def make_enum_definition(enum: ClassEnum | GlobalEnum) -> str:
    """Rust code for an engine enum: a newtype over its ordinal with associated constants."""
    name = _make_enum_name(enum.name)

    enumerators = "".join(
        f"    pub const {_make_enumerator_name(value.name, enum.name)}: Self = "
        f"Self {{ ord: {value.value} }};\n"
        for value in enum.values
    )
    unique_ords = sorted({value.value for value in enum.values})
    arms = " | ".join(f"ord @ {ord_}" for ord_ in unique_ords)

    code = (
        "#[repr(transparent)]\n"
        "#[derive(Copy, Clone, Eq, PartialEq, Debug, Hash)]\n"
        f"pub struct {name} {{\n"
        "    ord: i32\n"
        "}\n"
        f"impl {name} {{\n"
        f"{enumerators}"
        "}\n"
        f"impl crate::obj::EngineEnum for {name} {{\n"
        "    fn try_from_ord(ord: i32) -> Option<Self> {\n"
        "        match ord {\n"
        f"            {arms} => Some(Self {{ ord }}),\n"
        "            _ => None,\n"
        "        }\n"
        "    }\n"
        "    fn ord(self) -> i32 {\n"
        "        self.ord\n"
        "    }\n"
        "}\n"
        f"impl sys::GodotFfi for {name} {{\n"
        "    sys::ffi_methods! { type sys::GDNativeTypePtr = *mut Self; .. }\n"
        "}\n"
    )

    if enum.is_bitfield:
        code += (
            f"impl std::ops::BitOr for {name} {{\n"
            "    type Output = Self;\n"
            "\n"
            "    fn bitor(self, rhs: Self) -> Self::Output {\n"
            "        Self { ord: self.ord | rhs.ord }\n"
            "    }\n"
            "}\n"
        )
    return code


def _make_enum_name(enum_name: str) -> str:
    return enum_name


def _make_enumerator_name(enumerator_name: str, _enum_name: str) -> str:
    return enumerator_name


def _is_upper_or_num(ch: str | None) -> bool:
    return ch is not None and ch in _UPPER_OR_NUM


def _is_lower_or(ch: str | None, default: bool) -> bool:
    return default if ch is None else ch in _LOWER


def _ascii_lower(ch: str) -> str:
    return ch.lower() if ch in _UPPER_OR_NUM else ch


def to_module_name(class_name: str) -> str:
    """Convert a PascalCase class name into a snake_case module name."""
    chars = [ch for ch in class_name if ch != "_"]
    followers: list[str | None] = [*chars[1:], None]

    two_prev: str | None = None
    one_prev: str | None = None
    parts = []
    for current, nxt in zip(chars, followers):
        caps_to_lowercase = (
            _is_upper_or_num(one_prev)
            and _is_upper_or_num(current)
            and _is_lower_or(nxt, False)
            and not _is_lower_or(two_prev, True)
        )
        # Node2D => node_2d (numbers are considered uppercase)
        lower_to_uppercase = _is_lower_or(one_prev, False) and _is_upper_or_num(current)

        if caps_to_lowercase or lower_to_uppercase:
            parts.append("_")
        parts.append(_ascii_lower(current))
        two_prev, one_prev = one_prev, current

    result = "".join(parts)

    # Fix-ups for names the rules above get wrong
    result = result.replace("_vec_3", "_vec3_", 1)
    result = result.replace("gd_native", "gdnative", 1)
    result = result.replace("gd_script", "gdscript", 1)

    # Avoid clobbering `gdnative` during a glob import
    if result == "gdnative":
        return "gdnative_"
    return result


def safe_ident(s: str) -> str:
    """An identifier that does not collide with a Rust keyword."""
    return f"{s}_" if s in _RUST_KEYWORDS else s


def strlit(s: str) -> str:
    """A Rust string literal holding ``s``."""
    body = "".join(
        _ESCAPES.get(ch) or (ch if ch.isprintable() else f"\\u{{{ord(ch):x}}}") for ch in s
    )
    return f'"{body}"'


def c_str(s: str) -> str:
    """A Rust expression yielding a NUL-terminated C string pointer to ``s``."""
    return f"{strlit(s + chr(0))}.as_ptr() as *const i8"


def to_rust_type(ty: str, ctx: Context) -> RustTy:
    """Map a type from the Godot JSON to its Rust type, caching the result in ``ctx``."""
    cached = ctx.find_rust_type(ty)
    if cached is not None:
        return cached
    rust_ty = _to_rust_type_uncached(ty, ctx)
    ctx.insert_rust_type(ty, rust_ty)
    return rust_ty


def _strip_prefix(s: str, prefix: str) -> str | None:
    return s[len(prefix):] if s.startswith(prefix) else None


def _to_rust_type_uncached(ty: str, ctx: Context) -> RustTy:
    hardcoded = _HARDCODED_RUST_TYPES.get(ty)
    if hardcoded is not None:
        return RustTy(RustTyKind.BUILTIN_IDENT, hardcoded)

    qualified_enum = _strip_prefix(ty, "enum::")
    if qualified_enum is None:
        qualified_enum = _strip_prefix(ty, "bitfield::")

    if qualified_enum is not None:
        class_, dot, enum_ = qualified_enum.partition(".")
        if dot:
            module = to_module_name(class_)
            return RustTy(
                RustTyKind.ENGINE_ENUM,
                f"{module}::{_make_enum_name(enum_)}",
                surrounding_class=class_,
            )
        return RustTy(RustTyKind.ENGINE_ENUM, f"global::{_make_enum_name(qualified_enum)}")

    packed_arr_ty = _strip_prefix(ty, "Packed")
    elem_ty = _strip_prefix(ty, "typedarray::")
    if packed_arr_ty is not None:
        # PackedScene is not an array
        if packed_arr_ty.endswith("Array"):
            return RustTy(RustTyKind.BUILTIN_IDENT, packed_arr_ty)
    elif elem_ty is not None:
        packed_elem = _strip_prefix(elem_ty, "Packed")
        if packed_elem is not None:
            return RustTy(RustTyKind.BUILTIN_IDENT, packed_elem)

        rust_elem_ty = to_rust_type(elem_ty, ctx)
        tokens = f"TypedArray<{rust_elem_ty}>"
        if ctx.is_builtin(elem_ty):
            return RustTy(RustTyKind.BUILTIN_ARRAY, tokens)
        return RustTy(RustTyKind.ENGINE_ARRAY, tokens, elem_class=elem_ty)

    if ctx.is_builtin(ty):
        return RustTy(RustTyKind.BUILTIN_IDENT, ty)
    return RustTy(RustTyKind.ENGINE_CLASS, f"Gd<{ty}>")