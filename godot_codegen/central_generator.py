"""Generation of the central files: opaque types, the global method table and variant enums."""

from __future__ import annotations

import os
import textwrap
from dataclasses import dataclass, field
from pathlib import Path

from .api_parser import BuiltinClass, Constant, Constructor, ExtensionApi, Operator
from .context import Context
from .util import make_enum_definition, strlit, to_rust_type

_TRIVIAL_TYPES = frozenset({"bool", "int", "float"})
_EXPLICIT_GLOBAL_ENUMS = frozenset({"Variant.Type", "Variant.Operator"})


@dataclass
class CentralItems:
    """Code fragments collected from the API, shared by the sys and core output."""

    opaque_types: list[str] = field(default_factory=list)
    variant_ty_enumerators_pascal: list[str] = field(default_factory=list)
    variant_ty_enumerators_rust: list[str] = field(default_factory=list)
    variant_ty_enumerators_ord: list[str] = field(default_factory=list)
    variant_op_enumerators_pascal: list[str] = field(default_factory=list)
    variant_op_enumerators_ord: list[str] = field(default_factory=list)
    variant_fn_decls: list[str] = field(default_factory=list)
    variant_fn_inits: list[str] = field(default_factory=list)
    global_enum_defs: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TypeNames:
    """The names of one builtin type in its various spellings."""

    pascal_case: str
    """"int" or "PackedVector2Array"."""
    snake_case: str
    """"packed_vector2_array"."""
    sys_variant_type: str
    """"GDNATIVE_VARIANT_TYPE_PACKED_VECTOR2_ARRAY"."""


@dataclass
class BuiltinTypeInfo:
    """What is known about a builtin type before its methods are generated."""

    value: int
    type_names: TypeNames
    has_destructor: bool
    """Whether Godot provides a destructor for this type."""
    constructors: list[Constructor] | None = None
    operators: list[Operator] | None = None


def generate_central_files(
    api: ExtensionApi,
    ctx: Context,
    build_config: str,
    sys_gen_path: str | os.PathLike[str],
    core_gen_path: str | os.PathLike[str],
) -> list[Path]:
    """Write central.rs into both output directories and return the written paths."""
    central_items = make_central_items(api, build_config, ctx)

    sys_code = make_sys_code(central_items)
    core_code = make_core_code(central_items)

    return [
        _write_file(Path(sys_gen_path), sys_code),
        _write_file(Path(core_gen_path), core_code),
    ]


def _write_file(gen_path: Path, code: str) -> Path:
    gen_path.mkdir(parents=True, exist_ok=True)
    out_path = gen_path / "central.rs"
    try:
        out_path.write_text(code, encoding="utf-8")
    except OSError as e:
        raise RuntimeError(f"failed to write code file to {out_path};\n\t{e}") from e
    return out_path


def _block(items: list[str], prefix: str) -> str:
    return textwrap.indent("".join(items), prefix)


def make_sys_code(central_items: CentralItems) -> str:
    """The central file of the low-level crate."""
    items = central_items
    ty_variants = "".join(
        f"    {pascal} = {ord_},\n"
        for pascal, ord_ in zip(items.variant_ty_enumerators_pascal, items.variant_ty_enumerators_ord)
    )
    ty_matches = "".join(
        f"            {ord_} => Self::{pascal},\n"
        for pascal, ord_ in zip(items.variant_ty_enumerators_pascal, items.variant_ty_enumerators_ord)
    )
    op_variants = "".join(
        f"    {pascal} = {ord_},\n"
        for pascal, ord_ in zip(items.variant_op_enumerators_pascal, items.variant_op_enumerators_ord)
    )
    op_matches = "".join(
        f"            {ord_} => Self::{pascal},\n"
        for pascal, ord_ in zip(items.variant_op_enumerators_pascal, items.variant_op_enumerators_ord)
    )

    return (
        "use crate::{GDNativeVariantPtr, GDNativeTypePtr, GodotFfi, ffi_methods};\n"
        "\n"
        "pub mod types {\n"
        f"{_block(items.opaque_types, '    ')}"
        "}\n"
        "\n"
        "pub struct GlobalMethodTable {\n"
        f"{_block(items.variant_fn_decls, '    ')}"
        "}\n"
        "\n"
        "impl GlobalMethodTable {\n"
        "    pub(crate) unsafe fn new(interface: &crate::GDNativeInterface) -> Self {\n"
        "        Self {\n"
        f"{_block(items.variant_fn_inits, '            ')}"
        "        }\n"
        "    }\n"
        "}\n"
        "\n"
        "#[derive(Copy, Clone, Eq, PartialEq, Ord, PartialOrd, Hash, Debug)]\n"
        "#[repr(i32)]\n"
        "pub enum VariantType {\n"
        "    Nil = 0,\n"
        f"{ty_variants}"
        "}\n"
        "\n"
        "impl VariantType {\n"
        "    #[doc(hidden)]\n"
        "    pub fn from_ord(enumerator: crate::GDNativeVariantType) -> Self {\n"
        "        match enumerator {\n"
        "            0 => Self::Nil,\n"
        f"{ty_matches}"
        '            _ => unreachable!("invalid variant type {}", enumerator)\n'
        "        }\n"
        "    }\n"
        "\n"
        "    #[doc(hidden)]\n"
        "    pub fn to_ord(self) -> crate::GDNativeVariantType {\n"
        "        self as _\n"
        "    }\n"
        "}\n"
        "\n"
        "impl GodotFfi for VariantType {\n"
        "    ffi_methods! { type GDNativeTypePtr = *mut Self; .. }\n"
        "}\n"
        "\n"
        "#[derive(Copy, Clone, Eq, PartialEq, Ord, PartialOrd, Hash, Debug)]\n"
        "#[repr(i32)]\n"
        "pub enum VariantOperator {\n"
        f"{op_variants}"
        "}\n"
        "\n"
        "impl VariantOperator {\n"
        "    #[doc(hidden)]\n"
        "    pub fn from_ord(enumerator: crate::GDNativeVariantOperator) -> Self {\n"
        "        match enumerator {\n"
        f"{op_matches}"
        '            _ => unreachable!("invalid variant operator {}", enumerator)\n'
        "        }\n"
        "    }\n"
        "\n"
        "    #[doc(hidden)]\n"
        "    pub fn to_ord(self) -> crate::GDNativeVariantOperator {\n"
        "        self as _\n"
        "    }\n"
        "}\n"
        "\n"
        "impl GodotFfi for VariantOperator {\n"
        "    ffi_methods! { type GDNativeTypePtr = *mut Self; .. }\n"
        "}\n"
    )


def make_core_code(central_items: CentralItems) -> str:
    """The central file of the core crate."""
    items = central_items
    pairs = list(zip(items.variant_ty_enumerators_pascal, items.variant_ty_enumerators_rust))
    dispatch_variants = "".join(f"    {pascal}({rust}),\n" for pascal, rust in pairs)
    dispatch_matches = "".join(
        f"            VariantType::{pascal}\n"
        f"                => Self::{pascal}(variant.to::<{rust}>()),\n"
        for pascal, rust in pairs
    )

    return (
        "use crate::builtin::*;\n"
        "use crate::engine::Object;\n"
        "use crate::obj::Gd;\n"
        "\n"
        "#[allow(dead_code)]\n"
        "pub enum VariantDispatch {\n"
        "    Nil,\n"
        f"{dispatch_variants}"
        "}\n"
        "\n"
        "#[cfg(FALSE)]\n"
        "impl FromVariant for VariantDispatch {\n"
        "    fn try_from_variant(variant: &Variant) -> Result<Self, VariantConversionError> {\n"
        "        let dispatch = match variant.get_type() {\n"
        "            VariantType::Nil => Self::Nil,\n"
        f"{dispatch_matches}"
        "        };\n"
        "\n"
        "        Ok(dispatch)\n"
        "    }\n"
        "}\n"
        "\n"
        "pub mod global {\n"
        "    use crate::sys;\n"
        f"{_block(items.global_enum_defs, '    ')}"
        "}\n"
    )


def make_central_items(api: ExtensionApi, build_config: str, ctx: Context) -> CentralItems:
    """Collect all central code fragments from the API."""
    result = CentralItems()

    for class_sizes in api.builtin_class_sizes:
        if class_sizes.build_configuration == build_config:
            result.opaque_types.extend(
                make_opaque_type(size.name, size.size) for size in class_sizes.sizes
            )
            break

    class_map = _collect_builtin_classes(api)
    builtin_types_map = _collect_builtin_types(api, class_map)
    variant_operators = _collect_variant_operators(api)

    # NIL is not part of this iteration; it is added by hand
    for ty in sorted(builtin_types_map.values(), key=lambda info: info.value):
        decls, inits = _make_variant_fns(
            ty.type_names, ty.has_destructor, ty.constructors, ty.operators, builtin_types_map
        )
        pascal_name, rust_ty, ord_ = _make_enumerator(ty.type_names, ty.value, ctx)

        result.variant_ty_enumerators_pascal.append(pascal_name)
        result.variant_ty_enumerators_rust.append(rust_ty)
        result.variant_ty_enumerators_ord.append(ord_)
        result.variant_fn_decls.append(decls)
        result.variant_fn_inits.append(inits)

    for op in variant_operators:
        if not op.name.startswith("OP_"):
            raise ValueError("expected `OP_` prefix for variant operators")
        name = op.name[len("OP_"):]
        if name == "MAX":
            continue
        result.variant_op_enumerators_pascal.append(shout_to_pascal(name))
        result.variant_op_enumerators_ord.append(str(op.value))

    result.global_enum_defs.extend(
        make_enum_definition(enum)
        for enum in api.global_enums
        if enum.name not in _EXPLICIT_GLOBAL_ENUMS
    )
    return result


def _collect_builtin_classes(api: ExtensionApi) -> dict[str, BuiltinClass]:
    return {class_.name.lower(): class_ for class_ in api.builtin_classes}


def _find_global_enum(api: ExtensionApi, name: str, what: str) -> list[Constant]:
    for enum in api.global_enums:
        if enum.name == name:
            return enum.values
    raise ValueError(f"missing enum for {what} in JSON")


def _collect_builtin_types(
    api: ExtensionApi, class_map: dict[str, BuiltinClass]
) -> dict[str, BuiltinTypeInfo]:
    builtin_types_map: dict[str, BuiltinTypeInfo] = {}
    for ty in _find_global_enum(api, "Variant.Type", "VariantType"):
        if not ty.name.startswith("TYPE_"):
            raise ValueError(f"enum name begins with 'TYPE_': {ty.name}")
        shout_case = ty.name[len("TYPE_"):]
        if shout_case in ("NIL", "MAX"):
            continue

        # SHOUTY_CASE -> shoutycase, to match class names case-insensitively
        normalized = shout_case.lower().replace("_", "")

        class_ = class_map.get(normalized)
        if class_ is not None:
            info_args = dict(
                has_destructor=class_.has_destructor,
                constructors=class_.constructors,
                operators=class_.operators,
            )
            pascal_case = class_.name
        elif normalized == "object":
            info_args = dict(has_destructor=False, constructors=None, operators=None)
            pascal_case = "Object"
        else:
            raise ValueError(f"no builtin class found for variant type {ty.name}")

        type_names = TypeNames(
            pascal_case=pascal_case,
            snake_case=shout_case.lower(),
            sys_variant_type=f"GDNATIVE_VARIANT_TYPE_{shout_case}",
        )
        builtin_types_map[pascal_case] = BuiltinTypeInfo(
            value=ty.value, type_names=type_names, **info_args
        )
    return builtin_types_map


def _collect_variant_operators(api: ExtensionApi) -> list[Constant]:
    return list(_find_global_enum(api, "Variant.Operator", "VariantOperator"))


def _capitalize_ascii(name: str) -> str:
    first = name[:1]
    if first.isascii():
        first = first.upper()
    return first + name[1:]


def _make_enumerator(type_names: TypeNames, value: int, ctx: Context) -> tuple[str, str, str]:
    pascal_name = _capitalize_ascii(type_names.pascal_case)
    rust_ty = to_rust_type(type_names.pascal_case, ctx)
    return pascal_name, str(rust_ty), str(value)


def make_opaque_type(name: str, size: int) -> str:
    """Type alias for the opaque storage of a builtin type: "int" -> OpaqueInt."""
    if not name:
        raise ValueError("opaque type name must not be empty")
    return f"pub type Opaque{_capitalize_ascii(name)} = crate::opaque::Opaque<{size}usize>;\n"


def _make_variant_fns(
    type_names: TypeNames,
    has_destructor: bool,
    constructors: list[Constructor] | None,
    operators: list[Operator] | None,
    builtin_types: dict[str, BuiltinTypeInfo],
) -> tuple[str, str]:
    construct_decls, construct_inits = _make_construct_fns(type_names, constructors, builtin_types)
    destroy_decls, destroy_inits = _make_destroy_fns(type_names, has_destructor)
    op_eq_decls, op_eq_inits = _make_operator_fns(type_names, operators, "==", "EQUAL")
    op_lt_decls, op_lt_inits = _make_operator_fns(type_names, operators, "<", "LESS")

    to_variant = f"{type_names.snake_case}_to_variant"
    from_variant = f"{type_names.snake_case}_from_variant"
    variant_type = f"crate::{type_names.sys_variant_type}"

    decl = (
        f'pub {to_variant}: unsafe extern "C" fn(GDNativeVariantPtr, GDNativeTypePtr),\n'
        f'pub {from_variant}: unsafe extern "C" fn(GDNativeTypePtr, GDNativeVariantPtr),\n'
        f"{op_eq_decls}{op_lt_decls}{construct_decls}{destroy_decls}"
    )
    init = (
        f"{to_variant}: {{\n"
        "    let ctor_fn = interface.get_variant_from_type_constructor.unwrap();\n"
        f"    ctor_fn({variant_type}).expect({_format_load_error(to_variant)})\n"
        "},\n"
        f"{from_variant}: {{\n"
        "    let ctor_fn = interface.get_variant_to_type_constructor.unwrap();\n"
        f"    ctor_fn({variant_type}).expect({_format_load_error(from_variant)})\n"
        "},\n"
        f"{op_eq_inits}{op_lt_inits}{construct_inits}{destroy_inits}"
    )
    return decl, init


def _ptr_constructor_init(field_name: str, variant_type: str, index: int) -> str:
    return (
        f"{field_name}: {{\n"
        "    let ctor_fn = interface.variant_get_ptr_constructor.unwrap();\n"
        f"    ctor_fn(crate::{variant_type}, {index}i32).expect({_format_load_error(field_name)})\n"
        "},\n"
    )


def _ptr_constructor_decl(field_name: str) -> str:
    return f'pub {field_name}: unsafe extern "C" fn(GDNativeTypePtr, *const GDNativeTypePtr),\n'


def _make_construct_fns(
    type_names: TypeNames,
    constructors: list[Constructor] | None,
    builtin_types: dict[str, BuiltinTypeInfo],
) -> tuple[str, str]:
    if constructors is None or _is_trivial(type_names):
        return "", ""

    # Layout: [0] default, [1] copy, [2..] conversion and multi-argument constructors
    for i, ctor in enumerate(constructors):
        if ctor.index != i:
            raise ValueError(
                f"type {type_names.pascal_case}: constructor at position {i} has index {ctor.index}"
            )
    if len(constructors) < 2:
        raise ValueError(f"type {type_names.pascal_case}: expected default and copy constructors")
    if constructors[0].arguments is not None:
        raise ValueError(f"type {type_names.pascal_case}: default constructor takes arguments")

    copy_args = constructors[1].arguments
    if copy_args is None:
        raise ValueError(
            f"type {type_names.pascal_case}: no constructor args found for copy constructor"
        )
    if (
        len(copy_args) != 1
        or copy_args[0].name != "from"
        or copy_args[0].type_ != type_names.pascal_case
    ):
        raise ValueError(f"type {type_names.pascal_case}: unexpected copy constructor arguments")

    construct_default = f"{type_names.snake_case}_construct_default"
    construct_copy = f"{type_names.snake_case}_construct_copy"
    variant_type = type_names.sys_variant_type

    extra_decls, extra_inits = _make_extra_constructors(type_names, constructors, builtin_types)

    decls = (
        _ptr_constructor_decl(construct_default)
        + _ptr_constructor_decl(construct_copy)
        + "".join(extra_decls)
    )
    inits = (
        _ptr_constructor_init(construct_default, variant_type, 0)
        + _ptr_constructor_init(construct_copy, variant_type, 1)
        + "".join(extra_inits)
    )
    return decls, inits


def _make_extra_constructors(
    type_names: TypeNames,
    constructors: list[Constructor],
    builtin_types: dict[str, BuiltinTypeInfo],
) -> tuple[list[str], list[str]]:
    extra_decls = []
    extra_inits = []
    type_name = type_names.snake_case

    for i, ctor in enumerate(constructors[2:], start=2):
        args = ctor.arguments
        if args is None:
            continue
        if len(args) == 1 and args[0].name == "from":
            # Conversion constructor, named after the source type
            source = builtin_types.get(args[0].type_)
            if source is None:
                raise ValueError(f"unknown builtin type {args[0].type_} in conversion constructor")
            field_name = f"{type_name}_from_{source.type_names.snake_case}"
        else:
            # Named after the argument names
            field_name = f"{type_name}_from_{'_'.join(arg.name for arg in args)}"

        extra_decls.append(_ptr_constructor_decl(field_name))
        extra_inits.append(_ptr_constructor_init(field_name, type_names.sys_variant_type, i))
    return extra_decls, extra_inits


def _make_destroy_fns(type_names: TypeNames, has_destructor: bool) -> tuple[str, str]:
    if not has_destructor or _is_trivial(type_names):
        return "", ""

    destroy = f"{type_names.snake_case}_destroy"
    decls = f'pub {destroy}: unsafe extern "C" fn(GDNativeTypePtr),\n'
    inits = (
        f"{destroy}: {{\n"
        "    let dtor_fn = interface.variant_get_ptr_destructor.unwrap();\n"
        f"    dtor_fn(crate::{type_names.sys_variant_type}).unwrap()\n"
        "},\n"
    )
    return decls, inits


def _make_operator_fns(
    type_names: TypeNames,
    operators: list[Operator] | None,
    json_name: str,
    sys_name: str,
) -> tuple[str, str]:
    if (
        operators is None
        or not any(op.name == json_name for op in operators)
        or _is_trivial(type_names)
    ):
        return "", ""

    operator = f"{type_names.snake_case}_operator_{sys_name.lower()}"
    variant_type = f"crate::{type_names.sys_variant_type}"

    decl = (
        f'pub {operator}: unsafe extern "C" fn(GDNativeTypePtr, GDNativeTypePtr, GDNativeTypePtr),\n'
    )
    init = (
        f"{operator}: {{\n"
        "    let op_finder = interface.variant_get_ptr_operator_evaluator.unwrap();\n"
        "    op_finder(\n"
        f"        crate::GDNATIVE_VARIANT_OP_{sys_name},\n"
        f"        {variant_type},\n"
        f"        {variant_type},\n"
        f"    ).expect({_format_load_error(operator)})\n"
        "},\n"
    )
    return decl, init


def _format_load_error(ident: str) -> str:
    return strlit(f"failed to load GDExtension function `{ident}`")


def _is_trivial(type_names: TypeNames) -> bool:
    """Types whose operations Rust provides itself, needing no engine functions."""
    return type_names.pascal_case in _TRIVIAL_TYPES


def shout_to_pascal(shout_case: str) -> str:
    """Convert SHOUT_CASE to PascalCase: NOT_EQUAL -> NotEqual."""
    result = []
    next_upper = True
    for ch in shout_case:
        if next_upper:
            if ch == "_":
                raise ValueError(f"double underscore in '{shout_case}'")
            result.append(ch)
            next_upper = False
        elif ch == "_":
            next_upper = True
        else:
            result.append(ch.lower() if ch.isascii() else ch)
    return "".join(result)