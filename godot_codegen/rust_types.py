"""Rust types that Godot JSON types are mapped to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class RustTyKind(Enum):
    """The category of a mapped Rust type."""

    BUILTIN_IDENT = auto()
    """``bool``, ``Vector3i``"""
    BUILTIN_ARRAY = auto()
    """``TypedArray<i32>``"""
    ENGINE_ARRAY = auto()
    """``TypedArray<Gd<PhysicsBody3D>>``"""
    ENGINE_ENUM = auto()
    """``module::Enum``"""
    ENGINE_CLASS = auto()
    """``Gd<Node>``"""


@dataclass(frozen=True)
class RustTy:
    """A Rust type as it appears in generated code."""

    kind: RustTyKind
    tokens: str
    elem_class: str | None = None
    """Element class of an engine array."""
    surrounding_class: str | None = None
    """Class that declares an engine enum; None for global enums."""

    def return_decl(self) -> str:
        """The return type declaration; engine classes are returned as ``Option``."""
        if self.kind is RustTyKind.ENGINE_CLASS:
            return f"-> Option<{self.tokens}>"
        return f"-> {self.tokens}"

    def __str__(self) -> str:
        return self.tokens