"""Knowledge about the API shared by all generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, TypeVar

from .api_parser import ExtensionApi
from .rust_types import RustTy

T = TypeVar("T")


@dataclass
class InheritanceTree:
    """Maps each derived class to its direct base class."""

    derived_to_base: dict[str, str] = field(default_factory=dict)

    def insert(self, derived: str, base: str) -> None:
        """Record that ``derived`` inherits ``base``; each class may be inserted once."""
        if derived in self.derived_to_base:
            raise ValueError("Duplicate inheritance insert")
        self.derived_to_base[derived] = base

    def map_all_bases(self, derived: str, apply: Callable[[str], T]) -> list[T]:
        """Apply ``apply`` to every base of ``derived``, nearest first."""
        result = []
        base = self.derived_to_base.get(derived)
        while base is not None:
            result.append(apply(base))
            base = self.derived_to_base.get(base)
        return result


@dataclass
class Context:
    """Class names, singletons, inheritance and a cache of mapped Rust types."""

    engine_classes: set[str] = field(default_factory=set)
    builtin_types: set[str] = field(default_factory=set)
    singletons: set[str] = field(default_factory=set)
    inheritance_tree: InheritanceTree = field(default_factory=InheritanceTree)
    cached_rust_types: dict[str, RustTy] = field(default_factory=dict)

    @classmethod
    def build_from_api(cls, api: ExtensionApi) -> Context:
        """Collect the context from a parsed extension API."""
        ctx = cls()
        ctx.singletons.update(singleton.name for singleton in api.singletons)

        ctx.builtin_types.add("Variant")  # not part of builtin_classes
        ctx.builtin_types.update(builtin.name for builtin in api.builtin_classes)

        for class_ in api.classes:
            print(f"-- add engine class {class_.name}")
            ctx.engine_classes.add(class_.name)

            if class_.inherits is not None:
                print(f"  -- inherits {class_.inherits}")
                ctx.inheritance_tree.insert(class_.name, class_.inherits)
        return ctx

    def is_builtin(self, ty_name: str) -> bool:
        return ty_name in self.builtin_types

    def is_singleton(self, class_name: str) -> bool:
        return class_name in self.singletons

    def find_rust_type(self, ty: str) -> RustTy | None:
        return self.cached_rust_types.get(ty)

    def insert_rust_type(self, ty: str, resolved: RustTy) -> None:
        """Cache the mapping of ``ty``; existing entries are never overwritten."""
        if ty in self.cached_rust_types:
            raise ValueError("no overwrites of RustTy")
        self.cached_rust_types[ty] = resolved