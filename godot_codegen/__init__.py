"""Parse the Godot 4 extension API description and generate central Rust binding sources."""

__version__ = "0.1.0"