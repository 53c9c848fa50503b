# godot-codegen

A library that reads the `extension_api.json` file dumped by a Godot 4
executable and generates Rust binding sources from it.

## Installation

```
pip install .
```

## What it provides

- `godot_codegen.godot_version.parse_godot_version` parses the output of
  `godot --version` into a `GodotVersion`. It raises `ValueError` if the text
  does not match.
- `godot_codegen.godot_exe` locates the Godot executable and runs it.
  `locate_godot_binary` checks the `GODOT4_BIN` environment variable first and
  then looks for a `godot4` on `PATH`. `load_extension_api_json(watch,
  input_dir)` returns the contents of `extension_api.json` in `input_dir`. It
  dumps the file again when the file is missing. It also dumps it again when
  the version reported by Godot differs from the one stored in
  `godot_version.txt`. Only Godot 4 is accepted.
- `godot_codegen.api_parser` holds dataclass models of the JSON
  (`ExtensionApi`, `Class`, `Method`, `BuiltinClass`, and so on).
  `parse_extension_api` parses JSON text. `load_extension_api(watch,
  input_dir)` combines loading and parsing, and returns the API together with
  the build configuration (`"float_64"`).
- `godot_codegen.context.Context.build_from_api` collects the engine classes,
  builtin types, singletons and inheritance tree.
- `godot_codegen.util` holds the naming helpers `to_module_name`,
  `safe_ident`, `strlit` and `c_str`. It also has `make_enum_definition`, and
  `to_rust_type`, which maps a Godot JSON type to a `RustTy`.
- `godot_codegen.central_generator.generate_central_files(api, ctx,
  build_config, sys_gen_path, core_gen_path)` writes `central.rs` into both
  output directories and returns the written paths:
  - the sys file holds the opaque builtin types, the global method table,
    `VariantType` and `VariantOperator`;
  - the core file holds `VariantDispatch` and the global enums.
- `godot_codegen.watch.StopWatch` records the duration of named steps.
  `write_stats_to` writes them to a text file, followed by a total.

## Example

```python
from godot_codegen.godot_version import parse_godot_version
from godot_codegen.util import to_module_name

version = parse_godot_version("4.0.alpha.custom_build.faddbcfc0")
assert (version.major, version.minor, version.stability) == (4, 0, "alpha")

assert to_module_name("AnimatedSprite2D") == "animated_sprite_2d"
```

Generating the central files from an existing JSON file:

```python
from pathlib import Path

from godot_codegen.api_parser import BUILD_CONFIG, parse_extension_api
from godot_codegen.central_generator import generate_central_files
from godot_codegen.context import Context

api = parse_extension_api(Path("extension_api.json").read_text(encoding="utf-8"))
ctx = Context.build_from_api(api)
written = generate_central_files(api, ctx, BUILD_CONFIG, "out/sys", "out/core")
```

## What it does not do

- There is no command-line program. Everything is used from Python.
- Only the central files are generated. The package does not write per-class
  engine modules or the utility-function file.
- There is no single call that runs every step and writes the timing
  statistics. Combine the functions above yourself.