"""Running the Godot executable to obtain its version and extension API."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

from .godot_version import parse_godot_version
from .watch import StopWatch

EXTENSION_API_FILE = "extension_api.json"
GODOT_VERSION_FILE = "godot_version.txt"


def load_extension_api_json(watch: StopWatch, input_dir: str | os.PathLike[str]) -> str:
    """Return the extension API JSON, regenerating it if missing or the Godot version changed."""
    input_dir = Path(input_dir)
    json_path = input_dir / EXTENSION_API_FILE

    godot_bin = locate_godot_binary()
    watch.record("locate_godot")

    if not json_path.exists() or has_version_changed(godot_bin, input_dir / GODOT_VERSION_FILE):
        dump_extension_api(godot_bin, json_path)
        watch.record("dump_extension_api")

    try:
        result = json_path.read_text(encoding="utf-8")
    except OSError as e:
        raise RuntimeError(f"failed to open file {json_path}") from e
    watch.record("read_json_file")
    return result


def has_version_changed(godot_bin: str | os.PathLike[str], version_path: str | os.PathLike[str]) -> bool:
    """Compare the executable's version with the stored one, storing it when it differs."""
    version_path = Path(version_path)
    current_version = read_godot_version(godot_bin)
    try:
        changed = version_path.read_text(encoding="utf-8") != current_version
    except OSError:
        changed = True

    if changed:
        try:
            version_path.write_text(current_version, encoding="utf-8")
        except OSError as e:
            raise RuntimeError(f"write Godot version to file {version_path}") from e
    return changed


def read_godot_version(godot_bin: str | os.PathLike[str]) -> str:
    """Run ``godot --version`` and return the parsed version string; requires Godot 4."""
    try:
        completed = subprocess.run([str(godot_bin), "--version"], capture_output=True, check=False)
    except OSError as e:
        raise RuntimeError(f"failed to invoke Godot executable '{godot_bin}'") from e

    try:
        output = completed.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RuntimeError("convert Godot version to UTF-8") from e
    print(f"Godot version: {output}")

    try:
        parsed = parse_godot_version(output)
    except ValueError as e:
        raise RuntimeError(f"failed to parse Godot version '{output}': {e}") from e

    if parsed.major != 4:
        raise RuntimeError(
            f"Only Godot versions >= 4.0 are supported; found version {output.strip()}."
        )
    return parsed.full_string


def dump_extension_api(godot_bin: str | os.PathLike[str], out_file: str | os.PathLike[str]) -> None:
    """Have Godot write extension_api.json into the directory of ``out_file``."""
    cwd = Path(out_file).parent
    try:
        cwd.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(f"create directory '{cwd}'") from e
    print(f"Dump extension API to dir '{cwd}'...")

    try:
        subprocess.run(
            [str(godot_bin), "--headless", "--dump-extension-api", str(cwd)],
            cwd=cwd,
            capture_output=True,
            check=False,
        )
    except OSError as e:
        raise RuntimeError(f"failed to invoke Godot executable '{godot_bin}'") from e

    print(f"Generated {cwd}/{EXTENSION_API_FILE}.")


def locate_godot_binary() -> Path:
    """Find Godot via the GODOT4_BIN environment variable or a 'godot4' on PATH."""
    from_env = os.environ.get("GODOT4_BIN")
    if from_env is not None:
        print(f"Found GODOT4_BIN with path to executable: '{from_env}'")
        return Path(from_env)

    found = shutil.which("godot4")
    if found is not None:
        print(f"Found 'godot4' executable in PATH: {found}")
        return Path(found)

    raise RuntimeError(
        "Bindings generation requires 'godot4' executable or a GODOT4_BIN "
        "environment variable (with the path to the executable)."
    )