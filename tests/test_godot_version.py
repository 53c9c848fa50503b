import pytest

from godot_codegen.godot_version import GodotVersion, parse_godot_version

GOOD_VERSIONS = [
    ("3.0.stable.official", 3, 0, 0, "stable", None),
    ("3.0.1.stable.official", 3, 0, 1, "stable", None),
    ("3.2.stable.official", 3, 2, 0, "stable", None),
    ("3.37.stable.official", 3, 37, 0, "stable", None),
    ("3.4.stable.official.206ba70f4", 3, 4, 0, "stable", "206ba70f4"),
    ("3.4.1.stable.official.aa1b95889", 3, 4, 1, "stable", "aa1b95889"),
    ("3.5.beta.custom_build.837f2c5f8", 3, 5, 0, "beta", "837f2c5f8"),
    ("4.0.dev.custom_build.e7e9e663b", 4, 0, 0, "dev", "e7e9e663b"),
    ("4.0.alpha.custom_build.faddbcfc0", 4, 0, 0, "alpha", "faddbcfc0"),
]

BAD_VERSIONS = [
    "4.0.unstable.custom_build.e7e9e663b",
    "4.0.3.custom_build.e7e9e663b",
    "3.stable.official.206ba70f4",
    "4.0.alpha.custom_build",
]


@pytest.mark.parametrize("full, major, minor, patch, stability, custom_rev", GOOD_VERSIONS)
def test_good_versions(full, major, minor, patch, stability, custom_rev):
    parsed = parse_godot_version(full)
    assert parsed.major == major
    assert parsed.minor == minor
    assert parsed.patch == patch
    assert parsed.stability == stability
    assert parsed.custom_rev == custom_rev
    assert parsed.full_string == full


@pytest.mark.parametrize("full", BAD_VERSIONS)
def test_bad_versions(full):
    with pytest.raises(ValueError):
        parse_godot_version(full)


def test_surrounding_text_is_stripped():
    parsed = parse_godot_version("Godot Engine v4.0.alpha.custom_build.faddbcfc0 - x\n")
    assert parsed == GodotVersion(
        full_string="4.0.alpha.custom_build.faddbcfc0",
        major=4,
        minor=0,
        patch=0,
        stability="alpha",
        custom_rev="faddbcfc0",
    )


def test_component_out_of_u8_range():
    with pytest.raises(ValueError):
        parse_godot_version("300.0.stable.official")