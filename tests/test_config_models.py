from __future__ import annotations

import logging

import pytest

from boson.config.models import (
    BUILTIN_TITLE_CONFIGS,
    DEFAULT_COMPAT_TOOL_DIR,
    CompatibilityType,
    TitleConfig,
    merge_config,
    resolve_layers,
)


def test_runtime_defaults() -> None:
    electron_defaults = CompatibilityType.ELECTRON.runtime_defaults()
    assert electron_defaults.compatibility_type is CompatibilityType.ELECTRON
    assert electron_defaults.disable_steam_overlay is True
    assert dict(electron_defaults.env_vars) == {}

    love_defaults = CompatibilityType.LOVE.runtime_defaults()
    assert love_defaults.compatibility_type is CompatibilityType.LOVE
    assert love_defaults.disable_steam_overlay is False

    proton_defaults = CompatibilityType.DEFER_PROTON.runtime_defaults()
    assert proton_defaults.compat_tool_dir == DEFAULT_COMPAT_TOOL_DIR


def test_from_name_roundtrips_every_member() -> None:
    for member in CompatibilityType:
        assert CompatibilityType.from_name(member.value) is member


def test_from_name_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="unknown compat_type"):
        CompatibilityType.from_name("Wine")


def test_default_executable_love(make_context) -> None:
    assert CompatibilityType.LOVE.default_executable(make_context()) == ("love", [])


def test_default_executable_native_and_proton_have_no_wrapper(make_context) -> None:
    context = make_context()
    assert CompatibilityType.FORCE_NATIVE.default_executable(context) == (None, [])
    assert CompatibilityType.DEFER_PROTON.default_executable(context) == (None, [])


def test_default_executable_electron_uses_env_and_hook(make_context, install_dir) -> None:
    context = make_context({"ELECTRON_PATH": "/opt/electron/electron"})
    assert CompatibilityType.ELECTRON.default_executable(context) == (
        "/opt/electron/electron",
        ["--no-sandbox"],
    )

    hook = install_dir / "register-hook.js"
    hook.write_text("// hook")
    wrapper, args = CompatibilityType.ELECTRON.default_executable(context)
    assert wrapper == "/opt/electron/electron"
    assert args == ["--no-sandbox", "--require", str(hook)]


def test_default_executable_electron_reports_missing_hook(make_context, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="boson.config.models"):
        _, args = CompatibilityType.ELECTRON.default_executable(make_context())

    assert "--require" not in args
    assert "No Electron hook" in caplog.text


def test_merge_extends_sequences_and_overwrites_scalars() -> None:
    base = TitleConfig(
        compatibility_type=CompatibilityType.ELECTRON,
        wrapper_command="electron",
        wrapper_args=("--a",),
        env_vars={"SHARED": "base", "BASE_ONLY": "1"},
        append_args=("--base",),
        extra_preloads=("libbase.so",),
        disable_steam_overlay=True,
        compat_tool_dir="GE-Proton9-26",
    )
    overlay = TitleConfig(
        compatibility_type=CompatibilityType.LOVE,
        wrapper_args=("--a", "--b"),
        env_vars={"SHARED": "overlay"},
        append_args=("--overlay",),
        extra_preloads=("liboverlay.so",),
    )

    merged = merge_config(base, overlay)

    assert merged.compatibility_type is CompatibilityType.LOVE
    # Not set on the overlay, so kept
    assert merged.wrapper_command == "electron"
    assert merged.compat_tool_dir == "GE-Proton9-26"
    # Duplicates are kept
    assert merged.wrapper_args == ("--a", "--a", "--b")
    assert dict(merged.env_vars) == {"SHARED": "overlay", "BASE_ONLY": "1"}
    assert merged.append_args == ("--base", "--overlay")
    assert merged.extra_preloads == ("libbase.so", "liboverlay.so")
    # Unconditional overwrite, even back to the default
    assert merged.disable_steam_overlay is False


def test_merge_does_not_mutate_inputs() -> None:
    base = TitleConfig(wrapper_args=("--a",), env_vars={"A": "1"})
    overlay = TitleConfig(wrapper_args=("--b",), env_vars={"B": "2"})

    merge_config(base, overlay)

    assert base.wrapper_args == ("--a",)
    assert dict(base.env_vars) == {"A": "1"}
    assert dict(overlay.env_vars) == {"B": "2"}


def test_merge_lists_never_shrink() -> None:
    configs = [
        TitleConfig(),
        TitleConfig(wrapper_args=("--x",)),
        TitleConfig(wrapper_args=("--y", "--z")),
    ]
    for base in configs:
        for overlay in configs:
            merged = merge_config(base, overlay)
            assert len(merged.wrapper_args) >= max(
                len(base.wrapper_args), len(overlay.wrapper_args)
            )


def test_resolve_without_override_equals_two_layer_merge() -> None:
    global_default = TitleConfig(
        compatibility_type=CompatibilityType.FORCE_NATIVE,
        wrapper_args=("--global",),
        compat_tool_dir="GlobalProton",
    )
    expected = merge_config(CompatibilityType.FORCE_NATIVE.runtime_defaults(), global_default)

    assert resolve_layers(global_default) == expected
    assert resolve_layers(global_default, None) == expected


def test_comprehensive_three_layer_merging() -> None:
    global_default = TitleConfig(
        compatibility_type=CompatibilityType.FORCE_NATIVE,
        wrapper_args=("--global-arg",),
        env_vars={"GLOBAL_VAR": "global_value"},
        append_args=("--global-append",),
        extra_preloads=("libglobal.so",),
    )
    override = TitleConfig(
        compatibility_type=CompatibilityType.ELECTRON,
        wrapper_command="custom-electron",
        wrapper_args=("--user-arg",),
        env_vars={"USER_VAR": "user_value"},
        append_args=("--user-append",),
        extra_preloads=("libuser.so",),
        disable_steam_overlay=False,
    )

    resolved = resolve_layers(global_default, override)

    assert resolved.compatibility_type is CompatibilityType.ELECTRON
    assert resolved.wrapper_command == "custom-electron"
    assert resolved.wrapper_args == ("--global-arg", "--user-arg")
    assert resolved.env_vars["GLOBAL_VAR"] == "global_value"
    assert resolved.env_vars["USER_VAR"] == "user_value"
    assert resolved.append_args == ("--global-append", "--user-append")
    assert resolved.extra_preloads == ("libglobal.so", "libuser.so")
    # Override beats the Electron runtime default
    assert resolved.disable_steam_overlay is False


def test_defer_proton_takes_global_tool_dir() -> None:
    global_default = TitleConfig(
        compatibility_type=CompatibilityType.FORCE_NATIVE,
        wrapper_args=("--global-arg",),
        compat_tool_dir="GlobalProton",
    )
    override = TitleConfig(
        compatibility_type=CompatibilityType.DEFER_PROTON,
        wrapper_args=("--user-arg",),
    )

    resolved = resolve_layers(global_default, override)

    assert resolved.compatibility_type is CompatibilityType.DEFER_PROTON
    assert resolved.compat_tool_dir == "GlobalProton"
    assert resolved.wrapper_args == ("--global-arg", "--user-arg")


def test_defer_proton_explicit_tool_dir() -> None:
    override = TitleConfig(
        compatibility_type=CompatibilityType.DEFER_PROTON,
        compat_tool_dir="Proton-GE-8-32",
    )
    assert resolve_layers(TitleConfig(), override).compat_tool_dir == "Proton-GE-8-32"


def test_tool_dir_falls_back_when_no_layer_sets_it() -> None:
    override = TitleConfig(compatibility_type=CompatibilityType.LOVE)
    assert resolve_layers(TitleConfig(), override).compat_tool_dir == DEFAULT_COMPAT_TOOL_DIR


def test_builtin_titles() -> None:
    balatro = resolve_layers(TitleConfig(), BUILTIN_TITLE_CONFIGS[2379780])
    assert balatro.compatibility_type is CompatibilityType.LOVE
    assert balatro.disable_steam_overlay is False

    cookie_clicker = resolve_layers(TitleConfig(), BUILTIN_TITLE_CONFIGS[1454400])
    assert cookie_clicker.compatibility_type is CompatibilityType.ELECTRON
    assert cookie_clicker.disable_steam_overlay is True


def test_from_dict_reads_known_keys_and_ignores_unknown() -> None:
    config = TitleConfig.from_dict({
        "compat_type": "Electron",
        "wrapper_command": "/custom/electron",
        "env_vars": {"TEST_VAR": "test_value"},
        "append_args": ["--test-arg"],
        "disable_steam_overlay": True,
        "something_new": 42,
    })

    assert config.compatibility_type is CompatibilityType.ELECTRON
    assert config.wrapper_command == "/custom/electron"
    assert dict(config.env_vars) == {"TEST_VAR": "test_value"}
    assert config.append_args == ("--test-arg",)
    assert config.disable_steam_overlay is True
    # Missing keys take type defaults
    assert config.wrapper_args == ()
    assert config.compat_tool_dir is None


@pytest.mark.parametrize("data", [
    {"compat_type": "Wine"},
    {"wrapper_args": "--not-a-list"},
    {"wrapper_args": [1, 2]},
    {"env_vars": {"A": 1}},
    {"disable_steam_overlay": "yes"},
    {"compat_tool_dir": 5},
])
def test_from_dict_rejects_bad_values(data) -> None:
    with pytest.raises(ValueError):
        TitleConfig.from_dict(data)


def test_to_dict_omits_unset_optionals() -> None:
    data = TitleConfig(compatibility_type=CompatibilityType.LOVE).to_dict()
    assert data["compat_type"] == "Love"
    assert "wrapper_command" not in data
    assert "compat_tool_dir" not in data
    assert TitleConfig.from_dict(data) == TitleConfig(compatibility_type=CompatibilityType.LOVE)
