"""Tests for themes and the theme registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from wavegrid.graphics.themes import BUILTIN_THEMES, DEFAULT_THEME, Theme, ThemeRegistry


class TestTheme:
    def test_alpha_multiplies_line_color(self) -> None:
        theme = Theme(name="t", line_color="rgba(10, 20, 30, 0.5)", alpha=0.5)
        assert theme.line_rgba == (10, 20, 30, 0.25)

    def test_background_parsed(self) -> None:
        assert BUILTIN_THEMES["classicfm"].background_rgba == (26, 0, 0, 1.0)

    def test_bad_color_raises(self) -> None:
        with pytest.raises(ValueError):
            Theme(name="broken", line_color="not-a-color")

    def test_from_yaml_defaults(self) -> None:
        theme = Theme.from_yaml("plain", {"line_color": "#ffffff"})
        assert theme.name == "plain"
        assert theme.background_color == "#0a0a0a"
        assert theme.line_width is None


class TestThemeRegistry:
    def test_builtin_names(self) -> None:
        registry = ThemeRegistry()
        for name in ("default", "classicfm", "reprezent", "no-selection"):
            assert name in registry

    def test_resolve_known(self) -> None:
        assert ThemeRegistry().resolve("reprezent").name == "reprezent"

    @pytest.mark.parametrize("name", ["nope", "", None])
    def test_unknown_resolves_to_default(self, name) -> None:
        assert ThemeRegistry().resolve(name).name == DEFAULT_THEME

    def test_register_replaces(self) -> None:
        registry = ThemeRegistry()
        registry.register(Theme(name="classicfm", line_color="#000000"))
        assert registry.resolve("classicfm").line_color == "#000000"

    def test_instances_do_not_share_registrations(self) -> None:
        a = ThemeRegistry()
        a.register(Theme(name="extra"))
        assert "extra" not in ThemeRegistry()

    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "themes.yaml"
        path.write_text(
            "midnight:\n"
            "  background_color: '#000010'\n"
            "  line_color: 'rgba(80, 120, 255, 0.4)'\n"
            "  line_width: 1.2\n"
            "broken:\n"
            "  line_color: 'sparkly'\n"
            "scalar: 5\n",
            encoding="utf-8",
        )
        registry = ThemeRegistry()
        assert registry.load_file(path) == 1
        midnight = registry.resolve("midnight")
        assert midnight.line_width == 1.2
        assert midnight.line_rgba == (80, 120, 255, 0.4)
        assert "broken" not in registry

    def test_load_non_mapping_file(self, tmp_path: Path) -> None:
        path = tmp_path / "themes.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        assert ThemeRegistry().load_file(path) == 0
