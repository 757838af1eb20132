"""Tests for the style validators and built-in skin defaults."""

from __future__ import annotations

import logging

import pytest

from tiny_dices.config import settings
from tiny_dices.skins import (
    MAX_GRADIENT_COLORS,
    SkinState,
    default_skin,
    is_valid_color,
    is_valid_css_border,
    is_valid_data_image,
    is_valid_linear_gradient,
    sanitize_background,
    sanitize_border,
    sanitize_color,
    sanitize_image,
)


class TestColor:
    @pytest.mark.parametrize(
        "value",
        [
            "red",
            "white",
            "#FFF",
            "#000",
            "#ff3399",
            "#ff339980",
            "rgb(0, 0, 0)",
            "rgba(255, 255, 255, 0.2)",
            "hsl(270, 60%, 70%)",
            "transparent",
            "currentColor",
            "  gray  ",
        ],
    )
    def test_valid(self, value: str) -> None:
        assert is_valid_color(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "",
            "notacolor",
            "fff",
            "0xfff",
            "123",
            "red; background: url(x)",
            "expression(alert(1))",
            "red blue",
        ],
    )
    def test_invalid(self, value: str) -> None:
        assert is_valid_color(value) is False

    @pytest.mark.parametrize("value", [None, 42, ["red"]])
    def test_non_string(self, value: object) -> None:
        assert is_valid_color(value) is False


class TestLinearGradient:
    def test_angle_and_hex_colors(self) -> None:
        assert is_valid_linear_gradient("linear-gradient(135deg, #222, #000)") is True

    def test_default_background(self) -> None:
        assert is_valid_linear_gradient("linear-gradient(135deg, #ff3399, #33ccff)") is True

    @pytest.mark.parametrize(
        "value",
        [
            "linear-gradient(to right, red, blue)",
            "linear-gradient(red, blue)",
            "linear-gradient(1rad, red, blue)",
            "linear-gradient(-1turn, red, blue)",
            "linear-gradient(red 20%, blue 80%)",
            "linear-gradient(90deg, rgba(0,0,0,0.5), #fff)",
            "linear-gradient(red)",
            "LINEAR-GRADIENT(red, blue)",
        ],
    )
    def test_valid(self, value: str) -> None:
        assert is_valid_linear_gradient(value) is True

    @pytest.mark.parametrize(
        "value",
        [
            "linear-gradient(url(x), red)",
            "linear-gradient(red, URL (x))",
            "linear-gradient(red, expression(alert(1)))",
            "linear-gradient(red, javascript:alert(1))",
            "linear-gradient(red, <b>)",
            "linear-gradient(red, data:image/png;base64,QUJD)",
        ],
    )
    def test_unsafe_content_rejected(self, value: str) -> None:
        assert is_valid_linear_gradient(value) is False

    @pytest.mark.parametrize(
        "value",
        [
            "linear-gradient()",
            "linear-gradient(   )",
            "linear-gradient(135deg)",
            "linear-gradient(135deg, #222, #000",
            "radial-gradient(red, blue)",
            "red",
            "linear-gradient(135deg, notacolor)",
            "linear-gradient(to top left, red, blue)",
            "linear-gradient(red, , blue)",
        ],
    )
    def test_malformed_rejected(self, value: str) -> None:
        assert is_valid_linear_gradient(value) is False

    @pytest.mark.parametrize(
        "value",
        [
            "linear-gradient(red, blue ); position: fixed; inset: 0; z-index: calc(99999)",
            "linear-gradient(red, blue) , linear-gradient(red, blue)",
            "linear-gradient(red, blue)) (blue)",
            "linear-gradient(red, rgb(0, 0, 0)",
            'linear-gradient(red, blue); background-image: image-set("https://x.example/a.png" 1x)',
        ],
    )
    def test_value_must_end_with_the_function(self, value: str) -> None:
        assert is_valid_linear_gradient(value) is False

    @pytest.mark.parametrize(
        "value",
        [
            "linear-gradient(red; blue)",
            "linear-gradient(red, blue {})",
            "linear-gradient(red, 'blue')",
            'linear-gradient(red, "blue")',
            "linear-gradient(red, \\62lue)",
        ],
    )
    def test_declaration_breaking_characters_rejected(self, value: str) -> None:
        assert is_valid_linear_gradient(value) is False

    def test_color_limit(self) -> None:
        at_limit = "linear-gradient(" + ", ".join(["red"] * MAX_GRADIENT_COLORS) + ")"
        over_limit = "linear-gradient(" + ", ".join(["red"] * (MAX_GRADIENT_COLORS + 1)) + ")"
        assert is_valid_linear_gradient(at_limit) is True
        assert is_valid_linear_gradient(over_limit) is False

    def test_non_string(self) -> None:
        assert is_valid_linear_gradient(None) is False


class TestBorder:
    @pytest.mark.parametrize(
        "value",
        [
            "2px solid black",
            "1.5em dashed red",
            "10% dotted #fff",
            "2px solid rgba(255, 255, 255, 0.2)",
            "3rem double linear-gradient(red, blue)",
        ],
    )
    def test_valid(self, value: str) -> None:
        assert is_valid_css_border(value) is True

    def test_bad_width_unit(self) -> None:
        assert is_valid_css_border("2 solid black") is False

    def test_bad_style_keyword(self) -> None:
        assert is_valid_css_border("2px triangle black") is False

    def test_style_is_case_sensitive(self) -> None:
        assert is_valid_css_border("2px SOLID black") is False

    def test_too_few_parts(self) -> None:
        assert is_valid_css_border("2px solid") is False

    def test_bad_color(self) -> None:
        assert is_valid_css_border("2px solid url(x)") is False

    def test_gradient_that_closes_early_rejected(self) -> None:
        value = (
            '2px solid linear-gradient(red, blue ); background-image: image-set("https://'
            'evil.example/x.png" 1x) ; a: b(c)'
        )
        assert is_valid_css_border(value) is False
        assert sanitize_border(value) is None

    def test_non_string(self) -> None:
        assert is_valid_css_border(2) is False


class TestDataImage:
    def test_png(self) -> None:
        assert is_valid_data_image("data:image/png;base64,QUJD") is True

    @pytest.mark.parametrize("kind", ["png", "jpeg", "jpg", "gif", "webp"])
    def test_allowed_types(self, kind: str) -> None:
        assert is_valid_data_image(f"data:image/{kind};base64,QUJD+/==") is True

    def test_case_insensitive(self) -> None:
        assert is_valid_data_image("DATA:IMAGE/PNG;BASE64,QUJD") is True

    def test_remote_url_rejected(self) -> None:
        assert is_valid_data_image("https://example.com/a.png") is False

    def test_svg_rejected(self) -> None:
        assert is_valid_data_image("data:image/svg+xml;base64,QUJD") is False

    def test_payload_outside_base64_rejected(self) -> None:
        assert is_valid_data_image('data:image/png;base64,QUJD"); color: red') is False

    def test_empty_payload_rejected(self) -> None:
        assert is_valid_data_image("data:image/png;base64,") is False


class TestSanitize:
    def test_background_strips_and_accepts(self) -> None:
        assert sanitize_background("  linear-gradient(red, blue) ") == "linear-gradient(red, blue)"
        assert sanitize_background("gray") == "gray"

    def test_background_rejects(self) -> None:
        assert sanitize_background("url(evil.png)") is None
        assert sanitize_background(None) is None

    def test_color(self) -> None:
        assert sanitize_color(" red ") == "red"
        assert sanitize_color("linear-gradient(red, blue)") is None

    def test_border(self) -> None:
        assert sanitize_border("2px solid black") == "2px solid black"
        assert sanitize_border("2 solid black") is None

    def test_image_requires_data_uri(self) -> None:
        assert sanitize_image("https://example.com/a.png") is None
        assert sanitize_image("data:image/png;base64,QUJD") == "data:image/png;base64,QUJD"

    def test_image_force_unsafe(self) -> None:
        url = "https://example.com/a.png"
        assert sanitize_image(url, force_unsafe=True) == url

    def test_image_force_unsafe_still_needs_string(self) -> None:
        assert sanitize_image(42, force_unsafe=True) is None


class TestDefaults:
    def test_built_in_defaults(self) -> None:
        skin = default_skin()
        assert skin == SkinState(
            bg="linear-gradient(135deg, #ff3399, #33ccff)",
            text="white",
            border="2px solid rgba(255, 255, 255, 0.2)",
            bg_img=None,
            selection_bg="#000",
            selection_text="#FFF",
        )

    def test_invalid_configured_default_dropped(self, monkeypatch, caplog) -> None:
        monkeypatch.setattr(settings, "default_text_skin", "javascript:alert(1)")
        with caplog.at_level(logging.WARNING, logger="tiny_dices.skins"):
            skin = default_skin()
        assert skin.text is None
        assert "Ignoring invalid default text skin" in caplog.text

    def test_reset(self) -> None:
        skin = default_skin()
        skin.reset()
        assert skin == SkinState()
