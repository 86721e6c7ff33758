"""환경 변수 / 테마 파일 설정 테스트"""
import json

import pytest

from rankcard.card.CardLayout import build_layout
from rankcard.card.CardStyle import CardStyle, GradientFill, ImageBackground, SolidBackground
from rankcard.core.config import RankCardConfig, load_style, save_style
from rankcard.core.errors import ConfigurationError

from tests.conftest import fake_measure

ENV_VARS = (
    "RANKCARD_FONT_DIR",
    "RANKCARD_FONT_FAMILY",
    "RANKCARD_TAG_LENGTH",
    "RANKCARD_STRIP_ACCENTS",
    "RANKCARD_STYLE_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_from_env_defaults():
    config = RankCardConfig.from_env()
    assert config == RankCardConfig()
    assert config.tag_length == 15
    assert config.strip_accents is False


def test_from_env_values(monkeypatch, tmp_path):
    monkeypatch.setenv("RANKCARD_FONT_DIR", str(tmp_path))
    monkeypatch.setenv("RANKCARD_FONT_FAMILY", "Pretendard")
    monkeypatch.setenv("RANKCARD_TAG_LENGTH", "20")
    monkeypatch.setenv("RANKCARD_STRIP_ACCENTS", "yes")

    config = RankCardConfig.from_env()
    assert config.font_dir == str(tmp_path)
    assert config.font_family == "Pretendard"
    assert config.tag_length == 20
    assert config.strip_accents is True


@pytest.mark.parametrize("name, value", [("RANKCARD_TAG_LENGTH", "many"), ("RANKCARD_STRIP_ACCENTS", "maybe")])
def test_from_env_bad_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        RankCardConfig.from_env()


def test_build_style_applies_options():
    style = RankCardConfig(font_family="Pretendard", tag_length=8, strip_accents=True).build_style()
    assert style.font_family == "Pretendard"
    assert style.tag_length == 8
    assert style.strip_accents is True


def test_build_style_from_theme_file(tmp_path):
    path = tmp_path / "theme.json"
    save_style(CardStyle().with_overlay("#000000", 0.3), str(path))

    style = RankCardConfig(style_path=str(path)).build_style()
    assert style.overlay.color == "#000000"
    assert style.overlay.opacity == 0.3


def test_apply_fonts(registry, tmp_path):
    (tmp_path / "Card.ttf").write_bytes(b"x")
    (tmp_path / "Card-Bold.ttf").write_bytes(b"x")

    assert RankCardConfig(font_dir=str(tmp_path)).apply_fonts(registry) == 2
    assert RankCardConfig().apply_fonts(registry) == 0


def test_load_missing_theme(tmp_path):
    assert load_style(str(tmp_path / "missing.json")) == CardStyle()


def test_save_and_load_theme(tmp_path):
    path = tmp_path / "theme.json"
    style = (
        CardStyle()
        .with_background(ImageBackground("https://example.com/bg.png"))
        .with_progress_bar(GradientFill(("#ff0000", "#0000ff"), radial=True), rounded=False)
        .with_level(label="레벨", size=48)
        .with_status(circle=True)
    )
    save_style(style, str(path))
    loaded = load_style(str(path))

    assert loaded.background == ImageBackground("https://example.com/bg.png")
    assert loaded.progress_bar.fill == GradientFill(("#ff0000", "#0000ff"), radial=True)
    assert loaded.progress_bar.rounded is False
    assert loaded.level.label == "레벨"
    assert loaded.level.size == 48
    assert loaded.status.circle is True


def test_save_bytes_background_fails(tmp_path):
    style = CardStyle().with_background(ImageBackground(b"\x89PNG"))
    with pytest.raises(ConfigurationError):
        save_style(style, str(tmp_path / "theme.json"))


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        json.dumps({"background": {"type": "video", "value": "x"}}),
        json.dumps({"overlay": {"blur": 3}}),
        json.dumps({"width": "wide"}),
        json.dumps({"progress_bar": {"width": "x"}}),
        json.dumps({"level": {"size": "big"}}),
        json.dumps({"status": {"circle": "yes"}}),
        json.dumps({"rank": {"label": 5}}),
        json.dumps({"avatar": {"display": 1}}),
    ],
)
def test_load_invalid_theme(tmp_path, content):
    path = tmp_path / "theme.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_style(str(path))


def test_partial_theme_keeps_defaults(tmp_path):
    path = tmp_path / "theme.json"
    path.write_text(json.dumps({"background": {"type": "colour", "value": "#000000"}}), encoding="utf-8")
    style = load_style(str(path))
    assert style.background == SolidBackground("#000000")
    assert style.overlay == CardStyle().overlay


@pytest.mark.parametrize(
    "theme",
    [{"width": "wide"}, {"progress_bar": {"height": None}}, {"xp": {"size": 36.5}}, {"overlay": {"opacity": "half"}}],
)
def test_bad_theme_never_reaches_layout(tmp_path, rank_input, theme):
    path = tmp_path / "theme.json"
    path.write_text(json.dumps(theme), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        build_layout(rank_input, load_style(str(path)), fake_measure)
