"""폰트 레지스트리 테스트"""
import logging

import pytest

from rankcard.core.errors import ConfigurationError
from rankcard.core.FontRegistry import FontRegistry, FontSpec, default_registry


@pytest.fixture
def fake_font(tmp_path):
    path = tmp_path / "Fake.ttf"
    path.write_bytes(b"not really a font")
    return path


def test_missing_file_is_configuration_error(registry, tmp_path):
    with pytest.raises(ConfigurationError):
        registry.ensure_registered(FontSpec(str(tmp_path / "nope.ttf"), "Nope"))


def test_registration_is_idempotent(registry, fake_font, caplog):
    spec = FontSpec(str(fake_font), "Fake", "bold")
    with caplog.at_level(logging.INFO, logger="rankcard.core.FontRegistry"):
        registry.ensure_registered(spec)
        registry.ensure_registered(spec)

    assert registry.is_registered("Fake", "bold")
    assert registry.is_registered("fake", "BOLD")
    assert sum("폰트 등록됨" in r.message for r in caplog.records) == 1


def test_registering_other_file_replaces(registry, fake_font, tmp_path, caplog):
    other = tmp_path / "Other.ttf"
    other.write_bytes(b"x")
    registry.ensure_registered(FontSpec(str(fake_font), "Fake"))
    with caplog.at_level(logging.WARNING, logger="rankcard.core.FontRegistry"):
        registry.ensure_registered(FontSpec(str(other), "Fake"))
    assert any("교체" in r.message for r in caplog.records)


def test_unloadable_font_falls_back_to_default(registry, fake_font, caplog):
    registry.ensure_registered(FontSpec(str(fake_font), "Fake"))
    with caplog.at_level(logging.WARNING, logger="rankcard.core.FontRegistry"):
        font = registry.get_font("Fake", 24)
    assert font.getbbox("Level 5")[2] > 0
    assert any("폰트 로드 실패" in r.message for r in caplog.records)


def test_default_font_without_family(registry):
    font = registry.get_font(None, 36)
    assert registry.get_font(None, 36) is font
    assert registry.get_font(None, 48) is not font


def test_measure_grows_with_text(registry):
    short = registry.measure("1", 36)
    long = registry.measure("1000000", 36)
    assert 0 < short < long
    assert registry.measure("1000000", 72) > long


def test_register_directory(registry, tmp_path):
    (tmp_path / "Card.ttf").write_bytes(b"x")
    (tmp_path / "Card-Bold.otf").write_bytes(b"x")
    (tmp_path / "notes.txt").write_text("ignored")

    assert registry.register_directory(str(tmp_path)) == 2
    assert registry.is_registered("Card", "regular")
    assert registry.is_registered("Card", "bold")


def test_register_missing_directory(registry, tmp_path):
    with pytest.raises(ConfigurationError):
        registry.register_directory(str(tmp_path / "missing"))


def test_default_registry_is_shared():
    assert default_registry() is default_registry()
    assert isinstance(default_registry(), FontRegistry)
