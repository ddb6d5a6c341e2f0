"""Tests for per-document configuration and environment defaults."""

from __future__ import annotations

import logging

import pytest

from eps_tools import config
from eps_tools.color import ColorMode
from eps_tools.config import EpsConfig
from eps_tools.rendering.state import TextRenderingMode


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        'EPS_TOOLS_COLOR_MODE',
        'EPS_TOOLS_TEXT_MODE',
        'EPS_TOOLS_FILL_IMAGE_BACKGROUND',
        'EPS_TOOLS_TITLE',
        'EPS_TOOLS_CREATOR',
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    """RGB, vector text, no outliner, no image background fill."""
    cfg = EpsConfig()
    assert cfg.color_mode is ColorMode.RGB
    assert cfg.text_rendering_mode is TextRenderingMode.VECTOR
    assert cfg.text_outliner is None
    assert not cfg.fill_image_background


def test_from_env_reads_values(monkeypatch: pytest.MonkeyPatch) -> None:
    """Valid environment values override the defaults."""
    monkeypatch.setenv('EPS_TOOLS_COLOR_MODE', 'CMYK')
    monkeypatch.setenv('EPS_TOOLS_TEXT_MODE', 'text')
    monkeypatch.setenv('EPS_TOOLS_FILL_IMAGE_BACKGROUND', 'yes')
    cfg = EpsConfig.from_env()
    assert cfg.color_mode is ColorMode.CMYK
    assert cfg.text_rendering_mode is TextRenderingMode.TEXT
    assert cfg.fill_image_background


def test_from_env_invalid_values_keep_defaults(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """Invalid values are logged and ignored."""
    monkeypatch.setenv('EPS_TOOLS_COLOR_MODE', 'lab')
    monkeypatch.setenv('EPS_TOOLS_TEXT_MODE', 'outline')
    monkeypatch.setenv('EPS_TOOLS_FILL_IMAGE_BACKGROUND', 'maybe')
    with caplog.at_level(logging.ERROR, logger='eps_tools.config'):
        cfg = EpsConfig.from_env()
    assert cfg == EpsConfig()
    assert len(caplog.records) == 3


def test_default_title_and_creator(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment overrides win; blank values fall back to the built-in defaults."""
    assert config.get_default_title() == 'The EPS Document'
    assert config.get_default_creator().startswith('eps_tools ')
    monkeypatch.setenv('EPS_TOOLS_TITLE', 'Plot')
    monkeypatch.setenv('EPS_TOOLS_CREATOR', '   ')
    assert config.get_default_title() == 'Plot'
    assert config.get_default_creator() == 'eps_tools 1.0.0'
