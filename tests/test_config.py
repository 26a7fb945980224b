"""Tests for configuration, hotkey parsing and logging setup."""

import logging

import pytest

from snapdock.config import (
    ALIGN_SEPARATION_M,
    CLOSING_SPEED_MPS,
    MAX_SNAP_DISTANCE_M,
    HotkeyChord,
    SnapConfig,
)
from snapdock.logging_config import setup_logging
from snapdock.vessel import ActionGroup


class TestSnapConfig:

    def test_defaults(self):
        config = SnapConfig()

        assert config.max_snap_distance == MAX_SNAP_DISTANCE_M == 500.0
        assert config.align_separation == ALIGN_SEPARATION_M == 1.0
        assert config.closing_speed == CLOSING_SPEED_MPS == 0.15
        assert config.disabled_action_groups == (ActionGroup.SAS, ActionGroup.RCS)
        assert config.failure_message_duration == 6.0
        assert config.success_message_duration == 4.0
        assert str(config.hotkey) == "Ctrl+Alt+D"

    def test_frozen(self):
        config = SnapConfig()
        with pytest.raises(AttributeError):
            config.max_snap_distance = 10.0

    @pytest.mark.parametrize("kwargs", [
        {"max_snap_distance": 0.0},
        {"max_snap_distance": -5.0},
        {"align_separation": -1.0},
        {"closing_speed": -0.1},
        {"failure_message_duration": 0.0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SnapConfig(**kwargs)

    def test_from_dict(self):
        config = SnapConfig.from_dict({
            "max_snap_distance": 250,
            "closing_speed": "0.3",
            "disabled_action_groups": ["sas"],
            "hotkey": "ctrl+shift+j",
        })

        assert config.max_snap_distance == 250.0
        assert isinstance(config.max_snap_distance, float)
        assert config.closing_speed == pytest.approx(0.3)
        assert config.align_separation == 1.0
        assert config.disabled_action_groups == (ActionGroup.SAS,)
        assert config.hotkey.key == "j"

    def test_from_dict_empty_is_default(self):
        assert SnapConfig.from_dict({}) == SnapConfig()

    def test_from_dict_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown config keys"):
            SnapConfig.from_dict({"max_distance": 10})

    def test_from_dict_unknown_action_group(self):
        with pytest.raises(ValueError, match="Unknown action group"):
            SnapConfig.from_dict({"disabled_action_groups": ["warp"]})

    def test_from_dict_no_groups(self):
        config = SnapConfig.from_dict({"disabled_action_groups": []})
        assert config.disabled_action_groups == ()


class TestHotkeyChord:

    def test_parse(self):
        chord = HotkeyChord.parse("Ctrl + Alt + D")

        assert chord.key == "d"
        assert chord.modifiers == (("left_ctrl", "right_ctrl"), ("left_alt", "right_alt"))

    def test_parse_plain_key(self):
        chord = HotkeyChord.parse("f9")
        assert chord.modifiers == ()
        assert chord.is_triggered(held=set(), pressed={"f9"})

    def test_parse_empty(self):
        with pytest.raises(ValueError, match="Empty hotkey"):
            HotkeyChord.parse(" + ")

    def test_parse_unknown_modifier(self):
        with pytest.raises(ValueError, match="Unknown modifier"):
            HotkeyChord.parse("hyper+d")

    def test_ctrl_alt(self):
        assert HotkeyChord.ctrl_alt("d") == HotkeyChord.parse("ctrl+alt+d")

    def test_triggered_on_edge(self):
        chord = HotkeyChord.ctrl_alt("d")

        assert chord.is_triggered(held={"left_ctrl", "right_alt"}, pressed={"d"})
        assert not chord.is_triggered(held={"left_ctrl", "right_alt", "d"}, pressed=set())
        assert not chord.is_triggered(held={"left_alt"}, pressed={"d"})
        assert not chord.is_triggered(held={"left_ctrl", "left_alt"}, pressed={"e"})

    def test_str(self):
        assert str(HotkeyChord.parse("shift+k")) == "Shift+K"


class TestLogging:

    def test_setup_logging(self, tmp_path):
        log_file = tmp_path / "snapdock.log"
        logger = setup_logging(logging.DEBUG, log_file=str(log_file))
        try:
            assert logger.name == "snapdock"
            assert len(logger.handlers) == 2

            logging.getLogger("snapdock.validation").info("hello")
            for handler in logger.handlers:
                handler.flush()

            assert "hello" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

    def test_setup_again_drops_file_handler(self, tmp_path):
        logger = setup_logging(log_file=str(tmp_path / "first.log"))
        logger = setup_logging()
        try:
            assert len(logger.handlers) == 1
            assert not isinstance(logger.handlers[0], logging.FileHandler)
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

    def test_setup_twice_does_not_duplicate(self):
        logger = setup_logging()
        logger = setup_logging()
        try:
            assert len(logger.handlers) == 1
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)
