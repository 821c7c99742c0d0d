import logging

from condtour.config import TourConfig
from condtour.logging import ENV_LEVEL, init_logging, init_logging_from_cfg, level_from_cfg
from condtour.utils.logging import configure_logging, get_logger, logger


def test_level_from_cfg_sources(monkeypatch):
    monkeypatch.delenv(ENV_LEVEL, raising=False)
    assert level_from_cfg({"logging": {"level": "debug"}}) == logging.DEBUG
    assert level_from_cfg(TourConfig()) == logging.INFO
    assert level_from_cfg({"logging": {"level": "none"}}) == logging.WARNING
    assert level_from_cfg(None) == logging.WARNING
    monkeypatch.setenv(ENV_LEVEL, "debug")
    assert level_from_cfg({"logging": {"level": "info"}}) == logging.DEBUG


def test_init_logging_installs_one_handler(monkeypatch):
    monkeypatch.delenv(ENV_LEVEL, raising=False)
    root = logging.getLogger()
    saved = list(root.handlers)
    saved_level = root.level
    for h in saved:
        root.removeHandler(h)
    try:
        init_logging("info")
        init_logging_from_cfg({"logging": {"level": "debug"}})
        assert len(root.handlers) == 1
        assert logging.getLogger("condtour").level == logging.DEBUG
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.getLogger("condtour").setLevel(logging.NOTSET)


def test_get_logger_children():
    assert get_logger("condtour.tour").name == "condtour.tour"
    assert get_logger("viz").name == "condtour.viz"


def test_configure_logging_toggle(capsys):
    try:
        configure_logging(enabled=True, level=logging.INFO)
        configure_logging(enabled=True, level=logging.INFO)
        logger.info("[tour] hello")
        get_logger("condtour.tour").debug("[tour] position 1 -> 2 of 9")
        err = capsys.readouterr().err
        assert err.count("[INFO] [tour] hello") == 1
        assert "position" not in err
        configure_logging(enabled=False)
        logger.error("[tour] muted")
        assert "muted" not in capsys.readouterr().err
    finally:
        logger.handlers.clear()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)
