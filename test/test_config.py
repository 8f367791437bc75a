import logging

import pytest

from cmap_client.utils import config as config_module
from cmap_client.utils.cmap_logger import ColorFormatter, configure_logger, get_logger


def test_defaults(monkeypatch):
    for name in ("CMAP_LOG_LEVEL", "CMAP_DOMAIN", "CMAP_API_KEY_PREFIX", "CMAP_API_KEY", "CMAP_API_KEY_FILE"):
        monkeypatch.delenv(name, raising=False)
    cfg = config_module.load_config()
    assert cfg.log_level == "WARNING"
    assert cfg.domain == "https://simonscmap.com"
    assert cfg.api_key_prefix == "Api-Key "
    assert cfg.api_key == ""
    assert cfg.api_key_file == "api_key.csv"
    assert not cfg.has_api_key


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CMAP_LOG_LEVEL", "debug")
    monkeypatch.setenv("CMAP_DOMAIN", "https://staging.cmap.test/")
    monkeypatch.setenv("CMAP_API_KEY_PREFIX", "'Bearer '")
    monkeypatch.setenv("CMAP_API_KEY", "env-key")
    cfg = config_module.load_config()
    assert cfg.log_level == "DEBUG"
    assert cfg.domain == "https://staging.cmap.test"
    assert cfg.api_key_prefix == "Bearer "
    assert cfg.has_api_key
    assert "env-key" not in repr(cfg)


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("CMAP_LOG_LEVEL", "LOUD")
    with pytest.raises(RuntimeError, match="CMAP_LOG_LEVEL"):
        config_module.load_config()


def test_child_loggers_and_file_output(tmp_path):
    log_file = tmp_path / "logs" / "cmap.log"
    try:
        configure_logger(level="INFO", use_color=False, filename=str(log_file))
        get_logger("rest").info("EXEC uspCatalog")
    finally:
        configure_logger(level="WARNING")
    assert get_logger("rest").name == "cmap.rest"
    assert "EXEC uspCatalog" in log_file.read_text(encoding="utf-8")


def test_color_formatter_restores_record():
    record = logging.LogRecord("cmap", logging.ERROR, __file__, 1, "failed %s", ("uspMatch",), None)
    text = ColorFormatter(use_color=True).format(record)
    assert "failed uspMatch" in text
    assert record.msg == "failed %s"
    assert record.levelname == "ERROR"
