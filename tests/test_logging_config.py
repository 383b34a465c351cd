"""Tests for logging configuration and helpers."""
import logging

import pytest

from src.CustomLogger.config import get_log_config
from src.CustomLogger.custom_logger import CustomLogger
from src.CustomLogger.logging_utils import LogContext, batch_progress_logger


class TestLogConfig:

    def test_environment_overrides(self):
        assert get_log_config("development")["console_level"] == "DEBUG"
        assert get_log_config("testing")["log_file"] is None

    def test_unknown_environment_uses_defaults(self):
        assert get_log_config("nowhere")["console_level"] == "INFO"

    def test_log_file_env_var(self, monkeypatch):
        monkeypatch.setenv("LOG_FILE", "")
        assert get_log_config("development")["log_file"] is None
        monkeypatch.setenv("LOG_FILE", "custom.log")
        assert get_log_config("testing")["log_file"] == "custom.log"

    def test_logger_named_after_calling_class(self, monkeypatch):
        monkeypatch.setenv("LOG_ENV", "testing")

        class Caller:
            def make(self):
                return CustomLogger().custlogger(loglevel=logging.INFO)

        assert Caller().make().name == "Caller"


class TestLogHelpers:

    def test_log_context_reraises(self, caplog):
        log = logging.getLogger("ctx-test")
        with caplog.at_level(logging.ERROR, logger="ctx-test"):
            with pytest.raises(KeyError):
                with LogContext("lookup", log):
                    raise KeyError("x")
        assert "lookup failed" in caplog.text

    def test_progress_logged_at_batch_boundaries(self, caplog):
        log = logging.getLogger("progress-test")
        progress = batch_progress_logger(4, batch_size=2, logger=log)
        with caplog.at_level(logging.INFO, logger="progress-test"):
            for i in range(1, 5):
                progress(i)
        assert caplog.text.count("Progress") == 2
