import logging

from hrms.core import logging_config
from hrms.core.logging import log_user_action

class TestLoggingConfig:
    def test_streams_get_their_own_files(self, tmp_path):
        config = logging_config.build_logging_config(str(tmp_path), "DEBUG")
        handlers = config["handlers"]

        for stream in logging_config.LOG_STREAMS:
            filename = handlers[f"{stream}_file"]["filename"]
            assert filename.startswith(str(tmp_path / stream))
        assert handlers["error_file"]["level"] == "ERROR"
        assert config["loggers"]["hrms.audit"]["handlers"] == ["audit_file", "console"]
        assert config["loggers"]["access"]["propagate"] is False

    def test_setup_creates_directories(self, tmp_path, monkeypatch):
        monkeypatch.setattr(logging_config.settings, "LOG_DIR", str(tmp_path))
        try:
            logging_config.setup_logging()
            for stream in logging_config.LOG_STREAMS:
                assert (tmp_path / stream).is_dir()
        finally:
            for name in ("", "hrms.audit", "access", "uvicorn.access", "sqlalchemy.engine"):
                logger = logging.getLogger(name)
                for handler in list(logger.handlers):
                    logger.removeHandler(handler)
                    handler.close()
                if name:
                    logger.propagate = True

    def test_audit_line(self, caplog):
        with caplog.at_level(logging.INFO, logger="hrms.audit"):
            log_user_action(7, "submit", "KRA ratings", 12)
        assert "User 7 performed submit on KRA ratings 12" in caplog.text
