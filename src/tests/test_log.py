import logging

from core.config import settings
from log import setup_logging_to_file, setup_logging_to_seq


def test_file_logging_writes_under_log_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "logs"))
    logger = logging.getLogger("test_file_logging")

    log_path = setup_logging_to_file(app="simulate_vault", level=logging.INFO, logger=logger)
    logger.info("vault snapshot recorded")
    for handler in list(logger.handlers):
        handler.flush()
        logger.removeHandler(handler)

    assert log_path.parent == tmp_path / "logs"
    assert log_path.name.startswith("simulate_vault.")
    assert "[INFO] test_file_logging" in log_path.read_text()


def test_seq_logging_needs_server_url(monkeypatch):
    monkeypatch.setattr(settings, "SEQ_SERVER_URL", None)

    assert setup_logging_to_seq() is None
