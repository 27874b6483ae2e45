import logging
import pathlib
import sys

import pendulum
import seqlog

from core.config import settings

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s.%(funcName)s:%(lineno)d %(message)s"


def get_log_path(app: str) -> pathlib.Path:
    """One file per run, named after the app and its start time."""
    filename = f"{app}.{pendulum.now():%Y%m%d.%H%M%S.%f}.log"
    if settings.LOG_DIR:
        log_dir = settings.LOG_DIR
    elif sys.platform == "linux":
        log_dir = "/app-logs"
    else:
        log_dir = "~/logs"

    return pathlib.Path(log_dir, filename).expanduser()


def setup_logging_to_file(app: str, level: int, *, logger: logging.Logger) -> pathlib.Path:
    log_path = get_log_path(app)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path)
    file_handler.formatter = logging.Formatter(LOG_FORMAT)
    logger.setLevel(level)
    logger.addHandler(file_handler)
    return log_path


def setup_logging_to_console(level: int, *, logger: logging.Logger):
    if not sys.stdout.isatty():
        return

    from rich.logging import RichHandler
    from rich.traceback import install

    install(show_locals=True)
    logger.setLevel(level)
    logger.addHandler(RichHandler(rich_tracebacks=True, level=level, show_time=True))


def setup_logging_to_seq():
    if not settings.SEQ_SERVER_URL:
        return

    seqlog.log_to_seq(
        server_url=settings.SEQ_SERVER_URL,
        api_key=settings.SEQ_SERVER_API_KEY,
        level=logging.INFO,
        batch_size=10,
        auto_flush_timeout=10,
        override_root_logger=True,
    )
