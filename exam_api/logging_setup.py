from __future__ import annotations
import logging

# Libraries that log every statement or request at INFO.
NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "multipart")


def setup_console_logging(
    level: int = logging.INFO,
    quiet: tuple[str, ...] = NOISY_LOGGERS,
) -> None:
    """
    Call once at process start (API app or CLI). Service logs go to stderr;
    the loggers in ``quiet`` only report warnings unless ``level`` is DEBUG.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for name in quiet:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)

    if root.handlers:
        # already configured (uvicorn or pytest installed handlers)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
