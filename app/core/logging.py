# app/core/logging.py
import logging

ISO_FMT = "%Y-%m-%dT%H:%M:%S%z"

# librerías que en INFO/DEBUG llenan el log
_NOISY = ("sqlalchemy.engine", "httpx", "httpcore", "multipart", "urllib3")


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
        datefmt=ISO_FMT,
    )
    for name in _NOISY:
        logging.getLogger(name).setLevel(logging.WARNING)
