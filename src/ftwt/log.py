import logging
from typing import Optional, Union

FORMAT = "%(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure the ``ftwt`` logger with a console handler and, optionally, a file handler.

    Args:
        log_level: Minimum level to emit, as a number or a name such as ``"DEBUG"``.
        log_file: Path of a log file to append to, if any.
    """
    logger = logging.getLogger("ftwt")
    logger.setLevel(log_level)

    # avoid duplicate output when called more than once
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(FORMAT))
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)
