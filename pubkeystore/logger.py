import logging, json, sys, time, os

_FORMAT = json.dumps({
    "ts": "%(asctime)s",
    "level": "%(levelname)s",
    "name": "%(name)s",
    "msg": "%(message)s",
})


def _formatter() -> logging.Formatter:
    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
    formatter.converter = time.gmtime  # UTC timestamps
    return formatter


def get_logger(name="PubKey", level=None, to_file=None):
    """
    Structured logger shared by the store, codec and archive modules.

    level defaults to PUBKEYSTORE_LOG_LEVEL (INFO when unset) and to_file to
    PUBKEYSTORE_LOG_FILE. Handlers are only attached the first time a name
    is requested.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or os.getenv("PUBKEYSTORE_LOG_LEVEL", "INFO").upper())

    if logger.handlers:
        return logger

    formatter = _formatter()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    to_file = to_file or os.getenv("PUBKEYSTORE_LOG_FILE")
    if to_file:
        os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
        file_handler = logging.FileHandler(to_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
