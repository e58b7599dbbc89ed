import logging, json, sys, time, os

ROOT_LOGGER = "keeper"


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, name, msg."""

    converter = time.gmtime  # Use UTC timestamps

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%SZ")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def get_logger(name=ROOT_LOGGER, level=None, to_file=None):
    """Unified structured logger for all keeper components.

    Handlers live on the ``keeper`` root logger only; component loggers
    (``keeper.sync``, ``keeper.storage.sqlite`` ...) propagate to it.
    Level and log file default to KEEPER_LOG_LEVEL / KEEPER_LOG_FILE.
    """
    root = logging.getLogger(ROOT_LOGGER)
    formatter = JsonFormatter()

    if not root.handlers:
        root.setLevel(level or os.getenv("KEEPER_LOG_LEVEL", "INFO"))
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        root.addHandler(handler)
        to_file = to_file or os.getenv("KEEPER_LOG_FILE")
    elif level:
        root.setLevel(level)

    if to_file and not any(
        isinstance(h, logging.FileHandler) and h.baseFilename == os.path.abspath(to_file)
        for h in root.handlers
    ):
        # Ensure the directory exists before writing
        os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
        file_handler = logging.FileHandler(to_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if name == ROOT_LOGGER:
        return root
    if not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
