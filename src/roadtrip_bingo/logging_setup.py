from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from rich.logging import RichHandler


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging(*, level: str = "INFO", log_file: Optional[str] = None, json_format: bool = False) -> None:
    lvl = getattr(logging, level.upper(), logging.INFO)
    handlers: List[logging.Handler] = []
    handlers.append(RichHandler(rich_tracebacks=True, show_time=True, show_level=True, markup=False))
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(lvl)
        if json_format:
            file_handler.setFormatter(JsonLineFormatter())
        else:
            file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        handlers.append(file_handler)
    logging.basicConfig(level=lvl, handlers=handlers, force=True)
