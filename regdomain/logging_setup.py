from __future__ import annotations
import logging, logging.config, json
from pathlib import Path
from typing import Optional


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def build_dict_config(cfg: Optional[dict]) -> dict:
    cfg = cfg or {}
    level = (cfg.get("level") or "INFO").upper()
    log_file = cfg.get("file")
    rotate = cfg.get("rotate") or {}
    when = rotate.get("when", "midnight")
    backup = int(rotate.get("backupCount", 14))
    to_console = bool(cfg.get("console", True))
    as_json = bool(cfg.get("json", False))

    if as_json:
        fmt_name = "json"
        fmt_config = {"()": "regdomain.logging_setup.JsonFormatter"}
    else:
        fmt_name = "standard"
        fmt_config = {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"}

    handlers = {}
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "level": level,
            "filename": log_file,
            "when": when,
            "backupCount": backup,
            "encoding": "utf-8",
            "formatter": fmt_name,
        }
    if to_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": fmt_name,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            fmt_name: fmt_config
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": level,
            },
            "urllib3": {"level": "WARNING"},
            "requests": {"level": "WARNING"},
        },
    }


def setup_logging(app_cfg: Optional[dict]) -> None:
    cfg = app_cfg.get("logging", {}) if app_cfg else {}
    logging.config.dictConfig(build_dict_config(cfg))
