# impostor/core/logging_utils.py
import logging
import json
import datetime as dt
from typing import Dict, Any, Optional, Set

# LogRecord attributes that are never copied over as "extra" fields
LOG_RECORD_BUILTIN_ATTRS: Set[str] = {
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "module", "msecs",
    "message", "msg", "name", "pathname", "process", "processName",
    "relativeCreated", "stack_info", "thread", "threadName", "taskName",
}

class JSONFormatter(logging.Formatter):
    """
    Renders each record as one JSON object per line.

    `fmt_keys` maps output keys to LogRecord attribute names, e.g.
    {"level": "levelname", "logger": "name"}. Values passed through
    `extra=` (room_code, session_id, ...) are appended as-is.
    """
    def __init__(self, *, fmt_keys: Optional[Dict[str, str]] = None, datefmt: Optional[str] = None):
        super().__init__(datefmt=datefmt)
        self.fmt_keys = fmt_keys if fmt_keys is not None else {}

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._prepare_log_dict(record), default=str)

    def _timestamp(self, record: logging.LogRecord) -> str:
        if self.datefmt:
            return self.formatTime(record, self.datefmt)
        return dt.datetime.fromtimestamp(record.created, tz=dt.timezone.utc).isoformat()

    def _prepare_log_dict(self, record: logging.LogRecord) -> Dict[str, Any]:
        always_fields: Dict[str, Any] = {
            "message": record.getMessage(),
            "timestamp": self._timestamp(record),
        }
        if record.exc_info:
            always_fields["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            always_fields["stack_info"] = self.formatStack(record.stack_info)

        message_dict: Dict[str, Any] = {}
        for key, attr in self.fmt_keys.items():
            if attr in always_fields:
                message_dict[key] = always_fields.pop(attr)
            else:
                message_dict[key] = getattr(record, attr, None)
        message_dict.update(always_fields)

        for key, val in record.__dict__.items():
            if key not in LOG_RECORD_BUILTIN_ATTRS and key not in message_dict:
                message_dict[key] = val

        return message_dict
