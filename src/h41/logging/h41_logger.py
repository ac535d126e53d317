"""
Purpose
-------
Structured logging for the H.4.1 release engine. One logger per pipeline
run carries the run id and run metadata into every record, so discovery
probes, fetch attempts and per-field extraction diagnostics can be
correlated after the fact.

Key behaviors
-------------
- Emits one structured record per call (`emit`) with a level threshold.
- Serializes records as JSON (default) or as single text lines.
- Resolves LOG_LEVEL / LOG_FORMAT / LOG_DEST from the environment, falling
  back to defaults (and reporting the fallback) when values are invalid.
- `bind` derives a logger for a sub-component that shares the run id.

Conventions
-----------
- Default level is INFO, default format JSON, default destination STDERR.
- An explicit `level` passed to `initialize_logger` wins over LOG_LEVEL.
- Timestamps are UTC ISO-8601 with a trailing "Z".
- Event names are snake_case; context payloads are small and JSON-friendly.

Downstream usage
----------------
Call `initialize_logger` once per entry point and pass the logger down
explicitly. Use `logger.debug/info/warning/error(event, msg, context)`.
"""

import datetime as dt
import json
import os
import sys
from dataclasses import dataclass, field
from typing import TypedDict

LOG_LEVELS: dict[str, int] = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}
LOG_FORMATS: set[str] = {"json", "text"}
DEFAULT_LEVEL: str = "INFO"
DEFAULT_FORMAT: str = "json"
DEFAULT_DEST: str = "stderr"


class LogRecord(TypedDict):
    """
    Shape of one emitted record.

    Fields
    ------
    timestamp : str
        UTC ISO-8601 timestamp with a "Z" suffix.
    level : str
        "DEBUG", "INFO", "WARNING" or "ERROR".
    run_id : str
        Identifier shared by all records of one run.
    component : str
        Component that produced the record (e.g. "release_discovery").
    event : str
        snake_case event name.
    message : str
        Free-form human-readable message, possibly empty.
    run_meta : dict
        Run-scoped metadata fixed at initialization.
    context : dict
        Event-specific payload.
    """

    timestamp: str
    level: str
    run_id: str
    component: str
    event: str
    message: str
    run_meta: dict
    context: dict


@dataclass()
class LoggerSettings:
    """
    Effective logger configuration plus the names of variables that fell back.

    Attributes
    ----------
    level : str
        Effective threshold.
    log_format : str
        "json" or "text".
    log_dest : str
        "stderr" or a writable file path.
    fallbacks : list[str]
        Environment variable names whose values were rejected.
    """

    level: str = DEFAULT_LEVEL
    log_format: str = DEFAULT_FORMAT
    log_dest: str = DEFAULT_DEST
    fallbacks: list[str] = field(default_factory=list)


class H41Logger:
    """
    Purpose
    -------
    Level-filtered structured logger writing JSON or text records to STDERR
    or to a file.

    Parameters
    ----------
    component_name : str
        Label written into every record.
    run_id : str
        Identifier correlating records of one run.
    run_meta : dict
        Run-scoped metadata written into every record.
    log_level : str, default="INFO"
        Minimum level that is written.
    log_format : str, default="json"
        "json" or "text".
    log_dest : str, default="stderr"
        "stderr" or a file path opened in append mode.

    Notes
    -----
    - Writing never raises on unserializable context; values are stringified.
    """

    def __init__(
        self,
        component_name: str,
        run_id: str,
        run_meta: dict,
        log_level: str = DEFAULT_LEVEL,
        log_format: str = DEFAULT_FORMAT,
        log_dest: str = DEFAULT_DEST,
    ) -> None:
        self.component_name = component_name
        self.run_id = run_id
        self.run_meta = run_meta
        self.level = log_level
        self.format = log_format
        self.dest = log_dest

    def emit(
        self, event: str, level: str = "INFO", msg: str | None = None, context: dict | None = None
    ) -> None:
        """
        Build and write one record if `level` passes the threshold.

        Parameters
        ----------
        event : str
            snake_case event name.
        level : str, default="INFO"
            Record level.
        msg : str, optional
            Human-readable message.
        context : dict, optional
            Event payload.

        Returns
        -------
        None
        """

        if LOG_LEVELS[level] < LOG_LEVELS[self.level]:
            return
        record: LogRecord = {
            "timestamp": dt.datetime.now(dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "run_id": self.run_id,
            "component": self.component_name,
            "event": event,
            "message": msg or "",
            "run_meta": self.run_meta,
            "context": context or {},
        }
        self.write_record(self.format_record(record))

    def debug(self, event: str, msg: str | None = None, context: dict | None = None) -> None:
        self.emit(event=event, level="DEBUG", msg=msg, context=context)

    def info(self, event: str, msg: str | None = None, context: dict | None = None) -> None:
        self.emit(event=event, level="INFO", msg=msg, context=context)

    def warning(self, event: str, msg: str | None = None, context: dict | None = None) -> None:
        self.emit(event=event, level="WARNING", msg=msg, context=context)

    def error(self, event: str, msg: str | None = None, context: dict | None = None) -> None:
        self.emit(event=event, level="ERROR", msg=msg, context=context)

    def bind(self, component_name: str) -> "H41Logger":
        """
        Return a logger for a sub-component sharing this run's id, metadata
        and output settings.

        Parameters
        ----------
        component_name : str
            Component label for the derived logger.

        Returns
        -------
        H41Logger
            New logger instance; `self` is left unchanged.
        """

        return H41Logger(
            component_name=component_name,
            run_id=self.run_id,
            run_meta=self.run_meta,
            log_level=self.level,
            log_format=self.format,
            log_dest=self.dest,
        )

    def format_record(self, record: LogRecord) -> str:
        """
        Serialize a record as JSON or as a text line.

        Parameters
        ----------
        record : LogRecord
            Record to serialize.

        Returns
        -------
        str
            JSON document or
            "<timestamp> [<level>] <component> <event> - <message> k=v ...".
        """

        if self.format == "json":
            return json.dumps(record, ensure_ascii=False, default=str)
        context_str = " ".join(f"{k}={v}" for k, v in record["context"].items())
        return (
            f"{record['timestamp']} [{record['level']}] "
            f"{record['component']} {record['event']} - {record['message']} "
            f"{context_str}"
        ).rstrip()

    def write_record(self, formatted: str) -> None:
        if self.dest == "stderr":
            print(formatted, file=sys.stderr)
        else:
            with open(self.dest, "a", encoding="utf-8") as f:
                f.write(formatted + "\n")


def initialize_logger(
    component_name: str,
    level: str | None = None,
    run_id: str | None = None,
    run_meta: dict | None = None,
) -> H41Logger:
    """
    Configure and return an H41Logger.

    Parameters
    ----------
    component_name : str
        Component label.
    level : str, optional
        Explicit threshold; overrides LOG_LEVEL when valid.
    run_id : str, optional
        Run identifier; generated when omitted.
    run_meta : dict, optional
        Run-scoped metadata.

    Returns
    -------
    H41Logger
        Logger configured from the arguments and environment.

    Notes
    -----
    - One WARNING record is written per rejected configuration value.
    """

    settings: LoggerSettings = resolve_settings(level)
    logger = H41Logger(
        component_name=component_name,
        run_id=run_id if run_id is not None else generate_run_id(component_name),
        run_meta=run_meta if run_meta is not None else {},
        log_level=settings.level,
        log_format=settings.log_format,
        log_dest=settings.log_dest,
    )
    report_fallbacks(logger, settings.fallbacks)
    return logger


def resolve_settings(level: str | None = None) -> LoggerSettings:
    """
    Read and validate logger settings from the environment.

    Parameters
    ----------
    level : str, optional
        Explicit level taking precedence over LOG_LEVEL.

    Returns
    -------
    LoggerSettings
        Normalized settings; rejected variables are listed in `fallbacks`.

    Notes
    -----
    - A file destination is accepted only if it can be opened for appending.
    """

    settings = LoggerSettings()
    raw_level: str = level if level is not None else os.environ.get("LOG_LEVEL", DEFAULT_LEVEL)
    raw_format: str = os.environ.get("LOG_FORMAT", DEFAULT_FORMAT)
    raw_dest: str = os.environ.get("LOG_DEST", DEFAULT_DEST)

    if raw_level.upper() in LOG_LEVELS:
        settings.level = raw_level.upper()
    else:
        settings.fallbacks.append("LOG_LEVEL")

    if raw_format.lower() in LOG_FORMATS:
        settings.log_format = raw_format.lower()
    else:
        settings.fallbacks.append("LOG_FORMAT")

    if raw_dest.lower() != DEFAULT_DEST:
        try:
            with open(raw_dest, "a", encoding="utf-8"):
                pass
            settings.log_dest = raw_dest
        except OSError:
            settings.fallbacks.append("LOG_DEST")
    return settings


def generate_run_id(component_name: str) -> str:
    """
    Build a run id of the form `<component>--<UTC timestamp>--<pid>`.
    """

    stamp: str = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{component_name}--{stamp}--{os.getpid()}"


def report_fallbacks(logger: H41Logger, fallbacks: list[str]) -> None:
    """
    Write one WARNING per rejected logging variable.

    Parameters
    ----------
    logger : H41Logger
        Logger used to report.
    fallbacks : list[str]
        Names of the rejected environment variables.

    Returns
    -------
    None
    """

    defaults: dict[str, str] = {
        "LOG_LEVEL": DEFAULT_LEVEL,
        "LOG_FORMAT": DEFAULT_FORMAT,
        "LOG_DEST": DEFAULT_DEST,
    }
    for name in fallbacks:
        logger.warning(
            f"fallback_{name.lower()}",
            msg=f"Invalid {name}; defaulting to {defaults[name]}",
            context={"invalid_value": os.environ.get(name)},
        )
