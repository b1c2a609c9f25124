import json
import logging
import os
import sys
from logging import getLogger, DEBUG, INFO, WARNING, ERROR, CRITICAL, Formatter, LogRecord, StreamHandler

from boshmetrics.args import ArgumentParser

TRACE = DEBUG - 5
logging.addLevelName(TRACE, "TRACE")

getLogger().setLevel(ERROR)
getLogger("boshmetrics").setLevel(INFO)

# command line flag -> log level of the boshmetrics logger
VERBOSITY_FLAGS = {
    "trace": ("Trace logging", TRACE),
    "verbose": ("Verbose logging", DEBUG),
    "quiet": ("Only log errors", CRITICAL),
}


def add_args(arg_parser: ArgumentParser) -> None:
    group = arg_parser.add_mutually_exclusive_group()
    for flag, (description, _) in VERBOSITY_FLAGS.items():
        options = [f"--{flag}", "-v"] if flag == "verbose" else [f"--{flag}"]
        group.add_argument(*options, help=description, dest=flag, action="store_true", default=False)


class JsonFormatter(Formatter):
    """Renders a record as one json object per line, tagged with the emitting process."""

    def __init__(self, proc: str) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")
        self.proc = proc

    def format(self, record: LogRecord) -> str:
        message = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "process": self.proc,
        }
        if record.exc_info:
            message["exception"] = self.formatException(record.exc_info)
        return json.dumps(message, default=str)


def env_flag(name: str) -> bool:
    return os.environ.get(f"BOSHMETRICS_{name.upper()}", "false").lower() == "true"


def verbosity() -> int:
    argv = sys.argv[1:]
    for flag, (_, level) in VERBOSITY_FLAGS.items():
        if f"--{flag}" in argv or env_flag(flag) or (flag == "verbose" and "-v" in argv):
            return level
    return INFO


def setup_logger(proc: str) -> None:
    handler = StreamHandler()
    if env_flag("log_text"):
        log_format = f"%(asctime)s|{proc}|%(levelname)5s|%(process)d|%(threadName)10s  %(message)s"
        handler.setFormatter(Formatter(os.environ.get("BOSHMETRICS_LOG_FORMAT", log_format), "%y-%m-%d %H:%M:%S"))
    else:
        handler.setFormatter(JsonFormatter(proc))
    # leaves logging alone if the hosting process configured it already
    logging.basicConfig(handlers=[handler])
    level = verbosity()
    if level == CRITICAL:
        getLogger().setLevel(WARNING)
    getLogger("boshmetrics").setLevel(level)


setup_logger("boshmetrics")
log = getLogger("boshmetrics")
