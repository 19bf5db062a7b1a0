"""Utility functionality for logging.
"""
import contextlib
import sys

import logbook

from umialign import utils

LOG_NAME = "umialign"
FORMAT_STR = "[{record.time:%Y-%m-%d %H:%M:%S}] {record.message}"

logger = logbook.Logger(LOG_NAME)
logger_cl = logbook.Logger(LOG_NAME + "-commands")

def _is_cl(record, _):
    return record.channel == LOG_NAME + "-commands"

def _not_cl(record, handler):
    return not _is_cl(record, handler)

class CloseableNestedSetup(logbook.NestedSetup):
    def close(self):
        for obj in self.objects:
            if hasattr(obj, "close"):
                obj.close()

def _create_log_handler(config):
    """Route pipeline messages to the run log and stderr, command lines to their own file.
    """
    logbook.set_datetime_format("local")
    handlers = [logbook.NullHandler()]
    if config is not None:
        utils.safe_makedir(config.log_dir)
        handlers.append(logbook.FileHandler(config.run_log_file, format_string=FORMAT_STR,
                                            level="INFO", filter=_not_cl))
        handlers.append(logbook.FileHandler(config.commands_log_file, format_string=FORMAT_STR,
                                            level="DEBUG", filter=_is_cl))
    handlers.append(logbook.StreamHandler(sys.stderr, format_string=FORMAT_STR,
                                          level="INFO", bubble=True, filter=_not_cl))
    return CloseableNestedSetup(handlers)

@contextlib.contextmanager
def setup_local_logging(config=None):
    """Setup logging for a pipeline run, writing to the run log inside the log directory.

    Without a configuration, messages only go to stderr.
    """
    handler = _create_log_handler(config)
    handler.push_application()
    try:
        yield handler
    finally:
        handler.pop_application()
        handler.close()
