# --- src/fecap_core/log_config.py ---
import logging
import os
import sys

#: Environment variable that overrides the level passed to `setup_logging`.
LOG_LEVEL_ENV_VAR = "FECAP_LOG_LEVEL"

def setup_logging(level=logging.INFO):
    """
    Configures logging to stdout for the whole process.

    The device evaluation loop logs every reversal and solver outcome at DEBUG, so a
    host simulator typically keeps the default INFO level and raises it via the
    FECAP_LOG_LEVEL environment variable only while debugging a single device.
    """
    env_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        level = logging.getLevelName(env_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    log_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"
    )
    root_logger = logging.getLogger() # Get the root logger

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)
    logging.getLogger(__name__).debug(f"Logging configured at level {logging.getLevelName(level)}.")
