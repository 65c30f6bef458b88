"""
Logging configuration and setup for the TalkAI Gateway.

Plain text formatting with Unicode escape decoding, so backend fragments and
error bodies in non-Latin scripts stay readable in the logs.
"""

import logging
import os
import json
import re
from typing import Optional


LOGGER_NAME = "talkai-gateway"


class UnicodeFormatter(logging.Formatter):
    """
    Formatter that decodes Unicode escape sequences in log messages.
    """

    def __init__(self, fmt=None, datefmt=None):
        super().__init__(fmt, datefmt)
        self.unicode_pattern = re.compile(r'\\u([0-9a-fA-F]{4})')

    def _decode_unicode_escapes(self, text):
        """
        Decode Unicode escape sequences in the given text.

        Args:
            text (str): Text that may contain Unicode escape sequences

        Returns:
            str: Text with Unicode escape sequences decoded to actual characters
        """
        if not text:
            return text

        try:
            if '"error":' in text and '\\u' in text:
                decoded = json.loads(text)
                if isinstance(decoded, dict):
                    return json.dumps(decoded, ensure_ascii=False)
        except (json.JSONDecodeError, ValueError):
            pass

        def replace_unicode(match):
            hex_code = match.group(1)
            try:
                return chr(int(hex_code, 16))
            except ValueError:
                return match.group(0)

        return self.unicode_pattern.sub(replace_unicode, text)

    def format(self, record):
        formatted = super().format(record)
        return self._decode_unicode_escapes(formatted)


def _resolve_log_level(debug_mode: Optional[bool] = None) -> str:
    # Debug mode wins over LOG_LEVEL; it only ever raises verbosity.
    # Without an explicit flag, DEBUG_MODE is read from the environment.
    if debug_mode is None:
        debug_mode = os.environ.get("DEBUG_MODE", "false").strip().lower() in ("1", "true", "t", "yes", "y", "on")
    if debug_mode:
        return "DEBUG"
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if not isinstance(getattr(logging, level, None), int):
        return "INFO"
    return level


def setup_logging(debug_mode: Optional[bool] = None):
    """
    Single logging setup for the whole project.

    Args:
        debug_mode: Force DEBUG level on (True) or leave it to LOG_LEVEL
            (False). None falls back to the DEBUG_MODE environment variable.

    Returns:
        logging.Logger: Configured logger instance
    """
    log_level = _resolve_log_level(debug_mode)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level))

    logger.handlers.clear()

    formatter = UnicodeFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z"
    )

    # File output is optional: an empty LOG_DIR disables it
    log_dir = os.environ.get("LOG_DIR", "logs")
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, "app.log"))
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        logger.addHandler(file_handler)

        if log_level == "DEBUG":
            debug_handler = logging.FileHandler(os.path.join(log_dir, "debug.log"))
            debug_handler.setFormatter(formatter)
            debug_handler.setLevel(logging.DEBUG)
            logger.addHandler(debug_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if log_level == "DEBUG" else logging.INFO)
    logger.addHandler(console_handler)

    return logger
