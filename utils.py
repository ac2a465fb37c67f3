import os
import sys
import json
import logging
from typing import NamedTuple, Optional

import click

LOGGER_NAME = "static_http"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


class ServerConfig(NamedTuple):
    root: str
    host: str = "127.0.0.1"
    port: int = 8000
    default_type: Optional[str] = None
    threaded: bool = False
    cache_age: int = 3600
    block_size: int = 4096

    @classmethod
    def create(cls, root, **options):
        """Build a config with the document root canonicalized once, up front"""
        real_root = os.path.realpath(root)
        if not os.path.isdir(real_root):
            raise ValueError(f"Document root is not a directory: {root}")
        return cls(root=real_root, **options)


class ConfigLoader:
    # JSON type each key must already have; no coercion
    KEY_TYPES = {
        "host": str,
        "port": int,
        "threaded": bool,
        "default_type": str,
        "cache_age": int,
    }

    @staticmethod
    def load_config_file(config_path):
        with open(config_path, 'r') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"{config_path}: expected a JSON object")

        unknown = set(data) - set(ConfigLoader.KEY_TYPES)
        if unknown:
            raise ValueError(f"{config_path}: unknown keys {sorted(unknown)}")

        for key, value in data.items():
            expected = ConfigLoader.KEY_TYPES[key]
            # bool is a subclass of int, so true/false must not pass as a port
            wrong_bool = isinstance(value, bool) and expected is not bool
            if wrong_bool or not isinstance(value, expected):
                raise ValueError(f"{config_path}: {key} must be {expected.__name__}, got {value!r}")
        return data

    @staticmethod
    def merge(file_options, **overrides):
        # command line values win; None means "not given"
        options = dict(file_options)
        for key, value in overrides.items():
            if value is not None:
                options[key] = value
        return options


def setup_logging(log_file=None, level=logging.INFO):
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if log_file:
        handler = logging.FileHandler(log_file, mode='a')
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.handlers = [handler]
    logger.propagate = False
    return logger


def error_text(message):
    return click.style(f"❌ {message}", fg='bright_red', bold=True)
