"""Logging setup shared by every component"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAMESPACE = "azure_provider_report"

_AZURE_SDK_LOGGERS = ['azure', 'azure.core', 'azure.identity', 'msal', 'urllib3']

_console = Console(stderr=True)


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger writing through rich.

    Handlers are attached to the package root logger only, so repeated calls
    for the same component never duplicate output. Passing ``level`` changes
    the level for the whole package.
    """
    root = logging.getLogger(LOGGER_NAMESPACE)

    if not root.handlers:
        handler = RichHandler(console=_console, show_path=False, show_time=False)
        handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
        root.addHandler(handler)
        root.propagate = False
        root.setLevel(_resolve_level(os.getenv("AZURE_PROVIDER_REPORT_LOG_LEVEL", "INFO")))

        # Azure SDK is very chatty at INFO
        for sdk_logger in _AZURE_SDK_LOGGERS:
            logging.getLogger(sdk_logger).setLevel(logging.WARNING)

    if level:
        root.setLevel(_resolve_level(level))

    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def _resolve_level(level: str) -> int:
    return getattr(logging, str(level).upper(), logging.INFO)
