from .base import BaseAction
from .database import DatabaseAction
from .faker import FakerGenerate
from .http import HttpAction
from .registry import ConfigurationError, build_action, resolve, resolve_dialect

__all__ = [
    "BaseAction",
    "DatabaseAction",
    "FakerGenerate",
    "HttpAction",
    "ConfigurationError",
    "build_action",
    "resolve",
    "resolve_dialect",
]
