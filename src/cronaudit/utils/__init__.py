from .imports import resolve_callable
from .logging import setup_logging

__all__ = ["resolve_callable", "setup_logging"]
