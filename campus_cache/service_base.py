"""Shared base class for cache components.

Gives caches, registries and procedure wrappers a consistent logger without
coupling them to the HTTP layer.
"""

from __future__ import annotations

import logging


class BaseService:
    """Base class that provides a logger for derived components."""

    def __init__(self, logger: logging.Logger | None = None):
        # Module-qualified name keeps loggers readable when subclassed
        self.logger = logger or logging.getLogger(self.__class__.__module__)
