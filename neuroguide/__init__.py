"""NeuroGuide study planner backend."""

from .constants import APP_VERSION

__version__ = APP_VERSION
