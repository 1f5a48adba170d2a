"""
Core Components.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Naming and quoting logic
    schema/: DDL builders

Everything in core is pure: no connections, no HTTP, no environment reads
beyond configuration defaults.
"""

from . import models
from . import logic
from . import schema

__all__ = ['models', 'logic', 'schema']
