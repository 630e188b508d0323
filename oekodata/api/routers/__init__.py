# Oekodata API Routers
# ====================
"""API route handlers."""

from . import pipeline
from . import slack
from . import versions

__all__ = [
    'pipeline',
    'slack',
    'versions',
]
