# Oekodata Settings Module
"""Environment-driven configuration."""

from .config import (
    CrawlerConfig,
    MonitorConfig,
    PipelineConfig,
    SupersedePolicy,
    get_config,
    reset_config,
)

__all__ = [
    'CrawlerConfig',
    'MonitorConfig',
    'PipelineConfig',
    'SupersedePolicy',
    'get_config',
    'reset_config',
]
