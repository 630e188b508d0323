# Oekodata - Configuration
# ========================
# Environment-driven configuration for the version pipeline
"""
Configuration for crawling, monitoring, storage and notifications.

All values come from environment variables (a local .env file is loaded
first) with defaults matching the public KBOB publication.
"""

import os
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_URL = "https://www.kbob.admin.ch/de/oekobilanzdaten-im-baubereich"
DEFAULT_FILESERVICE_URL = (
    "https://backend.kbob.admin.ch/fileservice/"
    "sdweb-docs-prod-kbobadminch-files/files"
)
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class SupersedePolicy(str, Enum):
    """What to do with a new candidate while another one is pending."""
    REPLACE = "replace"              # Newest detection wins, operator is told
    KEEP_EXISTING = "keep_existing"  # Newer candidate is refused until decided


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class CrawlerConfig:
    """Settings for the publisher page crawler and downloader."""
    source_url: str = DEFAULT_SOURCE_URL
    download_dir: str = "./downloads"
    user_agent: str = DEFAULT_USER_AGENT
    request_delay: float = 2.0      # seconds between page interactions
    download_delay: float = 3.0     # seconds before each file download
    navigation_timeout: float = 60.0
    selector_timeout: float = 10.0
    http_timeout: float = 60.0
    max_expand_passes: int = 5
    headless: bool = True
    extra_headers: Dict[str, str] = field(default_factory=lambda: {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "de-CH,de;q=0.9,en;q=0.8",
        "Referer": "https://www.kbob.admin.ch/",
    })

    @classmethod
    def from_env(cls) -> "CrawlerConfig":
        """Create config from environment variables."""
        return cls(
            source_url=os.getenv("OEKODATA_SOURCE_URL", DEFAULT_SOURCE_URL),
            download_dir=os.getenv("OEKODATA_DOWNLOAD_DIR", "./downloads"),
            user_agent=os.getenv("OEKODATA_USER_AGENT", DEFAULT_USER_AGENT),
            request_delay=float(os.getenv("OEKODATA_REQUEST_DELAY", "2.0")),
            download_delay=float(os.getenv("OEKODATA_DOWNLOAD_DELAY", "3.0")),
            navigation_timeout=float(os.getenv("OEKODATA_NAVIGATION_TIMEOUT", "60")),
            selector_timeout=float(os.getenv("OEKODATA_SELECTOR_TIMEOUT", "10")),
            http_timeout=float(os.getenv("OEKODATA_HTTP_TIMEOUT", "60")),
            max_expand_passes=int(os.getenv("OEKODATA_MAX_EXPAND_PASSES", "5")),
            headless=_env_bool("OEKODATA_HEADLESS", "true"),
        )


@dataclass
class MonitorConfig:
    """Settings for the file-server directory monitor."""
    fileservice_url: str = DEFAULT_FILESERVICE_URL
    http_timeout: float = 30.0
    months_back: int = 1

    @classmethod
    def from_env(cls) -> "MonitorConfig":
        """Create config from environment variables."""
        return cls(
            fileservice_url=os.getenv("OEKODATA_FILESERVICE_URL", DEFAULT_FILESERVICE_URL),
            http_timeout=float(os.getenv("OEKODATA_HTTP_TIMEOUT", "30")),
            months_back=int(os.getenv("OEKODATA_MONITOR_MONTHS_BACK", "1")),
        )


@dataclass
class PipelineConfig:
    """Top-level configuration for the version pipeline."""
    db_path: str = "./data/oekodata.db"
    slack_webhook_url: Optional[str] = None
    notify_timeout: float = 10.0
    promote_retries: int = 3
    supersede_policy: SupersedePolicy = SupersedePolicy.REPLACE
    preview_count: int = 3
    strict_layout: bool = True
    check_interval: float = 24 * 3600.0
    log_level: str = "INFO"
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)

    @property
    def db_file(self) -> Path:
        return Path(self.db_path)

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Create config from environment variables (after loading .env)."""
        load_dotenv()

        policy_str = os.getenv("OEKODATA_SUPERSEDE_POLICY", "replace").lower()
        try:
            policy = SupersedePolicy(policy_str)
        except ValueError:
            logger.warning(f"Unknown OEKODATA_SUPERSEDE_POLICY '{policy_str}', defaulting to replace")
            policy = SupersedePolicy.REPLACE

        return cls(
            db_path=os.getenv("OEKODATA_DB_PATH", "./data/oekodata.db"),
            slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL") or None,
            notify_timeout=float(os.getenv("OEKODATA_NOTIFY_TIMEOUT", "10")),
            promote_retries=max(1, int(os.getenv("OEKODATA_PROMOTE_RETRIES", "3"))),
            supersede_policy=policy,
            preview_count=int(os.getenv("OEKODATA_PREVIEW_COUNT", "3")),
            strict_layout=_env_bool("OEKODATA_STRICT_LAYOUT", "true"),
            check_interval=float(os.getenv("OEKODATA_CHECK_INTERVAL", str(24 * 3600))),
            log_level=os.getenv("OEKODATA_LOG_LEVEL", "INFO").upper(),
            crawler=CrawlerConfig.from_env(),
            monitor=MonitorConfig.from_env(),
        )


# Singleton instance
_config: Optional[PipelineConfig] = None
_config_lock = threading.Lock()


def get_config() -> PipelineConfig:
    """Get the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = PipelineConfig.from_env()
    return _config


def reset_config() -> None:
    """Forget the cached configuration (used by tests)."""
    global _config
    with _config_lock:
        _config = None
