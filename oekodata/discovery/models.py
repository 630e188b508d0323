# Oekodata - Discovery Models
# ===========================
"""Metadata describing a discovered, not yet ingested dataset release."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class CandidateMetadata:
    """A dataset file found on the publisher page or file server."""
    url: str
    title: str = ""
    version_label: str = ""
    file_size_text: str = ""
    publish_date: Optional[str] = None  # ISO YYYY-MM-DD
    filename: str = ""

    @property
    def has_label(self) -> bool:
        return bool(self.version_label and self.version_label.strip())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateMetadata":
        return cls(
            url=data.get('url', ''),
            title=data.get('title', ''),
            version_label=data.get('version_label', ''),
            file_size_text=data.get('file_size_text', ''),
            publish_date=data.get('publish_date'),
            filename=data.get('filename', ''),
        )
