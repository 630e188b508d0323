"""
Pytest fixtures for the Oekodata test suite.
"""

import io
import os
import sys
import tempfile
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from oekodata.discovery import CandidateMetadata, CandidateSource
from oekodata.ingest import INDICATOR_FIELDS, Material
from oekodata.notify import NotificationGateway
from oekodata.settings import PipelineConfig
from oekodata.versions import VersionedStore

SHEET_WIDTH = 31

HEADER_ROW = (
    ["ID-Nummer", "UUID-Nummer", "BAUMATERIALIEN", "ID-Nummer Entsorgung",
     "Entsorgung", "Rohdichte/ Flächenmasse", "Bezug"]
    + [f"Indikator {i}" for i in range(len(INDICATOR_FIELDS))]
    + ["MATÉRIAUX DE CONSTRUCTION", "Élimination"]
)


def make_uuid(n: int) -> str:
    """Deterministic, valid version-4 UUID."""
    return str(uuid.UUID(int=n, version=4))


class RecordingNotifier(NotificationGateway):
    """Notification gateway that keeps every message for assertions."""

    def __init__(self, deliver: bool = True):
        self.deliver = deliver
        self.messages: List[Dict[str, Any]] = []

    def send(self, text, blocks=None):
        self.messages.append({'text': text, 'blocks': blocks})
        return self.deliver

    @property
    def texts(self) -> List[str]:
        return [m['text'] for m in self.messages]


class FakeSource(CandidateSource):
    """Candidate source returning a fixed list (or raising)."""

    def __init__(self, candidates: Optional[List[CandidateMetadata]] = None, error=None):
        self.candidates = candidates or []
        self.error = error
        self.calls = 0

    def discover(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.candidates)


class FakeDownloader:
    """Writes prepared workbook bytes to disk instead of downloading."""

    def __init__(self, directory: str, content: bytes = b"", error=None):
        self.directory = Path(directory)
        self.content = content
        self.error = error
        self.calls = 0

    def download(self, candidate):
        self.calls += 1
        if self.error:
            raise self.error
        path = self.directory / (candidate.filename or "download.xlsx")
        path.write_bytes(self.content)
        return path


@pytest.fixture
def temp_dir():
    """Temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def db_path(temp_dir):
    return os.path.join(temp_dir, "store.db")


@pytest.fixture
def store(db_path):
    return VersionedStore(db_path)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def pipeline_config(db_path, temp_dir):
    config = PipelineConfig(db_path=db_path, promote_retries=2)
    config.crawler.download_dir = temp_dir
    return config


@pytest.fixture
def material_row():
    """Factory for one spreadsheet data row."""
    def _row(n: int, uuid_value: Optional[str] = None, name_de: Any = "Beton",
             name_fr: Any = "Béton", density: Any = "2400", unit: str = "kg",
             indicators: Optional[List[Any]] = None, legacy_id: Optional[str] = None) -> List[Any]:
        values = indicators if indicators is not None else [
            round(0.1 * (i + 1) + n, 3) for i in range(len(INDICATOR_FIELDS))
        ]
        return (
            [legacy_id or f"01.{n:03d}", uuid_value or make_uuid(n), name_de,
             f"E{n:02d}", "Deponie", density, unit]
            + list(values)
            + [name_fr, "Décharge"]
        )
    return _row


@pytest.fixture
def build_workbook():
    """Factory producing .xlsx bytes with a title row, header row and data rows."""
    def _build(rows: List[List[Any]], sheet_name: str = "Baumaterialien Matériaux",
               header: Optional[List[Any]] = None, with_header: bool = True,
               extra_sheets: Optional[Dict[str, List[List[Any]]]] = None) -> bytes:
        body: List[List[Any]] = [["KBOB Ökobilanzdaten im Baubereich"] + [None] * (SHEET_WIDTH - 1)]
        if with_header:
            body.append(list(header or HEADER_ROW))
        body.extend(rows)
        width = max(len(r) for r in body)
        body = [list(r) + [None] * (width - len(r)) for r in body]

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            for name, extra_rows in (extra_sheets or {}).items():
                pd.DataFrame(extra_rows).to_excel(writer, sheet_name=name, header=False, index=False)
            pd.DataFrame(body).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return buffer.getvalue()
    return _build


@pytest.fixture
def make_material():
    """Factory for Material records with indicator values derived from n."""
    def _make(n: int, **overrides) -> Material:
        values = {name: round(0.1 * (i + 1) + n, 3) for i, name in enumerate(INDICATOR_FIELDS)}
        values.update(
            uuid=make_uuid(n),
            legacy_id=f"01.{n:03d}",
            name_de=f"Material {n}",
            name_fr=f"Matériau {n}",
            density="2400",
            density_min=2400.0,
            density_max=2400.0,
            unit="kg",
        )
        values.update(overrides)
        return Material(**values)
    return _make


@pytest.fixture
def make_candidate():
    def _make(label: str = "2024/1:2024, Version 5", publish_date: Optional[str] = "2024-12-03",
              filename: str = "kbob.xlsx") -> CandidateMetadata:
        return CandidateMetadata(
            url=f"https://example.org/files/{filename}",
            title=f"Ökobilanzdaten {label}",
            version_label=label,
            file_size_text="596.00 kB",
            publish_date=publish_date,
            filename=filename,
        )
    return _make
