#!/usr/bin/env python
# Oekodata - Local Ingestion
# ==========================
"""
Ingest a KBOB workbook from disk under an explicit version label.

Usage:
    python scripts/ingest_local.py downloads/kbob.xlsx --version "2024/1:2024, Version 5"
    python scripts/ingest_local.py kbob.xlsx --version 6.2 --date 2024-12-03 --approve
    python scripts/ingest_local.py kbob.xlsx --version 6.2 --approve --force
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from oekodata import PipelineError, VersionPipeline
from oekodata.settings import get_config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Ingest a local KBOB workbook')
    parser.add_argument('path', help='Path to the .xlsx file')
    parser.add_argument('--version', required=True, help='Version label to record')
    parser.add_argument('--date', default=None, help='Publish date (YYYY-MM-DD)')
    parser.add_argument('--url', default=None, help='Original download URL')
    parser.add_argument('--approve', action='store_true',
                        help='Promote immediately instead of staging for approval')
    parser.add_argument('--force', action='store_true',
                        help='Overwrite a version label that was already ingested')

    args = parser.parse_args()

    path = Path(args.path)
    if not path.is_file():
        logger.error(f"File not found: {path}")
        return 1

    pipeline = VersionPipeline.from_config(get_config())
    try:
        result = pipeline.ingest_local(
            str(path), args.version,
            publish_date=args.date,
            url=args.url,
            auto_approve=args.approve,
            force=args.force,
        )
    except PipelineError as e:
        logger.error(str(e))
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
