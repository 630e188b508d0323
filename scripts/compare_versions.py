#!/usr/bin/env python
# Oekodata - Version Comparison
# =============================
# Audit report of material changes between promoted versions
"""
Compare two promoted versions, or every neighbouring pair.

Usage:
    python scripts/compare_versions.py --from "2022/1:2022, Version 5" --to "2024/1:2024, Version 6"
    python scripts/compare_versions.py --all
    python scripts/compare_versions.py --all --json > changes.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from oekodata import VersionNotFound
from oekodata.settings import get_config
from oekodata.versions import VersionDiff, VersionedStore, format_report

logging.basicConfig(
    level=logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Compare promoted KBOB dataset versions')
    parser.add_argument('--from', dest='from_label', help='Older version label')
    parser.add_argument('--to', dest='to_label', help='Newer version label')
    parser.add_argument('--all', action='store_true',
                        help='Compare each version with the next one by publish date')
    parser.add_argument('--db', default=None, help='Path to the store database')
    parser.add_argument('--json', action='store_true', help='Print JSON instead of text')
    parser.add_argument('--max-materials', type=int, default=20,
                        help='Materials listed per section in the text report')

    args = parser.parse_args()

    if not args.all and not (args.from_label and args.to_label):
        parser.error("use --all or both --from and --to")

    store = VersionedStore(args.db or get_config().db_path)
    tool = VersionDiff(store)

    try:
        results = tool.diff_sequential() if args.all else [tool.diff(args.from_label, args.to_label)]
    except VersionNotFound as e:
        logger.error(str(e))
        return 1

    if not results:
        print("Need at least two versions to compare.")
        return 0

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False, default=str))
    else:
        for result in results:
            print(format_report(result, max_materials=args.max_materials))
            print()

    return 0


if __name__ == '__main__':
    sys.exit(main())
