#!/usr/bin/env python
# Oekodata - Pipeline Runner
# ==========================
# Scheduled checks, operator decisions and the API server
"""
Command-line entry point for the dataset version pipeline.

Usage:
    python scripts/run_pipeline.py --check
    python scripts/run_pipeline.py --monitor
    python scripts/run_pipeline.py --approve "2024/1:2024, Version 5" --user alice
    python scripts/run_pipeline.py --reject "2024/1:2024, Version 5"
    python scripts/run_pipeline.py --history
    python scripts/run_pipeline.py --loop --interval 86400
    python scripts/run_pipeline.py --serve --port 8000
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

logger = logging.getLogger(__name__)


def print_history(pipeline: VersionPipeline) -> None:
    history = pipeline.store.list_history()
    pending = pipeline.store.get_pending()

    print("\n" + "=" * 60)
    print("VERSION HISTORY")
    print("=" * 60)
    if not history:
        print("  (no versions ingested yet)")
    for version in history:
        marker = "*" if version.is_current else " "
        print(f" {marker} {version.version:<35} {version.publish_date or '-':<12} "
              f"{version.materials_count:>5} materials")
    if pending:
        print(f"\nPending: {pending.version_label} "
              f"({len(pending.materials)} materials, staged {pending.staged_at})")
    print("=" * 60)


def main():
    """Main entry point for the pipeline runner."""
    parser = argparse.ArgumentParser(
        description='Oekodata - discover, stage and promote KBOB dataset releases'
    )
    parser.add_argument('--check', action='store_true',
                        help='Run one discovery pass against the publisher page')
    parser.add_argument('--monitor', action='store_true',
                        help='Scan the file server for a new upload')
    parser.add_argument('--approve', metavar='LABEL',
                        help='Approve the pending version with this label')
    parser.add_argument('--reject', metavar='LABEL',
                        help='Reject the pending version with this label')
    parser.add_argument('--force', action='store_true',
                        help='With --approve: re-ingest a label already in history')
    parser.add_argument('--user', '-u', default='cli',
                        help='User recorded with the decision')
    parser.add_argument('--history', action='store_true',
                        help='Print version history and pending state')
    parser.add_argument('--loop', action='store_true',
                        help='Run checks forever on a fixed interval')
    parser.add_argument('--interval', type=float, default=None,
                        help='Seconds between checks in --loop mode')
    parser.add_argument('--use-monitor', action='store_true',
                        help='In --loop mode, scan the file server instead of crawling')
    parser.add_argument('--serve', action='store_true',
                        help='Start the HTTP API with uvicorn')
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    args = parser.parse_args()

    config = get_config()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.serve:
        import uvicorn
        uvicorn.run("oekodata.api.main:app", host=args.host, port=args.port)
        return 0

    pipeline = VersionPipeline.from_config(config)

    try:
        if args.check:
            print(json.dumps(pipeline.run_check().to_dict(), indent=2))
        if args.monitor:
            print(json.dumps(pipeline.run_monitor().to_dict(), indent=2))
        if args.approve:
            outcome = pipeline.approve(args.approve, user=args.user, force=args.force)
            print(json.dumps(outcome.to_dict(), indent=2))
        if args.reject:
            outcome = pipeline.reject(args.reject, user=args.user)
            print(json.dumps(outcome.to_dict(), indent=2))
    except PipelineError as e:
        logger.error(str(e))
        return 1

    if args.history:
        print_history(pipeline)

    if args.loop:
        pipeline.run_forever(args.interval, use_monitor=args.use_monitor)

    return 0


if __name__ == '__main__':
    sys.exit(main())
