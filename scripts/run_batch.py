#!/usr/bin/env python3
"""
Run a scoring / forecasting batch inline — the cron entry point.

Usage:
    python scripts/run_batch.py score                      # all active leads
    python scripts/run_batch.py score --lead-id L1 --lead-id L2
    python scripts/run_batch.py forecast
    python scripts/run_batch.py all                        # score, then forecast

Requires: DATABASE_URL set (or defaults to sqlite:///local.db). Redis is not
needed; nothing is enqueued.
"""
import sys
import os
import json
import argparse
import logging

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lead_engine.logging_config import configure_logging
from lead_engine.pipeline.manager import run_lead_scoring, run_forecast, run_all
from lead_engine.pipeline.signals import SignalFetchError
from lead_engine.services.settings import is_scoring_enabled

logger = logging.getLogger('scripts.run_batch')


def main(argv=None):
    parser = argparse.ArgumentParser(description='Lead scoring & pipeline forecasting batches')
    parser.add_argument('job', choices=['score', 'forecast', 'all'], help='Which batch to run')
    parser.add_argument('--lead-id', action='append', dest='lead_ids',
                        help='Restrict scoring to this lead (repeatable)')
    args = parser.parse_args(argv)

    configure_logging()

    try:
        if args.job == 'score':
            summaries = [run_lead_scoring(args.lead_ids, scoring_enabled=is_scoring_enabled())]
        elif args.job == 'forecast':
            summaries = [run_forecast()]
        else:
            summaries = run_all(args.lead_ids, scoring_enabled=is_scoring_enabled())
    except SignalFetchError:
        logger.error("Batch '%s' aborted — record store unavailable, retry later", args.job, exc_info=True)
        return 1

    for summary in summaries:
        print(json.dumps(summary.to_dict(), default=str))
    return 0


if __name__ == '__main__':
    sys.exit(main())
