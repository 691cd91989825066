#!/usr/bin/env python3
"""Synchronize a schema using configuration from sync.yaml.

Usage:
    python examples/sync.py
"""

import logging
from pathlib import Path

from mysqlsync import Synchronizer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

if __name__ == "__main__":
    s = Synchronizer.from_config(Path(__file__).with_name("sync.yaml"))
    print(s)
    results = s.run()
    for r in results:
        status = r.get("status", r.get("mode", ""))
        print(f"  {r['table']}: {status} ({r.get('rows_read', 0)} rows)")
