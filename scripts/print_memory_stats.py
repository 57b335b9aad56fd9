"""
Print a memory statistics report for a small demo client.

Usage:
  python scripts/print_memory_stats.py [--full] [--pretty] [--config PATH]
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from memstats.core.config import load_stats_config  # noqa: E402
from memstats.core.context import ClientContext, Session  # noqa: E402
from memstats.core.logger import setup_logging  # noqa: E402
from memstats.core.stats.provider import CounterProvider, fragment  # noqa: E402


class _FileManager(CounterProvider):
    def __init__(self) -> None:
        self.files: Dict[int, str] = {1: "photo.jpg", 2: "voice.ogg"}

    def counters(self, full: bool) -> Sequence[Tuple[str, Any]]:
        out: List[Tuple[str, Any]] = [("file_count", len(self.files))]
        if full:
            out.append(("file_names", sorted(self.files.values())))
        return out


class _UserManager:
    def __init__(self) -> None:
        self.users = {101: "alice", 102: "bob", 103: "carol"}

    def memory_stats(self, output: List[str]) -> None:
        output.append(fragment(users=len(self.users), users_full=0))


class _ConnectionStateManager:
    def memory_stats(self, output: List[str], full: bool = False) -> None:
        # Nothing cached.
        return


def build_demo_context(config_path: str) -> ClientContext:
    cfg = load_stats_config(config_path)
    ctx = ClientContext(session=Session(automated=False), config=cfg, logger=setup_logging(cfg.log_dir))
    ctx.register_subsystem("user_manager_", _UserManager())
    ctx.register_subsystem("connection_state_manager_", _ConnectionStateManager())
    ctx.register_subsystem("file_manager_", _FileManager())
    return ctx


def main(argv: Sequence[str] = ()) -> int:
    ap = argparse.ArgumentParser(description="Print a memory statistics report.")
    ap.add_argument("--full", action="store_true", help="ask providers for their detailed fragment")
    ap.add_argument("--pretty", action="store_true", help="indent the JSON report")
    ap.add_argument("--config", default="config/memstats.json")
    args = ap.parse_args(list(argv) or None)

    ctx = build_demo_context(args.config)
    try:
        stats = ctx.get_memory_stats(full=args.full)
    finally:
        ctx.close()
    if args.pretty:
        print(json.dumps(json.loads(stats.debug), indent=2))
    else:
        print(stats.debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
