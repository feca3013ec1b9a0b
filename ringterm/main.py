from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import List, Optional

from .core.config import ensure_config, load_config


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point: ensure the config, then replay a scenario if one was given."""
    ap = argparse.ArgumentParser(prog="ringterm")
    ap.add_argument("--verbose", action="store_true", help="log every incoming payload")
    ap.add_argument("--replay", type=Path, default=None, help="scenario script to replay")
    ap.add_argument("--state", type=Path, default=None, help="daemon state for --replay")
    args = ap.parse_args(argv)

    ensure_config()
    cfg = load_config()
    if args.replay is None:
        # The daemon binding ships separately; without it only offline replays run.
        print("ringterm: no daemon binding installed; use --replay <script> to run offline")
        return 1
    if not args.replay.exists():
        print(f"Scenario not found: {args.replay}")
        return 2

    from .tools.replay_events import render, replay

    on_status = print if args.verbose else None
    session = asyncio.run(
        replay(args.replay, args.state, cfg, verbose=args.verbose, on_status=on_status)
    )
    render(session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
