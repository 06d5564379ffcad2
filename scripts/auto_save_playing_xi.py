from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(BASE_DIR))

from fantasy_cricket.db.session import SessionLocal  # noqa: E402
from fantasy_cricket.services.auto_save import propagate_all  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Copy forward missing Playing XIs for locked, open matches."
    )
    parser.add_argument(
        "--league",
        dest="league_id",
        type=int,
        default=None,
        help="Restrict the pass to a single league id.",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Write lineups to DB. Without this flag it runs as dry-run.",
    )
    args = parser.parse_args()

    db = SessionLocal()
    try:
        result = propagate_all(db, apply=bool(args.apply), league_id=args.league_id)
        print(json.dumps(result, indent=2, ensure_ascii=False))
    finally:
        db.close()


if __name__ == "__main__":
    main()
