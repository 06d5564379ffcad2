from __future__ import annotations

import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from fantasy_cricket.models import ActionLog


def log_action(
    db: Session,
    *,
    category: str,
    action: str,
    league_id: Optional[int] = None,
    fantasy_team_id: Optional[int] = None,
    details: Optional[dict[str, Any]] = None,
    commit: bool = True,
) -> None:
    payload = json.dumps(details, ensure_ascii=False, default=str) if details else None
    db.add(
        ActionLog(
            category=category,
            action=action,
            league_id=league_id,
            fantasy_team_id=fantasy_team_id,
            details=payload,
        )
    )
    if commit:
        db.commit()
