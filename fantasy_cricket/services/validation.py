from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List

from fantasy_cricket.core.config import get_settings
from fantasy_cricket.services.lineups import Lineup, PlayerRef


class RoleClass(str, Enum):
    KEEPER = "keeper"
    BATTER = "batter"
    BOWLER = "bowler"
    BATTING_ALLROUNDER = "batting_allrounder"
    BOWLING_ALLROUNDER = "bowling_allrounder"
    UNKNOWN = "unknown"


OVERS_BY_ROLE = {
    RoleClass.BOWLER: 4,
    RoleClass.BOWLING_ALLROUNDER: 4,
    RoleClass.BATTING_ALLROUNDER: 2,
    RoleClass.BATTER: 0,
    RoleClass.KEEPER: 0,
    RoleClass.UNKNOWN: 0,
}


def classify_role(raw_label: str | None) -> RoleClass:
    """Map a free-text role label from the data feed to a ``RoleClass``.

    Labels look like "WK-Batsman", "Bowling Allrounder", "Batsman",
    "Bowler" but are not guaranteed to; matching is case-insensitive
    keyword containment, keeper first since "WK-Batsman" also says "bat".
    """
    text = (raw_label or "").strip().lower()
    compact = text.replace("-", "").replace(" ", "").replace("_", "")
    if "wicket" in text or "wk" in compact:
        return RoleClass.KEEPER
    if "allrounder" in compact:
        if "bowl" in text:
            return RoleClass.BOWLING_ALLROUNDER
        if "bat" in text:
            return RoleClass.BATTING_ALLROUNDER
        return RoleClass.UNKNOWN
    if "bowl" in text:
        return RoleClass.BOWLER
    if "bat" in text:
        return RoleClass.BATTER
    return RoleClass.UNKNOWN


@dataclass(frozen=True)
class LineupRules:
    lineup_size: int = 11
    min_wicketkeepers: int = 1
    min_bowling_overs: int = 20

    @classmethod
    def from_settings(cls) -> "LineupRules":
        settings = get_settings()
        return cls(
            lineup_size=settings.LINEUP_SIZE,
            min_wicketkeepers=settings.MIN_WICKETKEEPERS,
            min_bowling_overs=settings.MIN_BOWLING_OVERS,
        )


def bowling_overs(roles: Iterable[RoleClass]) -> int:
    return sum(OVERS_BY_ROLE[role] for role in roles)


def role_summary(players: Iterable[PlayerRef]) -> Dict[str, int]:
    counts = Counter(classify_role(p.role) for p in players)
    summary = {role.value: counts.get(role, 0) for role in RoleClass}
    summary["overs"] = bowling_overs(counts.elements())
    return summary


def validate_lineup(
    proposed: Lineup,
    squad: Dict[str, PlayerRef],
    rules: LineupRules | None = None,
) -> List[str]:
    """Structural checks on a proposed Playing XI.

    Stops at the first failing rule and returns it as a one-element list;
    an empty list means the lineup is valid. Roles are taken from ``squad``,
    which is authoritative over whatever the client sent.
    """
    rules = rules or LineupRules.from_settings()
    ids = [p.player_id for p in proposed.players]

    if len(ids) != rules.lineup_size or len(set(ids)) != rules.lineup_size:
        return [f"lineup_must_have_{rules.lineup_size}_players"]

    if proposed.captain_id == proposed.vice_captain_id:
        return ["captain_vice_captain_same"]

    if proposed.captain_id not in proposed.player_ids:
        return ["captain_not_in_lineup"]
    if proposed.vice_captain_id not in proposed.player_ids:
        return ["vice_captain_not_in_lineup"]

    if any(pid not in squad for pid in ids):
        return ["players_not_in_squad"]

    roles = [classify_role(squad[pid].role) for pid in ids]
    if sum(1 for role in roles if role is RoleClass.KEEPER) < rules.min_wicketkeepers:
        return ["lineup_needs_wicketkeeper"]

    if bowling_overs(roles) < rules.min_bowling_overs:
        return ["lineup_bowling_overs_below_minimum"]

    return []


VALIDATION_MESSAGES = {
    "captain_vice_captain_same": "Captain and vice-captain must be different players.",
    "captain_not_in_lineup": "Captain must be one of the selected players.",
    "vice_captain_not_in_lineup": "Vice-captain must be one of the selected players.",
    "players_not_in_squad": "Every selected player must belong to your squad.",
    "lineup_needs_wicketkeeper": "You must select at least one wicketkeeper.",
    "lineup_bowling_overs_below_minimum": "Your bowlers and all-rounders must cover the minimum overs.",
}


def describe(code: str) -> str:
    if code.startswith("lineup_must_have_"):
        return "A Playing XI needs exactly {} distinct players.".format(
            code.removeprefix("lineup_must_have_").removesuffix("_players")
        )
    return VALIDATION_MESSAGES.get(code, code)
