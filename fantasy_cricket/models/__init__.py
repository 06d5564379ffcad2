from fantasy_cricket.models.tables import (
    ActionLog,
    FantasyLeague,
    FantasyTeam,
    FantasyTeamPlayer,
    LeagueMatch,
    PlayerMatchPoints,
    TeamMatchScore,
    TeamPlayingXI,
    TeamPlayingXIPlayer,
    TransferRecord,
)

__all__ = [
    "ActionLog",
    "FantasyLeague",
    "FantasyTeam",
    "FantasyTeamPlayer",
    "LeagueMatch",
    "PlayerMatchPoints",
    "TeamMatchScore",
    "TeamPlayingXI",
    "TeamPlayingXIPlayer",
    "TransferRecord",
]
