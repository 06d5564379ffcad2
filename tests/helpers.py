from datetime import datetime, timedelta, timezone

from fantasy_cricket.services.lineups import Lineup, PlayerRef

T0 = datetime(2026, 3, 1, 14, 0, tzinfo=timezone.utc)

SQUAD = [
    PlayerRef("k1", "Keeper One", "WK-Batsman", "MI"),
    PlayerRef("k2", "Keeper Two", "Wicketkeeper Batter", "CSK"),
    PlayerRef("bat1", "Batter One", "Batsman", "MI"),
    PlayerRef("bat2", "Batter Two", "Batsman", "RCB"),
    PlayerRef("bat3", "Batter Three", "Batsman", "KKR"),
    PlayerRef("bat4", "Batter Four", "Batsman", "SRH"),
    PlayerRef("bat5", "Batter Five", "Batsman", "DC"),
    PlayerRef("bowl1", "Bowler One", "Bowler", "MI"),
    PlayerRef("bowl2", "Bowler Two", "Bowler", "CSK"),
    PlayerRef("bowl3", "Bowler Three", "Bowler", "RR"),
    PlayerRef("bowl4", "Bowler Four", "Bowler", "GT"),
    PlayerRef("bowl5", "Bowler Five", "Bowler", "PBKS"),
    PlayerRef("bar1", "Bowling AR One", "Bowling Allrounder", "LSG"),
    PlayerRef("bar2", "Bowling AR Two", "Bowling Allrounder", "RCB"),
    PlayerRef("batar1", "Batting AR One", "Batting Allrounder", "KKR"),
]
SQUAD_BY_ID = {player.player_id: player for player in SQUAD}

# 1 keeper, 4 batters, 4 bowlers, 1 bowling AR, 1 batting AR: 22 overs
BASE_XI = ["k1", "bat1", "bat2", "bat3", "bat4", "bowl1", "bowl2", "bowl3", "bowl4", "bar1", "batar1"]


def swap(player_ids, out_id, in_id):
    return [in_id if pid == out_id else pid for pid in player_ids]


def make_lineup(player_ids, captain_id="k1", vice_captain_id="bowl1", match_id=None):
    return Lineup(
        players=tuple(SQUAD_BY_ID[pid] for pid in player_ids),
        captain_id=captain_id,
        vice_captain_id=vice_captain_id,
        match_id=match_id,
    )


def after(match, minutes=1):
    start = match.match_start
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return start + timedelta(minutes=minutes)


def before_season():
    return T0 - timedelta(hours=1)
