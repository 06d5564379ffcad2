"""Transfer accounting for Playing XI changes.

Costs are always derived from consecutive lineup diffs. Nothing here reads
or trusts the cached counters on ``fantasy_teams``; cumulative spend is
rebuilt by replaying the stored chain every time it is needed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Set

from fantasy_cricket.services.errors import BudgetExceededError
from fantasy_cricket.services.lineups import Lineup, PlayerRef

CAPTAIN_CHANGE_ALLOWANCE = 1
VICE_CAPTAIN_CHANGE_ALLOWANCE = 1


@dataclass(frozen=True)
class PriceBreakdown:
    player_transfers: int = 0
    captain_cost: int = 0
    vice_captain_cost: int = 0
    players_added: tuple[PlayerRef, ...] = ()
    players_removed: tuple[PlayerRef, ...] = ()

    @property
    def total(self) -> int:
        return self.player_transfers + self.captain_cost + self.vice_captain_cost

    def as_dict(self) -> dict:
        return {
            "player_transfers": self.player_transfers,
            "captain_cost": self.captain_cost,
            "vice_captain_cost": self.vice_captain_cost,
            "total": self.total,
            "players_added": [p.as_dict() for p in self.players_added],
            "players_removed": [p.as_dict() for p in self.players_removed],
        }


FREE = PriceBreakdown()


def _replaced_by(player_id: str, replacements: Mapping[str, str], candidates: Set[str]) -> Optional[str]:
    """Follow approved replacements from ``player_id`` to one of ``candidates``."""
    seen: Set[str] = set()
    current = replacements.get(player_id)
    while current is not None and current not in seen:
        if current in candidates:
            return current
        seen.add(current)
        current = replacements.get(current)
    return None


def price_change(
    baseline: Optional[Lineup],
    proposed: Lineup,
    replacements: Optional[Mapping[str, str]] = None,
) -> PriceBreakdown:
    """Cost of moving from ``baseline`` to ``proposed``.

    A missing baseline means the first lineup of the chain, which is free.
    ``replacements`` maps an injured player id to the id that replaced it in
    the squad; swapping one for the other is not a transfer, and neither is
    handing the replacement the injured player's captaincy.
    """
    if baseline is None:
        return FREE
    replacements = replacements or {}
    before = baseline.player_ids
    after = proposed.player_ids
    incoming = {pid for pid in after if pid not in before}

    exempt_out: Set[str] = set()
    exempt_in: Set[str] = set()
    for player in baseline.players:
        if player.player_id in after:
            continue
        substitute = _replaced_by(player.player_id, replacements, incoming - exempt_in)
        if substitute is not None:
            exempt_out.add(player.player_id)
            exempt_in.add(substitute)

    added = tuple(
        p for p in proposed.players if p.player_id in incoming and p.player_id not in exempt_in
    )
    removed = tuple(
        p
        for p in baseline.players
        if p.player_id not in after and p.player_id not in exempt_out
    )

    def _changed(old: str, new: str) -> bool:
        return old != new and _replaced_by(old, replacements, {new}) is None

    return PriceBreakdown(
        player_transfers=len(added),
        captain_cost=int(_changed(baseline.captain_id, proposed.captain_id)),
        vice_captain_cost=int(_changed(baseline.vice_captain_id, proposed.vice_captain_id)),
        players_added=added,
        players_removed=removed,
    )


@dataclass
class LedgerState:
    transfer_limit: int
    transfers_used: int = 0
    captain_changes: int = 0
    vice_captain_changes: int = 0
    per_match: List[dict] = field(default_factory=list)

    @property
    def transfers_remaining(self) -> int:
        return max(0, self.transfer_limit - self.transfers_used)

    @property
    def captain_change_used(self) -> bool:
        return self.captain_changes >= CAPTAIN_CHANGE_ALLOWANCE

    @property
    def vice_captain_change_used(self) -> bool:
        return self.vice_captain_changes >= VICE_CAPTAIN_CHANGE_ALLOWANCE

    def apply(self, match_id: Optional[int], price: PriceBreakdown) -> None:
        self.transfers_used += price.total
        self.captain_changes += price.captain_cost
        self.vice_captain_changes += price.vice_captain_cost
        self.per_match.append(
            {
                "match_id": match_id,
                "player_transfers": price.player_transfers,
                "captain_cost": price.captain_cost,
                "vice_captain_cost": price.vice_captain_cost,
                "total": price.total,
            }
        )


def replay_chain(
    chain: Sequence[Lineup],
    transfer_limit: int,
    replacements: Optional[Mapping[str, str]] = None,
) -> LedgerState:
    """Sum the cost of every consecutive pair in ``chain`` (timeline order)."""
    state = LedgerState(transfer_limit=transfer_limit)
    previous: Optional[Lineup] = None
    for lineup in chain:
        state.apply(lineup.match_id, price_change(previous, lineup, replacements))
        previous = lineup
    return state


def check_budget(state: LedgerState, price: PriceBreakdown) -> None:
    """Raise ``BudgetExceededError`` if ``price`` does not fit in ``state``.

    The captain and vice-captain allowances are checked before the shared
    transfer pool so the caller learns which budget actually blocked the save.
    """
    remaining = state.transfer_limit - state.transfers_used
    if price.captain_cost and state.captain_changes + price.captain_cost > CAPTAIN_CHANGE_ALLOWANCE:
        raise BudgetExceededError(
            "captain_change_limit_exceeded",
            "Captain change already used this season.",
            transfers_used=state.transfers_used,
            transfers_remaining=max(0, remaining),
            transfers_this_match=price.total,
        )
    if (
        price.vice_captain_cost
        and state.vice_captain_changes + price.vice_captain_cost > VICE_CAPTAIN_CHANGE_ALLOWANCE
    ):
        raise BudgetExceededError(
            "vice_captain_change_limit_exceeded",
            "Vice-captain change already used this season.",
            transfers_used=state.transfers_used,
            transfers_remaining=max(0, remaining),
            transfers_this_match=price.total,
        )
    if state.transfers_used + price.total > state.transfer_limit:
        raise BudgetExceededError(
            "transfer_limit_exceeded",
            f"Transfer limit exceeded. You have {max(0, remaining)} transfers remaining, "
            f"but this change would use {price.total}.",
            transfers_used=state.transfers_used,
            transfers_remaining=max(0, remaining),
            transfers_this_match=price.total,
        )
