"""
Round scoring for Blend In.

Pure functions: given the faker, the cast votes and the roster they
always produce the same outcome. Nothing here touches session state.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable

logger = logging.getLogger(__name__)

@dataclass
class VoteTally:
    """Vote counts for a finished voting phase."""
    vote_counts: Dict[str, int] = field(default_factory=dict)  # target -> count
    total_votes: int = 0
    faker_votes: int = 0

def tally_votes(votes: Dict[str, str], faker_id: str) -> VoteTally:
    """Count votes per target."""
    vote_counts = Counter(votes.values())
    return VoteTally(
        vote_counts=dict(vote_counts),
        total_votes=len(votes),
        faker_votes=vote_counts.get(faker_id, 0)
    )

def is_faker_caught(votes: Dict[str, str], faker_id: str) -> bool:
    """
    A faker is caught only by a strict majority of the cast votes.

    A tie, or any split where the faker holds half or less, is not a catch.
    """
    tally = tally_votes(votes, faker_id)
    return tally.faker_votes * 2 > tally.total_votes

def score_round(faker_id: str,
                votes: Dict[str, str],
                player_ids: Iterable[str],
                faker_escape_points: int,
                catch_points: int) -> Dict[str, int]:
    """
    Compute per-player score deltas for one round.

    Faker not caught: the faker gains ``faker_escape_points``, nobody else scores.
    Faker caught: every non-faker whose vote is the faker gains ``catch_points``.

    Args:
        faker_id: Id of this round's faker
        votes: Mapping voter id -> target id
        player_ids: Current roster ids
        faker_escape_points: Reward for an uncaught faker
        catch_points: Reward per correct voter when the faker is caught

    Returns:
        Mapping player id -> points gained this round (0 for everyone not rewarded)
    """
    deltas = {pid: 0 for pid in player_ids}

    if is_faker_caught(votes, faker_id):
        for voter_id, target_id in votes.items():
            if voter_id != faker_id and target_id == faker_id and voter_id in deltas:
                deltas[voter_id] += catch_points
    elif faker_id in deltas:
        deltas[faker_id] += faker_escape_points

    logger.debug(f"Scored round: faker={faker_id} votes={votes} deltas={deltas}")
    return deltas
