"""
Challenge voting for the word category game.

Handles vote validation, collection and resolution of a challenge.
Contains no phase logic - purely voting mechanics.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)

VOTE_UP = 'up'
VOTE_DOWN = 'down'
VALID_VOTES = (VOTE_UP, VOTE_DOWN)

# Share of down votes at which a challenged answer is rejected
REJECT_THRESHOLD = 0.5


@dataclass
class ChallengeResult:
    """Outcome of a resolved challenge."""
    up_votes: int = 0
    down_votes: int = 0
    rejected: bool = False

    @property
    def total_votes(self) -> int:
        return self.up_votes + self.down_votes

    def to_dict(self) -> Dict[str, Any]:
        return {
            'up_votes': self.up_votes,
            'down_votes': self.down_votes,
            'total_votes': self.total_votes,
            'rejected': self.rejected
        }


@dataclass
class ChallengeVote:
    """A challenge against one revealed answer."""
    owner_id: str
    challenger_id: str
    answer: str
    votes: Dict[str, str] = field(default_factory=dict)  # voter -> 'up' | 'down'
    result: Optional[ChallengeResult] = None

    @property
    def is_resolved(self) -> bool:
        return self.result is not None

    def validate_vote(self, voter_id: str, vote, eligible_voters: Iterable[str]) -> Tuple[bool, str]:
        """
        Validate a vote before recording it.

        Args:
            voter_id: Participant voting
            vote: 'up' or 'down'
            eligible_voters: Participants allowed to vote

        Returns:
            Tuple of (is_valid, reason)
        """
        if self.is_resolved:
            return False, "Voting has ended"

        if vote not in VALID_VOTES:
            return False, "Invalid vote"

        if voter_id == self.owner_id:
            return False, "Cannot vote on your own answer"

        if voter_id not in eligible_voters:
            return False, "You are not eligible to vote"

        if voter_id in self.votes:
            return False, "You have already voted"

        return True, "Vote is valid"

    def record_vote(self, voter_id: str, vote, eligible_voters: Iterable[str]) -> bool:
        """
        Record a vote if it is valid.

        Returns:
            True if the vote was recorded
        """
        eligible = set(eligible_voters)
        is_valid, reason = self.validate_vote(voter_id, vote, eligible)
        if not is_valid:
            logger.debug(f"Rejected vote from {voter_id}: {reason}")
            return False

        self.votes[voter_id] = vote
        return True

    def has_everyone_voted(self, eligible_voters: Iterable[str]) -> bool:
        """True when every eligible voter (never the owner) has voted."""
        return all(voter in self.votes for voter in eligible_voters if voter != self.owner_id)

    def resolve(self) -> ChallengeResult:
        """
        Count the votes. The answer is rejected when at least half of the
        votes cast are down votes; with no votes it stands.

        Returns:
            The challenge result (also stored on the challenge)
        """
        if self.result is not None:
            return self.result

        counts = Counter(self.votes.values())
        up_votes = counts.get(VOTE_UP, 0)
        down_votes = counts.get(VOTE_DOWN, 0)
        total = up_votes + down_votes

        rejected = total > 0 and down_votes / total >= REJECT_THRESHOLD
        self.result = ChallengeResult(up_votes=up_votes, down_votes=down_votes, rejected=rejected)

        logger.info(f"Challenge on '{self.answer}' resolved: {up_votes} up, {down_votes} down, "
                    f"{'rejected' if rejected else 'accepted'}")
        return self.result

    def to_dict(self) -> Dict[str, Any]:
        """Public view: who voted, but not how, until resolved."""
        data = {
            'owner_id': self.owner_id,
            'challenger_id': self.challenger_id,
            'answer': self.answer,
            'voted_ids': list(self.votes.keys()),
            'result': self.result.to_dict() if self.result else None
        }
        if self.result:
            data['votes'] = dict(self.votes)
        return data
