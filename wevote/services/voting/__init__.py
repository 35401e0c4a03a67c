from wevote.services.voting.approval import tally_approval
from wevote.services.voting.payloads import (
    ApprovalVote,
    RankedVote,
    SimpleVote,
    parse_vote_payload,
    vote_from_payload,
)
from wevote.services.voting.rcv import tally_rcv
from wevote.services.voting.simple import tally_simple

__all__ = [
    "ApprovalVote",
    "RankedVote",
    "SimpleVote",
    "parse_vote_payload",
    "tally_approval",
    "tally_rcv",
    "tally_simple",
    "vote_from_payload",
]
