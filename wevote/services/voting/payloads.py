from dataclasses import dataclass
from typing import Tuple

from wevote.errors import InvalidArgument


@dataclass(frozen=True)
class SimpleVote:
    choice: str
    kind = "simple"

    def to_payload(self):
        return {"choice": self.choice}

    def shape(self):
        return {"choice": True}


@dataclass(frozen=True)
class ApprovalVote:
    approvals: Tuple[str, ...]
    kind = "approval"

    def to_payload(self):
        return {"approvals": list(self.approvals)}

    def shape(self):
        return {"approvalsCount": len(self.approvals)}


@dataclass(frozen=True)
class RankedVote:
    ranking: Tuple[str, ...]
    kind = "rcv"

    def to_payload(self):
        return {"ranking": list(self.ranking)}

    def shape(self):
        return {"rankingLength": len(self.ranking)}


def _known_unique(values, option_ids):
    known = set(option_ids)
    return tuple(dict.fromkeys(value for value in values if value in known))


# Unknown ids and repeats are dropped, keeping the first occurrence.
def parse_vote_payload(ballot_type, option_ids, data):
    data = data or {}

    if ballot_type == "rcv":
        ranking = data.get("ranking")
        if not isinstance(ranking, list) or not ranking:
            raise InvalidArgument("ranking required")
        cleaned = _known_unique(ranking, option_ids)
        if not cleaned:
            raise InvalidArgument("ranking has no valid options")
        return RankedVote(cleaned)

    if ballot_type == "approval":
        approvals = data.get("approvals")
        if not isinstance(approvals, list) or not approvals:
            raise InvalidArgument("approvals required")
        cleaned = _known_unique(approvals, option_ids)
        if not cleaned:
            raise InvalidArgument("approvals have no valid options")
        return ApprovalVote(cleaned)

    if ballot_type == "simple":
        choice = data.get("choice")
        if not choice:
            raise InvalidArgument("choice required")
        if choice not in option_ids:
            raise InvalidArgument("invalid choice")
        return SimpleVote(choice)

    raise InvalidArgument(f"Unsupported ballot type: {ballot_type}")


def vote_from_payload(payload):
    if "ranking" in payload:
        return RankedVote(tuple(payload["ranking"] or ()))
    if "approvals" in payload:
        return ApprovalVote(tuple(payload["approvals"] or ()))
    if "choice" in payload:
        return SimpleVote(payload["choice"])
    raise InvalidArgument("Unrecognized vote payload")
