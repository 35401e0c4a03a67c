from wevote.services.canonical import canonicalize, sha256_hex
from wevote.services.voting.approval import tally_approval
from wevote.services.voting.payloads import ApprovalVote, RankedVote, SimpleVote
from wevote.services.voting.rcv import DEFAULT_MAX_ROUNDS, tally_rcv
from wevote.services.voting.simple import tally_simple


def compute_results(ballot_type, option_ids, votes, max_rounds=DEFAULT_MAX_ROUNDS):
    if ballot_type == "simple":
        choices = [vote.choice if isinstance(vote, SimpleVote) else None for vote in votes]
        return tally_simple(option_ids, choices)

    if ballot_type == "approval":
        approval_sets = [
            vote.approvals if isinstance(vote, ApprovalVote) else () for vote in votes
        ]
        return tally_approval(option_ids, approval_sets)

    if ballot_type == "rcv":
        known = set(option_ids)
        rankings = [
            [cid for cid in vote.ranking if cid in known] if isinstance(vote, RankedVote) else []
            for vote in votes
        ]
        outcome = tally_rcv(rankings, max_rounds=max_rounds)
        return {
            "counts": {},
            "total": len(votes),
            "rounds": outcome["rounds"],
            "winner": outcome["winner"],
            "exhausted": outcome["exhausted"],
        }

    raise ValueError(f"Unsupported ballot type: {ballot_type}")


def compute_tally_hash(ballot_id, ballot_type, results):
    return sha256_hex({"ballotId": ballot_id, "type": ballot_type, "results": results})


def tally_signature_input(ballot_id, results):
    return canonicalize({"ballotId": ballot_id, "results": results})
