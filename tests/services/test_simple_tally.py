import pytest

from wevote.errors import InvalidArgument
from wevote.services.voting import (
    ApprovalVote,
    RankedVote,
    SimpleVote,
    parse_vote_payload,
    tally_approval,
    tally_simple,
    vote_from_payload,
)
from wevote.services.voting.results import compute_results, compute_tally_hash


def test_simple_tally_counts_choices_and_picks_highest():
    outcome = tally_simple(["A", "B", "C"], ["B", "A", "B", "C"])

    assert outcome == {"counts": {"A": 1, "B": 2, "C": 1}, "total": 4, "winner": "B"}


def test_simple_tally_tie_goes_to_smallest_option_id():
    outcome = tally_simple(["b", "a"], ["b", "a"])

    assert outcome["winner"] == "a"


def test_simple_tally_unknown_choice_counts_towards_total_only():
    outcome = tally_simple(["A", "B"], ["A", "Z"])

    assert outcome["counts"] == {"A": 1, "B": 0}
    assert outcome["total"] == 2


def test_simple_tally_without_votes_has_no_winner():
    assert tally_simple(["A", "B"], [])["winner"] is None


def test_approval_tally_counts_each_option_once_per_ballot():
    outcome = tally_approval(["A", "B", "C"], [("A", "A", "B"), ("B",), ("C", "X")])

    assert outcome == {"counts": {"A": 1, "B": 2, "C": 1}, "total": 3, "winner": "B"}


def test_parse_ranking_drops_unknown_and_repeated_options():
    vote = parse_vote_payload("rcv", ["A", "B", "C"], {"ranking": ["B", "X", "B", "A"]})

    assert vote == RankedVote(("B", "A"))
    assert vote.to_payload() == {"ranking": ["B", "A"]}
    assert vote.shape() == {"rankingLength": 2}


@pytest.mark.parametrize(
    "ballot_type,data,message",
    [
        ("rcv", {}, "ranking required"),
        ("rcv", {"ranking": ["X"]}, "ranking has no valid options"),
        ("approval", {"approvals": []}, "approvals required"),
        ("approval", {"approvals": ["X", "Y"]}, "approvals have no valid options"),
        ("simple", {}, "choice required"),
        ("simple", {"choice": "X"}, "invalid choice"),
        ("score", {"choice": "A"}, "Unsupported ballot type: score"),
    ],
)
def test_parse_vote_payload_rejects_bad_input(ballot_type, data, message):
    with pytest.raises(InvalidArgument) as excinfo:
        parse_vote_payload(ballot_type, ["A", "B"], data)

    assert excinfo.value.message == message


def test_vote_from_payload_restores_typed_votes():
    assert vote_from_payload({"choice": "A"}) == SimpleVote("A")
    assert vote_from_payload({"approvals": ["A", "B"]}) == ApprovalVote(("A", "B"))
    assert vote_from_payload({"ranking": ["B"]}) == RankedVote(("B",))

    with pytest.raises(InvalidArgument):
        vote_from_payload({"score": 3})


def test_compute_results_rcv_shape():
    votes = [RankedVote(("A",)), RankedVote(("A", "B")), RankedVote(("B",))]

    results = compute_results("rcv", ["A", "B"], votes)

    assert list(results) == ["counts", "total", "rounds", "winner", "exhausted"]
    assert results["counts"] == {}
    assert results["total"] == 3
    assert results["winner"] == "A"


def test_compute_results_rejects_unknown_type():
    with pytest.raises(ValueError):
        compute_results("score", ["A"], [])


def test_tally_hash_covers_type_and_results():
    results = tally_simple(["A", "B"], ["A"])

    base = compute_tally_hash("b1", "simple", results)

    assert len(base) == 64
    assert compute_tally_hash("b1", "simple", results) == base
    assert compute_tally_hash("b1", "approval", results) != base
    assert compute_tally_hash("b2", "simple", results) != base
