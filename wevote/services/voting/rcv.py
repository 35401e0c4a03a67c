DEFAULT_MAX_ROUNDS = 20


def _active_candidates(rankings):
    # dict keeps first-appearance order, which fixes the order of round counts
    return dict.fromkeys(candidate for ranking in rankings for candidate in ranking)


def tally_rcv(rankings, max_rounds=DEFAULT_MAX_ROUNDS):
    active = _active_candidates(rankings)
    ballots = [list(ranking) for ranking in rankings]
    rounds = []

    round_number = 1
    while active and round_number <= max_rounds:
        counts = {candidate: 0 for candidate in active}
        exhausted = 0

        for ballot in ballots:
            while ballot and ballot[0] not in active:
                ballot.pop(0)
            if not ballot:
                exhausted += 1
                continue
            counts[ballot[0]] += 1

        total_valid = sum(counts.values())
        leader = max(counts, key=counts.get)
        if counts[leader] > total_valid / 2:
            rounds.append({"round": round_number, "counts": counts, "exhausted": exhausted})
            return {"rounds": rounds, "winner": leader, "exhausted": exhausted}

        # lowest tie: the lexicographically last id goes
        lowest_count = min(counts.values())
        lowest = sorted(cid for cid, count in counts.items() if count == lowest_count)
        eliminated = lowest[-1]
        del active[eliminated]
        rounds.append(
            {
                "round": round_number,
                "counts": counts,
                "eliminated": eliminated,
                "exhausted": exhausted,
            }
        )

        if len(active) == 1:
            (winner,) = active
            return {"rounds": rounds, "winner": winner, "exhausted": exhausted}

        round_number += 1

    last_exhausted = rounds[-1]["exhausted"] if rounds else 0
    return {"rounds": rounds, "winner": None, "exhausted": last_exhausted}
