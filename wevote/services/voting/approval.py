from wevote.services.voting.simple import pick_winner


def tally_approval(option_ids, approval_sets):
    counts = {option_id: 0 for option_id in option_ids}
    total = 0

    for approvals in approval_sets:
        total += 1
        for option_id in dict.fromkeys(approvals):
            if option_id in counts:
                counts[option_id] += 1

    return {"counts": counts, "total": total, "winner": pick_winner(counts)}
