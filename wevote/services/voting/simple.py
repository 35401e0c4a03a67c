# Ties go to the smallest id; nothing counted means no winner.
def pick_winner(counts):
    top = max(counts.values(), default=0)
    if top == 0:
        return None
    return min(option_id for option_id, count in counts.items() if count == top)


def tally_simple(option_ids, choices):
    counts = {option_id: 0 for option_id in option_ids}
    total = 0

    for choice in choices:
        total += 1
        if choice in counts:
            counts[choice] += 1

    return {"counts": counts, "total": total, "winner": pick_winner(counts)}
