"""Display helpers shared by the API layer."""

# (upper bound exclusive, label) pairs for counts of ten and above
_COMPLETION_BUCKETS = (
    (100, "10+"),
    (1_000, "100+"),
    (10_000, "1k+"),
    (100_000, "10k+"),
    (1_000_000, "100k+"),
)


def format_completion_count(count: int) -> str:
    """
    Render a completion count the way quiz cards show it.

    Counts below ten are shown verbatim; larger counts collapse into
    coarse buckets ("10+", "100+", "1k+", ... "1M+").
    """
    if count < 10:
        return str(max(count, 0))
    for upper, label in _COMPLETION_BUCKETS:
        if count < upper:
            return label
    return "1M+"
