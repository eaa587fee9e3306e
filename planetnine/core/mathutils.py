"""Integer helpers shared by scoring and progress reporting."""


def percent_rounded(part: int, total: int) -> int:
    """``part / total * 100`` rounded half up, in exact integer arithmetic.

    Python's ``round`` rounds halves to even; percentages shown to learners
    round halves up.

    Examples:
        >>> percent_rounded(1, 8)
        13
        >>> percent_rounded(4, 5)
        80
    """
    if total <= 0:
        msg = "total must be positive"
        raise ValueError(msg)
    return (part * 200 + total) // (2 * total)
