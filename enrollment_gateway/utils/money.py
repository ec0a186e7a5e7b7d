"""Money formatting utilities"""


def format_usd(cents: int) -> str:
    """Format integer cents as a dollar string, showing cents only when non-zero"""
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    if remainder:
        return f"{sign}${dollars:,}.{remainder:02d}"
    return f"{sign}${dollars:,}"
