"""
Rupee formatting.

Amounts are whole rupees held as int, so no rounding happens here.
"""

RUPEE_SIGN = "₹"


def format_inr(amount: int) -> str:
    """
    Format an amount with Indian digit grouping.

    - 999 → "₹999"
    - 79999 → "₹79,999"
    - 10000000 → "₹1,00,00,000"
    - -500 → "-₹500"

    Args:
        amount: Whole rupees

    Returns:
        Display string with the rupee sign
    """
    sign = "-" if amount < 0 else ""
    digits = str(abs(int(amount)))

    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    return f"{sign}{RUPEE_SIGN}{digits}"
