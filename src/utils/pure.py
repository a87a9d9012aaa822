from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional

from db.models import CartLine

VALID_PROMO = "STOREFRONT10"
PROMO_DISCOUNT = 0.1  # 10%
CHECKOUT_TAX_RATE = 0.1


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    # If no headers, take the first row as header and remove it from rows
    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [list(map(str, row)) for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def fmt_money(amount: float) -> str:
    return f"${amount:,.2f}"


def is_valid_promo(code: str) -> bool:
    return (code or "").strip().upper() == VALID_PROMO


@dataclass(frozen=True)
class CheckoutSummary:
    subtotal: float
    shipping: float
    discount: float
    tax: float
    total: float


def checkout_summary(lines: Iterable[CartLine], promo_applied: bool = False) -> CheckoutSummary:
    """
    Totals shown on the checkout page. The promo discount only exists here;
    the order store records its own total without it.
    Shipping is charged once per line, not per unit, same as the stored total.
    """
    lines = list(lines)
    subtotal = sum(line.price * line.qty for line in lines)
    shipping = sum(line.shipping_cost for line in lines)
    discount = subtotal * PROMO_DISCOUNT if promo_applied else 0.0
    tax = (subtotal + shipping - discount) * CHECKOUT_TAX_RATE
    return CheckoutSummary(
        subtotal=round(subtotal, 2),
        shipping=round(shipping, 2),
        discount=round(discount, 2),
        tax=round(tax, 2),
        total=round(subtotal + shipping - discount + tax, 2),
    )


def password_strength(pw: str) -> int:
    """0 (empty) to 3: length >= 8, has upper case or digit, has a symbol."""
    if not pw:
        return 0
    score = 0
    if len(pw) >= 8:
        score += 1
    if any(c.isupper() or c.isdigit() for c in pw):
        score += 1
    if any(not c.isalnum() for c in pw):
        score += 1
    return score


STRENGTH_LABELS = ["", "Weak", "Medium", "Strong"]
