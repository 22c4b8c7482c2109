"""
Credit Card Billing Cycle

A card purchase is not due on the day it is made. It is attributed to the
billing cycle it falls in, and that cycle's total is paid on the card's
payment day, which may be in a different calendar month than the cutoff.

effective_billing_date() turns the purchase date into the date the expense
is booked on, in two independent steps:

1. CYCLE: a purchase after the cutoff day belongs to the next cycle, so the
   month moves forward by one.
2. PAYMENT: with a payment day set, a payment day earlier in the month than
   the cutoff means the payment falls in the month after the cycle closes
   (one more month), and the day becomes the payment day. Without a payment
   day, a purchase that moved to the next cycle is booked on day 1 and one
   that did not keeps its own day.

Example (cutoff 25, payment 5): a purchase on 27 March belongs to the
cycle closing 25 April and is paid on 5 May.
"""

import calendar
from datetime import date
from typing import Optional

from finledger.models.ledger import Card, ExpenseType


def add_months(value: date, months: int, day: Optional[int] = None) -> date:
    """
    Move a date by whole calendar months.

    The day of month is kept (or replaced by `day` when given) and clamped
    to the length of the target month, so 31 January + 1 month is
    28/29 February.
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    wanted_day = value.day if day is None else day
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(wanted_day, last_day))


def effective_billing_date(
    expense_date: date,
    expense_type: str,
    card: Optional[Card],
) -> date:
    """
    Date an expense is booked on.

    Only credit card expenses whose card still exists are shifted; every
    other expense is booked on the date it was made.
    """
    if expense_type != ExpenseType.CREDIT_CARD.value or card is None or not card.cutoff_day:
        return expense_date

    cutoff_day = card.cutoff_day
    payment_day = card.payment_day
    after_cutoff = expense_date.day > cutoff_day

    months = 1 if after_cutoff else 0

    if payment_day:
        if payment_day < cutoff_day:
            months += 1
        return add_months(expense_date, months, day=payment_day)

    if after_cutoff:
        return add_months(expense_date, months, day=1)
    return expense_date
