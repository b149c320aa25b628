"""Billing service for turning tracked time into billable amounts.
Handles invoice line item grouping and amount rounding.
"""

from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from app.domain.models.base import ValidationError
from app.domain.models.time_entry import TimeEntry
from app.domain.models.invoice import InvoiceLineItem


LINE_ITEM_GROUPINGS = ("project", "task", "none")


def round_currency(amount: float) -> float:
    """Round to cents, half up."""
    return float(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class BillingService:
    """
    Domain service for billing calculations.
    Amounts are hours times the entry's rate snapshot; entries without a
    rate count toward hours but add nothing to the amount.
    """

    def calculate_billable_amount(self, time_entries: Iterable[TimeEntry]) -> float:
        """Total billable amount for the given entries, rounded to cents."""
        return round_currency(sum(entry.billable_amount for entry in time_entries))

    def group_entries(self, time_entries: Iterable[TimeEntry], group_by: str) -> Dict[str, List[TimeEntry]]:
        """Group entries by project or task id, preserving first-seen order."""
        groups: Dict[str, List[TimeEntry]] = OrderedDict()
        for entry in time_entries:
            key = entry.project_id if group_by == "project" else entry.task_id
            groups.setdefault(key, []).append(entry)
        return groups

    def create_line_items(
        self,
        time_entries: List[TimeEntry],
        group_by: str = "project",
    ) -> List[InvoiceLineItem]:
        """
        Build invoice line items from billable time.

        With "none" every billable entry that has a rate becomes its own line.
        Otherwise one line per project or task, priced at the hour-weighted
        average rate of its billable entries.
        """
        if group_by not in LINE_ITEM_GROUPINGS:
            raise ValidationError(
                f"group_by must be one of: {', '.join(LINE_ITEM_GROUPINGS)}", "group_by"
            )

        billable = [entry for entry in time_entries if entry.billable and not entry.is_running]
        line_items = []

        if group_by == "none":
            for entry in billable:
                if not entry.billable_rate:
                    continue
                line_items.append(InvoiceLineItem(
                    description=entry.description or "Time entry",
                    quantity=entry.duration_hours,
                    rate=entry.billable_rate,
                    amount=round_currency(entry.billable_amount),
                    time_entry_ids=[entry.id],
                ))
        else:
            label = "Project work" if group_by == "project" else "Task work"
            for group_id, entries in self.group_entries(billable, group_by).items():
                total_hours = sum(entry.duration_hours for entry in entries)
                if total_hours <= 0:
                    continue
                total_amount = sum(entry.billable_amount for entry in entries)
                line_items.append(InvoiceLineItem(
                    description=f"{label}: {group_id}",
                    quantity=total_hours,
                    rate=total_amount / total_hours,
                    amount=round_currency(total_amount),
                    time_entry_ids=[entry.id for entry in entries],
                ))

        for item in line_items:
            item.validate()
        return line_items
