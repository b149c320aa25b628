"""
Invoice line items derived from billable time.
"""

from dataclasses import dataclass, field
from typing import List

from app.domain.models.base import ValidationError


@dataclass
class InvoiceLineItem:
    """Individual line item in an invoice."""

    description: str
    quantity: float
    rate: float
    amount: float
    time_entry_ids: List[str] = field(default_factory=list)
    unit: str = "hours"

    def validate(self) -> None:
        """Validate line item."""
        if not self.description:
            raise ValidationError("Description is required", "description")

        if self.quantity < 0:
            raise ValidationError("Quantity cannot be negative", "quantity")

        if self.rate < 0:
            raise ValidationError("Rate cannot be negative", "rate")

        if abs(self.amount - (self.quantity * self.rate)) > 0.01:
            raise ValidationError("Amount must equal quantity * rate", "amount")
