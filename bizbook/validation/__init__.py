"""Entry validation package."""

from bizbook.validation.validator import (
    EntryRejectedError,
    EntryValidator,
    can_delete_category,
    link_expense_vendor,
)

__all__ = [
    "EntryRejectedError",
    "EntryValidator",
    "can_delete_category",
    "link_expense_vendor",
]
