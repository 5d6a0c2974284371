"""Exceptions raised by the matching engine."""


class ItemNotFoundError(Exception):
    """Raised when a recommendation is requested for an unknown source item."""

    def __init__(self, item_id):
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class PolicyError(Exception):
    """Raised internally when an active policy row cannot be parsed."""
    pass
