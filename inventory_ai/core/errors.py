class InventoryError(Exception):
    """Base class for failures surfaced to the user as a notification."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseFailure(InventoryError):
    status_code = 422


class ProductNotFound(InventoryError):
    status_code = 404

    def __init__(self, product_name: str):
        super().__init__('Product "{}" not found in inventory.'.format(product_name))
        self.product_name = product_name


class InsufficientStock(InventoryError):
    status_code = 409

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            'Not enough stock for "{}". Only {} available.'.format(product_name, available)
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


class CommitFailure(InventoryError):
    status_code = 502


class SubmissionInProgress(InventoryError):
    status_code = 409

    def __init__(self, box: str):
        super().__init__("A {} prompt is already being processed.".format(box))
        self.box = box


__all__ = [
    "CommitFailure",
    "InsufficientStock",
    "InventoryError",
    "ParseFailure",
    "ProductNotFound",
    "SubmissionInProgress",
]
