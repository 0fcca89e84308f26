from inventory_ai.models.commit_log import InventoryCommit, SaleCommit

__all__ = ["InventoryCommit", "SaleCommit"]
