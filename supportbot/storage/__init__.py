from .expiring_store import ExpiringStore, StoreUnavailable

__all__ = ["ExpiringStore", "StoreUnavailable"]
