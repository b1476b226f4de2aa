from footfall.services.store_service import create_store, get_owned_store, list_stores

__all__ = ["create_store", "get_owned_store", "list_stores"]
