from hyphen_service.api.api import api

__all__ = ["api"]
