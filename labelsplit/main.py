from labelsplit.api.main import app

__all__ = ["app"]
