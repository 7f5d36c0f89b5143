from .settings import JobConfig, Settings, StorageConfig, get_settings, reset_settings

__all__ = ["JobConfig", "Settings", "StorageConfig", "get_settings", "reset_settings"]
