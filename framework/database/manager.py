import threading
from .sql_driver import SQLDriver

class DatabaseManager:
    """Process-wide database access; built once on first use, never rebuilt."""
    _instance = None
    _lock = threading.Lock()

    def __init__(self, settings):
        self.sql = SQLDriver(
            settings.DATABASE_URL,
            settings.ASYNC_DATABASE_URL,
            echo=settings.DB_ECHO,
        )

    @classmethod
    def get_instance(cls, settings=None):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    if settings is None:
                        from framework.config import settings as app_settings
                        settings = app_settings
                    cls._instance = cls(settings)
        return cls._instance

    @classmethod
    def _detach_instance(cls):
        with cls._lock:
            instance, cls._instance = cls._instance, None
        return instance

    @classmethod
    def reset_instance(cls):
        """Drop the cached instance (tests only). Sync pool only; see reset_instance_async."""
        instance = cls._detach_instance()
        if instance is not None:
            instance.sql.disconnect()

    @classmethod
    async def reset_instance_async(cls):
        """Drop the cached instance and dispose both the async and sync pools."""
        instance = cls._detach_instance()
        if instance is not None:
            await instance.sql.disconnect_async()
            instance.sql.disconnect()
