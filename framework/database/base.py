from abc import ABC, abstractmethod

class BaseDatabaseDriver(ABC):
    """Driver contract: every lifecycle step has a sync and an awaitable form."""

    @abstractmethod
    def connect(self):
        pass

    @abstractmethod
    async def connect_async(self):
        pass

    @abstractmethod
    def disconnect(self):
        pass

    @abstractmethod
    async def disconnect_async(self):
        pass

    @abstractmethod
    def create_schema(self):
        pass

    @abstractmethod
    async def create_schema_async(self):
        pass
