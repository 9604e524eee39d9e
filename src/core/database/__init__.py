from src.core.database.base import Base, BaseModel, BigIntPK
from src.core.database.session import async_session, get_db

__all__ = ["Base", "BaseModel", "BigIntPK", "async_session", "get_db"]
