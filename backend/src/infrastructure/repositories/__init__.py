"""SQLAlchemy repositories"""

from .document_repository import SqlAlchemyDocumentRepository
from .user_repository import SqlAlchemyUserRepository

__all__ = ["SqlAlchemyDocumentRepository", "SqlAlchemyUserRepository"]
