"""
Base service class for Touchline domain services.
Provides storage access and the standard response envelopes.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar, Generic

from core.exceptions import StorageSerializationError, TouchlineException
from core.utils import LoggerFactory

from ..models.base import BaseEntity

T = TypeVar('T', bound=BaseEntity)


@dataclass
class ServiceResponse(Generic[T]):
    """Standardized response from domain services."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}

    @classmethod
    def ok(cls, data: Optional[T] = None, **metadata) -> 'ServiceResponse[T]':
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def rejected(cls, error: TouchlineException, data: Optional[T] = None) -> 'ServiceResponse[T]':
        """Rejection envelope: the operation was not applied."""
        return cls(
            success=False,
            data=data,
            error=str(error),
            metadata={'error_code': error.error_code, 'recoverable': error.recoverable}
        )


@dataclass
class ServiceListResponse(Generic[T]):
    """Standardized list response from domain services."""
    success: bool
    data: List[T] = None
    error: Optional[str] = None
    total_count: int = 0
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.data is None:
            self.data = []
        if self.metadata is None:
            self.metadata = {}
        if self.total_count == 0:
            self.total_count = len(self.data)


class BaseService(ABC, Generic[T]):
    """
    Abstract base class for storage-backed domain services.
    Collections are stored whole under a single key: load everything,
    mutate in memory, write everything back.
    """

    def __init__(self, store, entity_class: Type[T], storage_key: str):
        """
        Initialize service with a key-value store and entity class.

        Args:
            store: KeyValueStore implementation
            entity_class: Domain entity class this service manages
            storage_key: Key the entity collection is stored under
        """
        self.store = store
        self.entity_class = entity_class
        self.storage_key = storage_key
        self.logger = LoggerFactory.get_logger(self.__class__.__name__)

    async def load_all(self) -> List[T]:
        """Load the whole collection; a missing key is an empty collection."""
        raw = await self.store.get(self.storage_key)
        if not raw:
            return []

        entities = []
        for item in raw:
            try:
                entities.append(self.entity_class.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                raise StorageSerializationError(
                    "decode", self.storage_key, original_error=e
                ) from e
        return entities

    async def save_all(self, entities: List[T]) -> None:
        """Overwrite the whole collection."""
        await self.store.set(self.storage_key, [entity.to_dict() for entity in entities])
        self.logger.debug(f"Saved {len(entities)} {self.entity_class.__name__} records")

    def get_service_info(self) -> Dict[str, Any]:
        """Get information about this service."""
        return {
            'service_name': self.__class__.__name__,
            'entity_type': self.entity_class.__name__,
            'storage_key': self.storage_key,
            'store': type(self.store).__name__,
        }


__all__ = [
    'BaseService',
    'ServiceResponse',
    'ServiceListResponse',
]
