"""
Base service layer for database operations over the shared connection pool
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

import asyncpg

from database.connection import get_db_pool

logger = logging.getLogger(__name__)

# Error types reported through ServiceResult
INVALID_QUERY = "INVALID_QUERY"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
DATABASE_ERROR = "DATABASE_ERROR"

# Failures that mean the store could not complete the statement
DATABASE_EXCEPTIONS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    RuntimeError,
)

@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def ok(cls, rows: List[Dict[str, Any]]) -> "ServiceResult":
        return cls(success=True, data=rows, count=len(rows))

    @classmethod
    def fail(cls, error: str, error_type: str) -> "ServiceResult":
        return cls(success=False, error=error, error_type=error_type)

class BaseService:
    """Base service giving subclasses pooled query helpers with uniform error handling"""

    def __init__(self, resource_name: str):
        self.resource_name = resource_name
        logger.info(f"BaseService initialized for resource: {resource_name}")

    async def _fetch(self, operation: str, query: str, *args) -> ServiceResult:
        """
        Run a row-returning statement on a pooled connection

        Args:
            operation: Short name used in logs and error messages
            query: Parameterized SQL
            *args: Positional query parameters

        Returns:
            ServiceResult with the rows as dictionaries, or a DATABASE_ERROR
        """
        try:
            db_pool = get_db_pool()
            async with db_pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
        except DATABASE_EXCEPTIONS as e:
            return self._database_error(operation, e)

        return ServiceResult.ok([dict(row) for row in rows])

    def _database_error(self, operation: str, exc: Exception) -> ServiceResult:
        logger.error(f"{operation} operation failed for {self.resource_name}: {exc}", exc_info=True)
        return ServiceResult.fail(
            f"Database operation failed: {exc}",
            DATABASE_ERROR
        )
