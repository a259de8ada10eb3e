from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.exceptions import AppError, DatabaseError
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService:
    """Base class for application services.

    Repositories only flush; a service wraps each operation in
    ``transaction()`` so all of its writes commit together or not at all.
    """

    def __init__(self, session: AsyncSession):
        """Initialize the service.

        Args:
            session: Database session shared by the service's repositories
        """
        self.session = session
        self.logger = LOGGER

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit on success, roll back on any failure.

        Raises:
            AppError: Domain errors raised inside the block, unchanged
            DatabaseError: If the database rejects any write
        """
        try:
            yield self.session
            await self.session.commit()
        except AppError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(
                f"Database operation failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise DatabaseError(f"Database operation failed: {str(e)}", original_error=e)
        except Exception:
            await self.session.rollback()
            raise
