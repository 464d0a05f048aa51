"""
Base Repository

Provides the foundation for repository classes that read from the
relational aggregate. Wraps every read in the same error translation so the
service layer deals in one exception type for "this source is unavailable".

Design Principles:
1. Dependency Injection - Receives DatabaseConfig, doesn't create it
2. Unavailability is data, not a crash - missing config, connection errors
   and missing tables all surface as SourceUnavailableError
3. Consistent interface - All repositories inherit this pattern
"""

from typing import Any, Mapping, Optional
import logging
import pandas as pd

from config import DatabaseConfig
from domain.errors import ConfigurationError, SourceUnavailableError
from logging_config import setup_logging

logger = setup_logging(__name__)


class BaseRepository:
    """
    Base class for all repository implementations.

    Provides read_df(), which runs a read-only query and translates any
    configuration, connection or query failure into SourceUnavailableError.

    Attributes:
        db: DatabaseConfig instance for database access
    """

    def __init__(self, db: DatabaseConfig, logger_instance: Optional[logging.Logger] = None):
        """
        Initialize repository with database configuration.

        Args:
            db: DatabaseConfig instance
            logger_instance: Optional logger (defaults to module logger)
        """
        self.db = db
        self._logger = logger_instance or logger

    def read_df(
        self,
        query: Any,
        params: Mapping[str, Any] | None = None,
    ) -> pd.DataFrame:
        """Execute a read-only SQL query and return a DataFrame.

        Args:
            query: SQL query string or SQLAlchemy TextClause
            params: Optional query parameters

        Returns:
            DataFrame with query results

        Raises:
            SourceUnavailableError: database unconfigured, unreachable, or the
                query failed (e.g. the table does not exist)
        """
        if not self.db.is_configured:
            raise SourceUnavailableError("relational database is not configured")

        try:
            with self.db.engine.connect() as conn:
                return pd.read_sql_query(query, conn, params=params)
        except ConfigurationError as e:
            raise SourceUnavailableError(str(e)) from e
        except Exception as e:
            msg = str(e).splitlines()[0] if str(e) else type(e).__name__
            self._logger.warning(f"Database read failed ({self.db.dialect}): {msg}")
            raise SourceUnavailableError(msg) from e
