"""
Aggregated Orders Repository

Reads the ``aggregated_orders`` table, which holds one row per
(region, type) with the best buy and best sell price seen in that region.

Design:
- Only the region-presence query lives here; the table itself is populated
  by a separate sync job
- Failures propagate as SourceUnavailableError so the regions-with-markets
  resolver can fall through to its static sources
"""

from typing import Optional
import logging

from sqlalchemy import text

from config import DatabaseConfig
from domain.converters import coerce_region_id
from logging_config import setup_logging
from repositories.base import BaseRepository

logger = setup_logging(__name__, log_file="aggregated_orders_repo.log")

REGIONS_WITH_MARKETS_SQL = text("""
    SELECT DISTINCT region_id
    FROM aggregated_orders
    WHERE best_buy_price IS NOT NULL OR best_sell_price IS NOT NULL
""")


class AggregatedOrdersRepository(BaseRepository):
    """Repository for the ``aggregated_orders`` relational aggregate."""

    def __init__(self, db: DatabaseConfig, logger_instance: Optional[logging.Logger] = None):
        super().__init__(db, logger_instance or logger)

    def get_regions_with_markets(self) -> list[int]:
        """
        Return region ids with a non-null best buy or best sell price.

        Rows whose region_id is null or not a positive integer are ignored.

        Raises:
            SourceUnavailableError: the database cannot be queried
        """
        df = self.read_df(REGIONS_WITH_MARKETS_SQL)
        region_ids = []
        if "region_id" in df.columns:
            for value in df["region_id"].tolist():
                region_id = coerce_region_id(value)
                if region_id is not None:
                    region_ids.append(region_id)
        self._logger.debug(f"aggregated_orders returned {len(region_ids)} regions")
        return region_ids

