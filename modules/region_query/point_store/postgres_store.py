"""PostgreSQL Point Store

Point store backed by the inspection database schema:

- ``inspection_group(id)``
- ``inspection_region(id, group_id, coord_x, coord_y, category)``

All statements use bound parameters. Connection lifetime is owned by the
caller (see ``inspection.connection.StoreConnector``); this class only borrows
the connection.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Set

import psycopg2
from psycopg2.extensions import ISOLATION_LEVEL_REPEATABLE_READ
from psycopg2.extras import execute_values

from inspection.exceptions import RQStoreError, RQStoreUnavailableError
from inspection.utils import log_performance
from .point_store import PointStore
from ..models import Box, InspectionPoint

logger = logging.getLogger(__name__)

SELECT_POINTS = "SELECT id, group_id, coord_x, coord_y, category FROM inspection_region"

SCHEMA_STATEMENTS = (
    "CREATE TABLE IF NOT EXISTS inspection_group ("
    "    id BIGINT NOT NULL,"
    "    PRIMARY KEY (id))",
    "CREATE TABLE IF NOT EXISTS inspection_region ("
    "    id BIGINT NOT NULL,"
    "    group_id BIGINT NOT NULL REFERENCES inspection_group (id),"
    "    coord_x DOUBLE PRECISION NOT NULL,"
    "    coord_y DOUBLE PRECISION NOT NULL,"
    "    category INTEGER NOT NULL,"
    "    PRIMARY KEY (id))",
    "CREATE INDEX IF NOT EXISTS inspection_region_coords_idx "
    "    ON inspection_region (coord_x, coord_y)",
    "CREATE INDEX IF NOT EXISTS inspection_region_group_idx "
    "    ON inspection_region (group_id)",
)

CONTAINED_GROUPS_HAVING = (
    " GROUP BY group_id"
    " HAVING MIN(coord_x) >= %s AND MAX(coord_x) <= %s"
    " AND MIN(coord_y) >= %s AND MAX(coord_y) <= %s"
)


def _row_to_point(row: Sequence[Any]) -> InspectionPoint:
    return InspectionPoint(id=row[0], group_id=row[1], x=row[2], y=row[3], category=row[4])


class PostgresPointStore(PointStore):
    """Point store answering primitives with parameterized SQL."""

    def __init__(self, connection):
        """Initialize the store.

        Args:
            connection: Open psycopg2 connection; the caller closes it
        """
        self._connection = connection
        logger.debug("PostgresPointStore initialized")

    def _rollback_quietly(self) -> None:
        try:
            self._connection.rollback()
        except psycopg2.Error as e:
            logger.warning(f"Rollback failed: {e}")

    def _translate_error(self, error: psycopg2.Error, operation: str):
        """Map a psycopg2 error onto the store error taxonomy."""
        if isinstance(error, (psycopg2.OperationalError, psycopg2.InterfaceError)):
            return RQStoreUnavailableError(
                f"Point store unavailable during {operation}: {str(error).strip()}",
                {"operation": operation}
            )
        self._rollback_quietly()
        return RQStoreError(
            f"Point store {operation} failed: {str(error).strip()}",
            {"operation": operation, "pgcode": error.pgcode}
        )

    def _fetch_all(self, sql: str, params: Sequence[Any], operation: str) -> List[Sequence[Any]]:
        try:
            with self._connection.cursor() as cursor:
                cursor.execute(sql, params)
                return cursor.fetchall()
        except psycopg2.Error as e:
            raise self._translate_error(e, operation)

    @contextmanager
    def snapshot(self) -> Iterator["PostgresPointStore"]:
        """Run the enclosed queries in one READ ONLY, REPEATABLE READ transaction."""
        connection = self._connection
        try:
            connection.rollback()
            connection.set_session(isolation_level=ISOLATION_LEVEL_REPEATABLE_READ, readonly=True)
        except psycopg2.Error as e:
            raise self._translate_error(e, "snapshot")

        try:
            yield self
        finally:
            try:
                connection.rollback()
                connection.set_session(isolation_level="DEFAULT", readonly="DEFAULT")
            except psycopg2.Error as e:
                logger.warning(f"Failed to release snapshot transaction: {e}")

    def range_scan(self, box: Box, category: Optional[int] = None,
                   group_ids: Optional[Iterable[int]] = None) -> List[InspectionPoint]:
        conditions = ["coord_x BETWEEN %s AND %s", "coord_y BETWEEN %s AND %s"]
        params: List[Any] = [box.min_x, box.max_x, box.min_y, box.max_y]

        if category is not None:
            conditions.append("category = %s")
            params.append(category)

        groups = sorted(set(group_ids)) if group_ids else []
        if groups:
            conditions.append("group_id = ANY(%s)")
            params.append(groups)

        sql = f"{SELECT_POINTS} WHERE " + " AND ".join(conditions) + " ORDER BY id"
        rows = self._fetch_all(sql, params, "range_scan")
        logger.debug(f"Range scan {box} category={category} returned {len(rows)} points")
        return [_row_to_point(row) for row in rows]

    def points_by_group(self, group_id: int) -> List[InspectionPoint]:
        rows = self._fetch_all(f"{SELECT_POINTS} WHERE group_id = %s ORDER BY id",
                               [group_id], "points_by_group")
        return [_row_to_point(row) for row in rows]

    def group_ids(self) -> Set[int]:
        rows = self._fetch_all("SELECT id FROM inspection_group", [], "group_ids")
        return {row[0] for row in rows}

    def point_count(self) -> int:
        rows = self._fetch_all("SELECT COUNT(*) FROM inspection_region", [], "point_count")
        return int(rows[0][0])

    def fully_contained_groups(self, box: Box,
                               candidate_groups: Optional[Iterable[int]] = None) -> Set[int]:
        params: List[Any] = []
        sql = "SELECT group_id FROM inspection_region"
        if candidate_groups is not None:
            candidates = sorted(set(candidate_groups))
            if not candidates:
                return set()
            sql += " WHERE group_id = ANY(%s)"
            params.append(candidates)

        sql += CONTAINED_GROUPS_HAVING
        params.extend([box.min_x, box.max_x, box.min_y, box.max_y])

        rows = self._fetch_all(sql, params, "fully_contained_groups")
        return {row[0] for row in rows}

    def ensure_schema(self) -> None:
        """Create the inspection tables if they do not exist."""
        try:
            with self._connection.cursor() as cursor:
                for statement in SCHEMA_STATEMENTS:
                    cursor.execute(statement)
            self._connection.commit()
        except psycopg2.Error as e:
            raise self._translate_error(e, "ensure_schema")
        logger.info("Database tables created/verified")

    @log_performance
    def bulk_load(self, points: Iterable[InspectionPoint], page_size: int = 1000) -> int:
        """Insert points and their groups in one transaction.

        Existing ids are left untouched (``ON CONFLICT DO NOTHING``).

        Returns:
            Number of point records submitted
        """
        records = [(p.id, p.group_id, p.x, p.y, p.category) for p in points]
        group_rows = [(group_id,) for group_id in sorted({record[1] for record in records})]

        try:
            with self._connection.cursor() as cursor:
                execute_values(
                    cursor,
                    "INSERT INTO inspection_group (id) VALUES %s ON CONFLICT (id) DO NOTHING",
                    group_rows,
                    page_size=page_size
                )
                execute_values(
                    cursor,
                    "INSERT INTO inspection_region (id, group_id, coord_x, coord_y, category) "
                    "VALUES %s ON CONFLICT (id) DO NOTHING",
                    records,
                    page_size=page_size
                )
            self._connection.commit()
        except psycopg2.Error as e:
            raise self._translate_error(e, "bulk_load")

        logger.info(f"Successfully loaded {len(records)} regions in {len(group_rows)} groups")
        return len(records)
