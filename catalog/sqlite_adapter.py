"""Read-only SQLite access to the command catalog.

All queries are parameterized ``text()`` statements run through a single
SQLAlchemy engine. The database file is opened with ``mode=ro`` so nothing
here can write to it.
"""

import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from pydantic import ValidationError as RowValidationError
from sqlalchemy import bindparam, create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import QueuePool

from observability.logging import log_performance
from observability.prometheus_metrics import record_db_metrics

from .categories import category_code
from .errors import NotFoundError, StorageUnavailableError, ValidationError
from .models import AppStats, BasicCategory, BasicGroup, Command, CommandDetail, Tip
from . import shaper

logger = logging.getLogger(__name__)

REQUIRED_TABLES = (
    "Command",
    "CommandSection",
    "Tip",
    "TipSection",
    "BasicCategory",
    "BasicGroup",
    "BasicCommand",
)

SLOW_QUERY_MS = 250.0

# Sized for the default FastAPI threadpool (40 workers)
POOL_SIZE = 10
POOL_MAX_OVERFLOW = 30

# Largest value SQLite can store in an INTEGER column
SQLITE_MAX_INTEGER = 2 ** 63 - 1


def parse_command_id(raw) -> int:
    """Validate a command id taken from a request.

    Accepts positive integers or their decimal string form. Anything else is a
    ValidationError; the database is never consulted for malformed ids.
    """
    if isinstance(raw, bool):
        raise ValidationError(f"Invalid command id: {raw!r}")
    if isinstance(raw, int):
        value = raw
    else:
        candidate = str(raw).strip()
        if not candidate.isascii() or not candidate.isdigit():
            raise ValidationError(f"Invalid command id: {raw!r}")
        value = int(candidate)
    if value <= 0 or value > SQLITE_MAX_INTEGER:
        raise ValidationError(f"Invalid command id: {raw!r}")
    return value


def resolve_limit(limit, default: int, maximum: int) -> int:
    """Apply the result-cap policy: default when absent, clamp to maximum."""
    if limit is None:
        return min(default, maximum)
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid limit: {limit!r}")
    if value < 1:
        raise ValidationError("Limit must be at least 1")
    return min(value, maximum)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input matches literally (ESCAPE '\\')."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CommandCatalog:
    """Query layer over the shipped command database."""

    def __init__(self, db_path: str, search_default_limit: int = 50, search_max_limit: int = 100,
                 suggestion_limit: int = 10, popular_commands: Sequence[str] = ()):
        self.db_path = db_path
        self.search_default_limit = search_default_limit
        self.search_max_limit = search_max_limit
        self.suggestion_limit = suggestion_limit
        self.popular_commands = list(popular_commands)
        self.engine: Optional[Engine] = None

    def initialize(self):
        """Open the engine and verify the schema. Failure here is fatal."""
        uri = f"{Path(self.db_path).resolve().as_uri()}?mode=ro"

        def connect():
            return sqlite3.connect(uri, uri=True, check_same_thread=False)

        self.engine = create_engine("sqlite://", creator=connect, poolclass=QueuePool,
                                    pool_size=POOL_SIZE, max_overflow=POOL_MAX_OVERFLOW)
        try:
            self.validate_schema()
        except StorageUnavailableError:
            self.close()
            raise
        logger.info(f"Command catalog opened read-only: {self.db_path}")

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            logger.info("Command catalog closed")

    @contextmanager
    def _connection(self, query_type: str) -> Iterator[Connection]:
        """Yield a pooled connection; storage failures become StorageUnavailableError."""
        if self.engine is None:
            raise StorageUnavailableError("catalog not initialized")

        start_time = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                yield conn
        except (SQLAlchemyError, sqlite3.Error) as e:
            logger.error(f"Catalog query '{query_type}' failed: {e}")
            record_db_metrics(query_type, time.perf_counter() - start_time, error=type(e).__name__)
            raise StorageUnavailableError(str(e)) from e
        except RowValidationError as e:
            logger.error(f"Corrupt row in catalog query '{query_type}': {e}")
            record_db_metrics(query_type, time.perf_counter() - start_time, error="CorruptRow")
            raise StorageUnavailableError(str(e)) from e
        record_db_metrics(query_type, time.perf_counter() - start_time)

    def validate_schema(self):
        """Check that every expected table exists."""
        with self._connection("validate_schema") as conn:
            rows = conn.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'")).scalars().all()

        found = set(rows)
        for table in REQUIRED_TABLES:
            if table in found:
                logger.debug(f"Table '{table}' found in database")
        missing = [table for table in REQUIRED_TABLES if table not in found]
        if missing:
            logger.error(f"Catalog schema incomplete, missing tables: {', '.join(missing)}")
            raise StorageUnavailableError(f"missing tables: {', '.join(missing)}")

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def get_stats(self) -> AppStats:
        with self._connection("stats") as conn:
            total_commands = conn.execute(text("SELECT COUNT(*) FROM Command")).scalar_one()
            total_tips = conn.execute(text("SELECT COUNT(*) FROM Tip")).scalar_one()
            total_basic_categories = conn.execute(text("SELECT COUNT(*) FROM BasicCategory")).scalar_one()

        logger.info(f"Stats: {total_commands} commands, {total_basic_categories} categories, {total_tips} tips")
        return AppStats(
            total_commands=total_commands,
            total_categories=total_basic_categories,
            total_tips=total_tips,
            total_basic_categories=total_basic_categories,
        )

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def list_categories(self) -> List[str]:
        with self._connection("categories") as conn:
            return list(conn.execute(text("SELECT title FROM BasicCategory ORDER BY position, id")).scalars())

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def list_categories_detailed(self) -> List[BasicCategory]:
        with self._connection("categories_detailed") as conn:
            rows = conn.execute(
                text("SELECT id, title, position FROM BasicCategory ORDER BY position, id")
            ).mappings().all()
            return [shaper.shape_basic_category(row) for row in rows]

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def list_all_commands(self) -> List[Command]:
        with self._connection("all_commands") as conn:
            rows = conn.execute(
                text("SELECT id, name, category, description FROM Command ORDER BY name COLLATE NOCASE, id")
            ).mappings().all()
            return shaper.shape_commands(rows)

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def get_command(self, command_id) -> CommandDetail:
        """Command with all of its sections in stored order."""
        command_id = parse_command_id(command_id)

        with self._connection("command") as conn:
            row = conn.execute(
                text("SELECT id, name, category, description FROM Command WHERE id = :id"),
                {"id": command_id},
            ).mappings().first()
            if row is None:
                logger.warning(f"Command with id {command_id} not found")
                raise NotFoundError("Command not found")

            sections = conn.execute(
                text("SELECT title, content FROM CommandSection WHERE command_id = :id ORDER BY id"),
                {"id": command_id},
            ).mappings().all()
            detail = shaper.shape_command_detail(row, sections)

        logger.info(f"Command {detail.name} found with {len(detail.sections)} sections")
        return detail

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def list_commands_by_category(self, name: str) -> List[Command]:
        code = category_code(name)
        if code is None:
            logger.info(f"Unknown category '{name}', returning no commands")
            return []

        with self._connection("commands_by_category") as conn:
            rows = conn.execute(
                text(
                    "SELECT id, name, category, description FROM Command "
                    "WHERE category = :code ORDER BY name COLLATE NOCASE, id"
                ),
                {"code": code},
            ).mappings().all()
            commands = shaper.shape_commands(rows)

        logger.info(f"Found {len(commands)} commands for category '{name}'")
        return commands

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def search_commands(self, query: Optional[str], limit=None, category: Optional[str] = None) -> List[Command]:
        """Substring search over name and description.

        Exact (case-insensitive) name matches sort first, then names
        alphabetically. A blank query matches nothing.
        """
        limit = resolve_limit(limit, self.search_default_limit, self.search_max_limit)
        term = (query or "").strip()
        if not term:
            return []

        params = {"term": term, "pattern": f"%{escape_like(term)}%", "limit": limit}
        category_clause = ""
        if category is not None and category.strip():
            code = category_code(category)
            if code is None:
                return []
            category_clause = "AND category = :code "
            params["code"] = code

        sql = (
            "SELECT id, name, category, description FROM Command "
            "WHERE (name LIKE :pattern ESCAPE '\\' OR description LIKE :pattern ESCAPE '\\') "
            f"{category_clause}"
            "ORDER BY CASE WHEN lower(name) = lower(:term) THEN 0 ELSE 1 END, "
            "name COLLATE NOCASE, id "
            "LIMIT :limit"
        )
        logger.debug(f"Search SQL: {sql} with params {params}")

        with self._connection("search") as conn:
            rows = conn.execute(text(sql), params).mappings().all()
            commands = shaper.shape_commands(rows)

        logger.info(f"Found {len(commands)} commands for search query: {term!r}")
        return commands

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def suggest_commands(self, prefix: Optional[str], limit=None) -> List[str]:
        """Distinct command names starting with ``prefix``, for autocomplete."""
        limit = resolve_limit(limit, self.suggestion_limit, self.search_max_limit)
        term = (prefix or "").strip()
        if not term:
            return []

        with self._connection("suggestions") as conn:
            names = list(conn.execute(
                text(
                    "SELECT DISTINCT name FROM Command WHERE name LIKE :pattern ESCAPE '\\' "
                    "ORDER BY name COLLATE NOCASE LIMIT :limit"
                ),
                {"pattern": f"{escape_like(term)}%", "limit": limit},
            ).scalars())

        logger.debug(f"Found {len(names)} suggestions for query: {term!r}")
        return names

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def get_popular_commands(self) -> List[Command]:
        """Commands from the curated list, in curated order."""
        if not self.popular_commands:
            return []

        rank = {}
        for position, name in enumerate(self.popular_commands):
            rank.setdefault(name, position)

        stmt = text(
            "SELECT id, name, category, description FROM Command WHERE name IN :names ORDER BY id"
        ).bindparams(bindparam("names", expanding=True))

        with self._connection("popular") as conn:
            rows = conn.execute(stmt, {"names": list(rank)}).mappings().all()
            seen = set()
            picked = []
            for row in sorted(rows, key=lambda r: rank[r["name"]]):
                if row["name"] in seen:
                    continue
                seen.add(row["name"])
                picked.append(row)
            commands = shaper.shape_commands(picked)

        logger.info(f"Found {len(commands)} popular commands")
        return commands

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def get_random_tip(self) -> Tip:
        with self._connection("random_tip") as conn:
            row = conn.execute(text("SELECT id, title FROM Tip ORDER BY RANDOM() LIMIT 1")).mappings().first()
            if row is None:
                logger.warning("Tip table is empty")
                raise NotFoundError("No tips available")

            sections = conn.execute(
                text(
                    "SELECT type, data1, data2, extra FROM TipSection "
                    "WHERE tip_id = :id ORDER BY position, id"
                ),
                {"id": row["id"]},
            ).mappings().all()
            tip = shaper.shape_tip(row, sections)

        logger.info(f"Found random tip: {tip.title} with {len(tip.sections)} sections")
        return tip

    @log_performance(threshold_ms=SLOW_QUERY_MS)
    def list_basic_groups(self, name: str) -> List[BasicGroup]:
        """Groups of a basic category, each with its commands."""
        title = (name or "").strip()

        with self._connection("basic_groups") as conn:
            category_id = conn.execute(
                text("SELECT id FROM BasicCategory WHERE title = :title COLLATE NOCASE ORDER BY id LIMIT 1"),
                {"title": title},
            ).scalar()
            if category_id is None:
                logger.warning(f"BasicCategory '{title}' not found")
                raise NotFoundError(f"Category '{title}' not found")

            groups = conn.execute(
                text(
                    "SELECT id, position, description FROM BasicGroup "
                    "WHERE category_id = :id ORDER BY position, id"
                ),
                {"id": category_id},
            ).mappings().all()
            commands = conn.execute(
                text(
                    "SELECT bc.id, bc.group_id, bc.command, bc.mans FROM BasicCommand bc "
                    "JOIN BasicGroup bg ON bc.group_id = bg.id "
                    "WHERE bg.category_id = :id ORDER BY bc.id"
                ),
                {"id": category_id},
            ).mappings().all()
            shaped = shaper.shape_basic_groups(groups, commands)

        logger.info(f"Found {len(shaped)} basic groups for category '{title}' (ID: {category_id})")
        return shaped
