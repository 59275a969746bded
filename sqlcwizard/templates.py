# File: sqlcwizard/templates.py
"""
SQLC Wizard - Starter SQL Templates
====================================
Static starter files keyed by database engine:

    <queries_dir>/users.sql            CRUD queries annotated for sqlc
    <schema_dir>/001_users_table.sql   matching ``users`` table DDL

Query files are assembled from one shared list of query definitions and a
per-engine dialect (placeholder style, boolean literal, ``now()`` spelling,
``RETURNING`` support).  Schemas differ too much between engines to share a
skeleton, so they are kept as literal DDL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Tuple, Union

from sqlcwizard.models import DatabaseEngine, database_engine_from

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("sqlcwizard.templates")

QUERIES_FILENAME: str = "users.sql"
SCHEMA_FILENAME: str = "001_users_table.sql"

_USER_COLUMNS: str = (
    "id, email, username, full_name, is_active, is_verified, created_at, updated_at"
)


# ---------------------------------------------------------------------------
# Dialects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Dialect:
    engine: DatabaseEngine
    numbered_params: bool
    true_literal: str
    now: str
    supports_returning: bool
    full_crud: bool

    def param(self, n: int) -> str:
        """The *n*-th bind parameter (1-based)."""
        return f"${n}" if self.numbered_params else "?"


_DIALECTS: Mapping[DatabaseEngine, Dialect] = MappingProxyType(
    {
        DatabaseEngine.POSTGRESQL: Dialect(
            engine=DatabaseEngine.POSTGRESQL,
            numbered_params=True,
            true_literal="true",
            now="NOW()",
            supports_returning=True,
            full_crud=True,
        ),
        DatabaseEngine.SQLITE: Dialect(
            engine=DatabaseEngine.SQLITE,
            numbered_params=False,
            true_literal="1",
            now="datetime('now')",
            supports_returning=True,
            full_crud=True,
        ),
        DatabaseEngine.MYSQL: Dialect(
            engine=DatabaseEngine.MYSQL,
            numbered_params=False,
            true_literal="1",
            now="NOW()",
            supports_returning=False,
            full_crud=False,
        ),
    }
)


# ---------------------------------------------------------------------------
# Query definitions
# ---------------------------------------------------------------------------


def _get_by(column: str) -> Callable[[Dialect], List[str]]:
    def body(d: Dialect) -> List[str]:
        return [
            f"SELECT {_USER_COLUMNS}",
            "FROM users",
            f"WHERE {column} = {d.param(1)}",
            "LIMIT 1;",
        ]

    return body


def _list_users(d: Dialect) -> List[str]:
    return [
        f"SELECT {_USER_COLUMNS}",
        "FROM users",
        f"WHERE is_active = {d.true_literal}",
        "ORDER BY created_at DESC",
        f"LIMIT {d.param(1)}",
        f"OFFSET {d.param(2)};",
    ]


def _create_user(d: Dialect) -> List[str]:
    lines: List[str] = [
        "INSERT INTO users (",
        "    email,",
        "    username,",
        "    full_name,",
        "    password_hash",
        ") VALUES (",
        "    " + ", ".join(d.param(n) for n in range(1, 5)),
    ]
    if d.supports_returning:
        lines.append(")")
        lines.append(f"RETURNING {_USER_COLUMNS};")
    else:
        lines.append(");")
    return lines


def _update_user(d: Dialect) -> List[str]:
    # Numbered params keep id first; positional ones follow textual order.
    name_param: str = d.param(2)
    id_param: str = d.param(1)
    return [
        "UPDATE users",
        "SET",
        f"    full_name = COALESCE({name_param}, full_name),",
        f"    updated_at = {d.now}",
        f"WHERE id = {id_param}",
        f"RETURNING {_USER_COLUMNS};",
    ]


def _delete_user(d: Dialect) -> List[str]:
    return ["DELETE FROM users", f"WHERE id = {d.param(1)};"]


@dataclass(frozen=True)
class QueryDefinition:
    name: str
    comment: str
    body: Callable[[Dialect], List[str]]
    needs_full_crud: bool = False

    def command(self, d: Dialect) -> str:
        if self.name == "ListUsers":
            return ":many"
        if self.name == "DeleteUser":
            return ":exec"
        if self.name == "CreateUser" and not d.supports_returning:
            return ":exec"
        return ":one"

    def render(self, d: Dialect) -> str:
        lines: List[str] = [f"-- name: {self.name} {self.command(d)}", f"-- {self.comment}"]
        lines.extend(self.body(d))
        return "\n".join(lines)


QUERY_DEFINITIONS: Tuple[QueryDefinition, ...] = (
    QueryDefinition("GetUser", "Get a single user by ID", _get_by("id")),
    QueryDefinition("GetUserByEmail", "Get a user by their email address", _get_by("email")),
    QueryDefinition(
        "GetUserByUsername",
        "Get a user by their username",
        _get_by("username"),
        needs_full_crud=True,
    ),
    QueryDefinition(
        "ListUsers", "List users with pagination", _list_users, needs_full_crud=True
    ),
    QueryDefinition("CreateUser", "Create a new user", _create_user),
    QueryDefinition(
        "UpdateUser", "Update user details", _update_user, needs_full_crud=True
    ),
    QueryDefinition(
        "DeleteUser", "Permanently delete a user (use with caution)", _delete_user
    ),
)


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

_POSTGRESQL_SCHEMA: str = """\
-- Example user table schema for PostgreSQL
CREATE TABLE IF NOT EXISTS users (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    email VARCHAR(255) NOT NULL UNIQUE,
    username VARCHAR(100) NOT NULL UNIQUE,
    full_name VARCHAR(255),
    password_hash VARCHAR(255) NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT true,
    is_verified BOOLEAN NOT NULL DEFAULT false,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_users_email ON users(email);
CREATE INDEX IF NOT EXISTS idx_users_username ON users(username);
"""

_SQLITE_SCHEMA: str = """\
-- Example user table schema for SQLite
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    email TEXT NOT NULL UNIQUE,
    username TEXT NOT NULL UNIQUE,
    full_name TEXT,
    password_hash TEXT NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1,
    is_verified INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_users_email ON users(email);
CREATE INDEX IF NOT EXISTS idx_users_username ON users(username);
"""

_MYSQL_SCHEMA: str = """\
-- Example user table schema for MySQL
CREATE TABLE IF NOT EXISTS users (
    id CHAR(36) PRIMARY KEY DEFAULT (UUID()),
    email VARCHAR(255) NOT NULL UNIQUE,
    username VARCHAR(100) NOT NULL UNIQUE,
    full_name VARCHAR(255),
    password_hash VARCHAR(255) NOT NULL,
    is_active TINYINT(1) NOT NULL DEFAULT 1,
    is_verified TINYINT(1) NOT NULL DEFAULT 0,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
    INDEX idx_users_email (email),
    INDEX idx_users_username (username)
);
"""

_SCHEMAS: Mapping[DatabaseEngine, str] = MappingProxyType(
    {
        DatabaseEngine.POSTGRESQL: _POSTGRESQL_SCHEMA,
        DatabaseEngine.SQLITE: _SQLITE_SCHEMA,
        DatabaseEngine.MYSQL: _MYSQL_SCHEMA,
    }
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def query_template(engine: Union[DatabaseEngine, str]) -> str:
    """Starter ``users.sql`` content for *engine*."""
    dialect: Dialect = _DIALECTS[database_engine_from(engine)]
    blocks: List[str] = [
        q.render(dialect)
        for q in QUERY_DEFINITIONS
        if dialect.full_crud or not q.needs_full_crud
    ]
    return "\n\n".join(blocks) + "\n"


def schema_template(engine: Union[DatabaseEngine, str]) -> str:
    """Starter ``001_users_table.sql`` content for *engine*."""
    return _SCHEMAS[database_engine_from(engine)]


class StarterTemplateGenerator:
    """
    Produces the starter files for one engine as a mapping of relative
    path to content, ready for ``ProjectExporter.write_files``.
    """

    __slots__ = ("_engine",)

    def __init__(self, engine: Union[DatabaseEngine, str]) -> None:
        self._engine: DatabaseEngine = database_engine_from(engine)

    @property
    def engine(self) -> DatabaseEngine:
        return self._engine

    def generate_queries(self) -> str:
        return query_template(self._engine)

    def generate_schema(self) -> str:
        return schema_template(self._engine)

    def generate_all(
        self,
        queries_dir: str,
        schema_dir: str,
        include_queries: bool = True,
        include_schema: bool = True,
    ) -> Dict[str, str]:
        result: Dict[str, str] = {}
        if include_queries:
            result[f"{queries_dir.rstrip('/')}/{QUERIES_FILENAME}"] = self.generate_queries()
        if include_schema:
            result[f"{schema_dir.rstrip('/')}/{SCHEMA_FILENAME}"] = self.generate_schema()
        logger.debug(
            "Starter templates for %s: %s", self._engine.value, ", ".join(result) or "none"
        )
        return result


__all__: List[str] = [
    "QUERIES_FILENAME",
    "SCHEMA_FILENAME",
    "Dialect",
    "QueryDefinition",
    "QUERY_DEFINITIONS",
    "query_template",
    "schema_template",
    "StarterTemplateGenerator",
]

logger.debug("sqlcwizard.templates loaded.")
