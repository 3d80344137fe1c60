"""Shared fixtures: a small on-disk copy of the command database."""

import sqlite3

import pytest
from fastapi.testclient import TestClient

from catalog.sqlite_adapter import CommandCatalog
from config.settings import AppConfig
from server.api import create_app

POPULAR = ["ssh", "grep", "doesnotexist", "ls"]

SCHEMA = """
CREATE TABLE Command (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    category INTEGER NOT NULL,
    name TEXT NOT NULL,
    description TEXT NOT NULL
);
CREATE TABLE CommandSection (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    command_id INTEGER NOT NULL
);
CREATE TABLE Tip (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    position INTEGER NOT NULL
);
CREATE TABLE TipSection (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tip_id INTEGER NOT NULL,
    position INTEGER NOT NULL,
    type INTEGER NOT NULL,
    data1 TEXT NOT NULL,
    data2 TEXT NOT NULL,
    extra TEXT NOT NULL
);
CREATE TABLE BasicCategory (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    position INTEGER NOT NULL,
    title TEXT NOT NULL
);
CREATE TABLE BasicGroup (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    position INTEGER NOT NULL,
    category_id INTEGER NOT NULL,
    description TEXT NOT NULL
);
CREATE TABLE BasicCommand (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    group_id INTEGER NOT NULL,
    command TEXT NOT NULL,
    mans TEXT NOT NULL
);
"""

COMMANDS = [
    (42, 3, "grep", "print lines matching a pattern"),
    (7, 1, "great", "a great command"),
    (8, 1, "agree", "agree with everything"),
    (3, 5, "ls", "list directory contents"),
    (4, 5, "chmod", "change file mode bits"),
    (10, 5, "cat", "concatenate files and print on the standard output"),
    (5, 13, "ssh", "OpenSSH remote login client"),
    (12, 13, "autossh", "keep ssh sessions alive"),
    (6, 99, "mystery", "a tool from an unknown category"),
    (11, 1, "pct", "report 100% of nothing"),
]

# Inserted out of title order on purpose: stored order is id order
SECTIONS = [
    (100, "NAME", "grep - print lines matching a pattern", 42),
    (101, "TLDR", "grep pattern file", 42),
    (102, "SYNOPSIS", "grep [OPTION...] PATTERNS [FILE...]", 42),
    (103, "DESCRIPTION", "grep searches for PATTERNS in each FILE.", 42),
    (104, "TLDR", "ls -la", 3),
]

TIPS = [(1, "Quick Navigation", 1)]

TIP_SECTIONS = [
    (1, 1, 2, 1, "echo second", "", ""),
    (2, 1, 1, 0, "Use Ctrl+A to go to beginning of line", "", ""),
]

BASIC_CATEGORIES = [
    (1, 2, "Files & Folders"),
    (2, 1, "One-liners"),
    (3, 3, "Unlisted Things"),
]

BASIC_GROUPS = [
    (10, 2, 1, "List files"),
    (11, 1, 1, "Copy files"),
    (12, 1, 2, "Handy one-liners"),
]

BASIC_COMMANDS = [
    (1, 11, "cp source dest", "cp"),
    (2, 10, "ls -la\n# long listing", "ls"),
    (3, 11, "cp -r dir dest", "cp"),
    (4, 12, "history | grep ssh", "history grep"),
]


def build_database(path) -> str:
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA)
        conn.executemany("INSERT INTO Command (id, category, name, description) VALUES (?, ?, ?, ?)", COMMANDS)
        conn.executemany("INSERT INTO CommandSection (id, title, content, command_id) VALUES (?, ?, ?, ?)", SECTIONS)
        conn.executemany("INSERT INTO Tip (id, title, position) VALUES (?, ?, ?)", TIPS)
        conn.executemany(
            "INSERT INTO TipSection (id, tip_id, position, type, data1, data2, extra) VALUES (?, ?, ?, ?, ?, ?, ?)",
            TIP_SECTIONS,
        )
        conn.executemany("INSERT INTO BasicCategory (id, position, title) VALUES (?, ?, ?)", BASIC_CATEGORIES)
        conn.executemany(
            "INSERT INTO BasicGroup (id, position, category_id, description) VALUES (?, ?, ?, ?)", BASIC_GROUPS
        )
        conn.executemany("INSERT INTO BasicCommand (id, group_id, command, mans) VALUES (?, ?, ?, ?)", BASIC_COMMANDS)
        conn.commit()
    finally:
        conn.close()
    return str(path)


def execute_sql(path, sql: str) -> None:
    """Modify a fixture database before it is opened read-only."""
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(sql)
        conn.commit()
    finally:
        conn.close()


@pytest.fixture
def db_path(tmp_path):
    """Path to a freshly seeded database file."""
    return build_database(tmp_path / "database.db")


@pytest.fixture
def catalog(db_path):
    catalog = CommandCatalog(db_path, search_default_limit=50, search_max_limit=100,
                             suggestion_limit=10, popular_commands=POPULAR)
    catalog.initialize()
    yield catalog
    catalog.close()


@pytest.fixture
def app_config(db_path):
    return AppConfig(database_path=db_path, popular_commands=POPULAR)


@pytest.fixture
def client(app_config):
    """Test client with the lifespan running, so the catalog is opened."""
    with TestClient(create_app(app_config)) as test_client:
        yield test_client
