"""
SQLite schema for the law corpus.

One primary table per family plus a plain FTS5 table holding the searchable
projection of each row (``rowid`` = primary ``id``). The FTS rows are written
by the store's upsert in the same transaction as the primary row; there are no
triggers.
"""

SCHEMA_VERSION = "2"

STATUTE_TABLE = """
CREATE TABLE IF NOT EXISTS {table} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    citation TEXT UNIQUE NOT NULL,
    title_num TEXT NOT NULL,
    chapter_num TEXT NOT NULL,
    section_num TEXT NOT NULL,
    title_name TEXT,
    chapter_name TEXT,
    section_name TEXT,
    full_text TEXT NOT NULL CHECK (length(full_text) > 0),
    effective_date TEXT,
    last_amended TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_{table}_title ON {table}(title_num);
CREATE INDEX IF NOT EXISTS idx_{table}_chapter ON {table}(chapter_num);

CREATE VIRTUAL TABLE IF NOT EXISTS {table}_fts USING fts5(
    citation,
    title_name,
    chapter_name,
    section_name,
    full_text
);
"""

COURT_RULES_TABLE = """
CREATE TABLE IF NOT EXISTS court_rules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    rule_set TEXT NOT NULL,
    rule_number TEXT NOT NULL,
    rule_name TEXT,
    full_text TEXT NOT NULL CHECK (length(full_text) > 0),
    effective_date TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(rule_set, rule_number)
);
CREATE INDEX IF NOT EXISTS idx_court_rules_set ON court_rules(rule_set);

CREATE VIRTUAL TABLE IF NOT EXISTS court_rules_fts USING fts5(
    rule_set,
    rule_number,
    rule_name,
    full_text
);
"""

SUPPORT_TABLES = """
CREATE TABLE IF NOT EXISTS crawl_progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    family TEXT NOT NULL,
    unit TEXT NOT NULL,
    status TEXT NOT NULL CHECK (status IN ('pending', 'completed', 'error')),
    error_message TEXT,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(family, unit)
);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

# Column of the FTS table that snippets are taken from (full_text)
SNIPPET_COLUMN = {
    "rcw_fts": 4,
    "wac_fts": 4,
    "court_rules_fts": 3,
}


def schema_script() -> str:
    return "\n".join([
        STATUTE_TABLE.format(table="rcw"),
        STATUTE_TABLE.format(table="wac"),
        COURT_RULES_TABLE,
        SUPPORT_TABLES,
    ])
