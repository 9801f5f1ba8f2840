"""Database schema definitions for the metadata store."""

SCHEMA_SQL = """\
-- Subjects
CREATE TABLE IF NOT EXISTS resources (
    id INTEGER PRIMARY KEY AUTOINCREMENT
);

-- Identifier statements (one subject may have many aliases)
CREATE TABLE IF NOT EXISTS identifiers (
    ids TEXT PRIMARY KEY,
    id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE
);

-- Relation statements (value is another subject)
CREATE TABLE IF NOT EXISTS relations (
    id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
    target_id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
    property TEXT NOT NULL,
    PRIMARY KEY (id, target_id, property)
);

-- Literal statements with typed shadow columns used for comparisons
CREATE TABLE IF NOT EXISTS statements (
    mid INTEGER PRIMARY KEY AUTOINCREMENT,
    id INTEGER NOT NULL REFERENCES resources(id) ON DELETE CASCADE,
    property TEXT NOT NULL,
    type TEXT NOT NULL,
    lang TEXT,
    value TEXT NOT NULL,
    value_n REAL,
    value_t TEXT
);

-- Full-text index over literal values (external content)
CREATE VIRTUAL TABLE IF NOT EXISTS statements_fts USING fts5(
    value,
    content='statements',
    content_rowid='mid',
    tokenize='unicode61'
);

CREATE TRIGGER IF NOT EXISTS statements_ai AFTER INSERT ON statements BEGIN
    INSERT INTO statements_fts(rowid, value) VALUES (new.mid, new.value);
END;

CREATE TRIGGER IF NOT EXISTS statements_ad AFTER DELETE ON statements BEGIN
    INSERT INTO statements_fts(statements_fts, rowid, value)
    VALUES ('delete', old.mid, old.value);
END;

CREATE TRIGGER IF NOT EXISTS statements_au AFTER UPDATE ON statements BEGIN
    INSERT INTO statements_fts(statements_fts, rowid, value)
    VALUES ('delete', old.mid, old.value);
    INSERT INTO statements_fts(rowid, value) VALUES (new.mid, new.value);
END;

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_identifiers_id ON identifiers(id);
CREATE INDEX IF NOT EXISTS idx_relations_target ON relations(target_id, property);
CREATE INDEX IF NOT EXISTS idx_relations_property ON relations(property, id);
CREATE INDEX IF NOT EXISTS idx_statements_id ON statements(id);
CREATE INDEX IF NOT EXISTS idx_statements_property ON statements(property, value);
CREATE INDEX IF NOT EXISTS idx_statements_property_n ON statements(property, value_n);
CREATE INDEX IF NOT EXISTS idx_statements_property_t ON statements(property, value_t);
"""


def get_schema() -> str:
    """Get the SQL schema string."""
    return SCHEMA_SQL
