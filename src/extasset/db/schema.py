"""SQL schema definitions for the extasset metadata database."""

# One row per configured asset; rows are never deleted
CREATE_ASSET_RECORDS_TABLE = """
CREATE TABLE IF NOT EXISTS asset_records (
    asset_key TEXT PRIMARY KEY,
    content_hash TEXT NOT NULL,
    last_checked_at TEXT NOT NULL,
    created_at TEXT DEFAULT (datetime('now')),
    updated_at TEXT DEFAULT (datetime('now'))
);
"""

CREATE_ASSET_RECORDS_UPDATE_TRIGGER = """
CREATE TRIGGER IF NOT EXISTS asset_records_updated_at
AFTER UPDATE ON asset_records
FOR EACH ROW
BEGIN
    UPDATE asset_records SET updated_at = datetime('now') WHERE asset_key = OLD.asset_key;
END;
"""

ALL_SCHEMA_STATEMENTS = [
    CREATE_ASSET_RECORDS_TABLE,
    CREATE_ASSET_RECORDS_UPDATE_TRIGGER,
]

SELECT_RECORD_QUERY = """
SELECT content_hash, last_checked_at FROM asset_records WHERE asset_key = ?;
"""

UPSERT_RECORD_QUERY = """
INSERT INTO asset_records (asset_key, content_hash, last_checked_at)
VALUES (?, ?, ?)
ON CONFLICT(asset_key) DO UPDATE SET
    content_hash = excluded.content_hash,
    last_checked_at = excluded.last_checked_at;
"""
