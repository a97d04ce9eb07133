"""
SQLite schema for dream league entities.
Each entity row keeps its lookup keys as columns and the full entity as a JSON
document in `data`. Every table is created with IF NOT EXISTS.
"""
from __future__ import annotations


def users_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        username TEXT NOT NULL,
        password_hash TEXT NOT NULL,
        created_at INTEGER NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_users_username ON users(username);
    """


def creators_schema() -> str:
    """One creator per authority."""
    return """
    CREATE TABLE IF NOT EXISTS creators (
        id TEXT PRIMARY KEY,
        authority_id TEXT NOT NULL,
        data TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_creators_authority ON creators(authority_id);
    """


def athletes_schema() -> str:
    """collectible_id is the externally issued token reference; unique."""
    return """
    CREATE TABLE IF NOT EXISTS athletes (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        collectible_id TEXT NOT NULL,
        team_id TEXT,
        data TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_athletes_collectible ON athletes(collectible_id);
    CREATE INDEX IF NOT EXISTS ix_athletes_owner ON athletes(owner_id);
    CREATE INDEX IF NOT EXISTS ix_athletes_team ON athletes(team_id);
    """


def teams_schema() -> str:
    """Team names are unique per owner."""
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        name TEXT NOT NULL,
        data TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_teams_owner_name ON teams(owner_id, name);
    """


def tournaments_schema() -> str:
    """status: registration | in_progress | completed | canceled. Names unique per authority."""
    return """
    CREATE TABLE IF NOT EXISTS tournaments (
        id TEXT PRIMARY KEY,
        authority_id TEXT NOT NULL,
        name TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'registration',
        data TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_tournaments_authority_name ON tournaments(authority_id, name);
    CREATE INDEX IF NOT EXISTS ix_tournaments_status ON tournaments(status);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution."""
    return "\n".join([
        users_schema(),
        creators_schema(),
        athletes_schema(),
        teams_schema(),
        tournaments_schema(),
    ])
