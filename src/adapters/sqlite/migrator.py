import hashlib
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

DOWN_MARKER = "-- Down"


class SQLiteMigrator:
    """
    Applies migrations/*.sql in filename order, once each.

    Each applied file is recorded in schema_migrations with a checksum of
    its up script; editing an applied file is reported, never re-run.
    """

    def __init__(self, db_path: str, migrations_dir: str | Path):
        self.db_path = db_path
        self.migrations_dir = Path(migrations_dir)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_migrations (
                filename TEXT PRIMARY KEY,
                checksum TEXT NOT NULL,
                applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
        """)
        return conn

    def _scripts(self) -> list[Path]:
        return sorted(self.migrations_dir.glob("*.sql"))

    @staticmethod
    def _up_script(path: Path) -> str:
        return path.read_text().split(DOWN_MARKER, 1)[0]

    @staticmethod
    def _checksum(script: str) -> str:
        return hashlib.sha256(script.encode()).hexdigest()

    def pending(self) -> list[str]:
        """Filenames not yet applied to the database."""
        conn = self._connect()
        try:
            applied = {row[0] for row in conn.execute("SELECT filename FROM schema_migrations")}
        finally:
            conn.close()
        return [p.name for p in self._scripts() if p.name not in applied]

    def run_migrations(self) -> list[str]:
        """Apply all pending migrations. Returns the filenames applied."""
        conn = self._connect()
        applied_now: list[str] = []
        try:
            recorded = dict(conn.execute("SELECT filename, checksum FROM schema_migrations"))
            for path in self._scripts():
                script = self._up_script(path)
                checksum = self._checksum(script)
                if path.name in recorded:
                    if recorded[path.name] != checksum:
                        logger.warning("Applied migration %s has changed on disk", path.name)
                    continue
                logger.info("Applying migration: %s", path.name)
                self._apply(conn, path.name, script, checksum)
                applied_now.append(path.name)
            return applied_now
        finally:
            conn.close()

    def _apply(self, conn: sqlite3.Connection, filename: str, script: str, checksum: str) -> None:
        try:
            conn.executescript(script)
            conn.execute(
                "INSERT INTO schema_migrations (filename, checksum) VALUES (?, ?)",
                (filename, checksum),
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise RuntimeError(f"Migration {filename} failed: {e}") from e
