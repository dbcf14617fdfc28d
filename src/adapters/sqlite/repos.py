import builtins
import json
import sqlite3
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar
from uuid import UUID

from src.core.ports.db import SlugConflictError, UserConflictError
from src.domain.entities import Post, User

T = TypeVar("T")


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class SQLitePostRepo:
    """
    Posts with their embedded sub-documents.

    Connections run in autocommit mode; multi-statement writes open their own
    BEGIN IMMEDIATE transaction so concurrent writers serialize per database.
    """

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    def _row_to_post(self, row: dict[str, Any]) -> Post:
        document = json.loads(row["document_json"])
        return Post.model_validate(
            {
                **document,
                "id": row["id"],
                "owner_id": row["owner_id"],
                "title": row["title"],
                "subtitle": row["subtitle"],
                "slug": row["slug"],
                "category": row["category"],
                "likes_count": row["likes_count"],
                "comments_count": row["comments_count"],
                "created_at": row["created_at"],
                "updated_at": row["updated_at"],
            }
        )

    def _write(self, conn: sqlite3.Connection, post: Post) -> None:
        try:
            conn.execute(
                """
                INSERT INTO posts (
                    id, owner_id, title, subtitle, slug, category,
                    likes_count, comments_count, document_json,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    subtitle=excluded.subtitle,
                    slug=excluded.slug,
                    category=excluded.category,
                    likes_count=excluded.likes_count,
                    comments_count=excluded.comments_count,
                    document_json=excluded.document_json,
                    updated_at=excluded.updated_at
            """,
                (
                    str(post.id),
                    str(post.owner_id),
                    post.title,
                    post.subtitle,
                    post.slug,
                    post.category,
                    post.likes_count,
                    post.comments_count,
                    json.dumps(post.document()),
                    post.created_at.isoformat(),
                    post.updated_at.isoformat(),
                ),
            )
        except sqlite3.IntegrityError as e:
            if "posts.slug" in str(e):
                raise SlugConflictError(post.slug) from e
            raise

    def save(self, post: Post) -> Post:
        conn = self._get_conn()
        try:
            self._write(conn, post)
            return post
        finally:
            conn.close()

    def get_by_id(self, post_id: UUID) -> Post | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
            return self._row_to_post(row) if row else None
        finally:
            conn.close()

    def get_by_slug(self, slug: str) -> Post | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM posts WHERE slug = ?", (slug,)).fetchone()
            return self._row_to_post(row) if row else None
        finally:
            conn.close()

    def slug_owner(self, slug: str) -> UUID | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT id FROM posts WHERE slug = ?", (slug,)).fetchone()
            return UUID(row["id"]) if row else None
        finally:
            conn.close()

    def list(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[builtins.list[Post], int]:
        conn = self._get_conn()
        try:
            where = " WHERE 1=1"
            params: builtins.list[str | int] = []
            if category:
                where += " AND category = ?"
                params.append(category)
            if search:
                # Literal substring, not a pattern
                where += " AND instr(casefold(title), ?) > 0"
                params.append(search.casefold())

            row = conn.execute(f"SELECT COUNT(*) AS cnt FROM posts{where}", params).fetchone()
            total = row["cnt"] if row else 0

            rows = conn.execute(
                f"SELECT * FROM posts{where} ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
            return [self._row_to_post(r) for r in rows], total
        finally:
            conn.close()

    def list_by_owner(self, owner_id: UUID) -> builtins.list[Post]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM posts WHERE owner_id = ? ORDER BY created_at DESC, id DESC",
                (str(owner_id),),
            ).fetchall()
            return [self._row_to_post(r) for r in rows]
        finally:
            conn.close()

    def delete(self, post_id: UUID) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))
            return cur.rowcount > 0
        finally:
            conn.close()

    def update_atomic(self, post_id: UUID, mutate: Callable[[Post], T]) -> T | None:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT * FROM posts WHERE id = ?", (str(post_id),)
                ).fetchone()
                if not row:
                    conn.execute("ROLLBACK")
                    return None

                post = self._row_to_post(row)
                result = mutate(post)
                self._write(conn, post)
                conn.execute("COMMIT")
                return result
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()


class SQLiteUserRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=UUID(row["id"]),
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            avatar_url=row["avatar_url"],
            avatar_storage_id=row["avatar_storage_id"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _get_one(self, where: str, value: str) -> User | None:
        conn = self._get_conn()
        try:
            row = conn.execute(f"SELECT * FROM users WHERE {where} = ?", (value,)).fetchone()
            return self._row_to_user(row) if row else None
        finally:
            conn.close()

    def get_by_id(self, user_id: UUID) -> User | None:
        return self._get_one("id", str(user_id))

    def get_by_email(self, email: str) -> User | None:
        return self._get_one("email", email.lower())

    def get_by_username(self, username: str) -> User | None:
        return self._get_one("username", username)

    def save(self, user: User) -> User:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO users (
                    id, username, email, password_hash, avatar_url,
                    avatar_storage_id, status, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    username=excluded.username,
                    email=excluded.email,
                    password_hash=excluded.password_hash,
                    avatar_url=excluded.avatar_url,
                    avatar_storage_id=excluded.avatar_storage_id,
                    status=excluded.status,
                    updated_at=excluded.updated_at
            """,
                (
                    str(user.id),
                    user.username,
                    user.email.lower(),
                    user.password_hash,
                    user.avatar_url,
                    user.avatar_storage_id,
                    user.status,
                    user.created_at.isoformat(),
                    user.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return user
        except sqlite3.IntegrityError as e:
            for field in ("username", "email"):
                if f"users.{field}" in str(e):
                    raise UserConflictError(field) from e
            raise
        finally:
            conn.close()
