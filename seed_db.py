import os
import sys
from pathlib import Path

# Add root to pythonpath
sys.path.append(os.getcwd())

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.local_storage import create_local_storage
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from src.components import auth, posts
from src.rules.loader import load_rules

DEMO_BLOCKS = [
    {"id": "intro", "type": "header", "data": {"text": "Welcome", "level": 2}},
    {"id": "body", "type": "paragraph", "data": {"text": "This is a seeded demo post."}},
]


def seed():
    data_dir = Path(os.environ.get("BLOG_DATA_DIR", "./data"))
    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = str(data_dir / "blog.db")
    print(f"Seeding to {db_path}")

    SQLiteMigrator(db_path, "migrations").run_migrations()
    rules = load_rules(Path(os.environ.get("BLOG_RULES_PATH", "rules.yaml")))

    user_repo = SQLiteUserRepo(db_path)
    post_repo = SQLitePostRepo(db_path)
    clock = SystemClock()

    email = "demo@example.com"
    user = user_repo.get_by_email(email)
    if user:
        print(f"User {email} already exists.")
    else:
        result = auth.run_register(
            auth.RegisterInput(username="demo", email=email, password="changeme"),
            user_repo=user_repo,
            auth_adapter=JWTAuthAdapter(),
            time=clock,
            rules=rules.auth,
        )
        if not result.success:
            print(f"Registration failed: {[e.message for e in result.errors]}")
            return
        user = result.user
        print(f"Created user: {email} / changeme")

    if posts.run_list_by_owner(posts.ListOwnerPostsInput(owner_id=user.id), repo=post_repo).posts:
        print("Demo post already exists.")
        return

    storage = create_local_storage(data_dir / "media")
    created = posts.run_create(
        posts.CreatePostInput(
            owner_id=user.id,
            title="Hello World",
            subtitle="A first post",
            blocks=DEMO_BLOCKS,
            category="lifestyle",
        ),
        repo=post_repo,
        storage=storage,
        time=clock,
        rules=rules.posts,
    )
    if created.success:
        print(f"Created post: /{created.post.slug}")
    else:
        print(f"Post creation failed: {[e.message for e in created.errors]}")


if __name__ == "__main__":
    seed()
