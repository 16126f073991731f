"""
Recipe repository implementation.
SQLite-backed persistence with in-memory support for testing.
"""

import json
import logging
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from app.core.errors import PersistenceError
from app.models import NormalizedRecipe, RecipeSource, StoredRecipe
from app.services.metrics import record_persistence_failure

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, external_id, api_source, title, image_url, ready_in_minutes, servings, "
    "ingredients, instructions, nutrition, created_at, updated_at"
)


def _init_schema(conn: sqlite3.Connection) -> None:
    """Create recipes table if not exists."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS recipes (
            id TEXT PRIMARY KEY,
            external_id TEXT NOT NULL,
            api_source TEXT NOT NULL,
            title TEXT NOT NULL,
            image_url TEXT,
            ready_in_minutes INTEGER,
            servings INTEGER,
            ingredients TEXT NOT NULL,
            instructions TEXT,
            nutrition TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE (external_id, api_source)
        )
    """)
    conn.execute("CREATE INDEX IF NOT EXISTS idx_recipes_title ON recipes(title)")
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_recipes_api_source ON recipes(api_source)"
    )
    conn.commit()


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _dump_list(models: list) -> str:
    return json.dumps([m.model_dump(mode="json", by_alias=True) for m in models])


def _recipe_from_row(row: tuple) -> StoredRecipe:
    """Build StoredRecipe from DB row."""
    (
        id_,
        external_id,
        api_source,
        title,
        image_url,
        ready_in_minutes,
        servings,
        ingredients_json,
        instructions_json,
        nutrition_json,
        created_at,
        updated_at,
    ) = row
    return StoredRecipe(
        id=id_,
        external_id=external_id,
        source_name=RecipeSource(api_source),
        title=title,
        image_url=image_url,
        ready_in_minutes=ready_in_minutes,
        servings=servings,
        ingredients=json.loads(ingredients_json),
        instructions=json.loads(instructions_json) if instructions_json else [],
        nutrition=json.loads(nutrition_json) if nutrition_json else None,
        created_at=datetime.fromisoformat(created_at),
        updated_at=datetime.fromisoformat(updated_at),
    )


class SQLiteRecipeRepository:
    """SQLite-backed recipe repository implementing RecipeRepository."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path or ":memory:"
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._lock = threading.Lock()
        _init_schema(self._conn)

    def _write(self, recipe: NormalizedRecipe) -> None:
        now = datetime.now(timezone.utc).isoformat()
        params: tuple[Any, ...] = (
            str(uuid.uuid4()),
            recipe.external_id,
            recipe.source_name.value,
            recipe.title,
            recipe.image_url,
            recipe.ready_in_minutes,
            recipe.servings,
            _dump_list(recipe.ingredients),
            _dump_list(recipe.instructions),
            json.dumps(recipe.nutrition) if recipe.nutrition is not None else None,
            now,
            now,
        )
        try:
            with self._lock:
                self._conn.execute(
                    f"INSERT INTO recipes ({_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                    "ON CONFLICT (external_id, api_source) DO UPDATE SET "
                    "title=excluded.title, image_url=excluded.image_url, "
                    "ready_in_minutes=excluded.ready_in_minutes, "
                    "servings=excluded.servings, ingredients=excluded.ingredients, "
                    "instructions=excluded.instructions, nutrition=excluded.nutrition, "
                    "updated_at=excluded.updated_at",
                    params,
                )
                self._conn.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceError(
                f"Could not store recipe {recipe.source_name.value}/{recipe.external_id}: {e}"
            ) from e

    def upsert(self, recipe: NormalizedRecipe) -> None:
        """Insert or overwrite by (external_id, source). Failures are logged, never raised."""
        try:
            self._write(recipe)
        except PersistenceError as e:
            record_persistence_failure()
            logger.warning("Error storing recipe: %s", e)

    def get_recipe(
        self, external_id: str, source: RecipeSource
    ) -> Optional[StoredRecipe]:
        with self._lock:
            cur = self._conn.execute(
                f"SELECT {_COLUMNS} FROM recipes WHERE external_id = ? AND api_source = ?",
                (external_id, source.value),
            )
            row = cur.fetchone()
        if row is None:
            return None
        return _recipe_from_row(tuple(row))

    def list_recipes(
        self,
        source: Optional[RecipeSource] = None,
        search: Optional[str] = None,
    ) -> List[StoredRecipe]:
        sql = f"SELECT {_COLUMNS} FROM recipes"
        clauses: list[str] = []
        params: list[Any] = []
        if source is not None:
            clauses.append("api_source = ?")
            params.append(source.value)
        if search and search.strip():
            clauses.append("LOWER(title) LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(search.strip().lower())}%")
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY updated_at DESC"
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [_recipe_from_row(tuple(r)) for r in rows]
