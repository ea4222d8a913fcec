"""Category service for database operations."""

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field

from config import get_default_categories_path
from models.category import TransactionCategory, CATEGORY_TYPES
from services import read_models
from logger import get_logger

logger = get_logger()

_CATEGORY_SELECT_FIELDS = (
    "id, name, type, color, icon, description, sort_order, is_active"
)


class CategorySeed(BaseModel):
    """Schema of one entry in the default categories YAML file."""

    name: str = Field(min_length=1)
    type: Literal["expense", "income", "both"] = "expense"
    color: str = Field(default="#CDAF56", pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: Optional[str] = None
    description: Optional[str] = None


class CategorySeedFile(BaseModel):
    categories: List[CategorySeed]


class CategoryService:
    """Service for managing transaction categories."""

    def __init__(self, db_manager, cache=None):
        """Initialize the category service.

        Args:
            db_manager: Database manager instance for database operations.
            cache: Optional ReadModelCache to invalidate after writes.
        """
        self.db_manager = db_manager
        self.cache = cache

    def find_all(self) -> List[TransactionCategory]:
        """Get all categories from the database.

        Returns:
            List of TransactionCategory objects, ordered by sort_order then name.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"""
                SELECT {_CATEGORY_SELECT_FIELDS}
                FROM categories
                ORDER BY sort_order, name
                """
            )
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find_by_type(
        self, category_type: str, active_only: bool = True
    ) -> List[TransactionCategory]:
        """Get categories usable for a transaction type.

        Categories of type 'both' are included for either type.

        Args:
            category_type: 'expense' or 'income'.
            active_only: If True, skip inactive categories.

        Returns:
            List of TransactionCategory objects, ordered by sort_order then name.
        """
        query = f"""
            SELECT {_CATEGORY_SELECT_FIELDS}
            FROM categories
            WHERE type IN (?, 'both')
        """
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY sort_order, name"

        with self.db_manager.connect() as conn:
            cursor = conn.execute(query, (category_type,))
            return [self._row_to_category(row) for row in cursor.fetchall()]

    def find(self, category_id: int) -> Optional[TransactionCategory]:
        """Get a single category by ID.

        Args:
            category_id: The category ID to find.

        Returns:
            TransactionCategory object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE id = ?",
                (category_id,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def find_by_name(self, name: str) -> Optional[TransactionCategory]:
        """Get a single category by name.

        Args:
            name: The category name to find.

        Returns:
            TransactionCategory object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE name = ?",
                (name,),
            )
            row = cursor.fetchone()

            if row:
                return self._row_to_category(row)
            return None

    def create(
        self,
        name: str,
        category_type: str = "expense",
        color: str = "#CDAF56",
        icon: Optional[str] = None,
        description: Optional[str] = None,
        sort_order: int = 0,
    ) -> TransactionCategory:
        """Create a new category.

        Args:
            name: Category name (should be unique).
            category_type: 'expense', 'income', or 'both'.
            color: Hex color string.
            icon: Optional symbolic icon name.
            description: Optional description of the category.
            sort_order: Position used when listing categories.

        Returns:
            The created TransactionCategory object with id populated.

        Raises:
            ValueError: If category_type is not supported.
            sqlite3.IntegrityError: If the name is already taken.
        """
        if category_type not in CATEGORY_TYPES:
            raise ValueError(f"Unknown category type: {category_type}")

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO categories (name, type, color, icon, description, sort_order)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (name, category_type, color, icon, description, sort_order),
            )
            conn.commit()
            category_id = cursor.lastrowid

        read_models.invalidate_after_write(self.cache, read_models.CATEGORY_WRITES)
        return TransactionCategory(
            id=category_id,
            name=name,
            type=category_type,
            color=color,
            icon=icon,
            description=description,
            sort_order=sort_order,
        )

    def delete(self, category_id: int) -> bool:
        """Delete a category by ID.

        Args:
            category_id: The category ID to delete.

        Returns:
            True if category was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
            conn.commit()

        read_models.invalidate_after_write(self.cache, read_models.CATEGORY_WRITES)
        return cursor.rowcount > 0

    def seed_defaults(self, path: Optional[Path] = None) -> int:
        """Create the default categories listed in a YAML file.

        Categories whose name already exists are left untouched.

        Args:
            path: YAML file to load. Defaults to db/default_categories.yaml.

        Returns:
            Number of categories created.

        Raises:
            pydantic.ValidationError: If the file does not match the schema.
        """
        path = path or get_default_categories_path()
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        seed_file = CategorySeedFile.model_validate(data)
        existing = {category.name for category in self.find_all()}

        created = 0
        for position, seed in enumerate(seed_file.categories):
            if seed.name in existing:
                continue
            self.create(
                seed.name,
                seed.type,
                color=seed.color.upper(),
                icon=seed.icon,
                description=seed.description,
                sort_order=position,
            )
            existing.add(seed.name)
            created += 1

        logger.info(f"Seeded {created} default categories from {path}")
        return created

    def _row_to_category(self, row: tuple) -> TransactionCategory:
        """Convert a database row to a TransactionCategory object."""
        return TransactionCategory(
            id=row[0],
            name=row[1],
            type=row[2],
            color=row[3],
            icon=row[4],
            description=row[5],
            sort_order=row[6],
            is_active=bool(row[7]),
        )
