"""Pytest configuration and fixtures."""

import pytest
from pathlib import Path

from metasearch.core.config import Schema
from metasearch.core.types import RESOURCE, XSD_DATE
from metasearch.search.engine import SearchEngine
from metasearch.store.database import Database
from metasearch.store.statements import StatementRepository

BASE_URL = "http://127.0.0.1/api/"

LOREM_1 = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Sed iaculis nisl "
    "enim, malesuada tempus nisl ultrices ut. Duis egestas at arcu in blandit. "
    "Nulla eget sem urna. Sed hendrerit enim ut ultrices luctus. Pellentesque "
    "habitant morbi tristique senectus et netus et malesuada fames ac turpis "
    "egestas. Curabitur non dolor non neque venenatis aliquet vitae venenatis est."
)
LOREM_2 = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. Pellentesque "
    "habitant morbi tristique senectus et netus et malesuada fames ac turpis "
    "egestas. Curabitur non dolor non neque venenatis aliquet vitae venenatis "
    "est. Aenean eleifend ipsum eu placerat sagittis. Aenean ullamcorper "
    "dignissim enim, ut congue turpis tristique eu."
)


@pytest.fixture
def test_db_path(tmp_path: Path) -> Path:
    """Provide a temporary database path for tests."""
    return tmp_path / "test.db"


@pytest.fixture
def schema() -> Schema:
    """Provide the default schema."""
    return Schema()


@pytest.fixture
def db(test_db_path: Path) -> Database:
    """Provide a connected database instance."""
    database = Database(test_db_path, pool_size=2)
    database.connect()
    yield database
    database.close()


@pytest.fixture
def statement_repo(db: Database, schema: Schema) -> StatementRepository:
    """Provide a StatementRepository instance."""
    return StatementRepository(db, schema, BASE_URL)


@pytest.fixture
def engine(db: Database, schema: Schema) -> SearchEngine:
    """Provide a SearchEngine instance."""
    return SearchEngine(db, schema, BASE_URL)


@pytest.fixture
def sample_resources(statement_repo: StatementRepository, schema: Schema) -> tuple[int, int]:
    """Create a parent and a child resource.

    The child points at the parent through the schema parent property.
    """
    res1 = statement_repo.create_resource(
        {
            schema.id: "https://an.unique.id",
            schema.label: "sample label for the first resource",
            "https://number.prop": 150,
            "https://lorem.ipsum": LOREM_1,
            "https://date.prop": ("2019-01-01", XSD_DATE),
        }
    )
    res2 = statement_repo.create_resource(
        {
            schema.parent: (statement_repo.uri(res1), RESOURCE),
            schema.label: "a more original title for a resource",
            "https://number.prop": 20,
            "https://lorem.ipsum": LOREM_2,
            "https://date.prop": ("2019-02-01", XSD_DATE),
        }
    )
    return res1, res2
