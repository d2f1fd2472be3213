"""Shared fixtures for the Movie Graph QA test suites."""

import os
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Settings require a Neo4j password; offline tests never connect
os.environ.setdefault("NEO4J_PASSWORD", "test-password")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")


@pytest.fixture
def movie_schema():
    from models.graph_schema import GraphSchema, PropertySchema, RelationshipPattern

    return GraphSchema(
        node_props={
            "Movie": [
                PropertySchema(property="id", type="STRING"),
                PropertySchema(property="released", type="DATE"),
                PropertySchema(property="title", type="STRING"),
                PropertySchema(property="imdbRating", type="FLOAT"),
            ],
            "Person": [PropertySchema(property="name", type="STRING")],
            "Genre": [PropertySchema(property="name", type="STRING")],
        },
        rel_props={"ACTED_IN": [], "DIRECTED": [], "IN_GENRE": []},
        relationships=[
            RelationshipPattern(start="Movie", type="IN_GENRE", end="Genre"),
            RelationshipPattern(start="Person", type="DIRECTED", end="Movie"),
            RelationshipPattern(start="Person", type="ACTED_IN", end="Movie"),
        ],
    )


@pytest.fixture
def graph_store(movie_schema):
    """GraphStore over the movie schema with the database replaced by a mock."""
    from services.graph_store import GraphStore

    store = GraphStore(driver=Mock(), enhanced_schema=False)
    store._structured_schema = movie_schema
    store.query = Mock(return_value=[{"count(DISTINCT a)": 955}])
    return store
