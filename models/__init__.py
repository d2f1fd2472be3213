"""Data models for the Movie Graph QA system."""

from .entities import (
    CypherExample,
    QAResult
)

from .graph_schema import (
    NodeType,
    RelationshipType,
    CypherResult,
    PropertySchema,
    RelationshipPattern,
    GraphSchema,
    PredefinedQueries
)

from .examples import DEFAULT_EXAMPLES

__all__ = [
    "CypherExample",
    "QAResult",
    "NodeType",
    "RelationshipType",
    "CypherResult",
    "PropertySchema",
    "RelationshipPattern",
    "GraphSchema",
    "PredefinedQueries",
    "DEFAULT_EXAMPLES"
]
