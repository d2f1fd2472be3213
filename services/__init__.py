"""Services package for the Movie Graph QA system."""

from .graph_store import GraphStore, GraphQueryError
from .example_store import ExampleStore
from .prompts import (
    build_few_shot_prompt,
    default_cypher_prompt,
    default_qa_prompt
)
from .cypher_validation import (
    GuardedCypherCorrector,
    CypherValidationError,
    schema_triples,
    validate_read_only
)
from .cypher_chain import CypherQAService

__all__ = [
    "GraphStore",
    "GraphQueryError",
    "ExampleStore",
    "build_few_shot_prompt",
    "default_cypher_prompt",
    "default_qa_prompt",
    "GuardedCypherCorrector",
    "CypherValidationError",
    "schema_triples",
    "validate_read_only",
    "CypherQAService"
]
