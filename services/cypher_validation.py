"""
Cypher post-processing for LLM output.
Enforces read-only access and fixes relationship directions before execution.
"""

import re
from typing import List

from langchain_neo4j.chains.graph_qa.cypher_utils import CypherQueryCorrector, Schema

from models.graph_schema import GraphSchema
from config import get_logger

logger = get_logger(__name__)


class CypherValidationError(Exception):
    """Raised when a generated Cypher statement is rejected."""
    pass


# Cypher clauses that write to the graph; a preceding '.' or '$' marks a property or parameter
CYPHER_WRITE_KEYWORDS = [
    r'(?<![.$])\bCREATE\b',
    r'(?<![.$])\bMERGE\b',
    r'(?<![.$])\bDETACH\s+DELETE\b',
    r'(?<![.$])\bDELETE\b',
    r'(?<![.$])\bREMOVE\b',
    r'(?<![.$])\bSET\b',
    r'(?<![.$])\bDROP\b',
    r'(?<![.$])\bFOREACH\b',
    r'(?<![.$])\bLOAD\s+CSV\b',
]

STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"")
QUOTED_NAME_PATTERN = re.compile(r"`[^`]*`")

# A node pattern whose label part uses |, &, ! or % (Cypher 5 label expressions)
LABEL_EXPRESSION_PATTERN = re.compile(r"\(\s*(?:`[^`]*`|\w+)?\s*:[^(){}\[\]]*?[|&!%]")


def validate_read_only(query: str) -> str:
    """
    Reject Cypher statements that would modify the graph.

    Raises:
        CypherValidationError: On an empty query or a write clause
    """
    if not query or not query.strip():
        raise CypherValidationError("Query cannot be empty")

    # Ignore keywords that only appear inside literals or quoted names
    masked = STRING_LITERAL_PATTERN.sub("''", query)
    query_upper = QUOTED_NAME_PATTERN.sub("``", masked).upper()

    for pattern in CYPHER_WRITE_KEYWORDS:
        match = re.search(pattern, query_upper)
        if match:
            raise CypherValidationError(
                f"Write operation '{match.group()}' is not allowed. Only read queries are permitted."
            )

    return query


def schema_triples(schema: GraphSchema) -> List[Schema]:
    """Relationship patterns of the graph in the form CypherQueryCorrector expects."""
    return [Schema(start, rel_type, end) for start, rel_type, end in schema.triples()]


class GuardedCypherCorrector(CypherQueryCorrector):
    """
    Relationship direction correction plus optional read-only enforcement.

    Installed as the chain's cypher_query_corrector, so it sees every
    generated statement before execution. Queries with label expressions
    are passed through uncorrected since their labels cannot be checked
    against single-label triples.
    """

    def __init__(
        self,
        schemas: List[Schema],
        correct_directions: bool = True,
        read_only: bool = False
    ):
        super().__init__(schemas)
        self.correct_directions = correct_directions
        self.read_only = read_only

    def correct_query(self, query: str) -> str:
        if LABEL_EXPRESSION_PATTERN.search(query):
            logger.debug("Label expression in query, skipping direction correction")
            return query
        corrected = super().correct_query(query)
        if not corrected:
            logger.warning(f"No schema relationship matches query, discarding:\n{query}")
        elif corrected != query:
            logger.info(f"Corrected Cypher:\n{corrected}")
        return corrected

    def __call__(self, query: str) -> str:
        if self.correct_directions:
            query = self.correct_query(query)
        if self.read_only and query:
            validate_read_only(query)
        return query
