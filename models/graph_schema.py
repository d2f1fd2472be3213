"""
Graph schema definitions for the movie knowledge graph.
Defines node types, relationship types, the introspected schema and Cypher query structures.
"""

from typing import List, Optional, Dict, Any, Tuple
from pydantic import BaseModel, Field
from enum import Enum


class NodeType(str, Enum):
    """Types of nodes in the movie graph."""
    MOVIE = "Movie"
    PERSON = "Person"
    GENRE = "Genre"


class RelationshipType(str, Enum):
    """Types of relationships in the movie graph."""
    ACTED_IN = "ACTED_IN"
    DIRECTED = "DIRECTED"
    IN_GENRE = "IN_GENRE"


class CypherResult(BaseModel):
    """Result from a Cypher query execution."""
    records: List[Dict[str, Any]] = Field(default_factory=list)
    summary: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Check if the query was successful."""
        return self.error is None

    @property
    def count(self) -> int:
        """Get the number of records returned."""
        return len(self.records)


class PropertySchema(BaseModel):
    """
    A single node or relationship property as seen by schema introspection.

    Attributes:
        property: Property key
        type: Cypher type name (STRING, INTEGER, FLOAT, DATE, ...)
        values: Sampled distinct values (enhanced schema only)
        min: Minimum value (enhanced schema only)
        max: Maximum value (enhanced schema only)
        distinct_count: Number of distinct values (enhanced schema only)
    """
    property: str
    type: str
    values: Optional[List[Any]] = None
    min: Optional[Any] = None
    max: Optional[Any] = None
    distinct_count: Optional[int] = None

    def describe(self) -> str:
        """Render the sampled values for the enhanced schema."""
        if self.values:
            if self.distinct_count is not None and self.distinct_count <= len(self.values):
                return f"Available options: {[str(v) for v in self.values]}"
            return f'Example: "{self.values[0]}"'
        if self.min is not None and self.max is not None:
            return f"Min: {self.min}, Max: {self.max}"
        return ""

    def to_structured(self) -> Dict[str, Any]:
        """Property entry in the structured schema consumed by the QA chain."""
        return self.model_dump(exclude_none=True)


class RelationshipPattern(BaseModel):
    """A (start)-[type]->(end) triple present in the graph."""
    start: str
    type: str
    end: str

    def __str__(self) -> str:
        return f"(:{self.start})-[:{self.type}]->(:{self.end})"


class GraphSchema(BaseModel):
    """Introspected schema of the graph database."""
    node_props: Dict[str, List[PropertySchema]] = Field(default_factory=dict)
    rel_props: Dict[str, List[PropertySchema]] = Field(default_factory=dict)
    relationships: List[RelationshipPattern] = Field(default_factory=list)
    enhanced: bool = False

    @property
    def node_labels(self) -> List[str]:
        return sorted(self.node_props)

    @property
    def relationship_types(self) -> List[str]:
        types = set(self.rel_props)
        types.update(r.type for r in self.relationships)
        return sorted(types)

    def triples(self) -> List[Tuple[str, str, str]]:
        """Return (start, type, end) tuples for relationship validation."""
        return [(r.start, r.type, r.end) for r in self.relationships]

    def to_structured(self) -> Dict[str, Any]:
        """
        Dictionary form of the schema used by GraphCypherQAChain.

        Relationship types without properties are left out of rel_props,
        matching what the chain renders for Neo4jGraph.
        """
        return {
            "node_props": {
                label: [p.to_structured() for p in props]
                for label, props in self.node_props.items()
            },
            "rel_props": {
                rel_type: [p.to_structured() for p in props]
                for rel_type, props in self.rel_props.items()
                if props
            },
            "relationships": [r.model_dump() for r in self.relationships],
            "metadata": {"constraint": [], "index": []},
        }

    def to_prompt_string(self) -> str:
        """Render the schema as text for the Cypher generation prompt."""
        if self.enhanced:
            return self._format_enhanced()

        node_lines = []
        for label, props in self.node_props.items():
            props_str = ", ".join(f"{p.property}: {p.type}" for p in props)
            node_lines.append(f"{label} {{{props_str}}}")

        rel_lines = []
        for rel_type, props in self.rel_props.items():
            if not props:
                continue
            props_str = ", ".join(f"{p.property}: {p.type}" for p in props)
            rel_lines.append(f"{rel_type} {{{props_str}}}")

        return "\n".join([
            "Node properties:",
            "\n".join(node_lines),
            "Relationship properties:",
            "\n".join(rel_lines),
            "The relationships:",
            "\n".join(str(r) for r in self.relationships),
        ])

    def _format_enhanced(self) -> str:
        lines = ["Node properties:"]
        for label, props in self.node_props.items():
            lines.append(f"- **{label}**")
            for p in props:
                lines.append(f"  - `{p.property}`: {p.type} {p.describe()}".rstrip())

        lines.append("Relationship properties:")
        for rel_type, props in self.rel_props.items():
            if not props:
                continue
            lines.append(f"- **{rel_type}**")
            for p in props:
                lines.append(f"  - `{p.property}`: {p.type} {p.describe()}".rstrip())

        lines.append("The relationships:")
        lines.extend(str(r) for r in self.relationships)
        return "\n".join(lines)


# Predefined Cypher queries for common operations
class PredefinedQueries:
    """Collection of predefined Cypher queries."""

    CREATE_CONSTRAINTS = [
        "CREATE CONSTRAINT movie_id IF NOT EXISTS FOR (m:Movie) REQUIRE m.id IS UNIQUE",
        "CREATE CONSTRAINT person_name IF NOT EXISTS FOR (p:Person) REQUIRE p.name IS UNIQUE",
        "CREATE CONSTRAINT genre_name IF NOT EXISTS FOR (g:Genre) REQUIRE g.name IS UNIQUE",
    ]

    # Sample data import
    LOAD_MOVIES = """
    LOAD CSV WITH HEADERS FROM $url AS row
    MERGE (m:Movie {id: row.movieId})
    SET m.released = date(row.released),
        m.title = row.title,
        m.imdbRating = toFloat(row.imdbRating)
    FOREACH (director IN split(row.director, '|') |
        MERGE (p:Person {name: trim(director)})
        MERGE (p)-[:DIRECTED]->(m))
    FOREACH (actor IN split(row.actors, '|') |
        MERGE (p:Person {name: trim(actor)})
        MERGE (p)-[:ACTED_IN]->(m))
    FOREACH (genre IN split(row.genres, '|') |
        MERGE (g:Genre {name: trim(genre)})
        MERGE (m)-[:IN_GENRE]->(g))
    """

    # Graph document import; labels and types are backtick-quoted by the caller
    MERGE_NODE = "MERGE (n:`{label}` {{id: $id}}) SET n += $properties"

    MERGE_RELATIONSHIP = """
    MATCH (a:`{start}` {{id: $source}}), (b:`{end}` {{id: $target}})
    MERGE (a)-[r:`{type}`]->(b)
    SET r += $properties
    """

    MERGE_SOURCE = """
    MERGE (d:Document {id: $id})
    SET d.text = $text, d += $metadata
    WITH d
    UNWIND $node_ids AS node_id
    MATCH (n {id: node_id})
    MERGE (d)-[:MENTIONS]->(n)
    """

    # Schema introspection (built-in procedures, no APOC required)
    NODE_PROPERTIES = """
    CALL db.schema.nodeTypeProperties()
    YIELD nodeLabels, propertyName, propertyTypes
    RETURN nodeLabels, propertyName, propertyTypes
    """

    REL_PROPERTIES = """
    CALL db.schema.relTypeProperties()
    YIELD relType, propertyName, propertyTypes
    RETURN relType, propertyName, propertyTypes
    """

    RELATIONSHIPS = """
    CALL db.relationshipTypes() YIELD relationshipType AS rel_type
    CALL {
        WITH rel_type
        MATCH (a)-[r]->(b)
        WHERE type(r) = rel_type
        WITH a, b LIMIT $sample
        UNWIND labels(a) AS start
        UNWIND labels(b) AS end
        RETURN DISTINCT start, end
    }
    RETURN start, rel_type AS type, end
    ORDER BY type, start, end
    """

    COUNT_NODES = "MATCH (n:`{label}`) RETURN count(n) AS count"

    COUNT_RELATIONSHIPS = "MATCH ()-[r]->() RETURN count(r) AS count"

    # Enhanced schema sampling; {match} binds the sampled entity to n
    NODE_MATCH = "(n:`{label}`)"

    REL_MATCH = "()-[n:`{label}`]->()"

    SAMPLE_STRING_VALUES = """
    MATCH {match}
    WHERE n.`{prop}` IS NOT NULL
    WITH DISTINCT n.`{prop}` AS value
    LIMIT $limit
    RETURN collect(value) AS values
    """

    COUNT_DISTINCT_VALUES = """
    MATCH {match}
    WHERE n.`{prop}` IS NOT NULL
    RETURN count(DISTINCT n.`{prop}`) AS distinct_count
    """

    SAMPLE_RANGE = """
    MATCH {match}
    WHERE n.`{prop}` IS NOT NULL
    RETURN min(n.`{prop}`) AS min, max(n.`{prop}`) AS max,
           count(DISTINCT n.`{prop}`) AS distinct_count
    """
