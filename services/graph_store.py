"""
Graph Store Service for the Movie Graph QA system.
Handles Neo4j connectivity, sample data loading, query execution and schema introspection.
Implements the LangChain graph store interface so GraphCypherQAChain can run on it.
"""

import hashlib
from typing import List, Dict, Any, Optional
from contextlib import contextmanager

from neo4j import GraphDatabase, Driver, Session
from neo4j.exceptions import ServiceUnavailable, AuthError
from langchain_neo4j.graphs.graph_store import GraphStore as BaseGraphStore

from models.graph_schema import (
    NodeType,
    PredefinedQueries,
    CypherResult,
    GraphSchema,
    PropertySchema,
    RelationshipPattern
)
from config import get_settings, get_logger

logger = get_logger(__name__)


# Neo4j type names reported by db.schema.* mapped to Cypher type names
PROPERTY_TYPE_MAP = {
    "String": "STRING",
    "Long": "INTEGER",
    "Double": "FLOAT",
    "Boolean": "BOOLEAN",
    "Date": "DATE",
    "DateTime": "DATE_TIME",
    "LocalDateTime": "LOCAL_DATE_TIME",
    "Time": "TIME",
    "LocalTime": "LOCAL_TIME",
    "Duration": "DURATION",
    "Point": "POINT",
}

RANGE_TYPES = {"INTEGER", "FLOAT", "DATE", "DATE_TIME", "LOCAL_DATE_TIME"}

# Distinct values shown as "Available options" in the enhanced schema
DISTINCT_VALUE_LIMIT = 10


class GraphQueryError(Exception):
    """Raised when a Cypher statement fails to execute."""

    def __init__(self, message: str, cypher: str = None):
        super().__init__(message)
        self.cypher = cypher


def map_property_type(property_types: Optional[List[str]]) -> str:
    """Collapse the reported type list of a property into one Cypher type name."""
    if not property_types:
        return "ANY"
    raw = property_types[0]
    if raw.endswith("Array"):
        return "LIST"
    return PROPERTY_TYPE_MAP.get(raw, raw.upper())


def _strip_type_name(name: str) -> str:
    """Turn ':`ACTED_IN`' into 'ACTED_IN'."""
    return name.lstrip(":").strip("`")


def _add_property(props: List[PropertySchema], name: Optional[str], types: Optional[List[str]]) -> None:
    # nodeTypeProperties reports a property once per label combination
    if name and all(p.property != name for p in props):
        props.append(PropertySchema(property=name, type=map_property_type(types)))


class GraphStore(BaseGraphStore):
    """
    Service for talking to the Neo4j movie graph.

    Features:
    - Connection management with connectivity verification
    - Sample movie dataset import via LOAD CSV
    - Raw and strict Cypher execution
    - Schema introspection with optional value sampling
    """

    def __init__(
        self,
        uri: str = None,
        user: str = None,
        password: str = None,
        database: str = None,
        enhanced_schema: bool = None,
        driver: Driver = None
    ):
        self.settings = get_settings()
        self.uri = uri or self.settings.neo4j_uri
        self.user = user or self.settings.neo4j_user
        self.password = password or self.settings.neo4j_password
        self.database = database or self.settings.neo4j_database
        # Read by GraphCypherQAChain.from_llm when it renders a filtered schema
        self._enhanced_schema = (
            self.settings.enhanced_schema if enhanced_schema is None else enhanced_schema
        )

        self._structured_schema: Optional[GraphSchema] = None
        self._driver: Optional[Driver] = driver
        if self._driver is None:
            self._connect()

    def _connect(self) -> None:
        """Establish connection to Neo4j."""
        try:
            self._driver = GraphDatabase.driver(
                self.uri,
                auth=(self.user, self.password)
            )
            self._driver.verify_connectivity()
            logger.info(f"Connected to Neo4j at {self.uri}")
        except AuthError as e:
            logger.error(f"Neo4j authentication failed: {e}")
            raise
        except ServiceUnavailable as e:
            logger.error(f"Neo4j service unavailable: {e}")
            raise

    @property
    def driver(self) -> Driver:
        """Get the Neo4j driver, reconnecting if necessary."""
        if self._driver is None:
            self._connect()
        return self._driver

    @contextmanager
    def session(self) -> Session:
        """Context manager for Neo4j sessions."""
        session = self.driver.session(database=self.database)
        try:
            yield session
        finally:
            session.close()

    def close(self) -> None:
        """Close the database connection."""
        if self._driver:
            self._driver.close()
            self._driver = None
            logger.info("Neo4j connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # Query execution

    def execute_cypher(
        self,
        cypher: str,
        parameters: Dict[str, Any] = None
    ) -> CypherResult:
        """Execute a raw Cypher query, reporting failures in the result."""
        parameters = parameters or {}

        with self.session() as session:
            try:
                result = session.run(cypher, parameters)
                records = [record.data() for record in result]
                summary = result.consume()

                return CypherResult(
                    records=records,
                    summary={
                        "counters": summary.counters.__dict__ if summary.counters else {},
                        "query_type": summary.query_type
                    }
                )
            except Exception as e:
                logger.error(f"Cypher execution error: {e}")
                return CypherResult(error=str(e))

    def query(
        self,
        cypher: str,
        params: Dict[str, Any] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute a Cypher query and return its records.

        Raises:
            GraphQueryError: If the database rejects the query
        """
        result = self.execute_cypher(cypher, params)
        if result.error:
            raise GraphQueryError(result.error, cypher=cypher)
        return result.records

    # Sample data

    def create_constraints(self) -> None:
        """Create uniqueness constraints for the movie dataset."""
        with self.session() as session:
            for constraint in PredefinedQueries.CREATE_CONSTRAINTS:
                try:
                    session.run(constraint)
                except Exception as e:
                    logger.debug(f"Constraint may already exist: {e}")

        logger.info("Database constraints created/verified")

    def load_movies(self, csv_url: str = None) -> Dict[str, Any]:
        """
        Import the sample movie dataset.

        Args:
            csv_url: CSV location readable by the Neo4j server

        Returns:
            Write counters reported by the database
        """
        csv_url = csv_url or self.settings.movies_csv_url
        self.create_constraints()

        result = self.execute_cypher(PredefinedQueries.LOAD_MOVIES, {"url": csv_url})
        if result.error:
            raise GraphQueryError(result.error, cypher=PredefinedQueries.LOAD_MOVIES)

        counters = (result.summary or {}).get("counters", {})
        logger.info(f"Loaded movie dataset from {csv_url}: {counters}")
        # Cached schema no longer reflects the graph
        self._structured_schema = None
        return counters

    def add_graph_documents(self, graph_documents: List[Any], include_source: bool = False) -> None:
        """
        Merge extracted graph documents into the database.

        Nodes are keyed by their id under their type label. With include_source,
        each source text becomes a Document node that MENTIONS its nodes.
        """
        for document in graph_documents:
            for node in document.nodes:
                self.query(
                    PredefinedQueries.MERGE_NODE.format(label=node.type),
                    {"id": node.id, "properties": node.properties or {}}
                )

            for rel in document.relationships:
                self.query(
                    PredefinedQueries.MERGE_RELATIONSHIP.format(
                        start=rel.source.type, type=rel.type, end=rel.target.type
                    ),
                    {
                        "source": rel.source.id,
                        "target": rel.target.id,
                        "properties": rel.properties or {}
                    }
                )

            if include_source and document.source is not None:
                text = document.source.page_content
                self.query(PredefinedQueries.MERGE_SOURCE, {
                    "id": hashlib.md5(text.encode("utf-8")).hexdigest(),
                    "text": text,
                    "metadata": document.source.metadata or {},
                    "node_ids": [node.id for node in document.nodes]
                })

        logger.info(f"Merged {len(graph_documents)} graph documents")
        self._structured_schema = None

    # Schema introspection

    @property
    def structured_schema(self) -> GraphSchema:
        """The introspected schema, refreshed on first access."""
        if self._structured_schema is None:
            self.refresh_schema()
        return self._structured_schema

    @property
    def schema(self) -> str:
        """The schema rendered as prompt text."""
        return self.structured_schema.to_prompt_string()

    @property
    def get_schema(self) -> str:
        return self.schema

    @property
    def get_structured_schema(self) -> Dict[str, Any]:
        return self.structured_schema.to_structured()

    def refresh_schema(self) -> GraphSchema:
        """Rebuild the cached schema from the database."""
        node_props: Dict[str, List[PropertySchema]] = {}
        for record in self.query(PredefinedQueries.NODE_PROPERTIES):
            for label in record["nodeLabels"] or []:
                props = node_props.setdefault(label, [])
                _add_property(props, record["propertyName"], record["propertyTypes"])

        rel_props: Dict[str, List[PropertySchema]] = {}
        for record in self.query(PredefinedQueries.REL_PROPERTIES):
            props = rel_props.setdefault(_strip_type_name(record["relType"]), [])
            _add_property(props, record["propertyName"], record["propertyTypes"])

        relationships = [
            RelationshipPattern(start=r["start"], type=r["type"], end=r["end"])
            for r in self.query(
                PredefinedQueries.RELATIONSHIPS,
                {"sample": self.settings.schema_sample_size}
            )
        ]

        schema = GraphSchema(
            node_props=node_props,
            rel_props=rel_props,
            relationships=relationships,
            enhanced=self._enhanced_schema
        )
        if self._enhanced_schema:
            for label, props in schema.node_props.items():
                self._sample_property_values(PredefinedQueries.NODE_MATCH.format(label=label), props)
            for rel_type, props in schema.rel_props.items():
                self._sample_property_values(PredefinedQueries.REL_MATCH.format(label=rel_type), props)

        self._structured_schema = schema
        logger.info(
            f"Schema refreshed: {len(node_props)} labels, "
            f"{len(schema.relationship_types)} relationship types"
        )
        return schema

    def _sample_property_values(self, match: str, props: List[PropertySchema]) -> None:
        """Annotate properties of the matched entities with example values or ranges."""
        for prop in props:
            fmt = {"match": match, "prop": prop.property}
            if prop.type == "STRING":
                count = self.query(PredefinedQueries.COUNT_DISTINCT_VALUES.format(**fmt))
                values = self.query(
                    PredefinedQueries.SAMPLE_STRING_VALUES.format(**fmt),
                    {"limit": DISTINCT_VALUE_LIMIT}
                )
                prop.distinct_count = count[0]["distinct_count"] if count else 0
                prop.values = values[0]["values"] if values else []
            elif prop.type in RANGE_TYPES:
                rows = self.query(PredefinedQueries.SAMPLE_RANGE.format(**fmt))
                if rows:
                    prop.min = _plain(rows[0]["min"])
                    prop.max = _plain(rows[0]["max"])
                    prop.distinct_count = rows[0]["distinct_count"]

    def get_statistics(self) -> Dict[str, int]:
        """Get database statistics."""
        stats = {}

        with self.session() as session:
            for label in NodeType:
                result = session.run(PredefinedQueries.COUNT_NODES.format(label=label.value))
                record = result.single()
                stats[label.value.lower() + "_count"] = record["count"] if record else 0

            result = session.run(PredefinedQueries.COUNT_RELATIONSHIPS)
            record = result.single()
            stats["relationship_count"] = record["count"] if record else 0

        return stats


def _plain(value: Any) -> Any:
    """Temporal driver values become ISO strings; numbers pass through."""
    if value is None or isinstance(value, (int, float, str)):
        return value
    return str(value)
