"""
Movie Graph QA - Main Orchestrator

Entry point for question answering over the Neo4j movie graph.
It connects to the database, loads the sample dataset, prints the schema,
builds zero-shot or few-shot Cypher prompts and answers questions.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Dict, Any, List
import argparse

from langchain_core.prompts import BasePromptTemplate

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config import get_settings, LogConfig, get_logger
from models.entities import CypherExample
from models.examples import DEFAULT_EXAMPLES
from services.graph_store import GraphStore
from services.example_store import ExampleStore
from services.prompts import build_few_shot_prompt, default_cypher_prompt
from services.cypher_chain import CypherQAService

logger = get_logger(__name__)

PROMPT_MODES = ("none", "static", "dynamic")


class MovieGraphQASystem:
    """
    Main orchestrator for the Movie Graph QA system.

    Coordinates the walkthrough:
    1. Connect to Neo4j
    2. Load the sample movie dataset
    3. Introspect and print the schema
    4. Build a zero-shot, static few-shot or dynamic few-shot prompt
    5. Run the graph QA chain on a question
    """

    def __init__(
        self,
        auto_connect: bool = True,
        examples: List[CypherExample] = None,
        k: int = None
    ):
        """
        Initialize the system.

        Args:
            auto_connect: Whether to connect to Neo4j on init
            examples: Few-shot examples (defaults to the movie examples)
            k: Number of examples selected per question in dynamic mode
        """
        self.settings = get_settings()
        self.examples = examples or DEFAULT_EXAMPLES
        self.k = k or self.settings.example_k
        self._example_store = None
        self._selector = None

        if auto_connect:
            try:
                self.graph = GraphStore()
                logger.info("Movie Graph QA system initialized successfully")
            except Exception as e:
                logger.error(f"Failed to connect to Neo4j: {e}")
                raise
        else:
            self.graph = None

    @property
    def example_store(self) -> ExampleStore:
        """Vector store for dynamic example selection, opened on first use."""
        if self._example_store is None:
            self._example_store = ExampleStore()
        return self._example_store

    def _require_graph(self) -> GraphStore:
        if not self.graph:
            raise RuntimeError("System not initialized with a database connection")
        return self.graph

    def load_sample_data(self, csv_url: str = None) -> Dict[str, Any]:
        """Import the movie dataset and refresh the schema."""
        graph = self._require_graph()
        counters = graph.load_movies(csv_url)
        graph.refresh_schema()
        return counters

    def get_schema(self) -> str:
        return self._require_graph().schema

    def print_schema(self) -> None:
        graph = self._require_graph()
        graph.refresh_schema()
        print(graph.schema)

    def index_examples(self) -> int:
        """Store the few-shot examples for similarity search."""
        return self.example_store.add_examples(self.examples)

    def build_prompt(self, mode: str = "static") -> BasePromptTemplate:
        """
        Build the Cypher generation prompt.

        Args:
            mode: 'none' (zero-shot), 'static' (all examples) or
                'dynamic' (k nearest examples per question)
        """
        if mode == "none":
            return default_cypher_prompt()
        if mode == "static":
            return build_few_shot_prompt(
                examples=[e.to_prompt_vars() for e in self.examples]
            )
        if mode == "dynamic":
            if self._selector is None:
                self.example_store.add_examples(self.examples)
                self._selector = self.example_store.selector(k=self.k)
            return build_few_shot_prompt(example_selector=self._selector)
        raise ValueError(f"Unknown prompt mode '{mode}', expected one of {PROMPT_MODES}")

    def build_chain(self, mode: str = "static", **kwargs: Any) -> CypherQAService:
        return CypherQAService(
            graph=self._require_graph(),
            cypher_prompt=self.build_prompt(mode),
            **kwargs
        )

    def query(self, question: str, mode: str = "static", **kwargs: Any) -> Dict[str, Any]:
        """
        Answer a question about the movie graph.

        Args:
            question: Natural language question
            mode: Prompt mode, see build_prompt

        Returns:
            Mapping with 'query', 'result' and 'intermediate_steps'
        """
        return asyncio.run(self.aquery(question, mode, **kwargs))

    async def aquery(self, question: str, mode: str = "static", **kwargs: Any) -> Dict[str, Any]:
        """Async version of query."""
        chain = self.build_chain(mode, **kwargs)
        return await chain.ainvoke(question)

    def get_statistics(self) -> Dict[str, Any]:
        """Get graph and example store statistics."""
        graph_stats = self.graph.get_statistics() if self.graph else {}
        return {
            "graph": graph_stats,
            "examples": {
                "configured": len(self.examples),
                "indexed": self._example_store.count() if self._example_store else None
            }
        }

    def close(self):
        """Close all connections."""
        if self.graph:
            self.graph.close()
        logger.info("System connections closed")


def print_result(result: Dict[str, Any]) -> None:
    print("\n" + "="*60)
    print(f"Question: {result.get('query')}")
    print("="*60)

    steps = result.get("intermediate_steps") or []
    for step in steps:
        if "query" in step:
            print(f"\nCypher Query:\n{step['query']}")
        if "context" in step:
            print(f"\nContext ({len(step['context'])} records):")
            print(json.dumps(step["context"], indent=2, default=str))

    answer = result.get("result")
    if isinstance(answer, list):
        answer = json.dumps(answer, indent=2, default=str)
    print(f"\nAnswer:\n{answer}")
    print("="*60)


# CLI Interface
def main(argv: List[str] = None):
    parser = argparse.ArgumentParser(
        description="Question answering over a Neo4j movie graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load the sample movie dataset and print the schema
  python main.py --load-data --schema

  # Ask with all examples in the prompt
  python main.py --query "How many actors are in the graph?"

  # Ask with the 3 most similar examples
  python main.py --query "Which actors played in Casino?" --few-shot dynamic --k 3

  # Show the prompt that would be sent
  python main.py --query "Who directed Heat?" --show-prompt
        """
    )

    parser.add_argument("--load-data", action="store_true", help="Load the sample movie dataset")
    parser.add_argument("--csv-url", help="Override the movie CSV location")
    parser.add_argument("--schema", action="store_true", help="Print the graph schema")
    parser.add_argument("--stats", action="store_true", help="Show graph statistics")
    parser.add_argument("--index-examples", action="store_true",
                        help="Store the few-shot examples in the vector store")
    parser.add_argument("--query", help="Question to answer")
    parser.add_argument("--few-shot", choices=PROMPT_MODES, default="static",
                        help="Prompting mode for Cypher generation")
    parser.add_argument("--k", type=int, help="Examples per question in dynamic mode")
    parser.add_argument("--show-prompt", action="store_true",
                        help="Print the formatted Cypher prompt for --query")
    parser.add_argument("--direct", action="store_true",
                        help="Return the raw records instead of a phrased answer")

    args = parser.parse_args(argv)

    settings = get_settings()
    LogConfig.setup_logging(settings.log_level)

    if not any([args.load_data, args.schema, args.stats, args.index_examples, args.query]):
        parser.print_help()
        return

    system = MovieGraphQASystem(k=args.k)

    try:
        if args.load_data:
            counters = system.load_sample_data(args.csv_url)
            print(json.dumps(counters, indent=2, default=str))

        if args.schema:
            system.print_schema()

        if args.index_examples:
            count = system.index_examples()
            print(f"Indexed {count} examples")

        if args.stats:
            stats = system.get_statistics()
            print("\n" + "="*40)
            print("MOVIE GRAPH STATISTICS")
            print("="*40)
            for key, value in stats.get("graph", {}).items():
                print(f"  {key}: {value}")
            print("="*40)

        if args.query:
            if args.show_prompt:
                prompt = system.build_prompt(args.few_shot)
                print(prompt.format(question=args.query, schema=system.get_schema()))
            result = system.query(args.query, mode=args.few_shot, return_direct=args.direct)
            print_result(result)

    finally:
        system.close()


if __name__ == "__main__":
    main()
