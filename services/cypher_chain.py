"""
Graph QA service for the Movie Graph QA system.
Configures GraphCypherQAChain from settings: the LLM writes Cypher, Neo4j runs it
and the LLM phrases the answer.
"""

import time
from typing import List, Dict, Any, Optional

from langchain_core.language_models import BaseLanguageModel
from langchain_core.prompts import BasePromptTemplate
from langchain_neo4j import GraphCypherQAChain
from langchain_openai import ChatOpenAI

from models.entities import QAResult
from services.graph_store import GraphStore
from services.prompts import default_cypher_prompt, default_qa_prompt
from services.cypher_validation import GuardedCypherCorrector, schema_triples
from config import get_settings, get_logger

logger = get_logger(__name__)


class CypherQAService:
    """
    Question answering over the movie graph.

    Steps per question, run by GraphCypherQAChain:
    1. Format the Cypher prompt with the question and the graph schema
    2. Ask the LLM for a Cypher statement
    3. Optionally fix relationship directions and enforce read-only access
    4. Execute the statement and keep the first top_k records
    5. Ask the LLM to phrase an answer from the records, unless returning them directly

    Options left as None fall back to settings.
    """

    def __init__(
        self,
        graph: GraphStore,
        llm: BaseLanguageModel = None,
        cypher_prompt: BasePromptTemplate = None,
        qa_prompt: BasePromptTemplate = None,
        qa_llm: BaseLanguageModel = None,
        top_k: int = None,
        return_intermediate_steps: bool = None,
        return_direct: bool = False,
        validate_cypher: bool = None,
        read_only: bool = None,
        include_types: List[str] = None,
        exclude_types: List[str] = None,
        verbose: bool = None,
        allow_dangerous_requests: bool = None
    ):
        self.settings = get_settings()
        self.graph = graph
        self.llm = llm or ChatOpenAI(
            model=self.settings.gpt_model,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
            api_key=self.settings.openai_api_key
        )
        self.return_direct = return_direct
        self.verbose = self.settings.verbose if verbose is None else verbose

        validate_cypher = self.settings.validate_cypher if validate_cypher is None else validate_cypher
        read_only = self.settings.read_only if read_only is None else read_only

        self.chain = GraphCypherQAChain.from_llm(
            llm=self.llm,
            qa_llm=qa_llm,
            graph=graph,
            cypher_prompt=cypher_prompt or default_cypher_prompt(),
            qa_prompt=qa_prompt or default_qa_prompt(),
            top_k=top_k or self.settings.top_k,
            return_intermediate_steps=(
                self.settings.return_intermediate_steps if return_intermediate_steps is None
                else return_intermediate_steps
            ),
            return_direct=return_direct,
            include_types=self.settings.include_types if include_types is None else include_types,
            exclude_types=self.settings.exclude_types if exclude_types is None else exclude_types,
            verbose=self.verbose,
            allow_dangerous_requests=(
                self.settings.allow_dangerous_requests if allow_dangerous_requests is None
                else allow_dangerous_requests
            )
        )

        if validate_cypher or read_only:
            self.chain.cypher_query_corrector = GuardedCypherCorrector(
                schema_triples(graph.structured_schema),
                correct_directions=validate_cypher,
                read_only=read_only
            )

    def get_schema(self) -> str:
        """Schema text handed to the Cypher prompt."""
        return self.chain.graph_schema

    async def ainvoke(self, question: str) -> Dict[str, Any]:
        """Answer a question; returns {'query', 'result'[, 'intermediate_steps']}."""
        try:
            output = await self.chain.ainvoke({"query": question})
        except Exception as e:
            logger.error(f"Graph QA failed for '{question}': {e}")
            raise

        steps = output.get("intermediate_steps") or []
        if self.verbose and steps:
            logger.info(f"Generated Cypher:\n{steps[0]['query']}")
        return output

    def invoke(self, question: str) -> Dict[str, Any]:
        """Synchronous version of ainvoke."""
        try:
            return self.chain.invoke({"query": question})
        except Exception as e:
            logger.error(f"Graph QA failed for '{question}': {e}")
            raise

    async def arun(self, question: str) -> QAResult:
        """Answer a question and return the full result model."""
        start_time = time.time()
        output = await self.ainvoke(question)

        steps: Optional[List[Dict[str, Any]]] = output.get("intermediate_steps")
        cypher = steps[0]["query"] if steps else None
        if self.return_direct:
            context = output["result"]
        else:
            context = steps[1]["context"] if steps and len(steps) > 1 else []

        return QAResult(
            query=question,
            result=output["result"],
            cypher_query=cypher,
            context=context,
            intermediate_steps=steps,
            execution_time=time.time() - start_time
        )
