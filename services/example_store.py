"""
Example Store Service for the Movie Graph QA system.
Keeps few-shot question/Cypher examples in ChromaDB with OpenAI embeddings
and selects the ones closest to a question.
"""

from typing import List
from pathlib import Path

import chromadb
from chromadb.config import Settings as ChromaSettings
from langchain_chroma import Chroma
from langchain_core.embeddings import Embeddings
from langchain_core.example_selectors import SemanticSimilarityExampleSelector
from langchain_core.vectorstores import VectorStore
from langchain_openai import OpenAIEmbeddings

from models.entities import CypherExample
from config import get_settings, get_logger

logger = get_logger(__name__)


class ExampleStore:
    """
    Vector store of question/Cypher examples.

    Only the question is embedded; the example travels as metadata so a hit
    can be handed straight to the few-shot prompt.
    """

    def __init__(
        self,
        persist_directory: str = None,
        collection_name: str = None,
        embeddings: Embeddings = None,
        vectorstore: VectorStore = None
    ):
        self.settings = get_settings()
        self.persist_directory = persist_directory or self.settings.chroma_persist_dir
        self.collection_name = collection_name or self.settings.example_collection

        self.embeddings = embeddings or OpenAIEmbeddings(
            model=self.settings.embedding_model,
            dimensions=self.settings.embedding_dimensions,
            api_key=self.settings.openai_api_key
        )
        self.vectorstore = vectorstore if vectorstore is not None else self._open_vectorstore()

        logger.info(f"Example store '{self.collection_name}' ready")

    def _open_vectorstore(self) -> Chroma:
        Path(self.persist_directory).mkdir(parents=True, exist_ok=True)
        client = chromadb.PersistentClient(
            path=self.persist_directory,
            settings=ChromaSettings(
                anonymized_telemetry=False,
                allow_reset=True
            )
        )
        return Chroma(
            client=client,
            collection_name=self.collection_name,
            embedding_function=self.embeddings,
            collection_metadata={"hnsw:space": "cosine"}
        )

    def add_examples(self, examples: List[CypherExample]) -> int:
        """
        Add examples to the store. Re-adding a question replaces its entry.

        Returns:
            Number of examples written
        """
        if not examples:
            return 0

        # Last write wins for duplicate questions within one call
        unique = {example.generate_id(): example for example in examples}
        ids = list(unique)

        try:
            self.vectorstore.add_texts(
                texts=[unique[i].to_document() for i in ids],
                metadatas=[unique[i].to_prompt_vars() for i in ids],
                ids=ids
            )
        except Exception as e:
            logger.error(f"Failed to add examples: {e}")
            raise

        logger.info(f"Stored {len(ids)} examples in '{self.collection_name}'")
        return len(ids)

    def search(self, text: str, k: int = None) -> List[CypherExample]:
        """
        Find the examples whose questions are most similar to a text.

        Returns:
            Examples ordered from most to least similar
        """
        docs = self.vectorstore.similarity_search(text, k=k or self.settings.example_k)
        return [CypherExample.from_prompt_vars(doc.metadata) for doc in docs]

    def selector(self, k: int = None) -> SemanticSimilarityExampleSelector:
        """Example selector over this store, keyed on the question only."""
        return SemanticSimilarityExampleSelector(
            vectorstore=self.vectorstore,
            k=k or self.settings.example_k,
            input_keys=["question"]
        )

    def count(self) -> int:
        return len(self.vectorstore.get(include=[])["ids"])

    def reset(self) -> None:
        """Delete every stored example."""
        self.vectorstore.delete_collection()
        self.vectorstore = self._open_vectorstore()
        logger.info("Example store reset")
