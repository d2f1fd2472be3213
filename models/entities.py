"""
Data models for the Movie Graph QA system.
Defines Pydantic models for few-shot examples and question answering results.
"""

import hashlib
from typing import List, Dict, Any, Optional, Union
from pydantic import BaseModel, Field, field_validator


class CypherExample(BaseModel):
    """
    A natural-language question paired with the Cypher query that answers it.

    Attributes:
        question: The user question
        query: The Cypher query answering the question
    """
    question: str
    query: str

    @field_validator('question', 'query')
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Example fields cannot be empty")
        return v.strip()

    def generate_id(self) -> str:
        """Stable ID derived from the question text."""
        digest = hashlib.sha1(self.question.lower().encode("utf-8")).hexdigest()
        return f"example_{digest[:16]}"

    def to_document(self) -> str:
        """Text that gets embedded for similarity search."""
        return self.question

    def to_prompt_vars(self) -> Dict[str, str]:
        """
        Variables for the example prompt template.

        Braces are doubled: FewShotPromptTemplate formats the assembled
        prompt a second time, so Cypher maps like {title: 'Casino'} must
        survive one extra str.format pass.
        """
        return {
            "question": _escape_braces(self.question),
            "query": _escape_braces(self.query)
        }

    @classmethod
    def from_prompt_vars(cls, variables: Dict[str, Any]) -> "CypherExample":
        """Inverse of to_prompt_vars, used on vector store metadata."""
        return cls(
            question=_unescape_braces(variables["question"]),
            query=_unescape_braces(variables["query"])
        )


def _escape_braces(text: str) -> str:
    return text.replace("{", "{{").replace("}", "}}")


def _unescape_braces(text: str) -> str:
    return text.replace("{{", "{").replace("}}", "}")


class QAResult(BaseModel):
    """
    Result from the graph question answering chain.

    Attributes:
        query: The original question
        result: The synthesized answer, or raw records when returned directly
        cypher_query: The generated Cypher statement
        context: Records retrieved from the graph
        intermediate_steps: Generated query and retrieved context, in order
        execution_time: Total time in seconds
    """
    query: str
    result: Union[str, List[Dict[str, Any]]]
    cypher_query: Optional[str] = None
    context: List[Dict[str, Any]] = Field(default_factory=list)
    intermediate_steps: Optional[List[Dict[str, Any]]] = None
    execution_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the chain's output mapping."""
        output = {
            "query": self.query,
            "result": self.result,
        }
        if self.intermediate_steps is not None:
            output["intermediate_steps"] = self.intermediate_steps
        return output
