"""
Prompt templates for Cypher generation and answer synthesis.
Supports zero-shot prompts plus few-shot prompts with static or selected examples.
"""

from typing import List, Dict, Optional

from langchain_core.example_selectors import BaseExampleSelector
from langchain_core.prompts import PromptTemplate, FewShotPromptTemplate


# Zero-shot Cypher generation prompt
CYPHER_GENERATION_TEMPLATE = """Task:Generate Cypher statement to query a graph database.
Instructions:
Use only the provided relationship types and properties in the schema.
Do not use any other relationship types or properties that are not provided.
Schema:
{schema}
Note: Do not include any explanations or apologies in your responses.
Do not respond to any questions that might ask anything else than for you to construct a Cypher statement.
Do not include any text except the generated Cypher statement.

The question is:
{question}"""

# Answer synthesis prompt
CYPHER_QA_TEMPLATE = """You are an assistant that helps to form nice and human understandable answers.
The information part contains the provided information that you must use to construct an answer.
The provided information is authoritative, you must never doubt it or try to use your internal knowledge to correct it.
Make the answer sound as a response to the question. Do not mention that you based the result on the given information.
Here is an example:

Question: Which managers own Neo4j stocks?
Context:[manager:CTL LLC, manager:JANE STREET GROUP LLC]
Helpful Answer: CTL LLC, JANE STREET GROUP LLC owns Neo4j stocks.

Follow this example when generating answers.
If the provided information is empty, say that you don't know the answer.
Information:
{context}

Question: {question}
Helpful Answer:"""

# Few-shot pieces
EXAMPLE_TEMPLATE = "User input: {question}\nCypher query: {query}"

FEW_SHOT_PREFIX = (
    "You are a Neo4j expert. Given an input question, create a syntactically "
    "correct Cypher query to run.\n\nHere is the schema information\n{schema}.\n\n"
    "Below are a number of examples of questions and their corresponding Cypher queries."
)

FEW_SHOT_SUFFIX = "User input: {question}\nCypher query: "


def default_cypher_prompt() -> PromptTemplate:
    return PromptTemplate(
        template=CYPHER_GENERATION_TEMPLATE,
        input_variables=["schema", "question"]
    )


def default_qa_prompt() -> PromptTemplate:
    return PromptTemplate(
        template=CYPHER_QA_TEMPLATE,
        input_variables=["context", "question"]
    )


def build_few_shot_prompt(
    examples: Optional[List[Dict[str, str]]] = None,
    example_selector: Optional[BaseExampleSelector] = None
) -> FewShotPromptTemplate:
    """
    Few-shot Cypher prompt with the standard prefix, suffix and example layout.

    Pass examples for static prompting or example_selector for dynamic
    prompting; FewShotPromptTemplate rejects both or neither with ValueError.
    Example values must have their braces doubled (see CypherExample.to_prompt_vars).
    """
    return FewShotPromptTemplate(
        examples=examples,
        example_selector=example_selector,
        example_prompt=PromptTemplate.from_template(EXAMPLE_TEMPLATE),
        prefix=FEW_SHOT_PREFIX,
        suffix=FEW_SHOT_SUFFIX,
        input_variables=["question", "schema"],
    )
