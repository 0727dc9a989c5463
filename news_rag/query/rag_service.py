"""
RAG Service for Question Answering with Context Retrieval

Orchestrates the retrieval pipeline:
1. Query validation
2. Query embedding generation
3. Similarity search against the vector store
4. Grounding prompt construction
5. LLM-based answer generation
6. Source deduplication
"""

import time
import logging
from typing import List, Optional

from ..errors import ValidationError, CollaboratorError, VectorStoreError, GenerationError
from ..embeddings.adapter import EmbeddingAdapter
from ..models import QueryResult, RAGAnswer

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = (
    "Sorry, I could not find any relevant information in the news database "
    "to answer this question."
)

CONTEXT_SEPARATOR = "\n\n---\n\n"

PROMPT_TEMPLATE = """You are a professional investment analysis assistant. Answer the user's question concisely and accurately, relying ENTIRELY on the context provided below.
Do not make up any information that is not in the context.

CONTEXT:
\"\"\"
{context}
\"\"\"

USER QUESTION: "{question}"

YOUR ANSWER:"""


class RAGService:
    """
    Retrieval-augmented question answering over indexed news chunks.

    Collaborators are injected: an EmbeddingAdapter for the query, a store
    exposing ``search(embedding, threshold, top_k)`` and a generator exposing
    ``generate(prompt)``.
    """

    def __init__(
        self,
        embedder: EmbeddingAdapter,
        vector_store,
        generator,
        match_threshold: float = 0.75,
        match_count: int = 5
    ):
        """
        Initialize the RAG service.

        Args:
            embedder: Adapter used to embed the question
            vector_store: Store used for similarity search
            generator: Generative model client
            match_threshold: Minimum similarity for a chunk to be used
            match_count: Maximum number of chunks to retrieve
        """
        self.embedder = embedder
        self.vector_store = vector_store
        self.generator = generator
        self.match_threshold = match_threshold
        self.match_count = match_count

    def _retrieve_context(self, query_embedding) -> List[QueryResult]:
        try:
            return list(self.vector_store.search(
                query_embedding,
                threshold=self.match_threshold,
                top_k=self.match_count
            ))
        except CollaboratorError:
            raise
        except Exception as e:
            raise VectorStoreError(f"Similarity search failed: {e}", cause=e) from e

    def _generate_answer(self, prompt: str) -> str:
        try:
            return self.generator.generate(prompt)
        except CollaboratorError:
            raise
        except Exception as e:
            raise GenerationError(f"Error generating answer with LLM: {e}", cause=e) from e

    @staticmethod
    def format_context(results: List[QueryResult]) -> str:
        """
        Render retrieved chunks as a context block, in retrieval order.

        Args:
            results: Retrieved chunks

        Returns:
            Context block with one source/content entry per chunk
        """
        return CONTEXT_SEPARATOR.join(
            f"- Source: {result.title} ({result.url})\n- Content: {result.content}"
            for result in results
        )

    @staticmethod
    def build_prompt(question: str, context: str) -> str:
        """Build the grounding prompt for the generative model."""
        return PROMPT_TEMPLATE.format(context=context, question=question)

    @staticmethod
    def deduplicate_sources(results: List[QueryResult]) -> List[QueryResult]:
        """
        Keep the first result for each URL, preserving order.

        Args:
            results: Retrieved chunks in descending similarity

        Returns:
            One result per distinct URL
        """
        seen_urls = set()
        sources = []
        for result in results:
            if result.url in seen_urls:
                continue
            seen_urls.add(result.url)
            sources.append(result)
        return sources

    def answer(self, question: Optional[str]) -> RAGAnswer:
        """
        Answer a question from the indexed news.

        Args:
            question: User's question

        Returns:
            RAGAnswer with the generated text and deduplicated sources; when
            nothing clears the similarity threshold the answer is
            NO_RESULTS_ANSWER with no sources

        Raises:
            ValidationError: If question is empty or whitespace
            CollaboratorError: If embedding, search or generation fails
        """
        if not isinstance(question, str) or not question.strip():
            raise ValidationError("Query is required")

        start_time = time.time()
        logger.info(f"Received RAG query: {question}")

        query_embedding = self.embedder.embed_one(question)
        results = self._retrieve_context(query_embedding)

        if not results:
            logger.info("No relevant documents found")
            return RAGAnswer(answer=NO_RESULTS_ANSWER, sources=[])

        logger.info(f"Found {len(results)} relevant documents")

        prompt = self.build_prompt(question, self.format_context(results))
        answer = self._generate_answer(prompt)

        logger.info(f"Answered in {time.time() - start_time:.2f}s")
        return RAGAnswer(answer=answer, sources=self.deduplicate_sources(results))
