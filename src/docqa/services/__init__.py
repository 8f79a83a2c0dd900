"""Service layer orchestrations for DocQA."""

from .generation import (
    BackendError,
    BackendTimeout,
    BackendUnreachable,
    GenerationBackend,
    GenerationConfig,
    GenerationError,
    MalformedBackendResponse,
    OllamaGenerator,
    RetryingGenerator,
    RetryPolicy,
)
from .normalizer import normalize
from .prompt import GENERAL_QA, INVOICE_CALCULATOR, INVOICE_QA, PROMPT_TEMPLATES, PromptBuilder, PromptTemplate
from .query import QueryConfig, QueryService

__all__ = [
    "BackendError",
    "BackendTimeout",
    "BackendUnreachable",
    "GenerationBackend",
    "GenerationConfig",
    "GenerationError",
    "MalformedBackendResponse",
    "OllamaGenerator",
    "RetryingGenerator",
    "RetryPolicy",
    "normalize",
    "GENERAL_QA",
    "INVOICE_CALCULATOR",
    "INVOICE_QA",
    "PROMPT_TEMPLATES",
    "PromptBuilder",
    "PromptTemplate",
    "QueryConfig",
    "QueryService",
]
