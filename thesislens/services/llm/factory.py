from functools import lru_cache

from thesislens.services.llm.client import LLMGateway


@lru_cache(maxsize=1)
def make_llm_gateway() -> LLMGateway:
    """
    Create and return a singleton LLM gateway instance.

    Returns:
        LLMGateway: Gateway configured from settings
    """
    return LLMGateway()
