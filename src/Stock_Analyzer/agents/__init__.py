"""LLM recommendation agent, analysis orchestration, and session state."""

from Stock_Analyzer.agents.llm_client import ChatMessage, LLMClient, LLMResponse
from Stock_Analyzer.agents.orchestrator import AnalysisOrchestrator
from Stock_Analyzer.agents.recommender import RecommendationClient
from Stock_Analyzer.agents.session import AnalysisSession

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisSession",
    "ChatMessage",
    "LLMClient",
    "LLMResponse",
    "RecommendationClient",
]
