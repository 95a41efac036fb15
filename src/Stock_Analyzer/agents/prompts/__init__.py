"""Versioned prompt templates for the recommendation agent."""

from Stock_Analyzer.agents.prompts.recommendation_prompt import (
    PROMPT_VERSION,
    RECOMMENDATION_SYSTEM_PROMPT,
    PromptMessage,
    build_recommendation_messages,
    build_recommendation_prompt,
)

__all__ = [
    "PROMPT_VERSION",
    "RECOMMENDATION_SYSTEM_PROMPT",
    "PromptMessage",
    "build_recommendation_messages",
    "build_recommendation_prompt",
]
