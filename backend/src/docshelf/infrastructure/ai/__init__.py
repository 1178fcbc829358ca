"""AI classifier adapters"""

from .openai_provider import OpenAIClassifier

__all__ = ["OpenAIClassifier"]
