"""
Gemini AI model service for capsule enrichment.
"""

import google.generativeai as genai
from typing import Any, Optional
from timecapsule.core.config import config
from timecapsule.core.errors import EnrichmentError
from timecapsule.prompts.capsule import (
    FUTURE_REPLY_FALLBACK,
    FUTURE_REPLY_GENERATION,
    SUMMARY_FALLBACK,
    SUMMARY_GENERATION,
    future_self_prompt,
    summarization_prompt,
)
import logging

logger = logging.getLogger(__name__)

def _response_text(response: Any) -> str:
    # .text raises when the candidate has no parts (e.g. blocked output)
    try:
        return (response.text or "").strip()
    except (ValueError, AttributeError, IndexError):
        return ""

class GeminiModel:
    """Wrapper for Google Gemini AI model."""

    def __init__(self, model_name: Optional[str] = None, api_key: Optional[str] = None):
        """
        Initialize Gemini model.

        Args:
            model_name: Model name to use (defaults to config)
            api_key: API key (defaults to config)
        """
        self.model_name = model_name or config.gemini_model
        self.api_key = api_key or config.gemini_api_key

        if not self.api_key:
            raise ValueError("Gemini API key not configured")

        # Configure Gemini
        genai.configure(api_key=self.api_key)
        self.model = genai.GenerativeModel(self.model_name)

        logger.info(f"✅ Gemini model initialized: {self.model_name}")

    def get_response(self, prompt: str, temperature: float, max_output_tokens: int) -> str:
        """
        Get response text from Gemini model.

        Args:
            prompt: Text prompt to send to the model
            temperature: Creativity level (0.0 to 1.0)
            max_output_tokens: Output budget

        Returns:
            Generated text, empty if the model produced none

        Raises:
            EnrichmentError: if the API call fails
        """
        try:
            response = self.model.generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    temperature=temperature,
                    max_output_tokens=max_output_tokens,
                )
            )
        except Exception as e:
            logger.error(f"Error getting Gemini response: {e}")
            raise EnrichmentError(f"Gemini API error: {str(e)}")

        text = _response_text(response)
        if not text:
            logger.warning("Empty response from Gemini model")
        return text

    def generate_summary(self, title: str, content: str) -> str:
        """2-3 sentence summary of the capsule's emotions and themes."""
        text = self.get_response(summarization_prompt(title, content), **SUMMARY_GENERATION)
        return text or SUMMARY_FALLBACK

    def generate_future_reply(self, title: str, content: str) -> str:
        """Warm first-person reply from the author's future self."""
        text = self.get_response(future_self_prompt(title, content), **FUTURE_REPLY_GENERATION)
        return text or FUTURE_REPLY_FALLBACK
