"""
Summarizer - OpenRouter chat completions through the OpenAI client.

summarize() never raises: failures are logged and treated as "no summary",
and nothing is retried.
"""
import logging
import os
from typing import Optional

import httpx
from openai import OpenAI

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterSummarizer:
    """Summarize prompts with a single OpenRouter model."""

    def __init__(self, api_key: str, model: str, timeout: float = 90.0, client: Optional[OpenAI] = None):
        self.model = model
        self.client = client or OpenAI(
            base_url=OPENROUTER_BASE_URL,
            api_key=api_key,
            max_retries=0,
            http_client=httpx.Client(
                timeout=httpx.Timeout(timeout),
                headers={
                    # Optional: helps OpenRouter attribute traffic.
                    "HTTP-Referer": os.getenv("OPENROUTER_HTTP_REFERER", "https://github.com/sec-change-feed"),
                    "X-Title": os.getenv("OPENROUTER_APP_TITLE", "SEC Change Feed"),
                },
            ),
        )

    def summarize(self, prompt: str) -> Optional[str]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            logger.warning(f"Summarization failed ({self.model}): {e}")
            return None

        choices = getattr(response, "choices", None) or []
        content = getattr(getattr(choices[0], "message", None), "content", None) if choices else None
        if not content:
            logger.warning(f"Summarization returned an empty response ({self.model})")
            return None
        return content.strip()
