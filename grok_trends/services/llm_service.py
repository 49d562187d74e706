import logging
from typing import Optional

import requests
from google import genai
from google.genai import types

from grok_trends.config import TrendsConfig, get_trends_config
from grok_trends.exceptions import CompletionError

logger = logging.getLogger(__name__)


class LLMService:
    """Single request/response JSON completions against the configured provider.

    The xAI chat-completions endpoint is the default (it can search X);
    Gemini on Vertex AI is available for draft writing through LLM_PROVIDER.
    """

    SUPPORTED_PROVIDERS = ("xai", "gemini")

    def __init__(self, config: Optional[TrendsConfig] = None):
        self.config = config or get_trends_config()
        self.provider = self.config.llm_provider

        if self.provider == "xai":
            self.api_key = self.config.xai_api_key
            if not self.api_key:
                raise CompletionError(
                    "XAI_API_KEY not configured. Set it using: firebase functions:secrets:set XAI_API_KEY"
                )
            self.model_name = self.config.xai_model
        elif self.provider == "gemini":
            project = self.config.google_cloud_project
            if not project:
                raise CompletionError("GOOGLE_CLOUD_PROJECT environment variable is required for Gemini")
            self.client = genai.Client(
                vertexai=True,
                project=project,
                location=self.config.gemini_location,
            )
            self.model_name = self.config.gemini_model
        else:
            raise CompletionError(
                f"Unsupported LLM provider: {self.provider}. Use one of {', '.join(self.SUPPORTED_PROVIDERS)}"
            )

        logger.info(f"Initialized LLM service with provider: {self.provider} ({self.model_name})")

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Request a JSON completion and return the raw message text.

        Raises:
            CompletionError: on transport errors, non-2xx answers or an
                answer without message content
        """
        if self.provider == "gemini":
            return self._complete_gemini(system_prompt, user_prompt)
        return self._complete_xai(system_prompt, user_prompt)

    def _complete_xai(self, system_prompt: str, user_prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.config.xai_temperature,
            "response_format": {"type": "json_object"},
        }

        try:
            response = requests.post(
                self.config.xai_url, json=payload, headers=headers, timeout=self.config.xai_timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Grok API request failed: {str(e)}")
            raise CompletionError(f"Grok API request failed: {str(e)}") from e

        if not response.ok:
            logger.error(f"Grok API HTTP error {response.status_code}: {response.text[:500]}")
            raise CompletionError(f"Grok API error ({response.status_code}): {response.text}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionError("Invalid response format from Grok API") from e

        if not isinstance(content, str):
            raise CompletionError("Invalid response format from Grok API")
        return content

    def _complete_gemini(self, system_prompt: str, user_prompt: str) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=self.config.gemini_temperature,
                    response_mime_type="application/json",
                ),
            )
        except Exception as e:
            logger.error(f"Failed to generate completion with Gemini: {str(e)}")
            raise CompletionError(f"Gemini request failed: {str(e)}") from e

        if not response.text:
            raise CompletionError("Empty response from Gemini")
        return response.text
