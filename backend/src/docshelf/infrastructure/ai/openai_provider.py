"""
OpenAI Provider - Concrete implementation of DocumentClassifierPort for OpenAI.

Classifies documents with OpenAI chat models (gpt-4o-mini by default) using
JSON mode. Images are sent as image_url parts, every other binary document as
a file part.
"""

import base64
import json
import logging
import time
from typing import Optional

from openai import OpenAI, APIError, RateLimitError, APIConnectionError, APITimeoutError, AuthenticationError

from ...domain.ai.ports import (
    AttachmentKind,
    ClassifierAttachment,
    ClassifierResponse,
    DocumentClassifierPort,
    LLMTimeoutError,
    LLMRateLimitError,
    LLMAuthError,
    LLMServiceError,
    LLMInvalidResponseError,
)
from ...analysis.prompts import CLASSIFIER_INSTRUCTIONS

logger = logging.getLogger(__name__)


class OpenAIClassifier(DocumentClassifierPort):
    """
    OpenAI implementation of DocumentClassifierPort.

    Uses OpenAI Python SDK (v1.x+) with structured output (JSON mode).
    Handles authentication, request formatting, attachment encoding and error mapping.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 60.0,
        max_tokens: int = 8192,
        instructions: str = CLASSIFIER_INSTRUCTIONS,
    ):
        """
        Initialize OpenAI classifier.

        Args:
            api_key: OpenAI API key
            model: Chat model name
            timeout_seconds: Per-request timeout
            max_tokens: Completion token limit
            instructions: System prompt describing the output contract

        Raises:
            ValueError: If API key is not provided
        """
        if not api_key:
            raise ValueError("OpenAI API key not provided. Set OPENAI_API_KEY environment variable.")

        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens
        self.instructions = instructions

    def classify(
        self,
        prompt: str,
        attachment: Optional[ClassifierAttachment] = None,
    ) -> ClassifierResponse:
        """
        Classify a document.

        Args:
            prompt: Context prompt (filename, type, size and, for text, content)
            attachment: Optional binary attachment

        Returns:
            ClassifierResponse with raw and parsed output

        Raises:
            LLMTimeoutError: Request timed out
            LLMRateLimitError: Rate limit exceeded
            LLMAuthError: Authentication failed
            LLMServiceError: Provider service unavailable
            LLMInvalidResponseError: Empty completion
        """
        content = [{"type": "text", "text": prompt}]
        if attachment is not None:
            content.append(self._attachment_part(attachment))

        messages = [
            {"role": "system", "content": self.instructions},
            {"role": "user", "content": content},
        ]
        return self._make_completion_call(messages)

    @staticmethod
    def _attachment_part(attachment: ClassifierAttachment) -> dict:
        """Encode an attachment as a chat content part (base64 data URI)"""
        b64_data = base64.b64encode(attachment.data).decode("utf-8")
        data_uri = f"data:{attachment.mime_type};base64,{b64_data}"

        if attachment.kind == AttachmentKind.IMAGE:
            return {"type": "image_url", "image_url": {"url": data_uri}}

        return {
            "type": "file",
            "file": {"filename": attachment.filename, "file_data": data_uri},
        }

    def _make_completion_call(self, messages: list) -> ClassifierResponse:
        """
        Internal method to make OpenAI completion call with error handling.

        Raises:
            LLMTimeoutError, LLMRateLimitError, LLMAuthError, LLMServiceError,
            LLMInvalidResponseError
        """
        start_time = time.perf_counter()
        warnings = []

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=0.0,
                max_tokens=self.max_tokens,
                timeout=self.timeout_seconds,
            )
        except APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI API timeout: {str(e)}")
        except RateLimitError as e:
            raise LLMRateLimitError(f"OpenAI rate limit exceeded: {str(e)}")
        except AuthenticationError as e:
            raise LLMAuthError(f"OpenAI authentication failed: {str(e)}")
        except (APIConnectionError, APIError) as e:
            raise LLMServiceError(f"OpenAI service error: {str(e)}")

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        if not response.choices or not response.choices[0].message.content:
            raise LLMInvalidResponseError("OpenAI returned an empty completion")

        raw_output = response.choices[0].message.content

        parsed_json = None
        try:
            parsed_json = json.loads(raw_output)
        except json.JSONDecodeError as e:
            warnings.append(f"Failed to parse LLM JSON output: {str(e)}")

        logger.debug(f"OpenAI classification finished: model={self.model}, latency_ms={latency_ms}")

        return ClassifierResponse(
            raw_output=raw_output,
            parsed_json=parsed_json,
            provider="openai",
            model=self.model,
            latency_ms=latency_ms,
            warnings=warnings,
        )
