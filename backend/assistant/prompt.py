"""
Prompt-template wrapper around the OpenAI chat completions API.

A PromptFlow binds a template to a pydantic input model and a pydantic output
model. Running it renders the validated input into the template, sends a
single chat completion request, and validates the JSON reply against the
output model. There are no retries.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

import openai
from pydantic import BaseModel, ValidationError

from jobtrack.config import settings

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

DEFAULT_SYSTEM_PROMPT = (
    "You are a precise assistant for a job application tracker. "
    "Return VALID JSON only - no markdown, no comments."
)


class PromptFlowError(Exception):
    """Raised when a flow cannot produce a valid output."""

    def __init__(self, message: str, flow_name: Optional[str] = None):
        self.flow_name = flow_name
        super().__init__(f"[{flow_name}] {message}" if flow_name else message)


def strip_code_fences(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = re.sub(r"^```(?:json)?\s*", "", content)
        content = re.sub(r"\s*```$", "", content)
    return content


class PromptFlow(Generic[InputT, OutputT]):
    def __init__(
        self,
        name: str,
        input_model: Type[InputT],
        output_model: Type[OutputT],
        template: str,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        model: Optional[str] = None,
        client: Any = None,
    ):
        self.name = name
        self.input_model = input_model
        self.output_model = output_model
        self.template = template
        self.system_prompt = system_prompt
        self.model = model or settings.openai_model
        self.client = client

    def _get_client(self):
        if self.client is None:
            if not settings.openai_api_key:
                raise PromptFlowError("OpenAI API key is not configured", self.name)
            self.client = openai.OpenAI(api_key=settings.openai_api_key)
        return self.client

    def _validate_input(self, payload: Union[InputT, Dict[str, Any]]) -> InputT:
        if isinstance(payload, self.input_model):
            return payload
        try:
            return self.input_model.model_validate(payload)
        except ValidationError as e:
            raise PromptFlowError(f"Invalid input: {e}", self.name) from e

    def render(self, payload: Union[InputT, Dict[str, Any]]) -> str:
        data = self._validate_input(payload)
        return self.template.format(**data.model_dump())

    def _parse_response(self, content: Optional[str]) -> OutputT:
        if not content or not content.strip():
            raise PromptFlowError("Model returned an empty response", self.name)

        content = strip_code_fences(content)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"[{self.name}] JSON parse error: {e}; content preview: {content[:300]}")
            raise PromptFlowError(f"Failed to parse model response: {e}", self.name) from e

        try:
            return self.output_model.model_validate(data)
        except ValidationError as e:
            logger.error(f"[{self.name}] Response does not match {self.output_model.__name__}: {e}")
            raise PromptFlowError("Model response does not match the expected schema", self.name) from e

    def run_sync(self, payload: Union[InputT, Dict[str, Any]]) -> OutputT:
        prompt = self.render(payload)
        client = self._get_client()

        logger.info(f"[{self.name}] Sending prompt ({len(prompt):,} chars) to {self.model}")
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=settings.openai_temperature,
                max_tokens=settings.openai_max_tokens,
            )
        except openai.OpenAIError as e:
            logger.error(f"[{self.name}] OpenAI request failed: {e}")
            raise PromptFlowError(f"Model request failed: {e}", self.name) from e

        content = response.choices[0].message.content if response.choices else None
        logger.debug(f"[{self.name}] Response received ({len(content or '')} chars)")
        return self._parse_response(content)

    async def run(self, payload: Union[InputT, Dict[str, Any]]) -> OutputT:
        # The OpenAI client is blocking; keep it off the event loop
        return await asyncio.to_thread(self.run_sync, payload)
