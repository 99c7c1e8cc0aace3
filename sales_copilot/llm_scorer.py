import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from openai import OpenAI
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Prior utterances included in prompts, newest last
MAX_HISTORY_CONTEXT = 3


# Model configuration profiles
MODEL_CONFIGS = {
    "gpt-5": {
        "token_param": "max_completion_tokens",
        "supports_temperature": False,
        "supports_json_mode": True,
        "description": "Latest frontier model",
    },
    "gpt-5-mini": {
        "token_param": "max_completion_tokens",
        "supports_temperature": False,
        "supports_json_mode": True,
        "description": "Cheaper, faster GPT-5 variant",
    },
    "gpt-4o": {
        "token_param": "max_tokens",
        "supports_temperature": True,
        "supports_json_mode": True,
        "description": "Standard GPT-4o model",
    },
    "gpt-4o-mini": {
        "token_param": "max_tokens",
        "supports_temperature": True,
        "supports_json_mode": True,
        "description": "Cost-effective GPT-4o variant",
    },
    "o1-mini": {
        "token_param": "max_completion_tokens",
        "supports_temperature": False,
        "supports_json_mode": False,
        "supports_system_message": False,
        "description": "Cost-effective reasoning model",
    },
}


class LLMResponseError(Exception):
    """The model call failed or returned something that does not decode to the expected schema"""


class LLMClient:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", temperature: float = 0.3,
                 max_tokens: int = 1000, timeout: float = 60.0):
        if not api_key:
            raise ValueError("OpenAI API key not provided")

        self.client = OpenAI(api_key=api_key, timeout=timeout)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.model_config = self._get_model_config()

    def _get_model_config(self) -> Dict[str, Any]:
        """Get configuration for the current model"""
        if self.model in MODEL_CONFIGS:
            return MODEL_CONFIGS[self.model]

        # Longest prefix wins so gpt-4o-mini-2024 maps to gpt-4o-mini, not gpt-4o
        for config_model in sorted(MODEL_CONFIGS, key=len, reverse=True):
            if self.model.startswith(config_model):
                return MODEL_CONFIGS[config_model]

        return {
            "token_param": "max_tokens",
            "supports_temperature": True,
            "supports_json_mode": False,
            "description": f"Unknown model: {self.model}",
        }

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the current model"""
        return {
            "model": self.model,
            "config": self.model_config.copy(),
            "temperature": self.temperature if self.model_config.get("supports_temperature", True) else 1.0,
            "max_tokens": self.max_tokens,
        }

    def complete_json(self, system_prompt: str, prompt: str) -> Dict[str, Any]:
        """
        Send one chat completion and parse the reply as a JSON object.

        Single attempt. Any transport error, empty reply or non-object JSON
        raises LLMResponseError.
        """
        if self.model_config.get("supports_system_message", True):
            messages = [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ]
        else:
            messages = [{"role": "user", "content": f"{system_prompt}\n\n{prompt}"}]

        request_params = {"model": self.model, "messages": messages}

        token_param = self.model_config.get("token_param", "max_tokens")
        request_params[token_param] = self.max_tokens

        if self.model_config.get("supports_temperature", True):
            request_params["temperature"] = self.temperature
        if self.model_config.get("supports_json_mode", False):
            request_params["response_format"] = {"type": "json_object"}

        try:
            response = self.client.chat.completions.create(**request_params)
            content = response.choices[0].message.content
        except Exception as e:
            raise LLMResponseError(f"Chat Completions API error ({self.model}): {e}") from e

        return parse_json_content(content)


def parse_json_content(content: Optional[str]) -> Dict[str, Any]:
    """Parse a model reply into a dict, tolerating markdown code fences"""
    if not content or not content.strip():
        raise LLMResponseError("Empty response from model")

    content = content.strip()
    if content.startswith("```json"):
        content = content[7:-3].strip()
    elif content.startswith("```"):
        content = content[3:-3].strip()

    try:
        result = json.loads(content)
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"JSON decode error: {e}") from e

    if not isinstance(result, dict):
        raise LLMResponseError(f"Expected a JSON object, got {type(result).__name__}")
    return result


def decode_response(model_cls: Type[T], data: Dict[str, Any]) -> T:
    """Validate a parsed reply against a response schema"""
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise LLMResponseError(f"Response does not match {model_cls.__name__}: {e.error_count()} error(s)") from e


def format_context(transcript: str, conversation_history: Optional[List[str]] = None) -> str:
    """Format the transcript and the most recent history entries for a prompt"""
    context = ""
    recent = (conversation_history or [])[-MAX_HISTORY_CONTEXT:]
    if recent:
        context += "CONTEXTO RECENTE DA CONVERSA:\n"
        for entry in recent:
            context += f"- {entry}\n"
        context += "\n"

    context += f'TEXTO DA CONVERSA:\n"{transcript}"\n'
    return context
