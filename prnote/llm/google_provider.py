"""Google Gemini provider implementation."""

from google import genai
from google.genai import types

from prnote.config import API_KEY_ENV_VARS, LLMProvider
from prnote.llm.base import (
    BaseLLMProvider,
    FinishStatus,
    GenerationRequest,
    GenerationResult,
    TokenUsage,
    _int_or_zero,
)

# Gemini calls the assistant role "model"
_ROLE_MAP = {"user": "user", "assistant": "model"}


def map_finish_reason(finish_reason) -> FinishStatus:
    """Map a Gemini FinishReason (enum or string) to a FinishStatus."""
    if finish_reason is None:
        return FinishStatus.OTHER
    value = str(getattr(finish_reason, "name", finish_reason)).upper()
    if "MAX_TOKENS" in value:
        return FinishStatus.LENGTH_LIMITED
    if value.endswith("STOP"):
        return FinishStatus.COMPLETE
    return FinishStatus.OTHER


class GoogleProvider(BaseLLMProvider):
    """Google Gemini LLM provider."""

    name = "Google Gemini"
    api_key_env_var = API_KEY_ENV_VARS[LLMProvider.GOOGLE]

    def _create_client(self, api_key: str):
        return genai.Client(api_key=api_key)

    def _submit(self, request: GenerationRequest) -> GenerationResult:
        contents = [
            types.Content(role=_ROLE_MAP[message.role], parts=[types.Part(text=message.content)])
            for message in request.messages()
        ]
        response = self.client.models.generate_content(
            model=request.model_name,
            contents=contents,
            config=types.GenerateContentConfig(
                system_instruction=request.system_instruction,
                temperature=request.temperature,
                max_output_tokens=request.max_output_tokens,
            ),
        )

        finish_status = FinishStatus.OTHER
        if response.candidates:
            finish_status = map_finish_reason(response.candidates[0].finish_reason)

        # response.text is None when the candidate has no text parts, which is
        # what thinking models return when the budget runs out mid-thought
        text = (response.text or "").strip() if response.candidates else ""

        usage = TokenUsage()
        metadata = getattr(response, "usage_metadata", None)
        if metadata:
            thoughts = getattr(metadata, "thoughts_token_count", None)
            # Thinking tokens consume the max_output_tokens budget
            output_tokens = _int_or_zero(metadata.candidates_token_count) + _int_or_zero(thoughts)
            usage = TokenUsage(
                prompt_tokens=_int_or_zero(metadata.prompt_token_count),
                output_tokens=output_tokens,
                total_tokens=_int_or_zero(metadata.total_token_count),
                reasoning_tokens=_int_or_zero(thoughts) if thoughts is not None else None,
            )

        return GenerationResult(
            text=text,
            finish_status=finish_status,
            usage=usage,
            model=request.model_name,
        )
