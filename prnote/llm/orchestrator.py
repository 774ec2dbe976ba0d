"""Resilient generation on top of a single LLM provider.

The orchestrator owns everything a provider adapter should not care about:
- retrying rate limits and 503-style failures with capped exponential backoff
- walking down a model ladder when a model stays unavailable
- recovering from output that was cut off by the token limit
"""

import logging
import math
import random
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from prnote.config import MIN_OUTPUT_TOKENS, RetryPolicy, clamp_max_output_tokens
from prnote.llm.base import (
    BaseLLMProvider,
    FinishStatus,
    GenerationRequest,
    GenerationResult,
    Message,
    TokenUsage,
)
from prnote.llm.exceptions import (
    MissingAPIKeyError,
    ProviderError,
    ProviderErrorKind,
    classify_error,
)
from prnote.llm.usage import format_usage, summarize

CONTINUE_INSTRUCTION = (
    "Continue from where you left off. Do not repeat earlier content. "
    "Keep the same structure and style."
)


def build_model_ladder(requested: str, fallbacks: Sequence[str] = ()) -> list[str]:
    """Build the ordered list of models to try.

    Args:
        requested: The model asked for; always first.
        fallbacks: Alternative models in priority order.

    Returns:
        The ladder with blanks and duplicates removed, order preserved.
    """
    ladder = []
    for model in [requested, *fallbacks]:
        model = (model or "").strip()
        if model and model not in ladder:
            ladder.append(model)
    return ladder


def compute_backoff_delay(
    attempt: int,
    policy: RetryPolicy,
    rng: Callable[[], float] = random.random,
) -> float:
    """Delay before the next attempt after attempt number `attempt` failed.

    delay = min(base * 2**(attempt - 1), cap) + jitter, 0 <= jitter < jitter_max
    """
    exponential = policy.backoff_base * (2 ** max(0, attempt - 1))
    return min(exponential, policy.backoff_cap) + rng() * policy.jitter_max


@dataclass
class RetryState:
    """Mutable bookkeeping for one orchestrated call."""

    model_ladder: list[str]
    attempt: int = 0
    current_model_index: int = 0
    consecutive_unavailable: int = 0

    @property
    def current_model(self) -> str:
        return self.model_ladder[self.current_model_index]

    @property
    def has_fallback(self) -> bool:
        return self.current_model_index + 1 < len(self.model_ladder)

    def advance_model(self) -> str:
        """Move to the next model in the ladder and reset the failure streak."""
        if self.has_fallback:
            self.current_model_index += 1
        self.consecutive_unavailable = 0
        return self.current_model


def _combine_usage(first: TokenUsage, second: TokenUsage) -> TokenUsage:
    reasoning = None
    if first.reasoning_tokens is not None or second.reasoning_tokens is not None:
        reasoning = (first.reasoning_tokens or 0) + (second.reasoning_tokens or 0)
    return TokenUsage(
        prompt_tokens=first.prompt_tokens + second.prompt_tokens,
        output_tokens=first.output_tokens + second.output_tokens,
        total_tokens=first.total_tokens + second.total_tokens,
        reasoning_tokens=reasoning,
    )


class GenerationOrchestrator:
    """Wraps a provider with retry, model fallback and continuation."""

    def __init__(
        self,
        provider: BaseLLMProvider,
        policy: Optional[RetryPolicy] = None,
        fallback_models: Sequence[str] = (),
        sleep: Callable[[float], None] = time.sleep,
        rng: Callable[[], float] = random.random,
    ):
        """Initialize the orchestrator.

        Args:
            provider: The adapter that performs single generation calls.
            policy: Retry tunables. Defaults to RetryPolicy().
            fallback_models: Models tried after the requested one.
            sleep: Called with the backoff delay in seconds.
            rng: Source of jitter in [0, 1).
        """
        self.provider = provider
        self.policy = policy or RetryPolicy()
        self.fallback_models = list(fallback_models)
        self._sleep = sleep
        self._rng = rng

    def generate(self, request: GenerationRequest, logger: logging.Logger) -> GenerationResult:
        """Generate text, recovering from transient failures and truncation.

        Args:
            request: The request to serve. Its model is tried first.
            logger: Logger for progress and diagnostics.

        Returns:
            The final GenerationResult. Its text may be empty when the model
            kept hitting the token limit without producing output.

        Raises:
            MissingAPIKeyError: If the provider has no API key.
            ProviderError: EXHAUSTED when every attempt failed, FATAL for
                non-retryable failures.
        """
        request = request.with_max_output_tokens(clamp_max_output_tokens(request.max_output_tokens))
        ladder = build_model_ladder(request.model_name, self.fallback_models)

        logger.info(
            f"[{self.provider.name}] request: model={ladder[0]} temperature={request.temperature} "
            f"max_output_tokens={request.max_output_tokens} prompt_chars={len(request.prompt)}"
        )

        result = self._generate_with_retry(request, ladder, logger)
        # Follow-up calls stay on the model that actually answered
        result = self._recover_truncation(request.with_model(result.model), result, logger)

        logger.info(
            f"[{self.provider.name}] response: model={result.model} "
            f"finish={result.finish_status.value} chars={len(result.text)}"
        )
        logger.debug(f"[{self.provider.name}] usage: {format_usage(result.usage, summarize(result.usage, result.text))}")
        return result

    def _generate_with_retry(
        self,
        request: GenerationRequest,
        ladder: list[str],
        logger: logging.Logger,
    ) -> GenerationResult:
        state = RetryState(model_ladder=ladder)
        last_error: Optional[ProviderError] = None

        while state.attempt < self.policy.max_attempts:
            state.attempt += 1
            model = state.current_model
            delay = compute_backoff_delay(state.attempt, self.policy, self._rng)

            try:
                result = self.provider.generate(request.with_model(model))
            except MissingAPIKeyError:
                raise
            except Exception as e:
                error = classify_error(e, self.provider.name)
                if not error.retryable:
                    logger.error(f"[{self.provider.name}] non-retryable failure on {model}: {error}")
                    if error is e:
                        raise
                    raise error from e

                last_error = error
                if error.kind == ProviderErrorKind.TRANSIENT_UNAVAILABLE:
                    state.consecutive_unavailable += 1
                    if state.consecutive_unavailable > self.policy.switch_threshold and state.has_fallback:
                        next_model = state.advance_model()
                        logger.warning(
                            f"[{self.provider.name}] {model} unavailable {self.policy.switch_threshold}+ times "
                            f"in a row, falling back to {next_model}"
                        )
                else:
                    state.consecutive_unavailable = 0

                if state.attempt < self.policy.max_attempts:
                    logger.warning(
                        f"[{self.provider.name}] attempt {state.attempt}/{self.policy.max_attempts} "
                        f"failed ({error.kind.value}); retrying in {delay:.1f}s"
                    )
                    self._sleep(delay)
                continue

            if not result.model:
                result = replace(result, model=model)
            return result

        raise ProviderError(
            ProviderErrorKind.EXHAUSTED,
            f"{self.provider.name} generation failed after {state.attempt} attempts "
            f"(models tried: {', '.join(ladder[: state.current_model_index + 1])}): {last_error}",
            status_code=last_error.status_code if last_error else None,
            provider=self.provider.name,
        ) from last_error

    def _recover_truncation(
        self,
        request: GenerationRequest,
        result: GenerationResult,
        logger: logging.Logger,
    ) -> GenerationResult:
        if result.finish_status != FinishStatus.LENGTH_LIMITED:
            return result

        if not result.text:
            bumped = clamp_max_output_tokens(
                math.ceil(request.max_output_tokens * self.policy.empty_retry_multiplier)
            )
            logger.warning(
                f"[{self.provider.name}] empty output at token limit; retrying once with "
                f"max_output_tokens={bumped}"
            )
            try:
                retried = self._generate_with_retry(
                    request.with_max_output_tokens(bumped), [request.model_name], logger
                )
            except ProviderError as e:
                logger.warning(f"[{self.provider.name}] empty-output retry failed, keeping empty result: {e}")
                return result
            if not retried.text:
                logger.warning(f"[{self.provider.name}] still no text after raising the token limit")
            return retried

        logger.info(f"[{self.provider.name}] output hit the token limit; requesting one continuation")
        continuation = replace(
            request,
            prompt=CONTINUE_INSTRUCTION,
            history=(
                *request.history,
                Message(role="user", content=request.prompt),
                Message(role="assistant", content=result.text),
            ),
            max_output_tokens=max(MIN_OUTPUT_TOKENS, request.max_output_tokens // 2),
        )
        try:
            more = self._generate_with_retry(continuation, [request.model_name], logger)
        except ProviderError as e:
            logger.warning(f"[{self.provider.name}] continuation failed, keeping partial output: {e}")
            return result

        more_text = more.text.strip()
        text = f"{result.text}\n\n{more_text}".strip() if more_text else result.text.strip()
        return GenerationResult(
            text=text,
            finish_status=more.finish_status,
            usage=_combine_usage(result.usage, more.usage),
            model=result.model,
        )
