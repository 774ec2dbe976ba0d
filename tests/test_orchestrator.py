"""Tests for prnote.llm.orchestrator module."""

import logging

import pytest

from prnote.config import MIN_OUTPUT_TOKENS, RetryPolicy
from prnote.llm.base import FinishStatus, GenerationResult, Message
from prnote.llm.exceptions import MissingAPIKeyError, ProviderError, ProviderErrorKind
from prnote.llm.orchestrator import (
    CONTINUE_INSTRUCTION,
    GenerationOrchestrator,
    RetryState,
    build_model_ladder,
    compute_backoff_delay,
)

from fakes import FakeProvider, StatusError, complete, length_limited


def make_orchestrator(outcomes, policy=None, fallback_models=(), rng=lambda: 0.0):
    """Build an orchestrator over a FakeProvider that records its sleeps."""
    provider = FakeProvider(outcomes)
    sleeps = []
    orchestrator = GenerationOrchestrator(
        provider,
        policy=policy,
        fallback_models=fallback_models,
        sleep=sleeps.append,
        rng=rng,
    )
    return orchestrator, provider, sleeps


def rate_limited():
    return StatusError("Too Many Requests", 429)


def unavailable():
    return StatusError("Service Unavailable", 503)


class TestBuildModelLadder:
    """Tests for build_model_ladder function."""

    def test_requested_model_first(self):
        """Test that the requested model leads the ladder."""
        assert build_model_ladder("b", ["a", "c"]) == ["b", "a", "c"]

    def test_removes_duplicates_preserving_order(self):
        """Test that duplicates are dropped and order kept."""
        ladder = build_model_ladder("gemini-2.5-pro", ["gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.5-flash"])
        assert ladder == ["gemini-2.5-pro", "gemini-2.5-flash"]

    def test_drops_blank_entries(self):
        """Test that empty and whitespace-only models are ignored."""
        assert build_model_ladder("a", ["", "  ", "b"]) == ["a", "b"]

    def test_no_fallbacks(self):
        """Test a ladder with only the requested model."""
        assert build_model_ladder("a") == ["a"]


class TestComputeBackoffDelay:
    """Tests for compute_backoff_delay function."""

    def test_exponential_growth_without_jitter(self):
        """Test that the delay doubles per attempt."""
        policy = RetryPolicy()
        delays = [compute_backoff_delay(n, policy, rng=lambda: 0.0) for n in range(1, 6)]
        assert delays == [1.0, 2.0, 4.0, 8.0, 16.0]

    def test_capped(self):
        """Test that the exponential part never exceeds the cap."""
        policy = RetryPolicy()
        assert compute_backoff_delay(6, policy, rng=lambda: 0.0) == 30.0
        assert compute_backoff_delay(100, policy, rng=lambda: 0.0) == 30.0

    def test_jitter_bounds(self):
        """Test that jitter stays within [0, jitter_max)."""
        policy = RetryPolicy()
        for n in range(1, 101):
            base = min(policy.backoff_base * 2 ** (n - 1), policy.backoff_cap)
            delay = compute_backoff_delay(n, policy, rng=lambda: 0.999)
            assert base <= delay < base + policy.jitter_max

    def test_monotonic_before_cap(self):
        """Test that delays never decrease as attempts grow."""
        policy = RetryPolicy()
        delays = [compute_backoff_delay(n, policy, rng=lambda: 0.5) for n in range(1, 40)]
        assert delays == sorted(delays)

    def test_custom_policy(self):
        """Test base and cap taken from the policy."""
        policy = RetryPolicy(backoff_base=0.5, backoff_cap=3.0, jitter_max=0.0)
        delays = [compute_backoff_delay(n, policy, rng=lambda: 0.9) for n in range(1, 5)]
        assert delays == [0.5, 1.0, 2.0, 3.0]


class TestRetryState:
    """Tests for RetryState dataclass."""

    def test_current_model(self):
        """Test current model follows the index."""
        state = RetryState(model_ladder=["a", "b"])
        assert state.current_model == "a"
        assert state.has_fallback is True

    def test_advance_model_resets_counter(self):
        """Test advancing moves to the next model and resets the streak."""
        state = RetryState(model_ladder=["a", "b"], consecutive_unavailable=11)
        assert state.advance_model() == "b"
        assert state.current_model_index == 1
        assert state.consecutive_unavailable == 0

    def test_advance_model_stays_on_last(self):
        """Test that the index never moves past the last model."""
        state = RetryState(model_ladder=["a"])
        assert state.advance_model() == "a"
        assert state.current_model_index == 0


class TestRetryLoop:
    """Tests for retry and backoff behavior of GenerationOrchestrator."""

    def test_success_on_first_attempt(self, sample_request, logger):
        """Test that a successful call is returned without sleeping."""
        orchestrator, provider, sleeps = make_orchestrator([complete("Hello")])

        result = orchestrator.generate(sample_request, logger)

        assert result.text == "Hello"
        assert result.model == "model-a"
        assert len(provider.requests) == 1
        assert sleeps == []

    def test_keeps_model_reported_by_provider(self, sample_request, logger):
        """Test that a model set by the adapter is not overwritten."""
        orchestrator, _, _ = make_orchestrator([complete("Hello", model="model-a-002")])

        result = orchestrator.generate(sample_request, logger)

        assert result.model == "model-a-002"

    def test_retries_rate_limits_with_backoff(self, sample_request, logger):
        """Test that 429s are retried after backoff delays."""
        orchestrator, provider, sleeps = make_orchestrator(
            [rate_limited(), rate_limited(), complete("ok")]
        )

        result = orchestrator.generate(sample_request, logger)

        assert result.text == "ok"
        assert len(provider.requests) == 3
        assert sleeps == [1.0, 2.0]

    def test_retries_unavailable_message_without_status(self, sample_request, logger):
        """Test that an 'overloaded' message is treated as transient."""
        orchestrator, provider, _ = make_orchestrator(
            [RuntimeError("The model is overloaded. Please try again later."), complete("ok")]
        )

        result = orchestrator.generate(sample_request, logger)

        assert result.text == "ok"
        assert len(provider.requests) == 2

    def test_fatal_error_raised_immediately(self, sample_request, logger):
        """Test that non-retryable errors abort without retrying."""
        orchestrator, provider, sleeps = make_orchestrator(
            [StatusError("invalid model", 400), complete("never")]
        )

        with pytest.raises(ProviderError) as exc_info:
            orchestrator.generate(sample_request, logger)

        assert exc_info.value.kind == ProviderErrorKind.FATAL
        assert exc_info.value.status_code == 400
        assert len(provider.requests) == 1
        assert sleeps == []

    def test_missing_api_key_propagates(self, sample_request, logger):
        """Test that a missing key is not retried or reclassified."""
        orchestrator, provider, _ = make_orchestrator([MissingAPIKeyError("no key")])

        with pytest.raises(MissingAPIKeyError):
            orchestrator.generate(sample_request, logger)

        assert len(provider.requests) == 1

    def test_exhausted_after_max_attempts(self, sample_request, logger):
        """Test EXHAUSTED after the attempt ceiling, chaining the last failure."""
        policy = RetryPolicy(max_attempts=3)
        orchestrator, provider, sleeps = make_orchestrator(
            [rate_limited(), rate_limited(), rate_limited()], policy=policy
        )

        with pytest.raises(ProviderError) as exc_info:
            orchestrator.generate(sample_request, logger)

        assert exc_info.value.kind == ProviderErrorKind.EXHAUSTED
        assert isinstance(exc_info.value.__cause__, ProviderError)
        assert exc_info.value.__cause__.kind == ProviderErrorKind.RATE_LIMITED
        assert len(provider.requests) == 3
        # No sleep after the final attempt
        assert len(sleeps) == 2

    def test_default_ceiling_is_100_attempts(self, sample_request, logger):
        """Test that the default policy allows 100 attempts."""
        orchestrator, provider, sleeps = make_orchestrator([rate_limited()] * 100)

        with pytest.raises(ProviderError) as exc_info:
            orchestrator.generate(sample_request, logger)

        assert exc_info.value.kind == ProviderErrorKind.EXHAUSTED
        assert len(provider.requests) == 100
        assert len(sleeps) == 99
        assert max(sleeps) == 30.0


class TestModelFallback:
    """Tests for walking down the model ladder."""

    def test_switches_after_threshold(self, sample_request, logger, caplog):
        """Test fallback once consecutive 503s exceed the threshold."""
        policy = RetryPolicy(switch_threshold=2)
        orchestrator, provider, _ = make_orchestrator(
            [unavailable(), unavailable(), unavailable(), complete("ok")],
            policy=policy,
            fallback_models=["model-b"],
        )

        with caplog.at_level(logging.WARNING):
            result = orchestrator.generate(sample_request, logger)

        assert [r.model_name for r in provider.requests] == ["model-a", "model-a", "model-a", "model-b"]
        assert result.model == "model-b"
        assert "falling back to model-b" in caplog.text

    def test_default_threshold_is_ten(self, sample_request, logger):
        """Test that the eleventh consecutive 503 triggers the switch."""
        orchestrator, provider, _ = make_orchestrator(
            [unavailable()] * 11 + [complete("ok")],
            fallback_models=["model-b"],
        )

        orchestrator.generate(sample_request, logger)

        models = [r.model_name for r in provider.requests]
        assert models[:11] == ["model-a"] * 11
        assert models[11] == "model-b"

    def test_rate_limit_resets_unavailable_streak(self, sample_request, logger):
        """Test that a non-503 failure breaks the consecutive count."""
        policy = RetryPolicy(switch_threshold=2)
        orchestrator, provider, _ = make_orchestrator(
            [unavailable(), unavailable(), rate_limited(), unavailable(), unavailable(), complete("ok")],
            policy=policy,
            fallback_models=["model-b"],
        )

        result = orchestrator.generate(sample_request, logger)

        assert {r.model_name for r in provider.requests} == {"model-a"}
        assert result.model == "model-a"

    def test_stays_on_last_model(self, sample_request, logger):
        """Test that the last model keeps being retried when nothing remains."""
        policy = RetryPolicy(switch_threshold=1)
        orchestrator, provider, _ = make_orchestrator(
            [unavailable()] * 5 + [complete("ok")],
            policy=policy,
            fallback_models=["model-b"],
        )

        orchestrator.generate(sample_request, logger)

        models = [r.model_name for r in provider.requests]
        assert models == ["model-a", "model-a", "model-b", "model-b", "model-b", "model-b"]

    def test_model_index_never_decreases(self, sample_request, logger):
        """Test that the ladder is only walked forward."""
        policy = RetryPolicy(switch_threshold=1)
        orchestrator, provider, _ = make_orchestrator(
            [unavailable(), unavailable(), rate_limited(), unavailable(), unavailable(), complete("ok")],
            policy=policy,
            fallback_models=["model-b", "model-c"],
        )

        orchestrator.generate(sample_request, logger)

        ladder = ["model-a", "model-b", "model-c"]
        indices = [ladder.index(r.model_name) for r in provider.requests]
        assert indices == sorted(indices)
        assert indices[-1] == 2


class TestTokenFloor:
    """Tests for the output token floor."""

    @pytest.mark.parametrize("budget", [-5, 0, 10, 767])
    def test_small_budgets_raised_to_floor(self, sample_request, logger, budget):
        """Test that the adapter never sees fewer than MIN_OUTPUT_TOKENS."""
        orchestrator, provider, _ = make_orchestrator([complete("ok")])

        orchestrator.generate(sample_request.with_max_output_tokens(budget), logger)

        assert provider.requests[0].max_output_tokens == MIN_OUTPUT_TOKENS

    def test_larger_budget_kept(self, sample_request, logger):
        """Test that budgets above the floor are passed through."""
        orchestrator, provider, _ = make_orchestrator([complete("ok")])

        orchestrator.generate(sample_request.with_max_output_tokens(4096), logger)

        assert provider.requests[0].max_output_tokens == 4096


class TestTruncationRecovery:
    """Tests for empty-output retry and continuation."""

    def test_complete_result_returned_unmodified(self, sample_request, logger):
        """Test that COMPLETE results skip recovery."""
        orchestrator, provider, _ = make_orchestrator([complete("full text")])

        result = orchestrator.generate(sample_request, logger)

        assert result.text == "full text"
        assert result.finish_status == FinishStatus.COMPLETE
        assert len(provider.requests) == 1

    def test_other_finish_status_returned_unmodified(self, sample_request, logger):
        """Test that OTHER results skip recovery."""
        orchestrator, provider, _ = make_orchestrator(
            [GenerationResult(text="", finish_status=FinishStatus.OTHER)]
        )

        result = orchestrator.generate(sample_request, logger)

        assert result.text == ""
        assert result.finish_status == FinishStatus.OTHER
        assert len(provider.requests) == 1

    def test_empty_output_retried_once_with_bigger_budget(self, sample_request, logger):
        """Test one retry with 1.5x tokens; empty result returned without error."""
        orchestrator, provider, _ = make_orchestrator([length_limited(""), length_limited("")])

        result = orchestrator.generate(sample_request, logger)

        assert result.text == ""
        assert result.finish_status == FinishStatus.LENGTH_LIMITED
        assert len(provider.requests) == 2
        assert provider.requests[1].max_output_tokens == 3072
        assert provider.requests[1].prompt == sample_request.prompt

    def test_empty_output_retry_rounds_up(self, sample_request, logger):
        """Test that the bumped budget is rounded up."""
        orchestrator, provider, _ = make_orchestrator([length_limited(""), complete("ok")])

        result = orchestrator.generate(sample_request.with_max_output_tokens(1001), logger)

        assert result.text == "ok"
        assert provider.requests[1].max_output_tokens == 1502

    def test_empty_output_retry_uses_serving_model(self, sample_request, logger):
        """Test that the retry reuses the model that answered, not the ladder head."""
        policy = RetryPolicy(switch_threshold=0)
        orchestrator, provider, _ = make_orchestrator(
            [unavailable(), length_limited(""), complete("ok")],
            policy=policy,
            fallback_models=["model-b"],
        )

        result = orchestrator.generate(sample_request, logger)

        assert [r.model_name for r in provider.requests] == ["model-a", "model-b", "model-b"]
        assert result.text == "ok"

    def test_failed_empty_output_retry_keeps_empty_result(self, sample_request, logger, caplog):
        """Test that a failing retry after empty output returns the first result."""
        orchestrator, provider, _ = make_orchestrator([length_limited(""), StatusError("bad request", 400)])

        with caplog.at_level(logging.WARNING):
            result = orchestrator.generate(sample_request, logger)

        assert result.text == ""
        assert result.finish_status == FinishStatus.LENGTH_LIMITED
        assert len(provider.requests) == 2
        assert "empty-output retry failed" in caplog.text

    def test_continuation_appends_text(self, sample_request, logger):
        """Test that partial output is continued once and joined."""
        orchestrator, provider, _ = make_orchestrator(
            [length_limited("Part one", output_tokens=100), complete("Part two", output_tokens=40)]
        )

        result = orchestrator.generate(sample_request, logger)

        assert result.text == "Part one\n\nPart two"
        assert result.finish_status == FinishStatus.COMPLETE
        assert result.usage.output_tokens == 140
        assert result.model == "model-a"

    def test_continuation_request_shape(self, sample_request, logger):
        """Test the replayed turns, instruction and budget of the continuation."""
        orchestrator, provider, _ = make_orchestrator([length_limited("Part one"), complete("Part two")])

        orchestrator.generate(sample_request, logger)

        continuation = provider.requests[1]
        assert continuation.prompt == CONTINUE_INSTRUCTION
        assert continuation.history == (
            Message(role="user", content=sample_request.prompt),
            Message(role="assistant", content="Part one"),
        )
        assert continuation.max_output_tokens == 1024
        assert continuation.model_name == "model-a"
        assert continuation.system_instruction == sample_request.system_instruction

    def test_continuation_budget_floor(self, sample_request, logger):
        """Test that the halved continuation budget respects the floor."""
        orchestrator, provider, _ = make_orchestrator([length_limited("Part one"), complete("Part two")])

        orchestrator.generate(sample_request.with_max_output_tokens(1000), logger)

        assert provider.requests[1].max_output_tokens == MIN_OUTPUT_TOKENS

    def test_only_one_continuation_round(self, sample_request, logger):
        """Test that a length-limited continuation is not continued again."""
        orchestrator, provider, _ = make_orchestrator(
            [length_limited("Part one"), length_limited("Part two"), complete("never")]
        )

        result = orchestrator.generate(sample_request, logger)

        assert len(provider.requests) == 2
        assert result.text == "Part one\n\nPart two"
        assert result.finish_status == FinishStatus.LENGTH_LIMITED

    def test_continuation_never_shortens_text(self, sample_request, logger):
        """Test that an empty continuation keeps the partial text."""
        orchestrator, _, _ = make_orchestrator([length_limited("Part one"), complete("")])

        result = orchestrator.generate(sample_request, logger)

        assert result.text == "Part one"

    def test_continuation_result_is_stripped(self, sample_request, logger):
        """Test surrounding whitespace removed whether or not text was added."""
        orchestrator, _, _ = make_orchestrator([length_limited("\n  partial"), complete("")])
        assert orchestrator.generate(sample_request, logger).text == "partial"

        orchestrator, _, _ = make_orchestrator([length_limited("\n  partial"), complete("more  \n")])
        assert orchestrator.generate(sample_request, logger).text == "partial\n\nmore"

    def test_failed_continuation_keeps_partial(self, sample_request, logger, caplog):
        """Test that a failing continuation returns the partial text with a warning."""
        orchestrator, provider, _ = make_orchestrator(
            [length_limited("Part one"), StatusError("bad request", 400)]
        )

        with caplog.at_level(logging.WARNING):
            result = orchestrator.generate(sample_request, logger)

        assert result.text == "Part one"
        assert result.finish_status == FinishStatus.LENGTH_LIMITED
        assert "continuation failed" in caplog.text

    def test_continuation_retries_transient_failures(self, sample_request, logger):
        """Test that the continuation goes through the retry loop."""
        orchestrator, provider, sleeps = make_orchestrator(
            [length_limited("Part one"), rate_limited(), complete("Part two")]
        )

        result = orchestrator.generate(sample_request, logger)

        assert result.text == "Part one\n\nPart two"
        assert len(sleeps) == 1


class TestUsageLogging:
    """Tests for usage diagnostics in the orchestrator log."""

    def test_usage_logged_at_debug(self, sample_request, logger, caplog):
        """Test that a usage line is logged at debug level."""
        orchestrator, _, _ = make_orchestrator([complete("Hello", output_tokens=50)])

        with caplog.at_level(logging.DEBUG, logger=logger.name):
            orchestrator.generate(sample_request, logger)

        debug_lines = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert any("usage:" in line and "output=50" in line for line in debug_lines)
