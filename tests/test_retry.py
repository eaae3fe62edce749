from __future__ import annotations

from ai_news_ingest.processing.retry import RetryPolicy


def test_delay_doubles() -> None:
    policy = RetryPolicy(max_attempts=3, base_delay_sec=1.0)
    assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]


def test_returns_first_success() -> None:
    sleeps: list[float] = []
    calls = {"n": 0}

    def op() -> str:
        calls["n"] += 1
        if calls["n"] < 2:
            raise RuntimeError("flaky")
        return "ok"

    result = RetryPolicy(max_attempts=3, base_delay_sec=1.0).run(
        op, fallback=lambda exc: "fallback", sleep=sleeps.append
    )
    assert result == "ok"
    assert calls["n"] == 2
    assert sleeps == [1.0]


def test_exhaustion_calls_fallback_with_last_error() -> None:
    sleeps: list[float] = []
    errors: list[Exception] = []

    def op() -> str:
        raise ValueError(f"boom {len(sleeps)}")

    def fallback(exc: Exception) -> str:
        errors.append(exc)
        return "fallback"

    result = RetryPolicy(max_attempts=3, base_delay_sec=1.0).run(op, fallback=fallback, sleep=sleeps.append)
    assert result == "fallback"
    assert sleeps == [1.0, 2.0]
    assert str(errors[0]) == "boom 2"


def test_single_attempt_goes_straight_to_fallback() -> None:
    sleeps: list[float] = []
    result = RetryPolicy(max_attempts=0, base_delay_sec=1.0).run(
        lambda: 1 / 0, fallback=lambda exc: type(exc).__name__, sleep=sleeps.append
    )
    assert result == "ZeroDivisionError"
    assert sleeps == []
