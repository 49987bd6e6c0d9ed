"""
Tests for inference rate limiting, generation numbering and cancellation.
"""

import pytest

from fingertip_hud.core.scheduler import CancellationToken, GenerationCounter, InferenceScheduler


def test_calls_closer_than_interval_are_rejected():
    scheduler = InferenceScheduler(min_interval=0.033)
    assert scheduler.should_infer(0.000)
    assert not scheduler.should_infer(0.010)


def test_calls_further_than_interval_are_accepted():
    scheduler = InferenceScheduler(min_interval=0.033)
    assert scheduler.should_infer(0.000)
    assert scheduler.should_infer(0.040)


def test_rejected_calls_do_not_move_last_run():
    scheduler = InferenceScheduler(min_interval=0.033)
    assert scheduler.should_infer(1.000)
    assert not scheduler.should_infer(1.020)
    assert not scheduler.should_infer(1.030)
    assert scheduler.should_infer(1.034)
    assert scheduler.last_run == 1.034


def test_ready_does_not_record_a_run():
    scheduler = InferenceScheduler(min_interval=0.033)
    assert scheduler.ready(2.0)
    assert scheduler.ready(2.0)
    assert scheduler.last_run is None

    scheduler.record_run(2.0)
    assert not scheduler.ready(2.010)
    assert scheduler.ready(2.040)


def test_reset_allows_next_frame():
    scheduler = InferenceScheduler(min_interval=0.033)
    scheduler.should_infer(5.0)
    scheduler.reset()
    assert scheduler.should_infer(5.001)


def test_negative_interval_is_rejected():
    with pytest.raises(ValueError):
        InferenceScheduler(min_interval=-1.0)


def test_generations_are_monotonic():
    counter = GenerationCounter()
    assert [counter.issue() for _ in range(3)] == [0, 1, 2]


def test_stale_completion_is_dropped():
    counter = GenerationCounter()
    first, second = counter.issue(), counter.issue()

    assert counter.try_apply(second)
    assert not counter.try_apply(first)
    assert counter.dropped == 1
    assert counter.last_applied == second


def test_in_order_completions_are_applied():
    counter = GenerationCounter()
    generations = [counter.issue() for _ in range(3)]
    assert all(counter.try_apply(g) for g in generations)
    assert counter.dropped == 0


def test_same_generation_applies_once():
    counter = GenerationCounter()
    generation = counter.issue()
    assert counter.try_apply(generation)
    assert not counter.try_apply(generation)


def test_cancellation_token():
    token = CancellationToken()
    assert not token.cancelled
    token.cancel()
    assert token.cancelled
