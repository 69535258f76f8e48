import threading

from agent_runner_sdk.nonce import InMemoryNonceStore
from agent_runner_sdk.signing import NONCE_TTL_SECONDS, sign_body, verify_signature


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_first_accept_wins_and_replay_is_rejected() -> None:
    store = InMemoryNonceStore()

    assert store.try_accept("nonce-abc-123") is True
    assert store.try_accept("nonce-abc-123") is False
    assert store.try_accept("nonce-abc-123") is False
    assert store.try_accept("nonce-xyz-456") is True


def test_replay_rejected_even_with_freshly_signed_request() -> None:
    store = InMemoryNonceStore()
    envelope = sign_body("secret", "{}")

    assert verify_signature(
        "secret",
        signature=envelope["signature"],
        timestamp=envelope["timestamp"],
        nonce=envelope["nonce"],
        body="{}",
    )
    assert store.try_accept(envelope["nonce"]) is True

    # Same nonce, a different (valid) body and signature: still a replay.
    again = sign_body("secret", '{"x":1}')
    assert store.try_accept(envelope["nonce"]) is False
    assert again["nonce"] != envelope["nonce"]


def test_default_ttl_is_twice_freshness_window() -> None:
    assert NONCE_TTL_SECONDS == 240


def test_rejected_retry_does_not_extend_record() -> None:
    clock = _FakeClock()
    store = InMemoryNonceStore(ttl_seconds=240, clock=clock)

    assert store.try_accept("nonce-0001") is True
    clock.now += 200
    assert store.try_accept("nonce-0001") is False
    clock.now += 40
    assert store.try_accept("nonce-0001") is True


def test_expired_records_are_purged() -> None:
    clock = _FakeClock()
    store = InMemoryNonceStore(ttl_seconds=10, clock=clock)

    for index in range(100):
        store.try_accept(f"nonce-{index:04d}")
    assert len(store) == 100

    clock.now += 5
    store.try_accept("nonce-late")
    clock.now += 6
    assert len(store) == 1


def test_concurrent_accept_has_exactly_one_winner() -> None:
    store = InMemoryNonceStore()
    barrier = threading.Barrier(16)
    results: list[bool] = []
    results_lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        accepted = store.try_accept("shared-nonce-1")
        with results_lock:
            results.append(accepted)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert results.count(False) == 15
