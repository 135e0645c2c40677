"""Tests for cancellation tokens and token groups."""

from CrptKit.DocumentSubmit.cancellation import CancellationToken, CancellationTokenGroup


class TestCancellationToken:
    def test_initial_state(self):
        token = CancellationToken()
        assert not token.is_cancelled()

    def test_cancel_notifies_listeners_once(self):
        token = CancellationToken()
        calls = []
        token.add_listener(lambda: calls.append("a"))
        token.cancel()
        token.cancel()
        assert token.is_cancelled()
        assert calls == ["a"]

    def test_listener_added_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel()
        calls = []
        token.add_listener(lambda: calls.append(1))
        assert calls == [1]

    def test_removed_listener_not_called(self):
        token = CancellationToken()
        calls = []

        def listener():
            calls.append(1)

        token.add_listener(listener)
        token.remove_listener(listener)
        token.remove_listener(listener)
        token.cancel()
        assert calls == []

    def test_failing_listener_does_not_block_others(self, caplog):
        token = CancellationToken()
        calls = []

        def broken():
            raise RuntimeError("boom")

        token.add_listener(broken)
        token.add_listener(lambda: calls.append(1))
        token.cancel()
        assert calls == [1]
        assert "Cancellation listener failed" in caplog.text

    def test_reset(self):
        token = CancellationToken()
        token.cancel()
        token.reset()
        assert not token.is_cancelled()


class TestCancellationTokenGroup:
    def test_cancel_all(self):
        group = CancellationTokenGroup()
        first = group.create_token()
        second = group.create_token()
        assert len(group) == 2
        assert not group.is_any_cancelled()

        group.cancel_all()
        assert first.is_cancelled()
        assert second.is_cancelled()
        assert group.is_any_cancelled()

    def test_token_added_after_cancel_is_cancelled(self):
        group = CancellationTokenGroup()
        group.cancel_all()
        token = CancellationToken()
        group.add_token(token)
        assert token.is_cancelled()

    def test_removed_token_is_left_alone(self):
        group = CancellationTokenGroup()
        token = group.create_token()
        group.remove_token(token)
        group.remove_token(token)
        group.cancel_all()
        assert not token.is_cancelled()
        assert len(group) == 0


def test_reason_reaches_group_members():
    group = CancellationTokenGroup()
    early = group.create_token()
    group.cancel_all("batch aborted")
    late = group.create_token()

    assert early.reason == "batch aborted"
    assert late.is_cancelled()
    assert late.reason == "batch aborted"
