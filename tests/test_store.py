"""Tests for the StateStore container."""

from conftest import make_account
from fintrack.state import Action, AddAccount, StateStore, ToggleTheme


class TestStateStore:
    """Tests for dispatch and subscriptions."""

    def test_dispatch_returns_new_state(self, store):
        """Test dispatch applies the reducer and swaps the state."""
        new_state = store.dispatch(AddAccount(account=make_account()))
        assert store.state is new_state
        assert len(new_state.accounts) == 1

    def test_listener_receives_previous_and_current(self, store):
        """Test listeners see both snapshots and the action."""
        seen = []
        store.subscribe(lambda prev, cur, action: seen.append((prev, cur, action)))

        action = AddAccount(account=make_account())
        store.dispatch(action)

        prev, cur, got = seen[0]
        assert prev.accounts == ()
        assert len(cur.accounts) == 1
        assert got is action

    def test_noop_does_not_notify(self, store):
        """Test an action the reducer ignores is not broadcast."""
        class Unknown(Action):
            pass

        seen = []
        store.subscribe(lambda *args: seen.append(args))
        before = store.state
        assert store.dispatch(Unknown()) is before
        assert seen == []

    def test_unsubscribe(self, store):
        """Test an unsubscribed listener is no longer called."""
        seen = []
        unsubscribe = store.subscribe(lambda *args: seen.append(args))
        unsubscribe()
        store.dispatch(ToggleTheme())
        assert seen == []

    def test_failing_listener_does_not_block(self, store):
        """Test a raising listener neither rolls back nor stops others."""
        seen = []

        def broken(*args):
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.subscribe(lambda *args: seen.append(args))

        store.dispatch(AddAccount(account=make_account()))

        assert len(store.state.accounts) == 1
        assert len(seen) == 1

    def test_explicit_initial_state(self, reducer, seeded_state):
        """Test a store can start from a given snapshot."""
        store = StateStore(reducer, seeded_state)
        assert store.state is seeded_state
