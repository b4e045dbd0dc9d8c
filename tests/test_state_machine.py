from __future__ import annotations

from stepwise.core import SchedulerState, SchedulerStateMachine


def test_happy_path_transitions() -> None:
    seen = []
    machine = SchedulerStateMachine("pong", on_transition=lambda old, new, msg: seen.append((old, new)))

    assert machine.state is SchedulerState.IDLE
    assert machine.transition_to(SchedulerState.ACTIVE, "Started")
    assert machine.transition_to(SchedulerState.SUSPENDED)
    assert machine.transition_to(SchedulerState.ACTIVE)
    assert machine.transition_to(SchedulerState.COMPLETING)
    assert machine.transition_to(SchedulerState.TERMINATED)

    assert machine.state.is_terminal()
    assert [t.to_state for t in machine.transitions] == [
        SchedulerState.ACTIVE,
        SchedulerState.SUSPENDED,
        SchedulerState.ACTIVE,
        SchedulerState.COMPLETING,
        SchedulerState.TERMINATED,
    ]
    assert seen[0] == (SchedulerState.IDLE, SchedulerState.ACTIVE)
    assert machine.context.started_at is not None
    assert machine.context.terminated_at is not None


def test_invalid_transitions_are_refused() -> None:
    machine = SchedulerStateMachine()
    assert not machine.transition_to(SchedulerState.COMPLETING)
    assert machine.state is SchedulerState.IDLE

    machine.transition_to(SchedulerState.ACTIVE)
    machine.transition_to(SchedulerState.SUSPENDED)
    assert not machine.transition_to(SchedulerState.COMPLETING)

    machine.transition_to(SchedulerState.ABORTING)
    machine.transition_to(SchedulerState.TERMINATED)
    for state in SchedulerState:
        assert not machine.transition_to(state)


def test_state_predicates() -> None:
    assert SchedulerState.ACTIVE.is_running()
    assert SchedulerState.SUSPENDED.is_running()
    assert not SchedulerState.IDLE.is_running()
    assert not SchedulerState.ABORTING.is_running()
    assert SchedulerState.TERMINATED.is_terminal()


def test_to_dict_and_status() -> None:
    machine = SchedulerStateMachine("pong")
    assert machine.get_status_display() == "Idle"
    machine.transition_to(SchedulerState.ACTIVE, "Started")

    data = machine.to_dict()
    assert data["identity"] == "'pong'"
    assert data["state"] == "ACTIVE"
    assert data["transitions"] == [{"from": "IDLE", "to": "ACTIVE", "message": "Started"}]
    assert data["terminated_at"] is None
    assert machine.get_status_display() == "Running"
