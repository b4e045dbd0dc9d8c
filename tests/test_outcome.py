from __future__ import annotations

import pytest

from stepwise.core import Aborted, BoundaryViolation, Completed, Failed, TaskAborted, classify
from stepwise.core.outcome import MENU_CLICK_ABORT, USER_ESCAPE


def test_no_error_is_completed() -> None:
    outcome = classify()
    assert outcome == Completed()
    assert outcome.succeeded


def test_task_aborted_keeps_its_reason() -> None:
    outcome = classify(TaskAborted(USER_ESCAPE))
    assert outcome == Aborted(USER_ESCAPE)
    assert not outcome.succeeded


def test_boundary_violation_is_reported_as_user_abort() -> None:
    outcome = classify(BoundaryViolation("fiber called across stack rewinding barrier"))
    assert outcome == Aborted(MENU_CLICK_ABORT)


@pytest.mark.parametrize("error", [ValueError("bad"), ZeroDivisionError(), RuntimeError("x")])
def test_other_errors_are_wrapped_untouched(error: Exception) -> None:
    outcome = classify(error)
    assert isinstance(outcome, Failed)
    assert outcome.error is error
    assert not outcome.succeeded


def test_outcome_strings() -> None:
    assert str(Completed()) == "Completed"
    assert str(Aborted("User Escape")) == "Aborted: User Escape"
    assert str(Failed(ValueError("bad"))) == "Failed: ValueError: bad"
