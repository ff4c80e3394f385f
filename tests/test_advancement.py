"""Tests for step-order advancement of workflow instances."""

import pytest

from app.modules.instances.advancement import (
    InstanceNotActiveError,
    NoRunnableStepError,
    NotCurrentStepError,
    StepNotFoundError,
    first_step,
    plan_advance,
)


def step(step_id, order, status="pending"):
    return {"id": step_id, "step_order": order, "status": status, "name": step_id}


STEPS = [step("s3", 3), step("s1", 1), step("s2", 2)]


def instance(current, status="active"):
    return {"id": "i1", "status": status, "current_step_id": current}


class TestFirstStep:
    def test_lowest_order_wins(self):
        assert first_step(list(reversed(STEPS)))["id"] == "s1"

    def test_statuses_from_a_previous_run_are_ignored(self):
        steps = [step("s1", 1, "completed"), step("s2", 2, "completed")]
        assert first_step(steps)["id"] == "s1"

    def test_no_steps(self):
        with pytest.raises(NoRunnableStepError):
            first_step([])

class TestPlanAdvance:
    def test_moves_to_next_step(self):
        plan = plan_advance(instance("s1"), STEPS, "s1")
        assert plan.completed_step["id"] == "s1"
        assert plan.next_step["id"] == "s2"
        assert not plan.finishes_instance

    def test_last_step_finishes(self):
        plan = plan_advance(instance("s3"), STEPS, "s3")
        assert plan.next_step is None
        assert plan.finishes_instance

    def test_skips_closed_steps_ahead(self):
        steps = [step("s1", 1), step("s2", 2, "completed"), step("s3", 3)]
        assert plan_advance(instance("s1"), steps, "s1").next_step["id"] == "s3"

    def test_only_closed_steps_ahead_finishes(self):
        steps = [step("s1", 1), step("s2", 2, "cancelled")]
        assert plan_advance(instance("s1"), steps, "s1").finishes_instance

    def test_wrong_step_is_conflict(self):
        with pytest.raises(NotCurrentStepError) as exc:
            plan_advance(instance("s1"), STEPS, "s2")
        assert exc.value.status_code == 409

    @pytest.mark.parametrize("status", ["completed", "cancelled"])
    def test_instance_must_be_active(self, status):
        with pytest.raises(InstanceNotActiveError):
            plan_advance(instance("s1", status=status), STEPS, "s1")

    def test_pointer_at_unknown_step(self):
        with pytest.raises(StepNotFoundError) as exc:
            plan_advance(instance("gone"), STEPS, "gone")
        assert exc.value.status_code == 404
