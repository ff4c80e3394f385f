"""
Step advancement for workflow instances.

An instance walks its workflow's steps strictly by step_order. Step status
lives on the shared workflow_steps rows and is reset to pending when a run
starts, so "open" means not yet completed or cancelled in the current run.
Completing the current step moves the pointer to the next open step, or closes
the instance when nothing is left. Branching node types in the builder do not
change this: branches are flattened into step_order at publish time.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

CLOSED_STEP_STATUSES = {"completed", "cancelled"}


class AdvancementError(ValueError):
    status_code = 400


class InstanceNotActiveError(AdvancementError):
    status_code = 409


class NotCurrentStepError(AdvancementError):
    status_code = 409


class StepNotFoundError(AdvancementError):
    status_code = 404


class NoRunnableStepError(AdvancementError):
    status_code = 400


@dataclass
class AdvancePlan:
    completed_step: dict
    next_step: Optional[dict]

    @property
    def finishes_instance(self) -> bool:
        return self.next_step is None


def order_steps(steps: Iterable[dict]) -> List[dict]:
    return sorted(steps, key=lambda step: step.get("step_order") or 0)


def is_open(step: dict) -> bool:
    return step.get("status") not in CLOSED_STEP_STATUSES


def first_step(steps: Iterable[dict]) -> dict:
    """Step a new instance starts on: the lowest step_order, whatever a previous run left behind"""
    ordered = order_steps(steps)
    if not ordered:
        raise NoRunnableStepError("Workflow has no steps to start from")
    return ordered[0]


def plan_advance(instance: dict, steps: Iterable[dict], completed_step_id: str) -> AdvancePlan:
    if instance.get("status") != "active":
        raise InstanceNotActiveError(
            f"Workflow instance {instance.get('id')} is {instance.get('status')}, not active"
        )
    if instance.get("current_step_id") != completed_step_id:
        raise NotCurrentStepError("Cannot complete step - this is not the current step in the workflow")

    ordered = order_steps(steps)
    index = next((i for i, step in enumerate(ordered) if step.get("id") == completed_step_id), None)
    if index is None:
        raise StepNotFoundError("Completed step not found in workflow")

    next_step = next((step for step in ordered[index + 1:] if is_open(step)), None)
    return AdvancePlan(completed_step=ordered[index], next_step=next_step)
