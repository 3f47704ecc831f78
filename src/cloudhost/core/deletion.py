"""
Environment Deletion
--------------------
Deletes environments in three passes:

 - classify: pure eligibility check per candidate (children, building, status)
 - plan: per-environment confirmation, building the deactivate and
   branch-delete sets
 - execute: deactivate, optionally wait for the activities, then delete the
   Git branches of inactive environments

Every item is processed independently: a failure is recorded as an outcome and
the batch carries on. The overall result is successful only when no item was
blocked or failed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Mapping, Optional

from cloudhost.clients.resources import Environment
from cloudhost.core.activity_monitor import wait_multiple
from cloudhost.core.logger import debug, log
from cloudhost.core.notifier import error, info, success, warning


class Eligibility(str, Enum):
    BLOCKED_CHILDREN = "blocked_children"
    BLOCKED_BUILDING = "blocked_building"
    ACTIVE = "active"
    INACTIVE = "inactive"
    SKIPPED = "skipped"


class Outcome(str, Enum):
    BLOCKED_CHILDREN = "blocked_children"
    BLOCKED_BUILDING = "blocked_building"
    DECLINED = "declined"
    DEACTIVATED = "deactivated"
    DELETED = "deleted"
    NOT_INACTIVE = "not_inactive"
    FAILED = "failed"


ERROR_OUTCOMES = {
    Outcome.BLOCKED_CHILDREN,
    Outcome.BLOCKED_BUILDING,
    Outcome.NOT_INACTIVE,
    Outcome.FAILED,
}


@dataclass
class ItemOutcome:
    environment_id: str
    outcome: Outcome
    message: str = ""

    @property
    def is_error(self) -> bool:
        return self.outcome in ERROR_OUTCOMES


@dataclass
class DeletionResult:
    outcomes: List[ItemOutcome] = field(default_factory=list)
    activity_failed: bool = False

    def add(self, environment_id: str, outcome: Outcome, message: str = "") -> ItemOutcome:
        item = ItemOutcome(environment_id, outcome, message)
        self.outcomes.append(item)
        return item

    def ids(self, outcome: Outcome) -> List[str]:
        return [o.environment_id for o in self.outcomes if o.outcome == outcome]

    @property
    def deactivated(self) -> int:
        return len(self.ids(Outcome.DEACTIVATED))

    @property
    def deleted(self) -> int:
        return len(self.ids(Outcome.DELETED))

    @property
    def has_errors(self) -> bool:
        return self.activity_failed or any(o.is_error for o in self.outcomes)

    @property
    def success(self) -> bool:
        return not self.has_errors

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


@dataclass
class DeletionPlan:
    deactivate: Dict[str, Environment] = field(default_factory=dict)
    delete: Dict[str, Environment] = field(default_factory=dict)


def has_children(candidate: Environment, environments: Mapping[str, Environment]) -> bool:
    return any(env.parent == candidate.id for env in environments.values())


def classify(candidate: Environment, environments: Mapping[str, Environment]) -> Eligibility:
    """Pure eligibility check against the full set of project environments."""
    if has_children(candidate, environments):
        return Eligibility.BLOCKED_CHILDREN
    if candidate.status == "dirty":
        return Eligibility.BLOCKED_BUILDING
    if candidate.is_active():
        return Eligibility.ACTIVE
    if candidate.status == "inactive":
        return Eligibility.INACTIVE
    return Eligibility.SKIPPED


class EnvironmentDeleter:
    """
    Plans and runs the deletion of a batch of environments.

    delete_branch: True (--delete-branch), False (--no-delete-branch), or None
    to ask per environment in interactive mode.
    wait: whether to block until deactivations complete; branch deletion of
    active environments is only possible when waiting.
    """

    def __init__(
        self,
        api,
        project,
        confirm: Callable[[str], bool],
        interactive: bool = True,
        wait: bool = True,
        delete_branch: Optional[bool] = None,
        timeout: Optional[float] = None,
        poll_interval: float = 2.0,
        waiter: Callable[..., bool] = wait_multiple,
    ):
        self.api = api
        self.project = project
        self.confirm = confirm
        self.interactive = interactive
        self.wait = wait
        self.delete_branch = delete_branch
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.waiter = waiter

    # ---------------------- PLAN ---------------------- #

    def _offer_branch_deletion(self) -> bool:
        if self.delete_branch is False or not self.wait:
            return False
        if self.delete_branch:
            return True
        return self.interactive and self.confirm("Delete the remote Git branch too?")

    def plan(self, candidates: Mapping[str, Environment], environments: Mapping[str, Environment], result: DeletionResult) -> DeletionPlan:
        plan = DeletionPlan()
        for env_id, environment in candidates.items():
            eligibility = classify(environment, environments)
            debug(f"Environment {env_id}: {eligibility.value}")

            if eligibility == Eligibility.BLOCKED_CHILDREN:
                error(f"The environment {env_id} has children and therefore can't be deleted.")
                info("Please delete the environment's children first.")
                result.add(env_id, Outcome.BLOCKED_CHILDREN, "has children")
            elif eligibility == Eligibility.BLOCKED_BUILDING:
                error(f"The environment {env_id} is currently building, and therefore can't be deleted. Please wait.")
                result.add(env_id, Outcome.BLOCKED_BUILDING, "currently building")
            elif eligibility == Eligibility.ACTIVE:
                warning(f"The environment {env_id} is currently active: deleting it will delete all associated data.")
                if not self.confirm(f"Are you sure you want to delete the environment {env_id}?"):
                    result.add(env_id, Outcome.DECLINED, "not confirmed")
                    continue
                plan.deactivate[env_id] = environment
                if self._offer_branch_deletion():
                    plan.delete[env_id] = environment
            elif eligibility == Eligibility.INACTIVE:
                if self.confirm(f"Are you sure you want to delete the remote Git branch {env_id}?"):
                    plan.delete[env_id] = environment
                else:
                    result.add(env_id, Outcome.DECLINED, "not confirmed")
            else:
                debug(f"Skipping environment {env_id} with status '{environment.status}'")
        return plan

    # ---------------------- EXECUTE ---------------------- #

    def _deactivate_all(self, plan: DeletionPlan, result: DeletionResult) -> list:
        activities = []
        for env_id, environment in plan.deactivate.items():
            try:
                log(f"Deleting environment {env_id}")
                activity = environment.deactivate()
            except Exception as exc:
                error(f"Failed to delete environment {env_id}: {exc}")
                result.add(env_id, Outcome.FAILED, str(exc))
                continue
            result.add(env_id, Outcome.DEACTIVATED)
            if activity is not None:
                activities.append(activity)
        return activities

    def _delete_branches(self, plan: DeletionPlan, result: DeletionResult):
        failed = set(result.ids(Outcome.FAILED))
        for env_id, environment in plan.delete.items():
            if env_id in failed:
                continue
            try:
                if environment.status != "inactive":
                    environment.refresh()
                    if environment.status != "inactive":
                        error(f"Cannot delete branch {env_id}: it is not (yet) inactive.")
                        result.add(env_id, Outcome.NOT_INACTIVE, f"status is {environment.status}")
                        continue
                environment.delete()
            except Exception as exc:
                error(f"Failed to delete branch {env_id}: {exc}")
                result.add(env_id, Outcome.FAILED, str(exc))
                continue
            success(f"Deleted remote Git branch {env_id}")
            result.add(env_id, Outcome.DELETED)

    def execute(self, plan: DeletionPlan, result: DeletionResult) -> DeletionResult:
        activities = self._deactivate_all(plan, result)

        if activities and self.wait:
            if not self.waiter(activities, timeout=self.timeout, poll_interval=self.poll_interval):
                result.activity_failed = True

        self._delete_branches(plan, result)

        if result.deleted:
            info("Run git fetch --prune to remove deleted branches from your local cache.")

        if result.deactivated or result.deleted or result.has_errors:
            debug(f"Clearing the environments cache for project {self.project.id}")
            self.api.clear_environments_cache(self.project)
        return result

    def run(self, candidates: Mapping[str, Environment], environments: Mapping[str, Environment]) -> DeletionResult:
        result = DeletionResult()
        plan = self.plan(candidates, environments, result)
        return self.execute(plan, result)
