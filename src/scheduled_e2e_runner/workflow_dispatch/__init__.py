"""Workflow dispatch exports."""

from .github_workflow_dispatcher import GitHubWorkflowDispatcher, WorkflowDispatchError
from .scheduled_trigger import WorkflowDispatcher, trigger_workflow_run

__all__ = [
    "GitHubWorkflowDispatcher",
    "WorkflowDispatchError",
    "WorkflowDispatcher",
    "trigger_workflow_run",
]
