from jobgenie.approvals.commands import EntityKind, TransitionCommand
from jobgenie.approvals.notifications import NotificationDispatcher
from jobgenie.approvals.workflow import ApprovalWorkflow, BulkOutcome, Summary

__all__ = [
    "ApprovalWorkflow",
    "BulkOutcome",
    "EntityKind",
    "NotificationDispatcher",
    "Summary",
    "TransitionCommand",
]
