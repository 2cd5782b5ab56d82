# (c) Copyright Datacraft, 2026
"""Document approval workflow."""
from .polling import PollRegistry, cancel_all_polls
from .queue import ApprovalQueue, is_visible, visibility_filter
from .schema import ActionResult, ApprovalItem, BulkUpdateResult, SiteRole
from .service import ApprovalService

__all__ = [
	'ActionResult',
	'ApprovalItem',
	'ApprovalQueue',
	'ApprovalService',
	'BulkUpdateResult',
	'PollRegistry',
	'SiteRole',
	'cancel_all_polls',
	'is_visible',
	'visibility_filter',
]
