# (c) Copyright Datacraft, 2026
"""Approval queue state and visibility rules."""
from dataclasses import dataclass
from typing import Iterable, Iterator

from docportal.core.types import ModerationStatus

from .schema import ApprovalItem, SiteRole

MODERATOR_STATUSES = frozenset({ModerationStatus.PENDING, ModerationStatus.DRAFT})


def is_visible(item: ApprovalItem, role: SiteRole) -> bool:
	"""Moderators see pending and draft items; others only their own drafts."""
	if role.can_moderate:
		return item.moderation_status in MODERATOR_STATUSES
	return (
		item.moderation_status == ModerationStatus.DRAFT
		and role.user_id is not None
		and item.editor_id == role.user_id
	)


def visibility_filter(role: SiteRole) -> str:
	"""OData `$filter` clause matching `is_visible`."""
	if role.can_moderate:
		return "OData__ModerationStatus eq 2 or OData__ModerationStatus eq 3"
	return f"OData__ModerationStatus eq 3 and EditorId eq {role.user_id}"


@dataclass(frozen=True)
class ApprovalQueue:
	"""Ordered, de-duplicated list of items awaiting a decision."""
	items: tuple[ApprovalItem, ...] = ()

	def __len__(self) -> int:
		return len(self.items)

	def __iter__(self) -> Iterator[ApprovalItem]:
		return iter(self.items)

	def __contains__(self, item_id: int) -> bool:
		return any(i.item_id == item_id for i in self.items)

	def get(self, item_id: int) -> ApprovalItem | None:
		return next((i for i in self.items if i.item_id == item_id), None)

	def extend(self, items: Iterable[ApprovalItem]) -> "ApprovalQueue":
		known = {i.item_id for i in self.items}
		added = []
		for item in items:
			if item.item_id in known:
				continue
			known.add(item.item_id)
			added.append(item)
		return ApprovalQueue(self.items + tuple(added))

	def replace(self, item: ApprovalItem) -> "ApprovalQueue":
		return ApprovalQueue(tuple(item if i.item_id == item.item_id else i for i in self.items))

	def remove(self, item_id: int) -> "ApprovalQueue":
		return ApprovalQueue(tuple(i for i in self.items if i.item_id != item_id))

	def visible_to(self, role: SiteRole) -> "ApprovalQueue":
		return ApprovalQueue(tuple(i for i in self.items if is_visible(i, role)))
