"""
Group queries and group-aware assignment resolution.

Assigning a lead guest cascades to the whole group by default. Assigning a
member asks the caller whether to move just that member or the member's whole
group. A lead of several groups must pick one; the resolver never guesses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from seating.errors import NotFound, ValidationError
from seating.snapshot import GroupRecord, GuestRecord, Snapshot


class AssignScope(str, Enum):
    MEMBER = "member"
    GROUP = "group"


class AssignStatus(str, Enum):
    ASSIGNED = "assigned"
    NEEDS_GROUP_CHOICE = "needs_group_choice"
    NEEDS_MEMBER_CHOICE = "needs_member_choice"


@dataclass
class AssignOutcome:
    status: AssignStatus
    guest_ids: Tuple[int, ...] = ()
    group_id: Optional[int] = None
    lead_guest_id: Optional[int] = None
    candidate_group_ids: Tuple[int, ...] = ()

    @property
    def needs_choice(self) -> bool:
        return self.status != AssignStatus.ASSIGNED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "guest_ids": list(self.guest_ids),
            "group_id": self.group_id,
            "lead_guest_id": self.lead_guest_id,
            "candidate_group_ids": list(self.candidate_group_ids),
        }


@dataclass
class GroupStatus:
    group_id: int
    is_active_for_service: bool = False
    is_complete: bool = False
    is_split: bool = False
    assigned_count: int = 0
    total_count: int = 0
    table_ids: List[int] = field(default_factory=list)
    missing_member_ids: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return dict(self.__dict__)


def groups_led_by(snapshot: Snapshot, guest_id: int) -> List[GroupRecord]:
    return sorted(
        (g for g in snapshot.groups.values() if g.lead_guest_id == guest_id),
        key=lambda g: g.id,
    )


def groups_with_member(snapshot: Snapshot, guest_id: int) -> List[GroupRecord]:
    return sorted(
        (g for g in snapshot.groups.values() if guest_id in g.member_ids),
        key=lambda g: g.id,
    )


def group_size(group: GroupRecord) -> int:
    return group.size


def guest_group_size(snapshot: Snapshot, guest_id: int) -> int:
    """1 for a solo guest, otherwise the size of the first group the guest leads."""
    led = groups_led_by(snapshot, guest_id)
    return group_size(led[0]) if led else 1


def guest_group(snapshot: Snapshot, guest_id: int) -> Optional[GroupRecord]:
    led = groups_led_by(snapshot, guest_id)
    if led:
        return led[0]
    member_of = groups_with_member(snapshot, guest_id)
    return member_of[0] if member_of else None


def group_display_name(snapshot: Snapshot, group: GroupRecord) -> str:
    if group.name:
        return group.name
    lead = snapshot.guests.get(group.lead_guest_id)
    return f"{lead.name if lead else 'Unknown'}'s group"


def get_group(snapshot: Snapshot, group_id: int) -> GroupRecord:
    group = snapshot.groups.get(group_id)
    if group is None:
        raise NotFound("Group not found")
    return group


def assigned_table_ids(snapshot: Snapshot, guest_id: int, day: str, service_id: int) -> List[int]:
    return sorted({row.table_id for row in snapshot.rows_for_guest(guest_id, day, service_id)})


def unassigned_guest_ids(snapshot: Snapshot, day: str, service_id: int) -> List[int]:
    seated = {row.guest_id for row in snapshot.rows_for_slot(day, service_id)}
    return [guest_id for guest_id in snapshot.guests if guest_id not in seated]


def resolve_assignment(
    snapshot: Snapshot,
    guest_id: int,
    group_id: Optional[int] = None,
    scope: Optional[AssignScope] = None,
    cascade: bool = False,
) -> AssignOutcome:
    """
    Decides who moves when ``guest_id`` is dropped on a table.

    Returns an outcome whose ``guest_ids`` lists everybody to place, or a
    ``NEEDS_*`` outcome describing the choice the caller has to make first.
    ``cascade`` marks a call that is already part of a group placement.
    """
    if guest_id not in snapshot.guests:
        raise NotFound("Guest not found")
    if scope is not None:
        scope = AssignScope(scope)

    chosen = None
    if group_id is not None:
        chosen = get_group(snapshot, group_id)
        if guest_id not in chosen.all_guest_ids:
            raise ValidationError("Guest is not part of the selected group")

    if cascade or scope == AssignScope.MEMBER:
        return AssignOutcome(AssignStatus.ASSIGNED, guest_ids=(guest_id,))

    led = groups_led_by(snapshot, guest_id)
    if led:
        if chosen is None and len(led) > 1:
            return AssignOutcome(
                AssignStatus.NEEDS_GROUP_CHOICE,
                lead_guest_id=guest_id,
                candidate_group_ids=tuple(g.id for g in led),
            )
        group = chosen or led[0]
        return AssignOutcome(
            AssignStatus.ASSIGNED,
            guest_ids=group.all_guest_ids,
            group_id=group.id,
            lead_guest_id=group.lead_guest_id,
        )

    member_of = groups_with_member(snapshot, guest_id)
    if member_of:
        group = chosen or member_of[0]
        if scope == AssignScope.GROUP:
            return AssignOutcome(
                AssignStatus.ASSIGNED,
                guest_ids=group.all_guest_ids,
                group_id=group.id,
                lead_guest_id=group.lead_guest_id,
            )
        return AssignOutcome(
            AssignStatus.NEEDS_MEMBER_CHOICE,
            guest_ids=(guest_id,),
            group_id=group.id,
            lead_guest_id=group.lead_guest_id,
            candidate_group_ids=tuple(g.id for g in member_of),
        )

    return AssignOutcome(AssignStatus.ASSIGNED, guest_ids=(guest_id,))


def group_assignment_status(snapshot: Snapshot, group_id: int, day: str, service_id: int) -> GroupStatus:
    group = snapshot.groups.get(group_id)
    if group is None:
        return GroupStatus(group_id=group_id)

    def is_seated(guest_id):
        return bool(snapshot.rows_for_guest(guest_id, day, service_id))

    # A lead's other, unused groups must not look half-assigned just
    # because the lead sits somewhere.
    if group.member_ids:
        active = any(is_seated(member_id) for member_id in group.member_ids)
    else:
        active = is_seated(group.lead_guest_id)

    status = GroupStatus(group_id=group_id, is_active_for_service=active, total_count=group.size)
    if not active:
        return status

    table_ids = set()
    for guest_id in group.all_guest_ids:
        tables = assigned_table_ids(snapshot, guest_id, day, service_id)
        if tables:
            table_ids.update(tables)
            status.assigned_count += 1
        elif guest_id in snapshot.guests:
            status.missing_member_ids.append(guest_id)

    status.table_ids = sorted(table_ids)
    status.is_complete = status.assigned_count == status.total_count and len(table_ids) == 1
    status.is_split = len(table_ids) > 1
    return status


def table_guests_grouped(snapshot: Snapshot, table_id: int, day: str, service_id: int) -> List[dict]:
    """
    Buckets the guests at a table by the group they are seated with.

    Ungrouped guests come first under ``group_id=None``.
    """
    guest_ids = [row.guest_id for row in snapshot.rows_at_table(table_id, day, service_id)]
    at_table = set(guest_ids)

    buckets: List[dict] = []
    grouped = set()
    for group in sorted(snapshot.groups.values(), key=lambda g: g.id):
        if group.member_ids:
            active_here = any(member_id in at_table for member_id in group.member_ids)
        else:
            active_here = group.lead_guest_id in at_table
        if not active_here:
            continue
        members = [guest_id for guest_id in group.all_guest_ids if guest_id in at_table]
        buckets.append({
            "group_id": group.id,
            "group_name": group_display_name(snapshot, group),
            "guests": _guest_dicts(snapshot, members),
        })
        grouped.update(members)

    ungrouped = [guest_id for guest_id in dict.fromkeys(guest_ids) if guest_id not in grouped]
    if ungrouped:
        buckets.insert(0, {"group_id": None, "group_name": None, "guests": _guest_dicts(snapshot, ungrouped)})
    return buckets


def _guest_dicts(snapshot: Snapshot, guest_ids) -> List[dict]:
    result = []
    for guest_id in guest_ids:
        guest: Optional[GuestRecord] = snapshot.guests.get(guest_id)
        if guest is not None:
            result.append({"id": guest.id, "name": guest.name, "is_ghost": guest.is_ghost})
    return result

