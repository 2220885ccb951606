from typing import Dict, List, Optional, Sequence

from seating.keys import DAYS, DEFAULT_SERVICE_IDS, MemberArrivalKey
from seating.snapshot import Snapshot


def _rate(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def _counted_guests(snapshot: Snapshot, day: str, service_id: Optional[int] = None) -> List[int]:
    guest_ids = {
        row.guest_id
        for row in snapshot.assignments.values()
        if row.day == day and (service_id is None or row.service_id == service_id)
    }
    return sorted(g for g in guest_ids if snapshot.is_counted(g))


def attendance_summary(snapshot: Snapshot, day: str,
                       service_ids: Sequence[int] = DEFAULT_SERVICE_IDS) -> Dict:
    """Headcount and arrivals for one day. Ghost guests are left out of every number."""
    guests = _counted_guests(snapshot, day)
    arrived = sum(1 for g in guests if snapshot.has_arrived(g, day))

    services = []
    for service_id in service_ids:
        service_guests = _counted_guests(snapshot, day, service_id)
        services.append({
            "service_id": service_id,
            "guests": len(service_guests),
            "arrived": sum(1 for g in service_guests if snapshot.has_arrived(g, day)),
            "departed": sum(1 for g in service_guests if snapshot.has_departed(g, day, service_id)),
        })

    return {
        "day": day,
        "total_guests": len(guests),
        "arrived": arrived,
        "arrival_rate": _rate(arrived, len(guests)),
        "services": services,
    }


def weekly_summary(snapshot: Snapshot, service_ids: Sequence[int] = DEFAULT_SERVICE_IDS) -> Dict:
    days = [attendance_summary(snapshot, day, service_ids) for day in DAYS]
    total_guests = sum(d["total_guests"] for d in days)
    total_arrivals = sum(d["arrived"] for d in days)

    popularity = [
        {"service_id": service_id, "total": sum(len(_counted_guests(snapshot, day, service_id)) for day in DAYS)}
        for service_id in service_ids
    ]
    popularity.sort(key=lambda s: s["total"], reverse=True)

    return {
        "days": days,
        "total_guests": total_guests,
        "total_arrivals": total_arrivals,
        "average_daily_guests": round(total_guests / len(DAYS), 1),
        "arrival_rate": _rate(total_arrivals, total_guests),
        "peak_day": max(days, key=lambda d: d["total_guests"])["day"],
        "lowest_day": min(days, key=lambda d: d["total_guests"])["day"],
        "service_popularity": popularity,
    }


def duplicate_guest_ids(snapshot: Snapshot) -> List[int]:
    """Guests sharing a name with another guest, ignoring case and surrounding spaces."""
    by_name: Dict[str, List[int]] = {}
    for guest in snapshot.guests.values():
        by_name.setdefault(guest.name.strip().lower(), []).append(guest.id)
    return sorted(g for ids in by_name.values() if len(ids) > 1 for g in ids)


def party_arrival_status(snapshot: Snapshot, guest_id: int, day: str) -> Dict:
    """Arrival of a guest together with the named members registered under them."""
    member_ids = sorted(m for m, main_guest_id in snapshot.group_members.items() if main_guest_id == guest_id)
    arrived = (1 if snapshot.has_arrived(guest_id, day) else 0) + sum(
        1 for m in member_ids if MemberArrivalKey(m, day) in snapshot.member_arrivals
    )
    total = 1 + len(member_ids)
    return {
        "guest_id": guest_id,
        "day": day,
        "arrived": arrived,
        "total": total,
        "is_partial": 0 < arrived < total,
        "is_complete": arrived == total,
        "percentage": _rate(arrived, total),
    }
