from enum import Enum
from typing import NamedTuple


class Day(str, Enum):
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"


DAYS = tuple(day.value for day in Day)

DEFAULT_SERVICES = (
    {"id": 1, "name": "Service 1", "time": "11:30 - 12:30"},
    {"id": 2, "name": "Service 2", "time": "12:45 - 13:45"},
    {"id": 3, "name": "Service 3", "time": "13:00 - 14:00"},
)

DEFAULT_SERVICE_IDS = tuple(service["id"] for service in DEFAULT_SERVICES)


class SlotKey(NamedTuple):
    day: str
    service_id: int


class TableSlotKey(NamedTuple):
    day: str
    service_id: int
    table_id: int

    @property
    def slot(self) -> SlotKey:
        return SlotKey(self.day, self.service_id)


class AssignmentKey(NamedTuple):
    guest_id: int
    table_id: int
    day: str
    service_id: int

    @property
    def slot(self) -> SlotKey:
        return SlotKey(self.day, self.service_id)

    @property
    def table_slot(self) -> TableSlotKey:
        return TableSlotKey(self.day, self.service_id, self.table_id)


class ArrivalKey(NamedTuple):
    guest_id: int
    day: str


class DepartureKey(NamedTuple):
    guest_id: int
    day: str
    service_id: int


class MemberArrivalKey(NamedTuple):
    member_id: int
    day: str
