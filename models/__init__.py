from .Base import Base
from .Assignment import Assignment
from .AssignmentDB import AssignmentDB
from .Attendance import Arrival, BlockedTable, Departure
from .AttendanceDB import ArrivalDB, BlockedTableDB, DepartureDB
from .Group import Group, GroupMembership, GroupUpdate
from .GroupDB import GroupDB, GroupMembershipDB
from .GroupMember import GroupMember, MemberArrival
from .GroupMemberDB import GroupMemberDB, MemberArrivalDB
from .Guest import Guest, GuestUpdate
from .GuestDB import GuestDB
from .Ledger import (
    AssignGuestRequest,
    CommitRequest,
    MoveGroupRequest,
    MoveGuestsRequest,
    MoveRequest,
    SeatAllocation,
    SplitByMemberRequest,
    SplitRequest,
    ToggleArrivalRequest,
    ToggleBlockRequest,
    ToggleDepartureRequest,
    ToggleGhostRequest,
    ToggleMemberArrivalRequest,
)
from .Sms import Sms
from .Table import Table, TableUpdate
from .TableDB import TableDB
