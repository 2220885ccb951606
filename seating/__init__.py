from .errors import NotFound, SeatingError, StorageFailure, ValidationError
from .groups import AssignOutcome, AssignScope, AssignStatus
from .keys import DAYS, Day, SlotKey, TableSlotKey, AssignmentKey
from .ledger import SeatingLedger
from .snapshot import Snapshot, snapshot_from_payload, snapshot_to_payload
from .sync import SnapshotPoller
