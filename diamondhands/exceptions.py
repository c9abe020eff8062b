"""
Exceptions - All errors raised by the replication and room layers.

Game-logic refusals are not exceptions: the reducer reports them through
ActionResult. Everything here is either a ledger problem or a caller
handing in something malformed.
"""


class DiamondHandsError(Exception):
    """Base class for all Diamond Hands errors."""
    pass


# ============ Ledger / replication ============

class ReplicationError(DiamondHandsError):
    """A ledger call failed."""
    pass


class WriteError(ReplicationError):
    """Publishing a record failed."""
    pass


class ReadError(ReplicationError):
    """Fetching a record failed."""
    pass


class RecordDecodeError(ReplicationError):
    """A ledger record did not match the wire contract."""
    def __init__(self, message, raw=None):
        self.raw = raw
        super().__init__(message)


# ============ Rooms ============

class RoomError(DiamondHandsError):
    """Base class for room/role errors."""
    pass


class InvalidRoomCode(RoomError):
    """Room code does not match PREFIX-####."""
    def __init__(self, code):
        self.code = code
        super().__init__(f"Invalid room code: {code!r}")


class InvalidHostIdentity(RoomError):
    """Host identity is not a syntactically valid credential."""
    def __init__(self, identity):
        self.identity = identity
        super().__init__(f"Invalid host identity: {identity!r}")


class NotHost(RoomError):
    """Only the host may drive the game."""
    pass


class NotInRoom(RoomError):
    """The participant has no room."""
    pass
