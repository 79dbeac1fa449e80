class RoomError(Exception):
    """Base class for room lifecycle failures."""


class RoomNotFound(RoomError):
    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} does not exist")
        self.room_id = room_id


class RoomCodeExhausted(RoomError):
    """No free room code was found within the retry bound."""


class ProtocolError(Exception):
    """An inbound message could not be decoded into a command."""
