from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import random
import string

LOBBY = 'lobby'
PROMPT = 'prompt'
DRAWING = 'drawing'
GUESSING = 'guessing'
REVEAL = 'reveal'

TEXT = 'text'
DRAWING_KIND = 'drawing'

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_code(length=6):
    """Generate a short, human-typable room code (uniqueness is checked by the store)."""
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))


def placeholder_name(player_id: str) -> str:
    return 'Guest_' + str(player_id)[:4]


@dataclass
class Player:
    id: str
    display_name: str
    is_ready: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'displayName': self.display_name,
            'isReady': self.is_ready,
        }


@dataclass(frozen=True)
class ChainEntry:
    round: int
    kind: str  # text, drawing
    content: Any
    creator_id: str

    def to_dict(self):
        return {
            'round': self.round,
            'kind': self.kind,
            'content': self.content,
            'creatorId': self.creator_id,
        }


@dataclass
class Book:
    starter_id: str
    starter_name: str
    chain: List[ChainEntry] = field(default_factory=list)

    def has_entry_for(self, round_idx: int) -> bool:
        return len(self.chain) >= round_idx + 1

    def to_dict(self):
        return {
            'starterId': self.starter_id,
            'starterName': self.starter_name,
            'chain': [entry.to_dict() for entry in self.chain],
        }


@dataclass
class Room:
    id: str
    host_id: str
    state: str = LOBBY  # lobby, prompt, drawing, guessing, reveal
    current_round: int = 0
    players: List[Player] = field(default_factory=list)
    books: List[Book] = field(default_factory=list)

    def get_player(self, player_id) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def get_book(self, starter_id) -> Optional[Book]:
        return next((b for b in self.books if b.starter_id == starter_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'hostId': self.host_id,
            'state': self.state,
            'currentRound': self.current_round,
            'players': [p.to_dict() for p in self.players],
            'books': [b.to_dict() for b in self.books],
        }
