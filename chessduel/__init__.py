"""Chess client core: game sessions, AI opponents and code-based remote play.

Modules:
- rules: python-chess adapter and position codec (FEN)
- evaluator: Material evaluation of positions
- search: Minimax with alpha-beta pruning
- strategy: Random / Balanced / Strong move selection
- sync: Peer play by exchanging position codes
- game: Session state machine driving all of the above
"""

from .game import Game
from .models import Color, Mode, Move, Phase, Theme, Tier
from .search import SearchEngine
from .strategy import MoveSelector
from .evaluator import Evaluator
from .sync import SyncOutcome

__all__ = [
    "Game",
    "Color",
    "Mode",
    "Move",
    "Phase",
    "Theme",
    "Tier",
    "SearchEngine",
    "MoveSelector",
    "Evaluator",
    "SyncOutcome",
]
