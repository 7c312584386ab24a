"""
Labels for clarity.
"""

from typing import List, Literal, Optional, Tuple

Color = Literal["red", "green", "orange", "blue", "yellow", "purple", "cyan"]
Code = List[Color]  # 4 distinct colors
Slots = List[Optional[Color]]  # in-progress guess, None = empty slot

FeedbackKind = Literal["correct", "misplaced", "wrong", "empty"]
FeedbackMode = Literal["positional", "aggregate"]
Difficulty = Literal["easy", "normal", "hard"]
Variant = Literal["solo", "dual"]
Direction = Literal["forward", "backward"]
RoundStatus = Literal["setup", "in_progress", "won", "lost", "timed_out"]

# Palette order matters: it drives slot color cycling
PALETTE: Tuple[Color, ...] = ("red", "green", "orange", "blue", "yellow", "purple", "cyan")
DIFFICULTIES: Tuple[Difficulty, ...] = ("easy", "normal", "hard")

CODE_LENGTH = 4
