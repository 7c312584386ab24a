"""
Pure game logic (no HTTP, no storage).

Secret generation plus the two ways a guess can be scored:
- positional: one verdict per slot (correct / misplaced / wrong)
- aggregate: only how many are correct and how many are misplaced,
  reported as correct pegs first, then misplaced, padded with wrong

Secrets and accepted guesses never repeat a color.
"""

from secrets import randbelow as _randbelow
from typing import Callable, List, Tuple

from .types import CODE_LENGTH, PALETTE, Code, FeedbackKind, FeedbackMode

# Marks a consumed slot during aggregate scoring; never a palette color
_USED = None


def generate_secret(randbelow: Callable[[int], int] = _randbelow) -> Code:
    """
    Draw CODE_LENGTH distinct colors from the palette in random order.
    `randbelow(n)` must return an int in [0, n).
    """
    remaining = list(range(len(PALETTE)))
    secret: Code = []
    while len(secret) < CODE_LENGTH:
        pick = randbelow(len(remaining))
        secret.append(PALETTE[remaining[pick]])
        del remaining[pick]
    return secret


def _check_lengths(secret: Code, guess: Code) -> None:
    if len(secret) == 0 or len(guess) != len(secret):
        raise ValueError("Secret and guess must be the same non-zero length.")


def score_positional(secret: Code, guess: Code) -> List[FeedbackKind]:
    """
    Example:
      secret = [red, blue, green, yellow]
      guess  = [purple, cyan, orange, red]
      -> [wrong, wrong, wrong, misplaced]
    """
    _check_lengths(secret, guess)

    feedback: List[FeedbackKind] = []
    for i, color in enumerate(guess):
        if color == secret[i]:
            feedback.append("correct")
        elif color in secret:
            feedback.append("misplaced")
        else:
            feedback.append("wrong")
    return feedback


def score_aggregate(secret: Code, guess: Code) -> Tuple[int, int]:
    """
    Classic peg count. Returns (correct_count, misplaced_count).

    Example:
      secret = [red, blue, green, yellow]
      guess  = [red, green, blue, yellow]
      -> (2, 2)
    """
    _check_lengths(secret, guess)

    secret_left = list(secret)
    guess_left = list(guess)

    # 1. Exact matches consume both sides
    correct_count = 0
    for i in range(len(guess_left)):
        if guess_left[i] == secret_left[i]:
            correct_count += 1
            secret_left[i] = _USED
            guess_left[i] = _USED

    # 2. Each leftover guess color consumes the first unconsumed secret slot of that color
    misplaced_count = 0
    for color in guess_left:
        if color is _USED:
            continue
        for j in range(len(secret_left)):
            if secret_left[j] is not _USED and secret_left[j] == color:
                misplaced_count += 1
                secret_left[j] = _USED
                break

    return (correct_count, misplaced_count)


def aggregate_feedback(secret: Code, guess: Code) -> List[FeedbackKind]:
    """Peg counts laid out as correct..., misplaced..., wrong... (order says nothing about slots)."""
    correct_count, misplaced_count = score_aggregate(secret, guess)
    feedback: List[FeedbackKind] = ["correct"] * correct_count + ["misplaced"] * misplaced_count
    while len(feedback) < len(guess):
        feedback.append("wrong")
    return feedback


def score_guess(secret: Code, guess: Code, mode: FeedbackMode) -> List[FeedbackKind]:
    if mode == "positional":
        return score_positional(secret, guess)
    if mode == "aggregate":
        return aggregate_feedback(secret, guess)
    raise ValueError(f"Unknown feedback mode: {mode!r}")


def count_feedback(feedback: List[FeedbackKind]) -> Tuple[int, int]:
    """(correct, misplaced) counted from either kind of feedback row."""
    return (feedback.count("correct"), feedback.count("misplaced"))


def is_solved(feedback: List[FeedbackKind]) -> bool:
    """
    Win = every peg is correct.
    Holds for both modes: positional checks each slot, aggregate has correct_count == length.
    """
    if len(feedback) == 0:
        return False
    return all(kind == "correct" for kind in feedback)


def is_valid_code(code: Code) -> bool:
    """4 palette colors, no repeats."""
    if len(code) != CODE_LENGTH:
        return False
    for color in code:
        if color not in PALETTE:
            return False
    return len(set(code)) == len(code)
