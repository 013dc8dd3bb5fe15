"""Timed shadowboxing rounds that call out random punching combinations."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass

from pcmkit.exceptions import InvalidParameter
from pcmkit.sink import PlaybackSink
from pcmkit.source import read_samples

logger = logging.getLogger(__name__)

ROUNDS_PROMPT = "How many rounds will you be doing today? "


@dataclass
class WorkoutConfig:
    """Timing and clip selection settings for a workout."""

    round_length_s: float = 180.0
    """Length of a round in seconds (120 for amateur, 180 for pro)."""
    combos: int = 18
    """Number of combination clips to choose from, numbered from 1."""
    rest_s: float = 60.0
    """Rest between rounds in seconds."""
    clips_dir: str = "./waves"
    """Directory holding ``<id>.<extension>`` clips."""
    extension: str = "wav"
    """Extension of the clip files."""

    def __post_init__(self) -> None:
        """Validate the workout settings."""
        if self.round_length_s <= 0:
            raise InvalidParameter("round_length_s must be positive")
        if self.combos < 1:
            raise InvalidParameter("combos must be at least 1")
        if self.rest_s < 0:
            raise InvalidParameter("rest_s must not be negative")


def prompt_rounds(read_line: Callable[[str], str] = input) -> int:
    """
    Ask for the number of rounds until an integer is entered.

    Negative answers count as their absolute value. ``EOFError`` from
    ``read_line`` propagates.
    """
    while True:
        answer = read_line(ROUNDS_PROMPT).strip()
        try:
            return abs(int(answer))
        except ValueError:
            logger.debug("Ignoring non-numeric round count %r", answer)


def pick_combo(rng: random.Random, combos: int) -> int:
    """Return a combination id in ``[1, combos]``."""
    return rng.randint(1, combos)


def clip_path(config: WorkoutConfig, combo_id: int) -> str:
    """Return the path of the clip for ``combo_id``."""
    return f"{config.clips_dir.rstrip('/')}/{combo_id}.{config.extension}"


def play_clip(path: str, sink: PlaybackSink) -> None:
    """Load a clip and play it, returning when it has finished."""
    samples, fmt = read_samples(path)
    sink.play_blocking(samples, sample_rate=fmt.sample_rate)


def run_workout(
    rounds: int,
    config: WorkoutConfig,
    *,
    play: Callable[[str], None],
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    rng: random.Random | None = None,
    announce: Callable[[str], None] = print,
) -> int:
    """
    Run ``rounds`` rounds of random combinations.

    Within a round, clips are played back to back until ``round_length_s`` has
    elapsed. ``play`` must block for the duration of the clip; the round timer
    relies on it. Rounds are separated by ``rest_s`` seconds of rest, with no
    rest after the final round.

    Errors raised by ``play`` abort the workout.

    Returns:
        The number of clips played.
    """
    rng = rng or random.Random()
    played = 0
    for index in range(rounds):
        announce(f"Round {index + 1} - Begin!")
        started = clock()
        while clock() - started < config.round_length_s:
            path = clip_path(config, pick_combo(rng, config.combos))
            logger.debug("Round %d: playing %s", index + 1, path)
            play(path)
            played += 1
        logger.info("Round %d finished", index + 1)

        if index == rounds - 1:
            break
        announce(f"Dingding!!! Take {config.rest_s:g} seconds of rest.")
        sleep(config.rest_s)

    announce("Good workout!")
    return played
