"""Command-line interface for pcmkit."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from pcmkit import source, tone, writer
from pcmkit.exceptions import PCMKitError
from pcmkit.sink import PlaybackSink
from pcmkit.workout import WorkoutConfig, play_clip, prompt_rounds, run_workout

logger = logging.getLogger(__name__)


def _add_device_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--device",
        default=None,
        help="Output device index or name (default: system default)",
    )
    parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Fail instead of waiting when another playback holds the output line",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for pcmkit."""
    parser = argparse.ArgumentParser(description="Play, generate and inspect PCM audio")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level to use",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    workout = subparsers.add_parser(
        "workout", help="Call out random punching combinations for timed rounds"
    )
    workout.add_argument(
        "--rounds", type=int, default=None, help="Number of rounds (prompted if omitted)"
    )
    workout.add_argument(
        "--clips-dir", default=WorkoutConfig.clips_dir, help="Directory holding <id>.<ext> clips"
    )
    workout.add_argument(
        "--extension", default=WorkoutConfig.extension, help="Extension of the clip files"
    )
    workout.add_argument(
        "--combos",
        type=int,
        default=WorkoutConfig.combos,
        help="Number of combination clips, numbered from 1",
    )
    workout.add_argument(
        "--round-length",
        type=float,
        default=WorkoutConfig.round_length_s,
        help="Round length in seconds",
    )
    workout.add_argument(
        "--rest",
        type=float,
        default=WorkoutConfig.rest_s,
        help="Rest between rounds in seconds",
    )
    _add_device_args(workout)
    workout.set_defaults(handler=_run_workout)

    play = subparsers.add_parser("play", help="Play a .wav or .au file")
    play.add_argument("file", help="Audio file to play")
    _add_device_args(play)
    play.set_defaults(handler=_run_play)

    scale = subparsers.add_parser("scale", help="Play a major scale")
    scale.add_argument("--root", type=float, default=440.0, help="Root frequency in Hz")
    scale.add_argument(
        "--save-dir",
        type=Path,
        default=None,
        help="Write one .wav per note to this directory instead of playing",
    )
    _add_device_args(scale)
    scale.set_defaults(handler=_run_scale)

    note = subparsers.add_parser("tone", help="Play or save a sine tone")
    note.add_argument("hz", type=float, help="Frequency in Hz")
    note.add_argument("--duration", type=float, default=1.0, help="Duration in seconds")
    note.add_argument("--amplitude", type=float, default=0.5, help="Amplitude in [0, 1]")
    note.add_argument(
        "--output", default=None, help="Save to this .wav or .au file instead of playing"
    )
    _add_device_args(note)
    note.set_defaults(handler=_run_tone)

    info = subparsers.add_parser("info", help="Show the PCM format of a file")
    info.add_argument("file", help="Audio file to inspect")
    info.set_defaults(handler=_run_info)

    return parser.parse_args(argv)


def _build_sink(args: argparse.Namespace) -> PlaybackSink:
    device: int | str | None = args.device
    if isinstance(device, str) and device.isdigit():
        device = int(device)
    return PlaybackSink(device=device, wait_for_device=not args.no_wait)


def _run_workout(args: argparse.Namespace) -> int:
    config = WorkoutConfig(
        round_length_s=args.round_length,
        combos=args.combos,
        rest_s=args.rest,
        clips_dir=args.clips_dir,
        extension=args.extension,
    )
    if args.rounds is not None:
        rounds = abs(args.rounds)
    else:
        try:
            rounds = prompt_rounds()
        except EOFError:
            _print_event("")
            return 1
    _print_event("Very good.")

    sink = _build_sink(args)
    run_workout(
        rounds,
        config,
        play=lambda path: play_clip(path, sink),
        announce=_print_event,
    )
    return 0


def _run_play(args: argparse.Namespace) -> int:
    samples, fmt = source.read_samples(args.file)
    _build_sink(args).play_blocking(samples, sample_rate=fmt.sample_rate)
    return 0


def _run_scale(args: argparse.Namespace) -> int:
    notes = tone.major_scale(args.root)
    if args.save_dir is not None:
        for index, samples in enumerate(notes):
            writer.save(samples, args.save_dir / f"scale-{index}.wav")
        _print_event(f"Saved {len(notes)} notes to {args.save_dir}")
        return 0

    sink = _build_sink(args)
    for hz, samples in zip(tone.scale_frequencies(args.root), notes, strict=True):
        logger.info("Playing %.2f Hz", hz)
        sink.play_blocking(samples)
    return 0


def _run_tone(args: argparse.Namespace) -> int:
    samples = tone.note(args.hz, args.duration, args.amplitude)
    if args.output is not None:
        writer.save(samples, args.output)
        _print_event(f"Saved {args.output}")
    else:
        _build_sink(args).play_blocking(samples)
    return 0


def _run_info(args: argparse.Namespace) -> int:
    data, fmt = source.load(args.file)
    _print_event(fmt.to_json())
    _print_event(f"Duration: {fmt.duration_s(len(data)):.2f} s")
    return 0


def _print_event(message: str) -> None:
    print(message, flush=True)  # noqa: T201


def main(argv: Sequence[str] | None = None) -> int:
    """Run the pcmkit CLI."""
    args = parse_args(list(argv) if argv is not None else sys.argv[1:])
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        return int(args.handler(args))
    except KeyboardInterrupt:
        logger.debug("Interrupted, shutting down...")
        return 130
    except (PCMKitError, OSError) as exc:
        logger.exception("Command %s failed", args.command)
        _print_event(f"Error: {exc}")
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
