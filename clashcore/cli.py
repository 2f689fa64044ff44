"""
Clashcore CLI - Command-line interface for the engine.

Usage:
    clashcore validate [data_file]              Integrity-check authoring data
    clashcore demo [--seed N] [--turns N] [-o]  Run an unattended match
    clashcore replay <transcript> [--data]      Verify a transcript replays exactly
"""

import argparse
import logging
import sys

from .config import settings

logger = logging.getLogger(__name__)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Clashcore - Deterministic card battle combat core",
        prog="clashcore",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate authoring data")
    validate_parser.add_argument("data_file", nargs="?", help="Path to a JSON export (default: standard set)")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run an unattended match on the standard roster")
    demo_parser.add_argument("--seed", type=int, default=settings.default_seed, help="Match seed")
    demo_parser.add_argument("--policy-seed", type=int, default=0, help="Seed for the auto-pilot policy")
    demo_parser.add_argument("--turns", type=int, default=settings.max_auto_turns, help="Turn limit")
    demo_parser.add_argument("--output", "-o", help="Write the transcript to this file")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Verify a transcript")
    replay_parser.add_argument("transcript_file", help="Path to a transcript JSON file")
    replay_parser.add_argument("--data", help="Path to a JSON export (default: standard set)")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "demo":
        cmd_demo(args)
    elif args.command == "replay":
        cmd_replay(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load_data(path):
    from .games.standard import create_standard_data
    from .spec_schema import load_game_data_file

    if path is None:
        return create_standard_data()
    return load_game_data_file(path)


def cmd_validate(args):
    """Validate authoring data."""
    from .engine_core.errors import DataIntegrityError
    from .spec_schema import validate_game_data

    print(f"Validating: {args.data_file or 'standard data set'}")
    try:
        data = _load_data(args.data_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.data_file}")
        sys.exit(1)
    except DataIntegrityError as e:
        print("\nErrors:")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)

    result = validate_game_data(data)
    print(f"Version: {data.version}")
    print(f"Characters: {len(data.characters)}")
    print(f"Statuses: {len(data.statuses)}")
    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")
    print("\nOK")


def cmd_demo(args):
    """Run an unattended match."""
    from .engine_core.transcript import events_digest
    from .games.standard import DEMO_ROSTERS, create_standard_data
    from .session import AutoPilot, SessionManager

    data = create_standard_data()
    manager = SessionManager()
    session = manager.create_session(data, DEMO_ROSTERS, seed=args.seed)
    print(f"Session created: {session.session_id}")
    print(f"Seed: {args.seed}  {' / '.join(DEMO_ROSTERS['p1'])} vs {' / '.join(DEMO_ROSTERS['p2'])}")

    result = AutoPilot(session, policy_seed=args.policy_seed, max_turns=args.turns).run()
    transcript = session.transcript

    print(f"Stopped: {result.loop_state.value} after {len(result.actions)} actions on turn {result.turns}")
    print(f"Winner: {result.winner or 'none'}")
    print(f"Events: {len(transcript.events)}  digest {events_digest(transcript.events)}")
    for error in result.errors:
        print(f"  - {error}")

    if args.output:
        transcript.save(args.output)
        print(f"Transcript written to {args.output}")
    manager.end_session(session.session_id)

    if not result.success:
        sys.exit(1)


def cmd_replay(args):
    """Verify a transcript replays byte for byte."""
    from .engine_core.errors import DataIntegrityError, NonDeterminismDetected
    from .engine_core.transcript import Transcript, events_digest, replay_transcript

    try:
        transcript = Transcript.load(args.transcript_file)
        data = _load_data(args.data)
    except FileNotFoundError as e:
        print(f"Error: File not found: {e.filename}")
        sys.exit(1)
    except DataIntegrityError as e:
        print("Data errors:")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)

    print(f"Replaying {len(transcript.entries)} actions with seed {transcript.seed}")
    try:
        match = replay_transcript(data, transcript)
    except NonDeterminismDetected as e:
        print(f"DIVERGED at action {e.index}: {e}")
        sys.exit(2)

    print(f"OK: {len(match.events)} events, digest {events_digest(transcript.events)}")


if __name__ == "__main__":
    main()
