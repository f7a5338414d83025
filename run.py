#!/usr/bin/env python3
"""
Nullistant voice control
Entry point for running the assistant against a described screen.

Type lines on stdin in place of speech: say the wake phrase ("hey nullistant"),
then the command ("go back", "click emergency", "scroll down").

Usage:
    python run.py --surface assets/demo_surface.json
    python run.py --no-wake --mode hybrid   # Skip the wake phrase
    python run.py --silent                  # Log speech instead of playing it
    python run.py --list-commands           # Show the command table
    python run.py --list-devices            # List audio output devices
"""
import argparse
import sys

from nullistant.core.config import Config
from nullistant.core.logger import get_logger, init_logger


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Nullistant - voice control for on-screen interfaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py --surface assets/demo_surface.json
  python run.py --no-wake               # Every line is a command
  python run.py --mode commands         # Command table only
  python run.py --silent --quiet        # No audio, less logging
        """
    )

    parser.add_argument(
        "--surface",
        type=str,
        default="assets/demo_surface.json",
        help="JSON file describing the on-screen elements (re-read on every scan)"
    )

    parser.add_argument(
        "--mode",
        type=str,
        default=Config.PROCESSING_MODE,
        choices=["intelligent", "commands", "hybrid"],
        help=f"Processing mode (default: {Config.PROCESSING_MODE})"
    )

    parser.add_argument(
        "--no-wake",
        action="store_true",
        help="Skip wake phrase detection (every line is a command)"
    )

    parser.add_argument(
        "--silent",
        action="store_true",
        help="Log spoken feedback instead of synthesizing it"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=Config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {Config.LOG_LEVEL})"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Hide recognizer, scheduler and speech debug chatter"
    )

    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List available audio devices and exit"
    )

    parser.add_argument(
        "--list-commands",
        action="store_true",
        help="List the voice command table and exit"
    )

    return parser.parse_args()


def list_commands() -> None:
    from nullistant.commands.table import CommandTable

    table = CommandTable()
    print("\n=== Voice Commands ===")
    for command in table.commands():
        flag = " (asks for confirmation)" if command.requires_confirmation else ""
        print(f"  [{command.category}] {command.description}{flag}")
        print(f"      {', '.join(command.patterns)}")
    print()


def list_devices() -> None:
    import sounddevice as sd

    print("\n=== Available Audio Devices ===")
    print(sd.query_devices())
    print()


def main():
    """Main entry point"""
    args = parse_args()

    init_logger(args.log_level, quiet_mode=args.quiet or Config.QUIET_MODE)
    logger = get_logger()

    if args.list_commands:
        list_commands()
        return 0

    if args.list_devices:
        try:
            list_devices()
        except OSError as e:
            logger.error(f"Audio devices unavailable: {e}")
            return 1
        return 0

    from nullistant.context.shared_context import SharedContext
    from nullistant.core.assistant import build_assistant
    from nullistant.surface.providers import JsonSurfaceProvider

    provider = JsonSurfaceProvider(args.surface)
    if not provider.path.exists():
        logger.error(f"Surface file not found: {args.surface}")
        return 1

    context = SharedContext()
    context.apply_settings(processing_mode=args.mode)

    # Print startup banner
    print("\n" + "=" * 60)
    print("  Nullistant Voice Control")
    print("=" * 60)
    print(f"  Surface: {args.surface}")
    print(f"  Mode: {args.mode}")
    print(f"  Wake Phrase: {'off' if args.no_wake else ', '.join(context.settings.wake_phrases)}")
    print(f"  Speech Output: {'log only' if args.silent else 'piper'}")
    print(f"  Log Level: {args.log_level}")
    print("=" * 60 + "\n")
    print("Type what you would say and press Enter. Ctrl+C to quit.\n")

    assistant = build_assistant(
        provider,
        context=context,
        require_wake=not args.no_wake,
        silent=args.silent,
    )

    try:
        assistant.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
