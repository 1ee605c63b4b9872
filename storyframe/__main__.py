"""
Storyframe Main Entry Point

    python -m storyframe generate --title ... --description ... [--character1 img.png]
    python -m storyframe play output/my-story --scene 1 --clip 2
    python -m storyframe serve --port 8000
"""

import argparse
import asyncio
import sys
import threading
from datetime import datetime
from pathlib import Path

from storyframe.core.config import load_config, set_config
from storyframe.core.constants import AspectRatio, StyleTheme
from storyframe.core.exceptions import AudioError, InvalidRequestError, StoryframeError
from storyframe.core.logging_config import LogLevel, get_logger, setup_logging
from storyframe.core.startup import validate_environment


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storyframe",
        description="Storyframe - storyboard generation with narration, images and speech"
    )
    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose log format")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-dir", type=str, help="Write a session log into this directory (overrides paths.logs_dir)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate a storyboard and export it")
    generate.add_argument("--title", "-t", required=True, help="Story title")
    generate.add_argument("--description", "-d", required=True, help="Short story description")
    generate.add_argument(
        "--style", default=StyleTheme.REAL.value,
        choices=[s.value for s in StyleTheme], help="Visual style"
    )
    generate.add_argument(
        "--aspect-ratio", default=AspectRatio.PORTRAIT.value,
        choices=[a.value for a in AspectRatio], help="Frame aspect ratio"
    )
    generate.add_argument("--character1", type=Path, help="Main character reference image")
    generate.add_argument("--character2", type=Path, help="Secondary character reference image")
    generate.add_argument("--output", "-o", type=Path, help="Export directory")

    play = subparsers.add_parser("play", help="Play a clip's narration from an exported storyboard")
    play.add_argument("directory", type=Path, help="Directory written by 'generate'")
    play.add_argument("--scene", type=int, required=True)
    play.add_argument("--clip", type=int, required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--reload", action="store_true")
    serve.add_argument("--skip-validation", action="store_true", help="Skip API key validation")

    return parser


def main(argv=None) -> int:
    """Main entry point for the Storyframe CLI."""
    args = build_parser().parse_args(argv)

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path)
    except StoryframeError as e:
        print(f"Could not load config: {e}", file=sys.stderr)
        return 2
    set_config(config)

    # Flags win; the config file supplies the defaults
    verbose = args.verbose or config.verbose_logging
    if args.debug:
        log_level = LogLevel.DEBUG
    elif verbose:
        log_level = LogLevel.INFO
    else:
        log_level = LogLevel.WARNING
    log_dir = Path(args.log_dir) if args.log_dir else config.logs_dir
    session_log = setup_logging(level=log_level, log_dir=log_dir, verbose=verbose)

    logger = get_logger("main")
    if session_log:
        logger.info(f"Session log: {session_log}")

    if args.command == "generate":
        return run_generate(args, config)
    if args.command == "play":
        return run_play(args, config)
    if args.command == "serve":
        return run_serve(args)

    logger.error(f"Unknown command: {args.command}")
    return 2


def _read_image(path):
    if path is None:
        return None
    return Path(path).read_bytes()


def _check_environment() -> bool:
    result = validate_environment()
    for warning in result.warnings:
        get_logger("main").warning(warning)
    if not result.valid:
        print("\nEnvironment validation failed. Missing required configuration:", file=sys.stderr)
        for error in result.errors:
            print(f"  x {error}", file=sys.stderr)
    return result.valid


def run_generate(args, config) -> int:
    """Generate a storyboard and export it to disk."""
    from storyframe.storyboard.export import export_storyboard
    from storyframe.storyboard.forms import build_request
    from storyframe.storyboard.pipeline import generate_storyboard

    logger = get_logger("main")

    try:
        request = build_request(
            title=args.title,
            description=args.description,
            style=args.style,
            aspect_ratio=args.aspect_ratio,
            character1=_read_image(args.character1),
            character2=_read_image(args.character2),
            max_image_bytes=config.uploads.max_image_bytes,
        )
    except (InvalidRequestError, OSError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    if not _check_environment():
        return 1

    def show_progress(message: str) -> None:
        print(f"  {message}")

    try:
        storyboard = asyncio.run(generate_storyboard(request, on_progress=show_progress, config=config))
    except StoryframeError as e:
        logger.error(f"Generation failed: {e}")
        print(f"\nGeneration failed: {e.message}", file=sys.stderr)
        return 1

    output = args.output or config.output_dir / datetime.now().strftime("%Y%m%d_%H%M%S")
    export_storyboard(storyboard, output, sample_rate=config.audio.sample_rate)
    print(f"\nStoryboard saved to {output}")
    return 0


def run_play(args, config) -> int:
    """Play one clip's narration and wait for it to finish."""
    from storyframe.audio.playback import AudioPlayer
    from storyframe.storyboard.export import load_storyboard

    try:
        storyboard = load_storyboard(args.directory)
    except (OSError, ValueError) as e:
        print(f"Could not load storyboard from {args.directory}: {e}", file=sys.stderr)
        return 2

    clip = storyboard.get_clip(args.scene, args.clip)
    if clip is None:
        print(f"No clip {args.clip} in scene {args.scene}", file=sys.stderr)
        return 2

    print(f"Scene {args.scene}, clip {args.clip}: {clip.narration}")

    player = AudioPlayer(sample_rate=config.audio.sample_rate)
    done = threading.Event()
    try:
        player.play(clip.audio, on_ended=done.set)
        while not done.wait(timeout=0.2):
            pass
    except KeyboardInterrupt:
        player.stop()
    except AudioError as e:
        print(f"Playback failed: {e.message}", file=sys.stderr)
        return 1
    finally:
        player.close()
    return 0


def run_serve(args) -> int:
    """Run the FastAPI backend (blocking)."""
    if not args.skip_validation and not _check_environment():
        print("\nRun with --skip-validation to bypass (not recommended)", file=sys.stderr)
        return 1

    from storyframe.api import start_server

    get_logger("main").info("Starting API server")
    start_server(host=args.host, port=args.port, reload=args.reload or None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
