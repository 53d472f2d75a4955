# --- dmaze.py ---
import argparse
import logging
import sys

from dmaze_lib import schema, styles
from dmaze_lib.config import DEFAULT_CONFIG_PATH, load_settings
from dmaze_lib.export import PRESETS, MazeExporter
from dmaze_lib.generation import MazeGenerator
from dmaze_lib.log_utils import setup_logging
from dmaze_lib.rendering.ascii_renderer import ASCIIRenderer
from dmaze_lib.session import MazeSession


def get_cli_args(argv=None):
    """Configures and parses command-line arguments."""
    p = argparse.ArgumentParser(
        description="Generates perfect mazes and exports them as PNG pages."
    )
    p.add_argument("-W", "--width", type=int, help="Maze width in cells (even values are rounded up).")
    p.add_argument("-H", "--height", type=int, help="Maze height in cells (even values are rounded up).")
    p.add_argument("-s", "--style", help="Named style to render with (see --list-styles).")
    p.add_argument("--seed", type=int, help="Random seed for reproducible mazes.")
    p.add_argument("-p", "--preset", choices=sorted(PRESETS), help="Export page preset.")
    p.add_argument("-o", "--output-dir", help="Directory for exported images.")
    p.add_argument("--json", metavar="FILE", help="Save the generated maze to a JSON file.")
    p.add_argument(
        "--load",
        metavar="FILE",
        help="Load a maze from a JSON file instead of generating one.",
    )
    p.add_argument("--no-export", action="store_true", help="Skip the PNG export.")
    p.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Settings file (default: {DEFAULT_CONFIG_PATH}).",
    )
    p.add_argument("--list-styles", action="store_true", help="List the built-in styles and exit.")
    # Logging arguments
    g_log = p.add_argument_group("Logging & Output")
    g_log.add_argument("-v", "--verbose", action="store_true", help="Enable INFO logging.")
    g_log.add_argument("--color-logs", action="store_true", help="Enable colored logging.")
    g_log.add_argument("--log-file", metavar="FILE", help="Redirect log output to a file.")
    g_log.add_argument(
        "--ascii-debug",
        action="store_true",
        help="Log an ASCII map of the resolved maze for debugging.",
    )
    g_log.add_argument(
        "-d",
        "--debug",
        nargs="?",
        const="all",
        dest="debug_topics",
        metavar="TOPICS",
        help="Enable DEBUG logging (all,generate,layout,geometry,render,export,config).",
    )
    return p.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point for the dmaze CLI."""
    args = get_cli_args(argv)
    log_level = logging.INFO if args.verbose else logging.WARNING
    if args.debug_topics:
        log_level = logging.DEBUG

    setup_logging(log_level, args.color_logs, args.debug_topics, args.log_file)
    log = logging.getLogger("dmaze.main")
    log.info("--- DMAZE CLI Initialized ---")
    log.debug("Arguments received: %s", vars(args))

    if args.list_styles:
        for name in styles.list_styles():
            style = styles.get_style(name)
            flags = [
                label
                for label, on in (
                    ("passages", style.has_passages),
                    ("walls", style.has_walls),
                    ("markers", style.has_markers),
                )
                if on
            ]
            print(f"{name:<10} {', '.join(flags) or '(nothing)'}")
        return 0

    try:
        settings = load_settings(args.config)
        style = styles.get_style(args.style or settings.style)
    except (ValueError, KeyError) as e:
        log.critical("%s", e)
        return 1

    tile_size = (settings.tile_size, settings.tile_size)
    exporter = MazeExporter(
        export_dir=args.output_dir or settings.export_dir,
        margin=settings.margin,
        tile_size=tile_size,
    )
    seed = args.seed if args.seed is not None else settings.seed
    session = MazeSession(MazeGenerator(seed), exporter, style, tile_size)

    if args.load:
        log.info("Loading maze from '%s'...", args.load)
        try:
            grid, saved_style = schema.load_json(args.load)
        except (OSError, ValueError, KeyError, TypeError) as e:
            log.critical("Failed to load or parse JSON file: %s", e)
            return 1
        session.load(grid, None if args.style else saved_style)
    else:
        try:
            width = args.width if args.width is not None else settings.width
            height = args.height if args.height is not None else settings.height
            session.generate(width, height)
        except ValueError as e:
            log.critical("%s", e)
            return 1

    if args.json:
        try:
            schema.save_json(session.grid, session.style, args.json)
            log.info("Saved maze to '%s'", args.json)
        except IOError as e:
            log.error("Could not write JSON file: %s", e)

    result = session.resolve()
    if not result.ok:
        log.error("%s", result.error)
        return 1

    if args.ascii_debug:
        renderer = ASCIIRenderer()
        renderer.render(result.placements)
        log.info("--- ASCII Debug Output ---")
        log.info("\n%s", renderer.get_output(), extra={"raw": True})
        log.info("--- End ASCII Debug Output ---")

    frame = session.fit_camera(settings.viewport, settings.camera_padding)
    log.info("Camera framing: zoom %.3f at (%.1f, %.1f)", frame.zoom, *frame.center)

    if args.no_export:
        log.info("--- Processing complete (export skipped). ---")
        return 0

    event = session.export(args.preset or settings.preset)
    if not event.ok:
        print(f"Export failed: {event.reason}", file=sys.stderr)
        return 1
    print(event.path)
    log.info("--- Processing complete. ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())
