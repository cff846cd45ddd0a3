from __future__ import annotations

import argparse
from typing import Iterable

from coverage_editor.common.config import EditorConfig
from coverage_editor.editor import Editor
from coverage_editor.obstacles import ObstacleKind
from coverage_editor.utils import set_verbose
from coverage_editor.visualization.render import PygameRenderer

PRESETS = {
    "empty": {},
    "test_data": {"test_data": True},
    "l_shape": {
        "boundary": [(100, 100), (600, 100), (600, 250), (300, 250), (300, 500), (100, 500)],
        "obstacles": [[(150, 150), (220, 150), (220, 220), (150, 220)]],
    },
    "crowded": {
        "boundary": [(80, 80), (720, 80), (720, 520), (80, 520)],
        "obstacles": [
            [(150, 150), (250, 150), (250, 250), (150, 250)],
            [(400, 300), (500, 280), (520, 380), (420, 420)],
            [(600, 120), (680, 160), (620, 220)],
        ],
        "dynamic": [[(300, 400), (360, 400), (360, 460), (300, 460)]],
    },
}


def build_editor(preset: str, config: EditorConfig, width: int, height: int) -> Editor:
    editor = Editor(config, viewport=(width, height))
    entry = PRESETS[preset]
    if entry.get("test_data"):
        editor.load_test_data()
        return editor
    if "boundary" in entry:
        editor.start_boundary()
        for point in entry["boundary"]:
            editor.place_world_point(point)
        editor.finish_current()
    for points in entry.get("obstacles", []):
        editor.insert_obstacle(points, ObstacleKind.STATIC)
    for points in entry.get("dynamic", []):
        editor.insert_obstacle(points, ObstacleKind.DYNAMIC)
    return editor


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Interactive coverage path editor")
    parser.add_argument("--preset", choices=PRESETS.keys(), default="empty")
    parser.add_argument("--load", type=str, help="Session JSON file to open")
    parser.add_argument("--config", type=str, help="JSON file overriding editor tunables")
    parser.add_argument("--speed", type=int, help="Initial playback speed (1-10)")
    parser.add_argument("--width", type=int, default=1000)
    parser.add_argument("--height", type=int, default=700)
    parser.add_argument("--fps", type=int, default=60)
    parser.add_argument("--verbose", action="store_true", help="Print component logs")
    args = parser.parse_args(list(argv) if argv is not None else None)

    set_verbose(args.verbose)
    config = EditorConfig.load(args.config) if args.config else EditorConfig()
    editor = build_editor(args.preset, config, args.width, args.height)
    if args.load:
        editor.load_session(args.load)
    if args.speed is not None:
        editor.set_speed(args.speed)

    renderer = PygameRenderer(editor, width=args.width, height=args.height, fps=args.fps)
    renderer.run()


if __name__ == "__main__":
    main()
