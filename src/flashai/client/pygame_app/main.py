from __future__ import annotations

import argparse
import os
from pathlib import Path

import pygame  # type: ignore[import-not-found]

from flashai.paths import get_paths
from flashai.services.content import ContentService
from flashai.services.telemetry import TelemetryService

from .app import App, AppContext
from .scenes.boot import BootScene
from .ui import load_fonts


def main() -> int:
    parser = argparse.ArgumentParser(prog="flashai")
    parser.add_argument("--width", type=int, default=1024)
    parser.add_argument("--height", type=int, default=768)
    parser.add_argument("--userdata", type=Path, default=None, help="Directory for the library and telemetry files")
    parser.add_argument(
        "--api-key",
        default=os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY"),
        help="Gemini API key for AI deck generation",
    )
    args = parser.parse_args()

    pygame.init()
    screen = pygame.display.set_mode((args.width, args.height))
    pygame.display.set_caption("FlashAI")

    clock = pygame.time.Clock()
    paths = get_paths(args.userdata)

    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    telemetry = TelemetryService(paths.telemetry_path)

    ctx = AppContext(
        screen=screen,
        clock=clock,
        paths=paths,
        fonts=load_fonts(),
        content=content,
        telemetry=telemetry,
        api_key=args.api_key,
    )

    app = App(ctx, BootScene(ctx))
    try:
        return app.run()
    finally:
        pygame.quit()


if __name__ == "__main__":
    raise SystemExit(main())
