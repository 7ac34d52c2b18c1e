"""
Chainring render engine - renders single frames and exports them
"""

import argparse
import base64
import sys
from io import BytesIO

from backend.cairo_shim import Surface, Canvas
from backend.exr_writer import write_exr
from config import Config
from modes.chainring import main as chainring_mode


def is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


class EtcObject:
    """Frame parameters handed to the mode's draw function.

    frames_remaining is filled in by the mode after drawing.
    """
    def __init__(self, frame=0, fps=60, bpm=60, teeth_count=32):
        self.frame = frame
        self.fps = fps
        self.bpm = bpm
        self.teeth_count = teeth_count
        self.frames_remaining = None
        self.mode = "chainring"


class RenderEngine:
    def __init__(self, size=None, fps=None, bpm=None):
        size = Config.CANVAS_SIZE if size is None else size
        if not is_int(size) or size <= 0:
            raise ValueError(f"size must be a positive integer, got {size!r}")
        self.resolution = (size, size)
        # Used whenever a render leaves fps or bpm out
        self.default_fps = Config.FPS if fps is None else fps
        self.default_bpm = Config.BPM if bpm is None else bpm
        self.etc = EtcObject(
            fps=self.default_fps,
            bpm=self.default_bpm,
            teeth_count=Config.TEETH_COUNT,
        )
        self.screen = None
        self.draw_func = chainring_mode.draw

    def set_frame(self, frame, fps=None, bpm=None):
        """Set the frame index, and optionally fps/bpm, for the next render"""
        fps = self.default_fps if fps is None else fps
        bpm = self.default_bpm if bpm is None else bpm
        if not is_int(frame) or frame < 0:
            raise ValueError(f"frame must be a non-negative integer, got {frame!r}")
        if not is_int(fps) or fps <= 0:
            raise ValueError(f"fps must be a positive integer, got {fps!r}")
        if not is_int(bpm) or bpm <= 0:
            raise ValueError(f"bpm must be a positive integer, got {bpm!r}")
        self.etc.frame = frame
        self.etc.fps = fps
        self.etc.bpm = bpm

    def render_frame(self):
        """Render the current frame onto a fresh surface and return it"""
        self.screen = Surface(self.resolution)
        self.draw_func(Canvas(self.screen), self.etc)
        return self.screen

    def preview_data_url(self):
        """Return the last rendered frame as a base64 PNG data URL"""
        if self.screen is None:
            self.render_frame()
        img = self.screen.get_image()
        buffer = BytesIO()
        img.save(buffer, format='PNG')
        img_base64 = base64.b64encode(buffer.getvalue()).decode('utf-8')
        return f"data:image/png;base64,{img_base64}"

    def preview_png(self):
        """Return the last rendered frame as PNG bytes"""
        if self.screen is None:
            self.render_frame()
        buffer = BytesIO()
        self.screen.get_image().save(buffer, format='PNG')
        return buffer.getvalue()

    def export_exr(self, path):
        """Write the last rendered frame to an EXR file. OSError propagates."""
        if self.screen is None:
            self.render_frame()
        return write_exr(path, self.screen.get_pixels())

    def get_status(self):
        """Get current engine status"""
        return {
            'current_mode': self.etc.mode,
            'frame': self.etc.frame,
            'fps': self.etc.fps,
            'bpm': self.etc.bpm,
            'frames_remaining': self.etc.frames_remaining,
            'resolution': self.resolution,
        }


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Render one chainring frame to an OpenEXR file")
    parser.add_argument('--frame', type=int, default=0, help="frame index (default: 0)")
    parser.add_argument('--fps', type=int, default=Config.FPS, help="frames per second")
    parser.add_argument('--bpm', type=int, default=Config.BPM, help="beats per minute")
    parser.add_argument('--size', type=int, default=Config.CANVAS_SIZE, help="canvas width and height in pixels")
    parser.add_argument('--output', default=Config.OUTPUT_PATH, help="EXR file to write")
    parser.add_argument('--preview', default=None, help="also write an 8-bit PNG preview here")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        engine = RenderEngine(size=args.size)
        engine.set_frame(args.frame, args.fps, args.bpm)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    engine.render_frame()
    engine.export_exr(args.output)
    print(f"Wrote {args.output} ({args.size}x{args.size})")

    if args.preview:
        engine.screen.get_image().save(args.preview, format='PNG')
        print(f"Wrote preview {args.preview}")

    print(f"Frames remaining in rotation: {engine.etc.frames_remaining}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
