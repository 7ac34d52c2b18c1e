"""
cairo drawing layer for the chainring renderer
Records vector paths and paints, and replays them onto a float cairo surface
"""

from contextlib import contextmanager
import math

import cairo
import numpy as np
from PIL import Image

FILL = 'fill'
STROKE = 'stroke'

JOIN_MITER = 'miter'
JOIN_BEVEL = 'bevel'

# cairo defaults to 10, the miter limit below matches other 2-D libraries
MITER_LIMIT = 4.0


class Surface:
    """Linear-light RGBA surface with 32-bit float channels.

    Pixels are stored premultiplied, four floats per pixel in R, G, B, A
    order (cairo FORMAT_RGBA128F).
    """

    def __init__(self, size):
        self.width, self.height = size
        self.surface = cairo.ImageSurface(cairo.Format.RGBA128F, self.width, self.height)

    def get_size(self):
        """Return surface dimensions"""
        return (self.width, self.height)

    def get_width(self):
        """Return surface width"""
        return self.width

    def get_pixels(self):
        """Return a (height, width, 4) float32 copy of the premultiplied pixels"""
        self.surface.flush()
        stride = self.surface.get_stride()
        data = np.frombuffer(self.surface.get_data(), dtype=np.float32)
        rows = data.reshape(self.height, stride // 4)
        return rows[:, :self.width * 4].reshape(self.height, self.width, 4).copy()

    def sample(self, x, y):
        """Read back one pixel as an (r, g, b, a) tuple of floats"""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} surface")
        self.surface.flush()
        stride = self.surface.get_stride()
        data = np.frombuffer(self.surface.get_data(), dtype=np.float32)
        index = y * (stride // 4) + (x << 2)
        return tuple(float(v) for v in data[index:index + 4])

    def get_image(self):
        """Get an 8-bit sRGB PIL Image for previews.

        Un-premultiplies, clips to [0, 1] and applies the sRGB transfer
        function, so the preview looks like the HDR file in a viewer.
        """
        pixels = self.get_pixels()
        alpha = pixels[..., 3:4]
        rgb = np.divide(pixels[..., :3], alpha, out=np.zeros_like(pixels[..., :3]), where=alpha > 0)
        rgb = np.clip(rgb, 0.0, 1.0)
        encoded = np.where(rgb <= 0.0031308, rgb * 12.92, 1.055 * np.power(rgb, 1.0 / 2.4) - 0.055)
        out = np.concatenate([encoded, np.clip(alpha, 0.0, 1.0)], axis=-1)
        return Image.fromarray(np.round(out * 255.0).astype(np.uint8), 'RGBA')


class Path:
    """Ordered list of path segments.

    Segments are ('M', [x, y]), ('L', [x, y]), ('C', [x1, y1, x2, y2, x, y])
    and ('Z', []).
    """

    def __init__(self):
        self.segments = []

    def move_to(self, p):
        self.segments.append(('M', [p[0], p[1]]))

    def line_to(self, p):
        self.segments.append(('L', [p[0], p[1]]))

    def cubic_to(self, c1, c2, p):
        self.segments.append(('C', [c1[0], c1[1], c2[0], c2[1], p[0], p[1]]))

    def close(self):
        self.segments.append(('Z', []))

    def commands(self):
        """Return the command letters only, e.g. 'MCLLCL...Z'"""
        return ''.join(cmd for cmd, _ in self.segments)

    def contours(self):
        """Split into closed/open contours, each a list of segments"""
        contours = []
        for cmd, pts in self.segments:
            if cmd == 'M' or not contours:
                contours.append([])
            contours[-1].append((cmd, pts))
        return contours

    def __len__(self):
        return len(self.segments)

    def __iter__(self):
        return iter(self.segments)


class RadialGradient:
    """Clamped radial color ramp.

    colors are linear (r, g, b, a) tuples. positions default to evenly
    spaced stops. matrix, if given, maps gradient space to user space.
    """

    def __init__(self, center, radius, colors, positions=None, matrix=None):
        if positions is not None and len(positions) != len(colors):
            raise ValueError(f"{len(colors)} colors but {len(positions)} stop positions")
        self.center = center
        self.radius = radius
        self.colors = list(colors)
        self.positions = positions
        self.matrix = matrix

    def stops(self):
        """Return (offset, color) pairs"""
        if self.positions is not None:
            return list(zip(self.positions, self.colors))
        if len(self.colors) == 1:
            return [(0.0, self.colors[0])]
        last = len(self.colors) - 1
        return [(i / last, color) for i, color in enumerate(self.colors)]

    def to_pattern(self):
        """Build the cairo pattern"""
        if self.radius <= 0:
            # degenerate ramp, clamped to the last stop
            return cairo.SolidPattern(*self.stops()[-1][1])
        cx, cy = self.center
        pattern = cairo.RadialGradient(cx, cy, 0.0, cx, cy, self.radius)
        for offset, (r, g, b, a) in self.stops():
            pattern.add_color_stop_rgba(offset, r, g, b, a)
        pattern.set_extend(cairo.EXTEND_PAD)
        if self.matrix is not None:
            # cairo pattern matrices map user space to pattern space
            inverse = cairo.Matrix(*self.matrix)
            inverse.invert()
            pattern.set_matrix(inverse)
        return pattern


class Paint:
    """Style for one draw call. Defaults: aliased opaque black fill."""

    def __init__(self):
        self.style = FILL
        self.stroke_width = 0.0
        self.stroke_join = JOIN_MITER
        self.anti_alias = False
        self.color = (0.0, 0.0, 0.0, 1.0)
        self.shader = None

    def set_color4f(self, color):
        """Set a solid linear color"""
        self.color = tuple(color)


class Canvas:
    """Drawing context over a Surface with a save/restore transform stack"""

    def __init__(self, surface):
        self.surface = surface
        self.context = cairo.Context(surface.surface)
        self.context.set_miter_limit(MITER_LIMIT)

    def get_size(self):
        return self.surface.get_size()

    def get_width(self):
        return self.surface.get_width()

    @contextmanager
    def saved(self):
        """Scope a transform change; the restore runs on every exit path"""
        self.context.save()
        try:
            yield self
        finally:
            self.context.restore()

    def translate(self, p):
        self.context.translate(p[0], p[1])

    def rotate(self, degrees):
        """Rotate by degrees, clockwise on screen"""
        self.context.rotate(math.radians(degrees))

    def clear(self, color=(0.0, 0.0, 0.0, 0.0)):
        """Replace every pixel with color"""
        ctx = self.context
        ctx.save()
        ctx.set_operator(cairo.OPERATOR_SOURCE)
        ctx.set_source_rgba(*color)
        ctx.paint()
        ctx.restore()

    def draw_path(self, path, paint):
        """Fill or stroke path with paint"""
        ctx = self.context
        ctx.new_path()
        for cmd, pts in path:
            if cmd == 'M':
                ctx.move_to(*pts)
            elif cmd == 'L':
                ctx.line_to(*pts)
            elif cmd == 'C':
                ctx.curve_to(*pts)
            elif cmd == 'Z':
                ctx.close_path()
            else:
                raise ValueError(f"Unknown path command {cmd!r}")
        self._paint(paint)

    def draw_circle(self, center, radius, paint):
        """Fill or stroke a circle with paint"""
        ctx = self.context
        ctx.new_path()
        ctx.arc(center[0], center[1], radius, 0.0, 2 * math.pi)
        ctx.close_path()
        self._paint(paint)

    def _paint(self, paint):
        ctx = self.context
        ctx.save()
        if paint.shader is not None:
            ctx.set_source(paint.shader.to_pattern())
        else:
            ctx.set_source_rgba(*paint.color)
        ctx.set_antialias(cairo.ANTIALIAS_DEFAULT if paint.anti_alias else cairo.ANTIALIAS_NONE)
        ctx.set_fill_rule(cairo.FILL_RULE_WINDING)
        if paint.style == STROKE:
            ctx.set_line_width(paint.stroke_width)
            ctx.set_line_join(cairo.LINE_JOIN_BEVEL if paint.stroke_join == JOIN_BEVEL else cairo.LINE_JOIN_MITER)
            ctx.stroke()
        else:
            ctx.fill()
        ctx.restore()
