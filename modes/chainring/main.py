# Chainring Mode
# A rotating bicycle chainring with three overlapping triangular blades
#
# etc.frame: Frame index (rotation = frame * 12 * bpm / 60 / fps degrees)
# etc.fps:   Frames per second
# etc.bpm:   Beats per minute, one fifth of a revolution per beat
#
# All colors are drawn as linear-light values onto a float surface, so the
# gradients interpolate linearly in light, not in gamma-encoded sRGB.

import math
from enum import IntEnum

from backend.cairo_shim import Path, Paint, RadialGradient, STROKE, JOIN_BEVEL

PI = math.pi
TAU = math.tau
# One nominal "degree" here is 4 degrees of arc. The triangle angles
# (60 + rotation, 120 per vertex) are calibrated against this unit.
DEGREES_IN_RADIANS = TAU / 90.0
PEN_SIZE = 1.0

TEETH_COUNT = 32

GREEN = 0xff00ff00
BLUE = 0xff0000ff
RED = 0xffff0000
YELLOW = 0xffffff00
CYAN = 0xff00ffff
MAGENTA = 0xffff00ff
WHITE = 0xffffffff
OVERLAY = 0x77222222

STEEL_GRAY = 0xff555555
RUST_BROWN = 0xff7b492d
DARK_BROWN = 0xff592e1f
LIGHT_RUST = 0xff885543


class Vertex(IntEnum):
    """Triangle corner that gets the colored gradient call-out"""
    FIRST = 0
    SECOND = 1
    THIRD = 2


# Gradient radii as fractions of the triangle side: (straight, wankel)
VERTEX_RADII = {
    Vertex.FIRST: ((0.30, 0.60), (0.36, 0.404)),
    Vertex.SECOND: ((0.420, 0.50), (0.404, 0.50)),
    Vertex.THIRD: ((0.30, 0.60), (0.36, 0.404)),
}


def srgb_u8_to_linear(v):
    """Decode one gamma-encoded 8-bit sRGB channel to linear light"""
    x = v / 255.0
    if x < 0.04045:
        return x / 12.92
    return ((x + 0.055) / 1.055) ** 2.4


def color_to_color4f(argb):
    """Convert 0xAARRGGBB to a linear (r, g, b, a) tuple.

    The hex colors are display-referred sRGB; alpha is already linear.
    """
    return (
        srgb_u8_to_linear((argb >> 16) & 0xff),
        srgb_u8_to_linear((argb >> 8) & 0xff),
        srgb_u8_to_linear(argb & 0xff),
        ((argb >> 24) & 0xff) / 255.0,
    )


def point_in_circle(center, radius, radians):
    """Point on a circle; y grows downwards so angles sweep counter-clockwise"""
    return (
        center[0] + radius * math.cos(radians),
        center[1] - radius * math.sin(radians),
    )


def pen_width(canvas):
    return max(PEN_SIZE, canvas.get_width() / 360.0)


def gradient(paint, center, radii, colors):
    """Set a two-stop radial gradient, stretched by radii[1] / radii[0] on y"""
    # The triangle side comes out negative in the 4-degree unit, only the
    # magnitude of the radii matters
    rx, ry = abs(radii[0]), abs(radii[1])
    if rx == 0:
        # A zero-size ramp clamps to its outer color everywhere
        paint.shader = None
        paint.set_color4f(colors[-1])
        return
    matrix = (1.0, 0.0, 0.0, ry / rx, center[0], center[1])
    paint.shader = RadialGradient((0.0, 0.0), rx, colors, matrix=matrix)


def chain_ring_path(radius, teeth_count=TEETH_COUNT):
    """Build teeth, ridge star and bolts as one path around the origin"""
    c = (0.0, 0.0)
    outer_radius = float(radius)
    inner_radius = outer_radius * 0.73
    ridge_radius = outer_radius * 0.85
    teeth_length = (outer_radius - ridge_radius) * 0.8

    path = Path()

    # Outer teeth
    delta = TAU / teeth_count
    teeth_bottom_gap = 0.2 * delta
    alpha = PI / 2.0
    for i in range(teeth_count):
        a = alpha - delta / 2.0 + teeth_bottom_gap / 2.0
        v = point_in_circle(c, outer_radius - teeth_length, a)
        if i == 0:
            path.move_to(v)
        else:
            path.line_to(v)
        middle = a + (delta - teeth_bottom_gap) / 2.0
        a += delta - teeth_bottom_gap
        peak = point_in_circle(c, outer_radius * 1.035, middle)
        path.cubic_to(peak, peak, point_in_circle(c, outer_radius - teeth_length, a))
        a += teeth_bottom_gap
        path.line_to(point_in_circle(c, outer_radius - teeth_length, a))
        alpha += delta
    path.close()

    # Inner ridge star, clockwise so it cuts a hole
    delta = -TAU / 5.0
    teeth_bottom_gap = 0.70 * delta
    alpha = PI / 2.0
    for i in range(5):
        a = alpha - delta / 2.0 + teeth_bottom_gap / 2.0
        v = point_in_circle(c, inner_radius, a)
        if i == 0:
            path.move_to(v)
        else:
            path.line_to(v)
        middle = a + (delta - teeth_bottom_gap) / 2.0
        a += delta - teeth_bottom_gap
        peak = point_in_circle(c, inner_radius - teeth_length * 1.33, middle)
        path.cubic_to(peak, peak, point_in_circle(c, inner_radius, a))
        a += teeth_bottom_gap
        path.cubic_to(
            point_in_circle(c, inner_radius * 1.05, a - teeth_bottom_gap * 0.67),
            point_in_circle(c, inner_radius * 1.05, a - teeth_bottom_gap * 0.34),
            point_in_circle(c, inner_radius, a),
        )
        alpha += delta
    path.close()

    # Bolts, sized from the star lobes
    bolt_radius = inner_radius * 0.81 * (delta - teeth_bottom_gap) / delta / PI
    alpha = PI / 2.0
    for _ in range(5):
        bolt = point_in_circle(c, inner_radius + bolt_radius * 0.33, alpha)
        a = alpha
        for j in range(5):
            if j == 0:
                path.move_to(point_in_circle(bolt, bolt_radius, a))
            else:
                path.cubic_to(
                    point_in_circle(bolt, bolt_radius * 1.14, a + PI / 3.0),
                    point_in_circle(bolt, bolt_radius * 1.14, a + PI / 6.0),
                    point_in_circle(bolt, bolt_radius, a),
                )
            a -= PI / 2.0
        path.close()
        alpha += delta

    return path


def chain_ring(canvas, center, radius, rotation, teeth_count=TEETH_COUNT):
    """Paint the chain ring at center, rotated by rotation degrees"""
    ridge_radius = radius * 0.85

    paint = Paint()
    paint.anti_alias = True
    paint.stroke_width = pen_width(canvas)

    with canvas.saved():
        canvas.translate(center)
        with canvas.saved():
            canvas.rotate(rotation)
            path = chain_ring_path(radius, teeth_count)

            # Rust shade, from steel gray to rust color
            paint.shader = RadialGradient(
                (0.0, 0.04 * ridge_radius),
                ridge_radius,
                [color_to_color4f(STEEL_GRAY), color_to_color4f(RUST_BROWN)],
                positions=[0.8, 1.0],
            )
            canvas.draw_path(path, paint)

            paint.shader = None
            paint.style = STROKE
            paint.set_color4f(color_to_color4f(DARK_BROWN))
            canvas.draw_path(path, paint)

        # Ridge around the chain ring, drawn with the outline paint
        gradient(
            paint,
            (0.0, -ridge_radius),
            (2.0 * ridge_radius, 2.0 * ridge_radius),
            (color_to_color4f(DARK_BROWN), color_to_color4f(LIGHT_RUST)),
        )
        canvas.draw_circle((0.0, 0.0), ridge_radius, paint)


def triangle_path(center, radius, degrees, wankel):
    """Closed triangle path; wankel bows the edges with cubic curves"""
    c = (float(center[0]), float(center[1]))
    r = float(radius)
    b = r * 0.9
    delta = 120.0 * DEGREES_IN_RADIANS

    alpha = degrees * DEGREES_IN_RADIANS
    path = Path()
    for i in range(4):
        v = point_in_circle(c, r, alpha)
        if i == 0:
            path.move_to(v)
        elif wankel:
            path.cubic_to(
                point_in_circle(c, b, alpha - 2.0 * delta / 3.0),
                point_in_circle(c, b, alpha - delta / 3.0),
                v,
            )
        else:
            path.line_to(v)
        alpha += delta
    path.close()
    return path


def triangle(canvas, center, radius, degrees, vertex, color, wankel):
    """Paint one triangle.

    With a vertex the triangle is filled with a gradient fanning out of that
    corner, from color to blue. Without one only the outline is stroked,
    with a white highlight on the top edge.

    Raises ValueError for a vertex outside 0, 1, 2; nothing is drawn then.
    """
    c = (float(center[0]), float(center[1]))
    r = float(radius)
    delta = 120.0 * DEGREES_IN_RADIANS
    side = r / math.cos((PI - delta) / 2.0) * 2.0

    paint = Paint()
    if vertex is not None:
        vertex = Vertex(vertex)
        a = (degrees + 120 * int(vertex)) * DEGREES_IN_RADIANS
        straight, rounded = VERTEX_RADII[vertex]
        fx, fy = rounded if wankel else straight
        gradient(
            paint,
            point_in_circle(c, r, a),
            (fx * side, fy * side),
            (color_to_color4f(color), color_to_color4f(BLUE)),
        )
    else:
        paint.anti_alias = True
        paint.stroke_width = pen_width(canvas)
        paint.style = STROKE
        paint.stroke_join = JOIN_BEVEL
        # Highlight reflection on the top triangle edge
        paint.shader = RadialGradient(
            (c[0], c[1] - 0.5 * r),
            0.5 * r,
            [color_to_color4f(WHITE), color_to_color4f(color)],
        )

    canvas.draw_path(triangle_path(c, r, degrees, wankel), paint)


def rotation_step(fps, bpm):
    """Degrees of rotation per frame"""
    return 12.0 * bpm / 60.0 / fps


def render_frame(frame, fps, bpm, canvas, teeth_count=TEETH_COUNT):
    """Paint one frame and return how many frames are left in the revolution"""
    step = rotation_step(fps, bpm)
    frame_count = int(360.0 / step)

    width, height = canvas.get_size()
    size = min(width, height)

    center = (size // 2, size // 2)
    chain_ring_radius = size // 2 * 100 // 100
    triangle_radius = size // 2 * 53 // 100

    rotation = frame * step
    chain_ring(canvas, center, chain_ring_radius, rotation, teeth_count)

    triangle_rotation = 60.0 + rotation
    blades = [
        (Vertex.FIRST, GREEN, True),
        (Vertex.SECOND, BLUE, True),
        (Vertex.THIRD, RED, True),
        (Vertex.FIRST, YELLOW, False),
        (Vertex.SECOND, CYAN, False),
        (Vertex.THIRD, MAGENTA, False),
        (None, OVERLAY, True),
        (None, OVERLAY, False),
    ]
    for vertex, color, wankel in blades:
        triangle(canvas, center, triangle_radius, triangle_rotation, vertex, color, wankel)

    return frame_count - (frame + 1)


def draw(screen, etc):
    """Draw function called by the render engine for every frame"""
    etc.frames_remaining = render_frame(etc.frame, etc.fps, etc.bpm, screen, etc.teeth_count)
