from __future__ import annotations

from io import BytesIO
from typing import Protocol, Sequence, runtime_checkable

from PIL import Image, ImageColor, ImageDraw, ImageFont

Color = str | tuple[int, int, int] | tuple[int, int, int, int]


@runtime_checkable
class Surface(Protocol):
    """Minimal 2D drawing target used by the scene renderer.

    Coordinates are pixels with the origin at the top-left and y pointing down.
    """

    @property
    def size(self) -> tuple[int, int]: ...

    def fill_gradient(self, stops: Sequence[tuple[float, Color]]) -> None: ...

    def line(self, start: tuple[float, float], end: tuple[float, float], *, color: Color, width: float = 1.0) -> None: ...

    def polyline(self, points: Sequence[tuple[float, float]], *, color: Color, width: float = 1.0) -> None: ...

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        fill: Color | None = None,
        outline: Color | None = None,
        outline_width: float = 1.0,
    ) -> None: ...

    def text(self, x: float, y: float, text: str, *, color: Color, size: float, anchor: str = "la") -> None: ...

    def image(self, x: float, y: float, width: float, height: float, source: Image.Image) -> None: ...


def parse_color(color: Color) -> tuple[int, int, int, int]:
    """Accept `#rrggbb`, `rgba(r,g,b,a)` with a 0..1 alpha, or an int tuple."""

    if isinstance(color, tuple):
        if len(color) == 3:
            return (int(color[0]), int(color[1]), int(color[2]), 255)
        if len(color) == 4:
            return (int(color[0]), int(color[1]), int(color[2]), int(color[3]))
        raise ValueError(f"invalid color tuple: {color!r}")

    s = str(color).strip().lower()
    if s.startswith("rgba(") and s.endswith(")"):
        parts = [p.strip() for p in s[5:-1].split(",")]
        if len(parts) != 4:
            raise ValueError(f"invalid rgba color: {color!r}")
        r, g, b = (int(float(p)) for p in parts[:3])
        a = max(0.0, min(1.0, float(parts[3])))
        return (r, g, b, int(round(a * 255)))
    rgba = ImageColor.getcolor(s, "RGBA")
    assert isinstance(rgba, tuple)
    return (int(rgba[0]), int(rgba[1]), int(rgba[2]), int(rgba[3]))


class PillowSurface:
    """Rasterises onto an RGBA `PIL.Image`."""

    def __init__(self, width: int, height: int) -> None:
        w = max(0, int(width))
        h = max(0, int(height))
        self._image = Image.new("RGBA", (max(w, 1), max(h, 1)), (0, 0, 0, 0))
        self._size = (w, h)
        self._draw = ImageDraw.Draw(self._image, "RGBA")
        self._fonts: dict[int, ImageFont.ImageFont | ImageFont.FreeTypeFont] = {}

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    @property
    def image(self) -> Image.Image:
        return self._image

    def _font(self, size: float) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
        px = max(1, int(round(size)))
        font = self._fonts.get(px)
        if font is None:
            font = ImageFont.load_default(size=px)
            self._fonts[px] = font
        return font

    def fill_gradient(self, stops: Sequence[tuple[float, Color]]) -> None:
        w, h = self._size
        if w <= 0 or h <= 0 or not stops:
            return
        parsed = sorted(((float(t), parse_color(c)) for t, c in stops), key=lambda s: s[0])
        for row in range(h):
            t = row / max(1, h - 1)
            self._draw.line([(0, row), (w - 1, row)], fill=_interpolate(parsed, t))

    def line(self, start: tuple[float, float], end: tuple[float, float], *, color: Color, width: float = 1.0) -> None:
        self._draw.line([start, end], fill=parse_color(color), width=max(1, int(round(width))))

    def polyline(self, points: Sequence[tuple[float, float]], *, color: Color, width: float = 1.0) -> None:
        if not points:
            return
        fill = parse_color(color)
        w = max(1, int(round(width)))
        if len(points) == 1:
            x, y = points[0]
            r = w / 2.0
            self._draw.ellipse([x - r, y - r, x + r, y + r], fill=fill)
            return
        self._draw.line(list(points), fill=fill, width=w, joint="curve")
        if w > 2:
            # Round caps.
            r = w / 2.0
            for x, y in (points[0], points[-1]):
                self._draw.ellipse([x - r, y - r, x + r, y + r], fill=fill)

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        fill: Color | None = None,
        outline: Color | None = None,
        outline_width: float = 1.0,
    ) -> None:
        if width <= 0 or height <= 0:
            return
        box = [x, y, x + width, y + height]
        self._draw.rectangle(
            box,
            fill=parse_color(fill) if fill is not None else None,
            outline=parse_color(outline) if outline is not None else None,
            width=max(1, int(round(outline_width))),
        )

    def text(self, x: float, y: float, text: str, *, color: Color, size: float, anchor: str = "la") -> None:
        if not text:
            return
        self._draw.text((x, y), text, fill=parse_color(color), font=self._font(size), anchor=anchor)

    def image(self, x: float, y: float, width: float, height: float, source: Image.Image) -> None:
        w = int(round(width))
        h = int(round(height))
        if w <= 0 or h <= 0:
            return
        tile = source.convert("RGBA").resize((w, h))
        self._image.paste(tile, (int(round(x)), int(round(y))), tile)

    def to_png_bytes(self) -> bytes:
        buf = BytesIO()
        self._image.save(buf, format="PNG")
        return buf.getvalue()


def _interpolate(stops: list[tuple[float, tuple[int, int, int, int]]], t: float) -> tuple[int, int, int, int]:
    if t <= stops[0][0]:
        return stops[0][1]
    for (t0, c0), (t1, c1) in zip(stops, stops[1:]):
        if t <= t1:
            k = 0.0 if t1 <= t0 else (t - t0) / (t1 - t0)
            return tuple(int(round(a + (b - a) * k)) for a, b in zip(c0, c1))  # type: ignore[return-value]
    return stops[-1][1]
