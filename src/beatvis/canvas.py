import cv2
import numpy as np

from beatvis.constants import BG_COLOR

# Fixed-point bits for sub-pixel drawing with OpenCV
SHIFT = 4
SUBPIXEL = 1 << SHIFT


class CanvasSurface:
    """
    A BGR pixel buffer with the few alpha-blended primitives the visualiser needs.
    Contents persist between frames; callers wash or clear explicitly.
    """

    def __init__(self, width, height, bg_color=BG_COLOR):
        self.bg_color = bg_color
        self.frame = None
        self.resize(width, height)

    @property
    def width(self):
        return self.frame.shape[1] if self.frame is not None else 0

    @property
    def height(self):
        return self.frame.shape[0] if self.frame is not None else 0

    @property
    def is_ready(self):
        return self.width > 0 and self.height > 0

    def resize(self, width, height):
        """Resize the buffer and fill it with the background colour."""
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            self.frame = None
            return
        self.frame = np.full((height, width, 3), self.bg_color, dtype=np.uint8)

    def clear(self):
        if self.frame is not None:
            self.frame[:] = self.bg_color

    def wash(self, color, alpha):
        """Blend a flat colour over the whole canvas, leaving a fading trail."""
        layer = np.full_like(self.frame, color)
        self.frame = cv2.addWeighted(self.frame, 1 - alpha, layer, alpha, 0)

    def fill_circle(self, center, radius, color, alpha=1.0):
        self._stroke_or_fill_circle(center, radius, color, alpha, -1)

    def stroke_circle(self, center, radius, color, alpha=1.0, thickness=1):
        self._stroke_or_fill_circle(center, radius, color, alpha, thickness)

    def fill_rects(self, rects, color, alpha=1.0):
        """Fill (x, y, w, h) rectangles sharing one colour and alpha."""
        if not rects:
            return

        def draw(overlay):
            for x, y, w, h in rects:
                cv2.rectangle(
                    overlay,
                    (int(x), int(y)),
                    (int(x + w) - 1, int(y + h) - 1),
                    color,
                    -1,
                )

        self._blend(0, 0, self.width, self.height, alpha, draw)

    def polyline(self, points, color, alpha=1.0, thickness=1):
        if len(points) < 2:
            return
        pts = np.round(np.asarray(points, dtype=np.float64) * SUBPIXEL).astype(np.int32)

        def draw(overlay):
            cv2.polylines(overlay, [pts], False, color, thickness, cv2.LINE_AA, SHIFT)

        self._blend(0, 0, self.width, self.height, alpha, draw)

    def to_rgb(self):
        return cv2.cvtColor(self.frame, cv2.COLOR_BGR2RGB)

    def _stroke_or_fill_circle(self, center, radius, color, alpha, thickness):
        x, y = center
        pad = radius + max(thickness, 0) + 2
        x0 = max(int(x - pad), 0)
        y0 = max(int(y - pad), 0)
        x1 = min(int(x + pad) + 1, self.width)
        y1 = min(int(y + pad) + 1, self.height)

        # Draw relative to the region of interest so only the touched pixels are blended
        local_center = (round((x - x0) * SUBPIXEL), round((y - y0) * SUBPIXEL))
        local_radius = max(round(radius * SUBPIXEL), 0)

        def draw(overlay):
            cv2.circle(overlay, local_center, local_radius, color, thickness, cv2.LINE_AA, SHIFT)

        self._blend(x0, y0, x1, y1, alpha, draw)

    def _blend(self, x0, y0, x1, y1, alpha, draw):
        if x0 >= x1 or y0 >= y1 or alpha <= 0:
            return
        roi = self.frame[y0:y1, x0:x1]
        overlay = roi.copy()
        draw(overlay)
        if alpha >= 1:
            self.frame[y0:y1, x0:x1] = overlay
        else:
            self.frame[y0:y1, x0:x1] = cv2.addWeighted(overlay, alpha, roi, 1 - alpha, 0)
