import math
from typing import Optional, Tuple

import cv2
import numpy as np

from compass.imu.orientation import bearing_to_direction
from compass.utils.config_sections import DashboardConfig, load_dashboard_config

BACKGROUND = (20, 20, 20)
DIAL_COLOR = (200, 200, 200)
NORTH_COLOR = (0, 0, 255)
NEEDLE_COLOR = (0, 165, 255)
TEXT_COLOR = (255, 255, 255)


class NeedleDashboard:
    """
    OpenCV compass face in a single window.

    The dial is fixed to the device; the needle is rotated by -bearing so it
    keeps pointing north while the wearer turns.
    """

    def __init__(self, config: Optional[DashboardConfig] = None):
        self.config = config or load_dashboard_config()
        self.size = int(self.config.size)
        self.center = (self.size // 2, self.size // 2)
        self.radius = int(self.size * 0.45)
        self.needle_length = int(self.radius * self.config.needle_ratio)
        self.window_name = self.config.window_name
        self._window_open = False
        self.frame_count = 0

    def needle_tip(self, bearing: float) -> Tuple[int, int]:
        """Pixel of the needle tip after rotating by -bearing (screen y grows down)."""
        theta = math.radians(-bearing)
        cx, cy = self.center
        x = cx + self.needle_length * math.sin(theta)
        y = cy - self.needle_length * math.cos(theta)
        return int(round(x)), int(round(y))

    def render(self, bearing: float, state=None) -> np.ndarray:
        """Draw the dial and needle for ``bearing``; returns a BGR frame."""
        frame = np.full((self.size, self.size, 3), BACKGROUND, dtype=np.uint8)
        cx, cy = self.center

        cv2.circle(frame, self.center, self.radius, DIAL_COLOR, 2)

        # Tick every 30°, longer at the cardinal points
        for deg in range(0, 360, 30):
            rad = math.radians(deg)
            inner = self.radius - (14 if deg % 90 == 0 else 7)
            p1 = (int(cx + inner * math.sin(rad)), int(cy - inner * math.cos(rad)))
            p2 = (int(cx + self.radius * math.sin(rad)), int(cy - self.radius * math.cos(rad)))
            cv2.line(frame, p1, p2, DIAL_COLOR, 2)

        heading_text = f"{bearing:5.1f} deg {bearing_to_direction(bearing)}"
        cv2.putText(frame, heading_text, (10, 24),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, TEXT_COLOR, 1)
        if state is not None and state.declination_degrees is not None:
            cv2.putText(frame, f"decl {state.declination_degrees:+.1f}", (10, self.size - 12),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, TEXT_COLOR, 1)

        # Needle drawn last so nothing covers it
        tip = self.needle_tip(bearing)
        tail = (2 * cx - tip[0], 2 * cy - tip[1])
        cv2.line(frame, self.center, tail, DIAL_COLOR, 4)
        cv2.line(frame, self.center, tip, NEEDLE_COLOR, 4)
        cv2.circle(frame, tip, 5, NORTH_COLOR, -1)

        self.frame_count += 1
        return frame

    def show(self, frame: np.ndarray) -> bool:
        """Display a rendered frame. Returns False when the user pressed 'q'."""
        if not self._window_open:
            cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
            cv2.resizeWindow(self.window_name, self.size, self.size)
            self._window_open = True

        cv2.imshow(self.window_name, frame)
        key = cv2.waitKey(1) & 0xFF
        return key != ord('q')

    def close(self) -> None:
        if self._window_open:
            cv2.destroyWindow(self.window_name)
            self._window_open = False
