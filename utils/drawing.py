# utils/drawing.py
"""Helper functions for drawing hand landmarks and capture overlays."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

HAND_CONNECTIONS: Tuple[Tuple[int, int], ...] = (
    (0, 1), (1, 2), (2, 3), (3, 4),  # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),  # Index
    (0, 9), (9, 10), (10, 11), (11, 12),  # Middle
    (0, 13), (13, 14), (14, 15), (15, 16),  # Ring
    (0, 17), (17, 18), (18, 19), (19, 20),  # Pinky
    (5, 9), (9, 13), (13, 17),  # Palm connections
)

BOX_PADDING = 0.05
PANEL_BG = (30, 30, 30)
PANEL_TEXT = (220, 220, 220)
HAND_BOX_COLOR = (0, 255, 0)
LANDMARK_COLOR = (0, 0, 255)


def guidance_text(finger_count: int, progress: int) -> str:
    """Label shown next to the hand for the current count and sequence progress."""
    if finger_count == 0:
        if progress == 0:
            return "Show 1 finger to start (1/3)"
        if progress == 1:
            return "Show 2 fingers (2/3)"
        if progress == 2:
            return "Show 3 fingers (3/3)"
        return "Sequence complete!"
    if finger_count in (1, 2, 3):
        noun = "finger" if finger_count == 1 else "fingers"
        if progress == finger_count - 1:
            return f"Hold {finger_count} {noun}... ({finger_count}/3)"
        return f"{finger_count} {noun} detected"
    return "Invalid gesture - show 1, 2, or 3 fingers"


# Small utility
def _rounded_rect(img, top_left, bottom_right, color, radius=12, thickness=-1, alpha=1.0):
    x1, y1 = top_left
    x2, y2 = bottom_right
    overlay = img.copy()
    w = x2 - x1
    h = y2 - y1
    if w <= 0 or h <= 0:
        return img
    radius = min(radius, w // 2, h // 2)
    cv2.rectangle(overlay, (x1 + radius, y1), (x2 - radius, y2), color, thickness)
    cv2.rectangle(overlay, (x1, y1 + radius), (x2, y2 - radius), color, thickness)
    cv2.circle(overlay, (x1 + radius, y1 + radius), radius, color, thickness)
    cv2.circle(overlay, (x2 - radius, y1 + radius), radius, color, thickness)
    cv2.circle(overlay, (x1 + radius, y2 - radius), radius, color, thickness)
    cv2.circle(overlay, (x2 - radius, y2 - radius), radius, color, thickness)
    cv2.addWeighted(overlay, alpha, img, 1 - alpha, 0, img)
    return img


def _to_pixels(
    landmarks: np.ndarray, width: int, height: int, mirrored: bool
) -> list[Tuple[int, int]]:
    if mirrored:
        return [(int((1.0 - x) * width), int(y * height)) for x, y in landmarks[:, :2]]
    return [(int(x * width), int(y * height)) for x, y in landmarks[:, :2]]


def draw_landmarks(
    frame: np.ndarray,
    landmarks: Optional[np.ndarray],
    mirrored: bool = False,
) -> np.ndarray:
    """Render the landmark points and bone connections of one hand.

    Args:
        frame: The frame to draw on
        landmarks: (21, 2|3) array of normalized coordinates, or None
        mirrored: If True, mirror the x coordinates horizontally
    """
    output = frame.copy()
    if landmarks is None or len(landmarks) == 0:
        return output
    height, width = output.shape[:2]
    points = _to_pixels(np.asarray(landmarks), width, height, mirrored)

    for start, end in HAND_CONNECTIONS:
        if start < len(points) and end < len(points):
            cv2.line(output, points[start], points[end], (0, 200, 120), 1, lineType=cv2.LINE_AA)

    for point in points:
        cv2.circle(output, point, 3, LANDMARK_COLOR, -1, lineType=cv2.LINE_AA)
    return output


def hand_bounding_box(
    landmarks: np.ndarray, padding: float = BOX_PADDING
) -> Tuple[float, float, float, float]:
    """Normalized (min_x, min_y, max_x, max_y) around the hand, padded and clamped to [0, 1]."""
    coords = np.asarray(landmarks)[:, :2]
    min_x, min_y = coords.min(axis=0)
    max_x, max_y = coords.max(axis=0)
    return (
        max(0.0, float(min_x) - padding),
        max(0.0, float(min_y) - padding),
        min(1.0, float(max_x) + padding),
        min(1.0, float(max_y) + padding),
    )


def draw_hand_box(
    frame: np.ndarray,
    landmarks: Optional[np.ndarray],
    label: str,
    mirrored: bool = False,
) -> np.ndarray:
    """Box the detected hand and put a guidance label above it."""
    output = frame.copy()
    if landmarks is None or len(landmarks) == 0:
        return output
    height, width = output.shape[:2]
    min_x, min_y, max_x, max_y = hand_bounding_box(landmarks)
    if mirrored:
        min_x, max_x = 1.0 - max_x, 1.0 - min_x

    top_left = (int(min_x * width), int(min_y * height))
    bottom_right = (int(max_x * width), int(max_y * height))
    cv2.rectangle(output, top_left, bottom_right, HAND_BOX_COLOR, 3, lineType=cv2.LINE_AA)

    text_size, _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.7, 2)
    label_x = top_left[0]
    label_y = max(top_left[1] - 10, text_size[1] + 12)
    _rounded_rect(
        output,
        (label_x - 6, label_y - text_size[1] - 8),
        (label_x + text_size[0] + 6, label_y + 8),
        (0, 0, 0),
        radius=6,
        alpha=0.9,
    )
    cv2.putText(output, label, (label_x, label_y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, HAND_BOX_COLOR, 2, lineType=cv2.LINE_AA)
    return output


def draw_mode_banner(
    frame: np.ndarray,
    text: str,
    *,
    color: Tuple[int, int, int] = (56, 142, 60),
    alpha: float = 0.85,
) -> np.ndarray:
    """Overlay a semi-transparent banner at the top-left with mode text."""
    output = frame.copy()
    padding = 12
    font_scale = 0.8
    thickness = 2
    text_size, _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, font_scale, thickness)
    width = text_size[0] + padding * 2 + 30
    height = text_size[1] + padding * 2

    _rounded_rect(output, (10, 10), (10 + width, 10 + height), color, radius=14, alpha=alpha)
    cv2.putText(
        output,
        text,
        (10 + padding, 10 + padding + text_size[1] - 2),
        cv2.FONT_HERSHEY_SIMPLEX,
        font_scale,
        (255, 255, 255),
        thickness,
        lineType=cv2.LINE_AA,
    )
    return output


def draw_countdown(frame: np.ndarray, value: int) -> np.ndarray:
    """Draw a prominent countdown number at the center of the frame."""
    output = frame.copy()
    height, width = output.shape[:2]
    text = str(max(value, 0))
    font_scale = min(width, height) / 300
    text_size, _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_DUPLEX, font_scale, 6)
    origin = (
        (width - text_size[0]) // 2,
        (height + text_size[1]) // 2,
    )
    # halo
    for offset in range(6, 2, -2):
        cv2.putText(output, text, (origin[0], origin[1] + offset), cv2.FONT_HERSHEY_DUPLEX, font_scale, (10, 10, 10), 10, lineType=cv2.LINE_AA)
    cv2.putText(output, text, origin, cv2.FONT_HERSHEY_DUPLEX, font_scale, (0, 180, 255), 6, lineType=cv2.LINE_AA)
    return output


def draw_prompts(
    frame: np.ndarray,
    prompts: Sequence[str],
    origin: Tuple[int, int] = (20, 60),
    font_scale: float = 0.65,
    line_height: int = 28,
) -> np.ndarray:
    """Display a panel of text lines, e.g. the key bindings of the current mode."""
    output = frame.copy()
    if not prompts:
        return output
    x, y = origin
    total_w = max(cv2.getTextSize(p, cv2.FONT_HERSHEY_SIMPLEX, font_scale, 2)[0][0] for p in prompts) + 16
    total_h = line_height * len(prompts) + 8

    _rounded_rect(output, (x - 10, y - 10), (x + total_w + 10, y + total_h + 10), PANEL_BG, radius=14, alpha=0.8)

    yy = y + 8
    for prompt in prompts:
        cv2.putText(output, prompt, (x + 8, yy + 12), cv2.FONT_HERSHEY_SIMPLEX, font_scale, PANEL_TEXT, 2, lineType=cv2.LINE_AA)
        yy += line_height
    return output


def draw_status(frame: np.ndarray, message: str) -> np.ndarray:
    """Show the status message in a bar along the bottom edge."""
    output = frame.copy()
    if not message:
        return output
    height, width = output.shape[:2]
    text_size, _ = cv2.getTextSize(message, cv2.FONT_HERSHEY_SIMPLEX, 0.7, 2)
    x = max((width - text_size[0]) // 2, 10)
    y = height - 24
    _rounded_rect(output, (x - 14, y - text_size[1] - 12), (x + text_size[0] + 14, y + 12), PANEL_BG, radius=10, alpha=0.75)
    cv2.putText(output, message, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, PANEL_TEXT, 2, lineType=cv2.LINE_AA)
    return output
