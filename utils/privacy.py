"""
Privacy protection - Face region blurring
"""
import cv2
import numpy as np


def blur_region(region, intensity):
    """
    Gaussian-blur a cropped region

    The crop is blurred in isolation: pixels around it in the source
    frame never bleed into the result.

    Args:
        region: Cropped pixel buffer (H, W, C) or (H, W)
        intensity: Gaussian sigma, > 0

    Returns:
        blurred: New buffer with the same shape and dtype
    """
    isolated = np.ascontiguousarray(region).copy()
    if isolated.size == 0:
        return isolated
    return cv2.GaussianBlur(
        isolated, (0, 0), sigmaX=intensity, sigmaY=intensity,
        borderType=cv2.BORDER_REFLECT_101
    )


def blur_box(frame, box, intensity):
    """
    Blur a clamped box of frame in place

    Args:
        frame: Pixel buffer to modify
        box: BoundingBox already clamped to the frame
        intensity: Gaussian sigma

    Returns:
        frame: The same buffer
    """
    rows, cols = box.slices()
    frame[rows, cols] = blur_region(frame[rows, cols], intensity)
    return frame
