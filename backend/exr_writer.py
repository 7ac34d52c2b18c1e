"""
OpenEXR export for float surfaces
"""

import os

# OpenCV ships the EXR codec disabled; it has to be enabled before import
os.environ.setdefault('OPENCV_IO_ENABLE_OPENEXR', '1')

import cv2
import numpy as np

# Lossless, full 32-bit float channels
HIGH_QUALITY = [
    cv2.IMWRITE_EXR_TYPE, cv2.IMWRITE_EXR_TYPE_FLOAT,
    cv2.IMWRITE_EXR_COMPRESSION, cv2.IMWRITE_EXR_COMPRESSION_ZIP,
]


def write_exr(path, pixels, params=None):
    """Write a (height, width, 4) array of linear RGBA floats to path.

    Raises OSError when the file cannot be written.
    """
    pixels = np.asarray(pixels, dtype=np.float32)
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected (height, width, 4) RGBA pixels, got shape {pixels.shape}")

    directory = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Output directory does not exist: {directory}")

    # OpenCV channel order is BGRA
    bgra = np.ascontiguousarray(pixels[..., [2, 1, 0, 3]])
    try:
        ok = cv2.imwrite(path, bgra, HIGH_QUALITY if params is None else params)
    except cv2.error as e:
        raise OSError(f"Could not write EXR file {path}: {e}") from e
    if not ok:
        raise OSError(f"Could not write EXR file {path}")
    return path


def read_exr(path):
    """Read an EXR file back as a (height, width, 4) RGBA float32 array"""
    bgra = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if bgra is None:
        raise OSError(f"Could not read EXR file {path}")
    return bgra[..., [2, 1, 0, 3]]
