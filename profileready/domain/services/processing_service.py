from __future__ import annotations

import math

import numpy as np


class ProcessingService:
    """Pure NumPy raster math. Inputs and outputs are float32 arrays normalized to [0, 1].

    Channel convention:
    - RGBA: (H, W, 4), straight (non-premultiplied) alpha
    """

    # EXIF orientation 1-8 -> pixels as displayed
    @staticmethod
    def orient(matrix: np.ndarray, orientation: int) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if orientation == 2:
            out = mat[:, ::-1]
        elif orientation == 3:
            out = mat[::-1, ::-1]
        elif orientation == 4:
            out = mat[::-1, :]
        elif orientation == 5:
            out = mat.transpose(1, 0, 2)
        elif orientation == 6:
            out = np.rot90(mat, -1)
        elif orientation == 7:
            out = mat[::-1, ::-1].transpose(1, 0, 2)
        elif orientation == 8:
            out = np.rot90(mat, 1)
        else:
            out = mat
        return np.ascontiguousarray(out, dtype=np.float32)

    # Crop region [y_start:y_end, x_start:x_end]
    @staticmethod
    def crop(matrix: np.ndarray, x_start: int, x_end: int, y_start: int, y_end: int) -> np.ndarray:
        return matrix.astype(np.float32)[y_start:y_end, x_start:x_end]

    # Solid canvas filled with an RGB colour, fully opaque
    @staticmethod
    def canvas(width: int, height: int, rgb: tuple[float, float, float]) -> np.ndarray:
        out = np.empty((height, width, 4), dtype=np.float32)
        out[..., :3] = np.asarray(rgb, dtype=np.float32)
        out[..., 3] = 1.0
        return out

    # "#RRGGBB" -> (r, g, b) in [0, 1]
    @staticmethod
    def hex_to_rgb(color: str) -> tuple[float, float, float]:
        value = color.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Expected 6 hex digits, got {color!r}")
        r, g, b = (int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4))
        return r, g, b

    # Brightness/contrast polynomial: I_out = slope * I_in + intercept
    # slope = tan(pi * (contrast/100 + 1) / 4), intercept = b/100 + ((100 - b)/200) * (1 - slope)
    @staticmethod
    def adjust_brightness_contrast(matrix: np.ndarray, brightness: float, contrast: float) -> np.ndarray:
        mat = matrix.astype(np.float32)
        slope = max(0.0, math.tan(math.pi * (float(contrast) / 100.0 + 1.0) / 4.0))
        intercept = float(brightness) / 100.0 + ((100.0 - float(brightness)) / 200.0) * (1.0 - slope)
        out = mat.copy()
        out[..., :3] = np.clip(slope * mat[..., :3] + intercept, 0.0, 1.0)
        return out.astype(np.float32)

    # Alpha-over: out = src * a_s + dst * a_d * (1 - a_s), divided by the output alpha.
    # `image` is placed with its top-left corner at (x, y); parts outside the canvas are dropped.
    @staticmethod
    def composite_over(canvas: np.ndarray, image: np.ndarray, x: int, y: int) -> np.ndarray:
        out = canvas.astype(np.float32).copy()
        h, w = out.shape[:2]
        ih, iw = image.shape[:2]
        # compute source and destination ranges
        x_src_start = max(0, -x)
        y_src_start = max(0, -y)
        x_dst_start = max(0, x)
        y_dst_start = max(0, y)
        x_len = min(w - x_dst_start, iw - x_src_start)
        y_len = min(h - y_dst_start, ih - y_src_start)
        if x_len <= 0 or y_len <= 0:
            return out
        src = image.astype(np.float32)[y_src_start : y_src_start + y_len, x_src_start : x_src_start + x_len]
        dst = out[y_dst_start : y_dst_start + y_len, x_dst_start : x_dst_start + x_len]
        a_s = src[..., 3:4]
        a_d = dst[..., 3:4]
        a_o = a_s + a_d * (1.0 - a_s)
        rgb = src[..., :3] * a_s + dst[..., :3] * a_d * (1.0 - a_s)
        safe = np.where(a_o > 0.0, a_o, 1.0)
        dst[..., :3] = np.where(a_o > 0.0, rgb / safe, 0.0)
        dst[..., 3:4] = a_o
        return out

    # Drop alpha by compositing onto an opaque background colour
    @staticmethod
    def flatten(matrix: np.ndarray, rgb: tuple[float, float, float] = (1.0, 1.0, 1.0)) -> np.ndarray:
        mat = matrix.astype(np.float32)
        h, w = mat.shape[:2]
        base = ProcessingService.canvas(w, h, rgb)
        return ProcessingService.composite_over(base, mat, 0, 0)[..., :3]

    @staticmethod
    def is_opaque(matrix: np.ndarray) -> bool:
        return bool(matrix.ndim == 3 and (matrix.shape[2] < 4 or np.all(matrix[..., 3] >= 1.0)))
