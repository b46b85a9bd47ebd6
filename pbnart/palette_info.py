"""Palette descriptions for printing and web clients."""
import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from pbnart.raster_ingest import encode_png_base64
from pbnart.types import PaintResult


@dataclass
class ColorInfo:
    """One palette entry as shown to the user."""
    number: int  # 1-based color number stamped on regions
    hex: str
    c: int  # Cyan %
    m: int  # Magenta %
    y: int  # Yellow %
    k: int  # Black %


def color_to_hex(color: Sequence[int]) -> str:
    """``#rrggbb`` for an RGB(A) color; alpha is dropped."""
    r, g, b = (int(v) for v in color[:3])
    return f"#{r:02x}{g:02x}{b:02x}"


def rgb_to_cmyk(color: Sequence[int]) -> Tuple[int, int, int, int]:
    """
    Convert an RGB(A) color to CMYK percentages.

    Percentages are truncated toward zero. Pure black is (0, 0, 0, 100).
    """
    r, g, b = (int(v) / 255.0 for v in color[:3])
    k = 1.0 - max(r, g, b)

    if k >= 1.0:
        return 0, 0, 0, 100

    c = (1.0 - r - k) / (1.0 - k)
    m = (1.0 - g - k) / (1.0 - k)
    y = (1.0 - b - k) / (1.0 - k)
    return int(c * 100), int(m * 100), int(y * 100), int(k * 100)


def describe_palette(palette: np.ndarray) -> List[ColorInfo]:
    """ColorInfo for each palette row, numbered from 1."""
    infos = []
    for i, color in enumerate(palette):
        c, m, y, k = rgb_to_cmyk(color)
        infos.append(ColorInfo(number=i + 1, hex=color_to_hex(color), c=c, m=m, y=y, k=k))
    return infos


def palette_to_json(palette: np.ndarray, indent: int = 2) -> str:
    """Serialize the palette as a JSON list of ColorInfo objects."""
    return json.dumps([asdict(info) for info in describe_palette(palette)], indent=indent)


def result_payload(result: PaintResult) -> Dict[str, Any]:
    """
    Response body for web clients: base64 PNG image plus palette.

    Returns:
        {"image": str, "palette": [ColorInfo dicts]}
    """
    return {
        "image": encode_png_base64(result.image),
        "palette": [asdict(info) for info in describe_palette(result.palette)],
    }
