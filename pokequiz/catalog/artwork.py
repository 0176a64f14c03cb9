"""
Artwork rendering - silhouette transform and PNG encoding.
"""

from __future__ import annotations
import io

from PIL import Image


def to_silhouette(image: Image.Image) -> bytes:
    """
    Render an image as a black silhouette on a transparent background.

    Any pixel that is not fully transparent becomes opaque black.
    """
    alpha = image.convert("RGBA").getchannel("A")
    mask = alpha.point(lambda a: 255 if a > 0 else 0)

    silhouette = Image.new("RGBA", image.size, (0, 0, 0, 0))
    silhouette.paste((0, 0, 0, 255), (0, 0) + image.size, mask)
    return encode_png(silhouette)


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
