import io
from abc import ABC, abstractmethod

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from app.core.config import Settings
from app.core.errors import PhotoTransformError


class PhotoTransformer(ABC):
    @abstractmethod
    def transform(self, photo: bytes) -> bytes:
        raise NotImplementedError


class PassthroughTransformer(PhotoTransformer):
    def transform(self, photo: bytes) -> bytes:
        if not photo:
            raise PhotoTransformError("Photo is empty")
        return photo


class OverlayTransformer(PhotoTransformer):
    def __init__(self, *, text: str, position: tuple[int, int], font_size: int) -> None:
        self.text = text
        self.position = position
        self.font_size = font_size

    def transform(self, photo: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(photo)) as image:
                image_format = image.format or "PNG"
                # JPEG cannot carry alpha; everything else keeps it.
                mode = "RGB" if image_format == "JPEG" else "RGBA"
                canvas = image.convert(mode)
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise PhotoTransformError(f"Unable to read photo: {exc}") from exc

        draw = ImageDraw.Draw(canvas)
        font = ImageFont.load_default(size=self.font_size)
        draw.text(self.position, self.text, fill="black", font=font)

        out = io.BytesIO()
        try:
            canvas.save(out, format=image_format)
        except (OSError, ValueError, KeyError) as exc:
            raise PhotoTransformError(f"Unable to encode photo as {image_format}: {exc}") from exc
        return out.getvalue()


def build_photo_transformer(settings: Settings) -> PhotoTransformer:
    kind = (settings.photo_transform or "overlay").strip().lower()
    if kind == "passthrough":
        return PassthroughTransformer()
    if kind == "overlay":
        return OverlayTransformer(
            text=settings.overlay_text,
            position=(settings.overlay_x, settings.overlay_y),
            font_size=settings.overlay_font_size,
        )
    raise ValueError("Unsupported PHOTO_TRANSFORM. Supported values: overlay, passthrough.")
