"""Source image component."""

from pydantic import BaseModel, Field

from quadart.core.arena import RasterRef


class Component(BaseModel):
    """Base class for all components.

    Components are plain pydantic data holders. Raster data is never stored
    inline; components carry RasterRefs into the world's arena.
    """

    model_config = {"arbitrary_types_allowed": True}


class RGBA(Component):
    """Decoded source image.

    Attributes:
        pix: RasterRef to (H, W, 4) uint8 pixels
        origin: Absolute (x, y) coordinate of the top-left pixel
    """

    pix: RasterRef
    origin: tuple[int, int] = Field(default=(0, 0))
