"""
Image Processor Module.

This module prepares uploaded images for OCR:
    - Image loading and validation
    - Orientation correction from EXIF data
    - RGB conversion and size limiting
    - Contrast/sharpness enhancement

Supports: PNG, JPG, JPEG

Author: ML Engineering Team
"""

import io

from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from config import get_config
from invoice_capture.utils.logger import get_logger
from invoice_capture.utils.exceptions import AcquisitionFailedError

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Processor for image uploads.

    Attributes:
        max_width: Maximum image width in pixels
        max_height: Maximum image height in pixels
        auto_orient: Whether to auto-correct orientation
        enhance_contrast: Whether to apply contrast enhancement

    Example:
        >>> processor = ImageProcessor()
        >>> image = processor.load(png_bytes, "scan.png")
    """

    def __init__(self) -> None:
        """Initialize the image processor with configuration."""
        self.max_width = get_config("input.image.max_width", 4960)
        self.max_height = get_config("input.image.max_height", 7016)
        self.auto_orient = get_config("input.image.auto_orient", True)
        self.enhance_contrast = get_config("input.image.enhance_contrast", True)

    def load(self, raw_bytes: bytes, filename: str = "image") -> Image.Image:
        """
        Decode and prepare an image for OCR.

        Args:
            raw_bytes: Encoded image content.
            filename: Original filename, for error messages.

        Returns:
            Processed RGB image.

        Raises:
            AcquisitionFailedError: If the bytes are not a readable image.
        """
        try:
            image = Image.open(io.BytesIO(raw_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            logger.error(f"Failed to load image {filename}: {e}")
            raise AcquisitionFailedError(filename, str(e)) from e

        logger.debug(f"Loaded image {filename}: {image.width}x{image.height} {image.mode}")
        return self._process_image(image)

    def _process_image(self, image: Image.Image) -> Image.Image:
        """
        Apply the processing pipeline.

        Processing steps:
            1. Fix orientation from EXIF data
            2. Convert to RGB
            3. Resize if too large
            4. Enhance contrast (optional)
        """
        if self.auto_orient:
            image = ImageOps.exif_transpose(image)

        image = self._convert_to_rgb(image)
        image = self._resize_if_needed(image)

        if self.enhance_contrast:
            image = self._enhance_image(image)

        return image

    def _convert_to_rgb(self, image: Image.Image) -> Image.Image:
        """Convert to RGB, flattening transparency onto white."""
        if image.mode == 'RGB':
            return image

        if image.mode in ('RGBA', 'LA'):
            rgba = image.convert('RGBA')
            background = Image.new('RGB', image.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            return background

        return image.convert('RGB')

    def _resize_if_needed(self, image: Image.Image) -> Image.Image:
        """Shrink images above the size limit, keeping the aspect ratio."""
        width, height = image.size

        if width <= self.max_width and height <= self.max_height:
            return image

        ratio = min(self.max_width / width, self.max_height / height)
        new_size = (int(width * ratio), int(height * ratio))

        logger.debug(f"Resized image from {width}x{height} to {new_size[0]}x{new_size[1]}")
        return image.resize(new_size, Image.LANCZOS)

    def _enhance_image(self, image: Image.Image) -> Image.Image:
        """Slight contrast and sharpness boost for OCR."""
        image = ImageEnhance.Contrast(image).enhance(1.2)
        return ImageEnhance.Sharpness(image).enhance(1.1)
