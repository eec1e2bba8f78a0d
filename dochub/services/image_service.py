from io import BytesIO
from typing import Tuple

from PIL import Image

from dochub.schemas.processing import ImageCompressOptions

# Pillow format name and MIME type per output extension
OUTPUT_FORMATS = {
    'jpg': ('JPEG', 'image/jpeg'),
    'png': ('PNG', 'image/png'),
    'webp': ('WEBP', 'image/webp'),
}


class ImageService:
    @staticmethod
    def resize_image(img: Image.Image, max_width: int = None, max_height: int = None) -> Image.Image:
        """Shrink to fit within the bounds, keeping the aspect ratio. Never enlarges."""
        if not max_width and not max_height:
            return img
        bounds = (max_width or img.width, max_height or img.height)
        img.thumbnail(bounds, Image.Resampling.LANCZOS)
        return img

    @staticmethod
    def _target_format(source_format: str, options: ImageCompressOptions) -> str:
        if options.output_format:
            return 'jpg' if options.output_format == 'jpeg' else options.output_format
        if source_format == 'PNG':
            return 'png'
        if source_format == 'WEBP':
            return 'webp'
        return 'jpg'

    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
            rgba = img.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel('A'))
            return background
        return img.convert('RGB') if img.mode != 'RGB' else img

    @staticmethod
    def compress(image_bytes: bytes, options: ImageCompressOptions) -> Tuple[bytes, str, str]:
        """Re-encode an image; returns ``(bytes, extension, mime_type)``."""
        with Image.open(BytesIO(image_bytes)) as source:
            source.load()
            source_format = source.format
            img = ImageService.resize_image(source.copy(), options.max_width, options.max_height)

        ext = ImageService._target_format(source_format, options)
        pil_format, mime_type = OUTPUT_FORMATS[ext]
        output = BytesIO()
        if pil_format != 'JPEG' and img.mode == 'CMYK':
            img = img.convert('RGB')
        if pil_format == 'JPEG':
            ImageService._flatten(img).save(output, format='JPEG', quality=options.jpeg_quality, optimize=True)
        elif pil_format == 'WEBP':
            img.save(output, format='WEBP', quality=options.jpeg_quality)
        else:
            img.save(output, format='PNG', optimize=True)
        return output.getvalue(), ext, mime_type

image_service = ImageService()
