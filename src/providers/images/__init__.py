"""Image-hosting providers.

CloudflareImagesProvider lists a Cloudflare Images account page by page and
opens streamed requests for rendition URLs.
"""

from src.providers.images.cloudflare_provider import CloudflareImagesProvider

__all__ = ["CloudflareImagesProvider"]
