from .filename import content_disposition, media_filename, sanitize_filename

__all__ = ["content_disposition", "media_filename", "sanitize_filename"]
