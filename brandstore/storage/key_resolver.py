"""
Object key resolution for stored image references.

Rows keep the public URL of each image. Deleting the image needs the object
key again, so this module turns a URL back into a key.

Handles patterns like:
    https://bucket.s3.region.amazonaws.com/catalog/products/123-456.jpg
    https://s3.region.amazonaws.com/bucket/catalog/products/123-456.jpg
    https://project.supabase.co/storage/v1/object/public/bucket/catalog/products/123-456.jpg
    https://cdn.example.com/bucket/catalog/products/123-456.jpg
"""
from typing import Optional, Sequence
from urllib.parse import unquote, urlparse

# Text after any of these markers is "<bucket>/<key>" or "<key>"
KEY_MARKERS = (
    ".amazonaws.com/",
    "/storage/v1/object/public/",
)


def resolve_object_key(
    url: Optional[str],
    bucket: Optional[str] = None,
    markers: Sequence[str] = KEY_MARKERS,
) -> Optional[str]:
    """
    Derive the object-store key from a stored reference.

    Args:
        url: Stored reference (public URL). ``None`` or blank yields ``None``.
        bucket: Bucket name; a leading path segment equal to it is stripped.
        markers: Substrings that directly precede the key (or bucket/key).

    Returns:
        The object key, or ``None`` when there is nothing to delete.
    """
    if not url or not url.strip():
        return None
    url = url.strip()

    remainder = None
    for marker in markers:
        if marker in url:
            remainder = url.split(marker, 1)[1]
            break

    if remainder is None:
        try:
            parsed = urlparse(url)
        except ValueError:
            return None
        if not parsed.scheme or not parsed.netloc:
            return None
        remainder = parsed.path

    # Drop query string / fragment
    remainder = remainder.split("?", 1)[0].split("#", 1)[0]
    parts = [p for p in unquote(remainder).split("/") if p]
    if bucket and parts and parts[0] == bucket:
        parts = parts[1:]
    return "/".join(parts) or None
