import os

CONTENT_TYPES = {
    "js": "application/javascript",
    "json": "application/json",

    "woff": "font/woff",

    "ico": "image/x-icon",
    "png": "image/png",
    "svg": "image/svg+xml",

    "css": "text/css",
    "html": "text/html",
}


def content_type(path, default=None):
    """Return the MIME type for path's extension, or default when it is not in the table"""
    extension = os.path.splitext(path)[1]
    if not extension:
        return default
    return CONTENT_TYPES.get(extension[1:], default)
