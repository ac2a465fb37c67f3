import os

INDEX_FILE = "index.html"


class ResolutionError(Exception):
    pass


class NotFound(ResolutionError):
    status = 404


class Forbidden(ResolutionError):
    status = 403


def _canonical(root, path):
    try:
        real_path = os.path.realpath(path, strict=True)
    except (OSError, ValueError):
        raise NotFound(path)

    if os.path.commonpath([root, real_path]) != root:
        raise Forbidden(path)
    return real_path


def resolve(root, target):
    """Map a request target such as /css/site.css to a regular file under root.

    root must already be canonical. Raises NotFound when nothing servable
    exists there and Forbidden when the canonical path leaves root. A
    directory resolves to its index.html, which is checked the same way.
    """
    path = _canonical(root, os.path.join(root, target[1:]))

    if os.path.isdir(path):
        path = _canonical(root, os.path.join(path, INDEX_FILE))

    if not os.path.isfile(path):
        raise NotFound(path)
    return path
