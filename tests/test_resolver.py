import os

import pytest

import resolver
from resolver import resolve, NotFound, Forbidden


def test_resolves_plain_file(docroot):
    assert resolve(docroot, "/style.css") == os.path.join(docroot, "style.css")


def test_root_resolves_to_index(docroot):
    assert resolve(docroot, "/") == os.path.join(docroot, "index.html")


def test_directory_matches_its_index(docroot):
    assert resolve(docroot, "/docs") == resolve(docroot, "/docs/index.html")
    assert resolve(docroot, "/docs/") == os.path.join(docroot, "docs", "index.html")


def test_dot_segments_inside_root_are_allowed(docroot):
    assert resolve(docroot, "/docs/../style.css") == os.path.join(docroot, "style.css")


def test_missing_file(docroot):
    with pytest.raises(NotFound):
        resolve(docroot, "/missing.html")


def test_directory_without_index(docroot):
    with pytest.raises(NotFound):
        resolve(docroot, "/bare/")


@pytest.mark.parametrize("target", [
    "/../secret.html",
    "/docs/../../secret.html",
    "//etc/passwd",
])
def test_traversal_is_forbidden(docroot, target):
    with pytest.raises(Forbidden):
        resolve(docroot, target)


def test_traversal_to_missing_path_is_not_found(docroot):
    with pytest.raises(NotFound):
        resolve(docroot, "/../no-such-file")


def test_symlink_escape_is_forbidden(docroot):
    with pytest.raises(Forbidden):
        resolve(docroot, "/escape.html")
    with pytest.raises(Forbidden):
        resolve(docroot, "/outside/secret.html")


def test_sibling_with_common_prefix_is_forbidden(tmp_path, docroot):
    sibling = tmp_path / "www2"
    sibling.mkdir()
    (sibling / "a.html").write_bytes(b"x")

    with pytest.raises(Forbidden):
        resolve(docroot, "/../www2/a.html")


def test_embedded_nul_is_not_found(docroot):
    with pytest.raises(NotFound):
        resolve(docroot, "/index.html\x00.css")


def test_errors_carry_http_status():
    assert NotFound.status == 404
    assert Forbidden.status == 403
    assert issubclass(NotFound, resolver.ResolutionError)
    assert issubclass(Forbidden, resolver.ResolutionError)
    assert not hasattr(resolver.ResolutionError, "status")
