from http import HTTPStatus

BLOCK_SIZE = 4096
CACHE_AGE = 3600


def encode_chunk(data):
    return b"%x\r\n" % len(data) + data + b"\r\n"


def write_status(wfile, code):
    """Write a body-less response such as 404 Not Found"""
    reason = HTTPStatus(code).phrase
    wfile.write(f"HTTP/1.1 {code} {reason}\r\nConnection: close\r\n\r\n".encode("ascii"))
    wfile.flush()


def write_file(wfile, path, content_type, cache_age=CACHE_AGE, block_size=BLOCK_SIZE):
    """Stream path as a 200 response with a chunked body.

    The headers go out before the file is opened, so an error opening or
    reading it leaves the client with a truncated body.
    """
    wfile.write(
        "HTTP/1.1 200 OK\r\n"
        f"Cache-Control: max-age={cache_age}\r\n"
        "Connection: close\r\n"
        f"Content-Type: {content_type}\r\n"
        "Transfer-Encoding: chunked\r\n"
        "\r\n".encode("ascii")
    )

    with open(path, "rb") as f:
        while True:
            block = f.read(block_size)
            if not block:
                break
            wfile.write(encode_chunk(block))

    wfile.write(b"0\r\n\r\n")
    wfile.flush()
