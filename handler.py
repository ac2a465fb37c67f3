import socket
import logging

import chunked
import resolver
from content_types import content_type
from utils import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

MAX_REQUEST_LINE = 8192


class BadRequest(Exception):
    pass


class ConnectionHandler:
    """Serves exactly one request per connection, then closes it."""

    def __init__(self, config):
        self.config = config

    def handle(self, sock):
        try:
            self.serve(sock)
        except Exception as e:
            logger.error(f"Error: {e}")
        finally:
            self.close(sock)

    def serve(self, sock):
        with sock.makefile("rb") as rfile, sock.makefile("wb") as wfile:
            raw_line = rfile.readline(MAX_REQUEST_LINE + 1)
            if not raw_line.strip():
                return

            try:
                request_line = self.decode_request_line(raw_line)
                logger.info(f"Processing {request_line} ...")
                target = self.parse_request_line(request_line)
            except BadRequest:
                chunked.write_status(wfile, 400)
                return

            self.respond(wfile, target)

    def decode_request_line(self, raw_line):
        if len(raw_line) > MAX_REQUEST_LINE:
            logger.info(f"Processing {raw_line[:64]!r}... ({len(raw_line)}+ bytes)")
            raise BadRequest("request line too long")
        try:
            return raw_line.decode("utf-8").strip()
        except UnicodeDecodeError:
            logger.info(f"Processing {raw_line.strip()!r} ...")
            raise BadRequest("request line is not UTF-8")

    def parse_request_line(self, request_line):
        pieces = request_line.split()
        if len(pieces) < 2 or pieces[0] != "GET":
            raise BadRequest(request_line)

        target = pieces[1]
        if not target.startswith("/"):
            raise BadRequest(request_line)
        return target

    def respond(self, wfile, target):
        try:
            path = resolver.resolve(self.config.root, target)
        except resolver.ResolutionError as e:
            chunked.write_status(wfile, e.status)
            return

        mime_type = content_type(path, self.config.default_type)
        if mime_type is None:
            logger.error(f"Error: no content type for {path}")
            chunked.write_status(wfile, 500)
            return

        chunked.write_file(wfile, path, mime_type,
                           cache_age=self.config.cache_age,
                           block_size=self.config.block_size)

    def close(self, sock):
        try:
            sock.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # peer already gone
        sock.close()
