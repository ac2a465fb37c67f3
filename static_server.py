import sys
import socket
import logging
import threading

import click

from handler import ConnectionHandler
from utils import LOGGER_NAME, ServerConfig, ConfigLoader, setup_logging, error_text

logger = logging.getLogger(LOGGER_NAME)


# ============================== 📡 LISTENER 📡 ==============================
class StaticHTTPServer:
    def __init__(self, config):
        self.config = config
        self.handler = ConnectionHandler(config)
        self.running = True

        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.sock.bind((config.host, config.port))
            self.sock.listen(socket.SOMAXCONN)
        except OSError:
            self.sock.close()
            raise

    @property
    def address(self):
        return self.sock.getsockname()[:2]

    def start(self):
        host, port = self.address
        logger.info(f"Listening on {host}:{port} ...")

        while self.running:
            try:
                conn, _ = self.sock.accept()
            except OSError:
                if not self.running:
                    break
                raise
            self.dispatch(conn)

    def dispatch(self, conn):
        if self.config.threaded:
            thread = threading.Thread(target=self.handler.handle, args=(conn,))
            thread.daemon = True
            thread.start()
        else:
            self.handler.handle(conn)

    def close(self):
        self.running = False
        try:
            # wakes up a thread blocked in accept()
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()


# ============================== 🚀 CLI COMMAND 🚀 ==============================
@click.command()
@click.argument('document_root', type=click.Path(exists=True, file_okay=False))
@click.argument('host', required=False)
@click.argument('port', type=int, required=False)
@click.option('--config', 'config_path', type=click.Path(dir_okay=False),
              help='JSON file with host, port, threaded, default_type, cache_age')
@click.option('--threaded/--sequential', default=None,
              help='Handle each connection on its own thread')
@click.option('--default-type', help='Content type for unknown extensions (default: answer 500)')
@click.option('--log-file', type=click.Path(dir_okay=False),
              help='Append log lines to this file instead of stderr')
def main(document_root, host, port, config_path, threaded, default_type, log_file):
    """Serve DOCUMENT_ROOT over HTTP/1.1 with chunked responses.

    HOST defaults to 127.0.0.1 and PORT to 8000. Every connection gets
    exactly one response and is then closed.
    """
    setup_logging(log_file)

    try:
        file_options = ConfigLoader.load_config_file(config_path) if config_path else {}
        options = ConfigLoader.merge(file_options, host=host, port=port,
                                     threaded=threaded, default_type=default_type)
        config = ServerConfig.create(document_root, **options)
    except (OSError, ValueError, TypeError) as e:
        click.echo(error_text(f"Invalid configuration: {e}"), err=True)
        sys.exit(1)

    try:
        server = StaticHTTPServer(config)
    except OSError as e:
        click.echo(error_text(f"Failed to bind {config.host}:{config.port}: {e}"), err=True)
        sys.exit(1)

    try:
        server.start()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
        click.echo("Server stopped.", err=True)


if __name__ == '__main__':
    main()
