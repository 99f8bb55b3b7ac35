"""TCP echo server that serves every client on its own thread."""

from __future__ import annotations

import argparse
import re
import socket
import sys
import threading

DEFAULT_PORT = 8080
DEFAULT_BACKLOG = 10
RECV_SIZE = 1023
_POLL_INTERVAL = 0.2
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_port(text: str) -> int:
    """Read a port number the way the command line gives it.

    Leading whitespace and a sign are accepted and anything after the digits
    is ignored; text without leading digits counts as zero. A ``ValueError``
    is raised unless the result lies in 1..65535.
    """
    match = _LEADING_INT.match(text)
    port = int(match.group(1)) if match else 0
    if not 0 < port <= 65535:
        raise ValueError(f"invalid port: {text!r}")
    return port


class ThreadedEchoServer:
    """Echoes every byte a client sends, serving clients concurrently."""

    def __init__(
        self,
        host: str = "",
        port: int = DEFAULT_PORT,
        backlog: int = DEFAULT_BACKLOG,
    ) -> None:
        self._stop = threading.Event()
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._socket.bind((host, port))
            self._socket.listen(backlog)
        except OSError:
            self._socket.close()
            raise
        self._socket.settimeout(_POLL_INTERVAL)

    @property
    def server_address(self) -> tuple[str, int]:
        """The address the listening socket is bound to."""
        return self._socket.getsockname()[:2]

    def handle_client(self, conn: socket.socket, address) -> None:
        """Send back whatever the client sends until it disconnects."""
        host, port = address[:2]
        print(f"Client connected: {host}:{port}")
        with conn:
            try:
                while chunk := conn.recv(RECV_SIZE):
                    conn.sendall(chunk)
            except OSError:
                pass
        print(f"Client {host}:{port} disconnected")

    def serve_forever(self) -> None:
        """Accept clients and start a thread for each until shut down."""
        while not self._stop.is_set():
            if self._socket.fileno() == -1:
                break
            try:
                conn, address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stop.is_set() or self._socket.fileno() == -1:
                    break
                print(f"Accept error: {exc}", file=sys.stderr)
                continue
            conn.settimeout(None)
            worker = threading.Thread(
                target=self.handle_client, args=(conn, address), daemon=True
            )
            try:
                worker.start()
            except RuntimeError as exc:
                print(f"Could not start client thread: {exc}", file=sys.stderr)
                conn.close()

    def shutdown(self) -> None:
        """Ask :meth:`serve_forever` to stop accepting clients."""
        self._stop.set()

    def close(self) -> None:
        """Stop serving and release the listening socket."""
        self.shutdown()
        self._socket.close()

    def __enter__(self) -> ThreadedEchoServer:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def main(argv: list[str] | None = None) -> int:
    """Run the threaded echo server from the command line."""
    parser = argparse.ArgumentParser(
        prog="echoserve-threaded",
        description="Echo everything clients send, one thread per client.",
    )
    parser.add_argument("port", nargs="?", help=f"port to listen on (default: {DEFAULT_PORT})")
    parser.add_argument("--host", default="", help="address to bind (default: all)")
    args = parser.parse_args(argv)

    port = DEFAULT_PORT
    if args.port is not None:
        try:
            port = parse_port(args.port)
        except ValueError:
            print(f"Invalid port, using {DEFAULT_PORT}")

    try:
        server = ThreadedEchoServer(args.host, port)
    except OSError as exc:
        print(f"Failed to start server: {exc}", file=sys.stderr)
        return 1

    with server:
        print(f"Server running on port {server.server_address[1]}")
        print("Press Ctrl+C to stop")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nStopping server...")
        print("Closing server")
    return 0


if __name__ == "__main__":
    sys.exit(main())