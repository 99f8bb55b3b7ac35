"""Sequential TCP server that echoes back complete lines."""

from __future__ import annotations

import argparse
import contextlib
import socket
import sys
import threading

from echoserve.lines import DEFAULT_LIMIT, LineAccumulator, OverflowPolicy

DEFAULT_PORT = 8080
RECV_SIZE = 1024
_POLL_INTERVAL = 0.2


class LineEchoServer:
    """Serves one client at a time, replying with each line it sends."""

    def __init__(
        self,
        host: str = "",
        port: int = DEFAULT_PORT,
        limit: int = DEFAULT_LIMIT,
        policy: OverflowPolicy | str = OverflowPolicy.REPORT,
        backlog: int = 5,
    ) -> None:
        # Validate settings before touching the network.
        LineAccumulator(limit, policy)
        self.limit = limit
        self.policy = OverflowPolicy(policy)
        self._stop = threading.Event()
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
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

    def handle_connection(self, conn: socket.socket, address) -> None:
        """Echo lines on one connection until the client disconnects."""
        host, port = address[:2]
        print(f"New connection: {host}:{port}")
        accumulator = LineAccumulator(self.limit, self.policy)
        error: OSError | None = None
        with conn:
            try:
                while chunk := conn.recv(RECV_SIZE):
                    replies = accumulator.feed(chunk)
                    if replies:
                        conn.sendall(b"".join(replies))
            except OSError as exc:
                error = exc
            tail = accumulator.flush()
            if tail:
                with contextlib.suppress(OSError):
                    conn.sendall(tail)
        if error is None:
            print("Client disconnected")
        else:
            print(f"Read error: {error}", file=sys.stderr)
        print("Connection closed\n")

    def serve_forever(self) -> None:
        """Accept and handle connections one by one until shut down."""
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
            self.handle_connection(conn, address)

    def shutdown(self) -> None:
        """Ask :meth:`serve_forever` to return after the current client."""
        self._stop.set()

    def close(self) -> None:
        """Stop serving and release the listening socket."""
        self.shutdown()
        self._socket.close()

    def __enter__(self) -> LineEchoServer:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def main(argv: list[str] | None = None) -> int:
    """Run the line echo server from the command line."""
    parser = argparse.ArgumentParser(
        prog="echoserve-lines",
        description="Echo each line a client sends back to it.",
    )
    parser.add_argument("--host", default="", help="address to bind (default: all)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT,
                        help="longest line in bytes")
    parser.add_argument(
        "--policy",
        choices=[policy.value for policy in OverflowPolicy],
        default=OverflowPolicy.REPORT.value,
        help="what to do with over-long lines",
    )
    args = parser.parse_args(argv)

    try:
        server = LineEchoServer(args.host, args.port, args.limit, args.policy)
    except (OSError, ValueError) as exc:
        print(f"Failed to start server: {exc}", file=sys.stderr)
        return 1

    with server:
        print(f"Echo server listening on port {server.server_address[1]}")
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            print("\nStopping server...")
    return 0


if __name__ == "__main__":
    sys.exit(main())