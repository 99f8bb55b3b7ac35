import socket
import threading

import pytest

from echoserve.line_server import LineEchoServer, main
from echoserve.lines import OVERFLOW_MESSAGE, OverflowPolicy

CLIENT_ADDRESS = ("127.0.0.1", 40000)


def _read_all(sock):
    chunks = []
    while chunk := sock.recv(4096):
        chunks.append(chunk)
    return b"".join(chunks)


def _exchange_direct(server, data):
    client, served = socket.socketpair()
    with client:
        client.sendall(data)
        client.shutdown(socket.SHUT_WR)
        server.handle_connection(served, CLIENT_ADDRESS)
        client.settimeout(5)
        return _read_all(client)


@pytest.fixture
def server():
    with LineEchoServer("127.0.0.1", 0) as srv:
        yield srv


@pytest.fixture
def running_server():
    srv = LineEchoServer("127.0.0.1", 0)
    thread = threading.Thread(target=srv.serve_forever, daemon=True)
    thread.start()
    yield srv, thread
    srv.close()
    thread.join(timeout=5)


def _talk(address, data):
    with socket.create_connection(address, timeout=5) as client:
        client.sendall(data)
        client.shutdown(socket.SHUT_WR)
        return _read_all(client)


def test_handle_connection_echoes_lines(server):
    assert _exchange_direct(server, b"hello\nworld\n") == b"hello\nworld\n"


def test_handle_connection_normalises_line_endings(server):
    assert _exchange_direct(server, b"a\r\nb\rc\n") == b"a\nb\nc\n"


def test_handle_connection_flushes_unterminated_tail(server):
    assert _exchange_direct(server, b"first\nlast") == b"first\nlast\n"


def test_handle_connection_skips_blank_lines(server):
    assert _exchange_direct(server, b"\n\n\r\n") == b""


def test_handle_connection_reports_overflow():
    with LineEchoServer("127.0.0.1", 0, limit=4) as srv:
        assert _exchange_direct(srv, b"abcdefg\n") == OVERFLOW_MESSAGE + b"fg\n"


def test_handle_connection_truncates_with_truncate_policy():
    with LineEchoServer("127.0.0.1", 0, limit=3, policy=OverflowPolicy.TRUNCATE) as srv:
        data = b"abcdefg"
        assert _exchange_direct(srv, data + b"\n") == data[:3] + b"\n"


def test_handle_connection_closes_socket(server):
    client, served = socket.socketpair()
    with client:
        client.shutdown(socket.SHUT_WR)
        server.handle_connection(served, CLIENT_ADDRESS)
        assert served.fileno() == -1


def test_server_address_is_bound_port(server):
    host, port = server.server_address
    assert host == "127.0.0.1"
    assert 0 < port < 65536


def test_serve_forever_echoes_over_tcp(running_server):
    srv, _ = running_server
    assert _talk(srv.server_address, b"ping\n") == b"ping\n"


def test_serve_forever_handles_sequential_clients(running_server):
    srv, _ = running_server
    for payload in (b"one\n", b"two\r\n", b"three"):
        assert _talk(srv.server_address, payload) == payload.rstrip(b"\r\n") + b"\n"


def test_shutdown_stops_serve_forever(running_server):
    srv, thread = running_server
    srv.shutdown()
    thread.join(timeout=5)
    assert not thread.is_alive()


def test_close_releases_listening_socket():
    srv = LineEchoServer("127.0.0.1", 0)
    address = srv.server_address
    srv.close()
    with pytest.raises(ConnectionRefusedError):
        socket.create_connection(address, timeout=5)


def test_invalid_limit_rejected():
    with pytest.raises(ValueError):
        LineEchoServer("127.0.0.1", 0, limit=0)


def test_bind_failure_raises():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        with pytest.raises(OSError):
            LineEchoServer("127.0.0.1", busy.getsockname()[1])


def test_main_returns_error_when_port_busy(capsys):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        port = busy.getsockname()[1]
        assert main(["--host", "127.0.0.1", "--port", str(port)]) == 1
    assert "Failed to start server" in capsys.readouterr().err


def test_main_returns_error_for_bad_limit():
    assert main(["--host", "127.0.0.1", "--port", "0", "--limit", "0"]) == 1


def test_main_rejects_unknown_policy():
    with pytest.raises(SystemExit):
        main(["--policy", "explode"])