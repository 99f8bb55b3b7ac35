# echoserve

This package provides two small TCP echo servers. Use them to test
clients, check connectivity, or probe a network from a shell.

## Installation

```
pip install .
```

## Commands

### Line echo server

```
echoserve-lines [--host HOST] [--port PORT] [--limit BYTES] [--policy {report,truncate}]
```

The server listens on all interfaces on port 8080 by default. It handles
one client at a time.

It reads incoming bytes into lines. A line ends at `\n` or at `\r`.
Each line that has content is sent back with one `\n` after it. Empty
lines are dropped, so a `\r\n` pair produces only one reply. If the
client disconnects partway through a line, the server still sends that
part back.

`--limit` sets the longest line the server holds, in bytes. The default
is 2047. `--policy` controls what happens when a line goes past that
limit:

- `report` (default): the client gets an error message, and the server
  starts a new line.
- `truncate`: the extra bytes are dropped until the line ends.

If the server cannot bind its socket, or the settings are invalid, the
command prints the error and exits with status 1. Press Ctrl+C to stop
the server.

### Threaded echo server

```
echoserve-threaded [PORT] [--host HOST]
```

This server starts a new thread for each client. Whatever a client sends
comes back to it unchanged.

The port defaults to 8080. The command reads the leading digits of the
argument, so `8081abc` means 8081. If the result is not between 1 and
65535, the command prints a notice and uses 8080 instead. Press Ctrl+C
to stop the server.

## Library use

```python
from echoserve.lines import LineAccumulator, OverflowPolicy

acc = LineAccumulator(limit=2047, policy=OverflowPolicy.REPORT)
acc.feed(b"hello\nwor")   # [b"hello\n"]
acc.pending               # b"wor"
acc.flush()               # b"wor\n"
acc.reset()               # discard any unterminated line
```

`LineEchoServer` and `ThreadedEchoServer` work the same way:

- `LineEchoServer` comes from `echoserve.line_server`.
- `ThreadedEchoServer` comes from `echoserve.threaded_server`.
- Both bind and listen when they are created.
- Both can be used as context managers.
- `server_address` reports the address the server is bound to.
- `serve_forever()` runs the server.
- `shutdown()` stops it from another thread. `LineEchoServer` first
  finishes with its current client.
- `close()` releases the listening socket.

```python
import threading
from echoserve.threaded_server import ThreadedEchoServer, parse_port

with ThreadedEchoServer("127.0.0.1", 0) as server:
    threading.Thread(target=server.serve_forever, daemon=True).start()
    print(server.server_address)
    ...
    server.shutdown()

parse_port("8081")  # 8081; raises ValueError outside 1..65535
```

## Tests

```
pip install .[test]
pytest
```