# louisnet

A compact TCP networking library built around the reactor pattern. One
event loop and one poller wait for readiness on file descriptors.
Channels pass the events that fire to callbacks. On top of these sit an
acceptor, TCP connections with input and output buffers, and a TCP server
that ties them together. An echo server is included. It runs on POSIX
systems and uses `select.poll`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Running the echo server

```
louisnet-echo
louisnet-echo --port 9000
```

By default the server listens on port 8888 on all interfaces. It writes
everything a client sends straight back to that client. For each
connection that comes up or goes down, and for each message it receives,
it prints a line to standard output. Stop it with Ctrl+C.
`python -m louisnet.echo` does the same.

## Writing a server

```python
from louisnet.event_loop import EventLoop
from louisnet.inet_address import InetAddress
from louisnet.tcp_server import TcpServer


def on_connection(conn):
    print(conn.name, "up" if conn.connected() else "down")


def on_message(conn, buffer):
    data = buffer.retrieve_all_as_bytes()
    conn.send(data.upper())


with EventLoop() as loop, TcpServer(loop, InetAddress(9000)) as server:
    server.set_connection_callback(on_connection)
    server.set_message_callback(on_message)
    server.start()
    loop.loop()
```

The connection callback runs twice for each connection: once when it is
established and once when it closes.

The message callback receives the connection and its input `Buffer`.
Take out what you need. Whatever you leave stays in the buffer for the
next call. If no message callback is set, the server discards incoming
data.

`TcpServer.close()` shuts down every live connection and closes the
listening socket. `TcpServer.connections` is a read-only view of the
live connections, keyed by file descriptor. `TcpServer.local_address`
gives the address the server is actually bound to, which is useful when
you listen on port 0.

## Building blocks

- `louisnet.buffer.Buffer`: a growable byte buffer with a small
  prependable area (`Buffer.CHEAP_PREPEND`, 8 bytes), a readable region
  and a writable region (initially `Buffer.INITIAL_SIZE`, 1024 bytes).
  - `append` accepts bytes or str.
  - `peek` returns the readable bytes without consuming them.
  - `retrieve`, `retrieve_all`, `retrieve_as_bytes`,
    `retrieve_all_as_bytes`, `retrieve_as_string` and
    `retrieve_all_as_string` consume data.
  - `read_fd` and `write_fd` move data from or to a file descriptor and
    raise `OSError` on failure.
  - Asking to retrieve more bytes than are readable raises `ValueError`.
- `louisnet.inet_address.InetAddress`: an IPv4 address and port.
  - `InetAddress(port)` covers all interfaces and
    `InetAddress(port, True)` covers loopback only.
  - `InetAddress.from_ip_port("127.0.0.1", 8080)` and
    `InetAddress.from_sockaddr(("127.0.0.1", 8080))` take an explicit
    address.
  - `to_ip()`, `to_port()` and `to_ip_port()` (`"127.0.0.1:8080"`) read
    it back.
  - An invalid address or a port outside 0–65535 raises `ValueError`.
- `louisnet.event_loop.EventLoop`: `loop()` runs until `quit()` is
  called and dispatches the fired events to their channels. Calling
  `loop()` while it is already running raises `RuntimeError`. It works as
  a context manager, and `close()` releases every channel still
  registered.
- `louisnet.channel.Channel`: binds a file descriptor to read, write,
  close and error callbacks.
  - `enable_read`, `enable_write`, `disable_read`, `disable_write` and
    `disable_all` change the events it is interested in and register the
    change with its loop.
  - `handle_event` dispatches the events in `revents`.
  - `remove` detaches the channel from its loop.
- `louisnet.poller.Poller`: keeps the map from descriptors to channels
  and the poll set in step. `poll(timeout_ms)` returns the channels whose
  events fired.
- `louisnet.acceptor.Acceptor`: owns a non-blocking listening socket
  with `SO_REUSEADDR` set. `listen()` binds the socket and starts
  watching it. Each accepted socket goes to the new-connection callback
  together with its peer `InetAddress`. If no callback is set, the socket
  is closed.
- `louisnet.tcp_connection.TcpConnection`: one established connection.
  - `send` writes at once when it can and buffers the rest.
  - `shutdown` closes the write side once pending output has been
    flushed.
  - `force_close` closes the connection now and runs the close
    callbacks.
  - `set_tcp_no_delay` toggles `TCP_NODELAY`, which is on by default.
  - `state` is a `ConnectionState`. `connected()` and `disconnected()`
    query it.
- `louisnet.tcp_server.TcpServer`: accepts connections and forwards
  their events to the callbacks you set.
- `louisnet.echo.EchoServer`: the echo server used by `louisnet-echo`.
- `louisnet.timestamp.Timestamp`: `Timestamp.now()` gives the current
  time with microsecond resolution. `str()` formats it in local time as
  `YYYY/MM/DD HH:MM:SS`.

## Logging

The networking modules report through Python's standard `logging`
module, under logger names such as `louisnet.poller`.

Separately, `louisnet.log` provides a process-wide `Logger`. It writes to
the console, to a file, or to both, and renames the file with a timestamp
suffix once it reaches a size limit.

```python
from louisnet.log import Logger, LogLevel, LogTarget, info, error

Logger.get_instance().init(LogLevel.DEBUG, LogTarget.BOTH, "server.log", 1024 * 1024)
info("listening on port %d", 9000)
error("accept failed: %s", "resource temporarily unavailable")
```

Each record carries:

- a millisecond timestamp
- the level
- the caller's file and line
- the thread id

The helper functions `trace`, `debug`, `info`, `warn`, `error` and
`fatal` take %-style arguments and cut the message to 1023 characters.
Levels, from lowest to highest, are `TRACE`, `DEBUG`, `INFO`, `WARN`,
`ERROR` and `FATAL`. Messages below the configured level are dropped.
`Logger.close()` closes the log file.

## What it does not do

Everything runs on a single thread in one event loop. The library only
covers the server side of IPv4 TCP. It has no client or connector for
making outgoing connections, no timers, and no IPv6 support.