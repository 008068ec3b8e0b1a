"""Fetch a page over HTTP and print everything the server sends back."""

from __future__ import annotations

import os
import sys

from sponge.address import Address
from sponge.sockets import TCPSocket


def _emit(data: bytes) -> None:
    sink = getattr(sys.stdout, "buffer", None)
    if sink is None:
        sys.stdout.write(data.decode("latin-1"))
        return
    sys.stdout.flush()
    sink.write(data)
    sink.flush()


def get_url(host: str, path: str) -> None:
    """Request ``path`` from the HTTP service on ``host`` and print the reply until EOF."""
    with TCPSocket() as sock:
        sock.connect(Address.resolve(host, "http"))
        request = f"GET {path} HTTP/1.1\r\nHost: {host}\r\nConnection: close\r\n\r\n"
        sock.write(request)
        while not sock.eof():
            data = sock.read()
            if data:
                _emit(data)


def main(argv: list[str] | None = None) -> int:
    """Command entry point: ``webget HOST PATH``."""
    args = sys.argv[1:] if argv is None else list(argv)
    prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "webget"
    if len(args) != 2:
        sys.stderr.write(f"Usage: {prog} HOST PATH\n")
        sys.stderr.write(f"\tExample: {prog} example.com /index.html\n")
        return 1
    host, path = args
    try:
        get_url(host, path)
    except Exception as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())