"""One-click launcher for the therapist relay."""

from __future__ import annotations

import os
import socket
import subprocess
import sys
import time
import webbrowser
from pathlib import Path

import httpx
from dotenv import load_dotenv

from therapist_relay.config.settings import load_settings


def _is_port_free(port: int) -> bool:
    """Return True if a TCP port is available on localhost."""

    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(0.2)
        if sock.connect_ex(("127.0.0.1", port)) == 0:
            return False
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(("127.0.0.1", port))
            return True
        except OSError:
            return False


def _pick_port(start_port: int, max_port: int) -> int:
    """Pick an available port from a range."""

    for port in range(start_port, max_port + 1):
        if _is_port_free(port):
            return port
    return start_port


def _start_server(port: int) -> subprocess.Popen[str]:
    """Start uvicorn serving the relay app."""

    reload_enabled = os.getenv("ENABLE_RELOAD", "0").strip() == "1"
    args = [
        sys.executable or "python",
        "-m",
        "uvicorn",
        "therapist_relay.main:app",
        "--host",
        "127.0.0.1",
        "--port",
        str(port),
    ]
    if reload_enabled:
        args.append("--reload")
    return subprocess.Popen(args, cwd=Path(__file__).resolve().parent)


def _wait_for_server(url: str, timeout_seconds: int = 30) -> bool:
    """Wait until the health endpoint responds."""

    start_time = time.time()
    with httpx.Client(timeout=1.0, trust_env=False) as client:
        while time.time() - start_time < timeout_seconds:
            try:
                response = client.get(url)
                if response.status_code == 200:
                    return True
            except httpx.HTTPError:
                time.sleep(1)
    return False


def main() -> int:
    """Launch the relay and open the chat page."""

    load_dotenv()
    preferred_port = load_settings().port
    port = _pick_port(preferred_port, preferred_port + 10)
    if port != preferred_port:
        print(f"Port {preferred_port} is busy, using {port} instead.")
    server = _start_server(port)
    url = f"http://127.0.0.1:{port}/"
    ready = _wait_for_server(f"{url}api/health")
    if not ready:
        print(f"Relay did not become ready in time. Open {url} manually.")
        return 1
    print(f"Therapist relay running on {url}")
    print(f"Health check: {url}api/health")
    webbrowser.open(url)
    try:
        return server.wait()
    except KeyboardInterrupt:
        server.terminate()
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
