from __future__ import annotations

from functools import lru_cache
import os
import platform
import socket


@lru_cache(maxsize=1)
def describe_host() -> str:
    """Short markdown list about the machine, included in agent prompts."""
    lines = [
        f"- Host: {socket.gethostname()}",
        f"- OS: {platform.system()} {platform.release()}",
        f"- Architecture: {platform.machine()}",
        f"- CPU cores: {os.cpu_count() or 'unknown'}",
        f"- Python agent PID: {os.getpid()}",
    ]
    try:
        with open("/etc/os-release", "r", encoding="utf-8") as fh:
            for line in fh:
                if line.startswith("PRETTY_NAME="):
                    lines.insert(1, f"- Distribution: {line.split('=', 1)[1].strip().strip(chr(34))}")
                    break
    except OSError:
        pass
    return "\n".join(lines)
