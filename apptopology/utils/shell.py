"""
Thin wrappers around the external provisioning engine's CLI.
"""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import IO, List, Mapping, Optional


class CmdError(Exception):
    pass


def run(
    cmd: List[str], cwd: Optional[str], env: Optional[Mapping[str, str]] = None
) -> str:
    """Execute a command, echo both pipes, and return ONLY stdout text."""
    print(f"Running: {' '.join(cmd)}")
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
    except FileNotFoundError as ex:
        raise CmdError(f"Command not found: {cmd[0]}") from ex

    stdout_buf: List[str] = []

    def pump(pipe: IO[str], keep: bool) -> None:
        with pipe:
            for line in iter(pipe.readline, ""):
                line = line.rstrip()
                print(line, flush=True)
                if keep:
                    stdout_buf.append(line)

    threads = [
        threading.Thread(target=pump, args=(proc.stdout, True), daemon=True),
        threading.Thread(target=pump, args=(proc.stderr, False), daemon=True),
    ]
    for t in threads:
        t.start()
    rc = proc.wait()
    for t in threads:
        t.join()

    out_text = "\n".join(stdout_buf).strip()
    if rc != 0:
        raise CmdError(f"Command failed ({rc}): {' '.join(cmd)}\nSTDOUT:\n{out_text}")
    return out_text


def cdktf(
    project_dir: Path, args: List[str], env: Optional[Mapping[str, str]] = None
) -> str:
    return run(["cdktf", *args], cwd=str(project_dir), env=env)
