# core/process.py
from __future__ import annotations
import shlex
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Sequence


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


ProcessRunner = Callable[[Sequence[str]], ProcessResult]


def quote_cmd(cmd: Sequence[str]) -> str:
    return " ".join(shlex.quote(x) for x in cmd)


def run_process(cmd: Sequence[str]) -> ProcessResult:
    """
    Run a command with stdout/stderr captured (nothing echoed to the user).
    A command that cannot be spawned at all is reported like a shell would: exit 127.
    """
    args: List[str] = [str(x) for x in cmd]
    try:
        p = subprocess.run(args, capture_output=True, text=True)
    except OSError as e:
        return ProcessResult(127, "", f"{args[0]}: {e}")
    return ProcessResult(p.returncode, p.stdout or "", p.stderr or "")
