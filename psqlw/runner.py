"""
Subprocess execution for psqlw.

Both the password provider and psql are run through a CommandRunner so the
launcher can be exercised with fakes instead of real processes.
"""

import signal
import subprocess
import threading
from contextlib import contextmanager
from typing import Iterator, List, Mapping, Optional, Sequence


@contextmanager
def ignore_interrupts() -> Iterator[None]:
    """
    Ignore SIGINT and SIGQUIT in this process while a child is running.

    The terminal delivers them to the whole foreground process group, and the
    child (psql cancelling a query, a provider prompting for a password)
    decides what to do with them.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    signums = [signal.SIGINT]
    if hasattr(signal, "SIGQUIT"):
        signums.append(signal.SIGQUIT)

    previous = {signum: signal.signal(signum, signal.SIG_IGN) for signum in signums}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


class CommandRunner:
    """Interface for running an external command to completion."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:
        """
        Run command with args and wait for it to exit.

        Args:
            command: Executable path or name looked up on PATH
            args: Arguments passed after the command
            env: Child environment (default: inherit)
            capture_output: Capture stdout as bytes instead of inheriting it

        Returns:
            CompletedProcess with the exit status, negative if killed by a signal

        Raises:
            OSError: If the command cannot be started
        """
        raise NotImplementedError


class SubprocessRunner(CommandRunner):
    """Run commands with the subprocess module, inheriting stdin and stderr."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        capture_output: bool = False,
    ) -> subprocess.CompletedProcess:
        argv: List[str] = [command, *args]
        stdout = subprocess.PIPE if capture_output else None

        with subprocess.Popen(
            argv,
            env=None if env is None else dict(env),
            stdout=stdout,
        ) as proc:
            with ignore_interrupts():
                output, _ = proc.communicate()

        return subprocess.CompletedProcess(argv, proc.returncode, output)
