"""External command execution.

Strategies never call :mod:`subprocess` directly. They go through a
:class:`CommandRunner`, which makes it possible to swap in a recording runner
in tests or a different execution backend without patching the stdlib.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

from source_fetcher.exceptions import ErrorDuringExecution

Arg = Union[str, Path, "Quiet"]


@dataclass
class CommandResult:
    """Outcome of a finished command."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class Quiet:
    """Placeholder for a tool-specific quiet flag inside an argument list.

    Replaced by ``flag`` when output should be suppressed and dropped
    entirely in verbose mode.
    """

    flag: str


class CommandRunner(Protocol):
    """Capability to run external programs."""

    def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        capture: bool = False,
        output: Optional[Path] = None,
    ) -> CommandResult:
        """Run a command to completion.

        Args:
            args: Program and arguments
            cwd: Working directory for the command
            capture: Capture stdout/stderr instead of inheriting them
            output: Write the command's stdout to this file

        Returns:
            CommandResult with the exit status and any captured output
        """
        ...

    def pipeline(
        self,
        producer: Sequence[str],
        consumer: Sequence[str],
        *,
        cwd: Optional[Path] = None,
    ) -> tuple[CommandResult, CommandResult]:
        """Run ``producer`` with its stdout connected to ``consumer``'s stdin."""
        ...


class LocalRunner:
    """Runs commands as local subprocesses."""

    def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        capture: bool = False,
        output: Optional[Path] = None,
    ) -> CommandResult:
        argv = [str(arg) for arg in args]
        if output is not None:
            with open(output, "wb") as f:
                r = subprocess.run(argv, cwd=cwd, stdout=f, stderr=subprocess.PIPE, check=False)
            return CommandResult(argv, r.returncode, "", r.stderr.decode(errors="replace"))

        r = subprocess.run(
            argv, cwd=cwd, capture_output=capture, text=True, errors="replace", check=False
        )
        return CommandResult(argv, r.returncode, r.stdout or "", r.stderr or "")

    def pipeline(
        self,
        producer: Sequence[str],
        consumer: Sequence[str],
        *,
        cwd: Optional[Path] = None,
    ) -> tuple[CommandResult, CommandResult]:
        first_argv = [str(arg) for arg in producer]
        second_argv = [str(arg) for arg in consumer]
        with subprocess.Popen(first_argv, cwd=cwd, stdout=subprocess.PIPE) as first:
            with subprocess.Popen(second_argv, cwd=cwd, stdin=first.stdout) as second:
                # Let the producer see SIGPIPE if the consumer exits early
                first.stdout.close()
                second.wait()
            first.wait()
        return (
            CommandResult(first_argv, first.returncode),
            CommandResult(second_argv, second.returncode),
        )


_default_runner: CommandRunner = LocalRunner()


def get_runner() -> CommandRunner:
    """Get the process-wide default command runner."""
    return _default_runner


def set_runner(runner: CommandRunner) -> None:
    """Replace the process-wide default command runner."""
    global _default_runner
    _default_runner = runner


def expand_quiet_args(args: Sequence[Arg], verbose: bool = False) -> list[str]:
    """Resolve quiet flags in an argument list.

    A :class:`Quiet` marker is replaced by its flag, or removed when verbose.
    Without a marker, ``-q`` is inserted after the subcommand (e.g.
    ``svn up`` becomes ``svn up -q``) unless verbose.
    """
    expanded: list[str] = []
    marked = False
    for arg in args:
        if isinstance(arg, Quiet):
            marked = True
            if not verbose:
                expanded.append(arg.flag)
        else:
            expanded.append(str(arg))

    if not marked and not verbose:
        expanded.insert(2, "-q")
    return expanded


def safe_system(
    args: Sequence[Arg],
    *,
    runner: Optional[CommandRunner] = None,
    cwd: Optional[Path] = None,
    output: Optional[Path] = None,
) -> CommandResult:
    """Run a command and raise if it fails.

    Raises:
        ErrorDuringExecution: If the command exits with a non-zero status
    """
    runner = runner or get_runner()
    argv = [str(arg) for arg in args]
    result = runner.execute(argv, cwd=cwd, output=output)
    if not result.success:
        raise ErrorDuringExecution(argv, result.returncode, result.stderr)
    return result


def quiet_system(
    args: Sequence[Arg],
    *,
    runner: Optional[CommandRunner] = None,
    cwd: Optional[Path] = None,
) -> bool:
    """Run a command with its output discarded and report whether it succeeded."""
    runner = runner or get_runner()
    argv = [str(arg) for arg in args]
    return runner.execute(argv, cwd=cwd, capture=True).success


def popen_read(
    args: Sequence[Arg],
    *,
    runner: Optional[CommandRunner] = None,
    cwd: Optional[Path] = None,
) -> str:
    """Run a command and return its stdout, whatever its exit status."""
    runner = runner or get_runner()
    argv = [str(arg) for arg in args]
    return runner.execute(argv, cwd=cwd, capture=True).stdout


def safe_pipeline(
    producer: Sequence[Arg],
    consumer: Sequence[Arg],
    *,
    runner: Optional[CommandRunner] = None,
    cwd: Optional[Path] = None,
) -> None:
    """Pipe one command into another, raising if either stage fails."""
    runner = runner or get_runner()
    first, second = runner.pipeline(
        [str(arg) for arg in producer],
        [str(arg) for arg in consumer],
        cwd=cwd,
    )
    for result in (first, second):
        if not result.success:
            raise ErrorDuringExecution(result.args, result.returncode, result.stderr)
