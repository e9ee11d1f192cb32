"""Command execution data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecOptions:
    """Per-call execution options.

    Constructed by the caller for a single command and discarded afterwards.
    """

    sudo: bool = False
    timeout: float | None = None
    stdin: str | bytes | None = None


class CommandError(Exception):
    """A remote command ran and exited non-zero.

    Distinct from transport failures so that callers can tell "the command
    reported failure" apart from "the command could not be run at all".
    """

    def __init__(
        self,
        command: str,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Initialize command error.

        Args:
            command: Command string as issued to the host
            exit_code: Exit status, or -1 when killed by a signal
            stdout: Captured standard output
            stderr: Captured standard error
        """
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip()
        message = f"command '{command}' exited with exit code {exit_code}"
        if detail:
            message += f": {detail}"
        super().__init__(message)

    @property
    def output(self) -> str:
        """Combined stdout and stderr, stdout first."""
        return join_output(self.stdout, self.stderr)


class RetryError(Exception):
    """All attempts of a retried command failed."""

    def __init__(self, command: str, attempts: int, last_error: Exception) -> None:
        """Initialize retry error.

        Args:
            command: Command that was retried
            attempts: Number of attempts made
            last_error: Error raised by the final attempt
        """
        self.command = command
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"command '{command}' failed after {attempts} attempts: {last_error}"
        )


def join_output(stdout: str, stderr: str) -> str:
    """Concatenate stdout and stderr into one observable string."""
    if stdout and stderr:
        return f"{stdout}\n{stderr}"
    return stdout or stderr
