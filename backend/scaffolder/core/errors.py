"""
Error taxonomy for scaffolding and dev server supervision.

Services raise these; only the API layer turns them into HTTP responses.
"""

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Sequence


class ExitCause(str, Enum):
    """Likely reason a dev server exited before it was ready (diagnostic only)"""
    MISSING_COMMAND = "missing_command"
    PORT_CONFLICT = "port_conflict"
    UNKNOWN = "unknown"


class ScaffoldError(Exception):
    """Base class for every error raised by the scaffolder"""


class NoPortAvailableError(ScaffoldError):
    def __init__(self, range_start: int, range_end: int):
        self.range_start = range_start
        self.range_end = range_end
        super().__init__(
            f"No available port in range {range_start}-{range_end - 1}"
        )


class PortNotAllocatedError(ScaffoldError):
    def __init__(self, port: int):
        self.port = port
        super().__init__(f"Port {port} was not allocated by this process")


class ServerStartError(ScaffoldError):
    """Base class for dev server startup failures"""

    def __init__(self, port: int, message: str):
        self.port = port
        super().__init__(message)


class MissingProjectFilesError(ServerStartError):
    def __init__(self, port: int, project_path: Path, missing: Iterable[str]):
        self.project_path = project_path
        self.missing = list(missing)
        super().__init__(
            port,
            f"Cannot start server in {project_path}: missing {', '.join(self.missing)}"
        )


class PortConflictError(ServerStartError):
    def __init__(self, port: int):
        super().__init__(port, f"Port {port} is already in use by another process")


class CommandNotFoundError(ServerStartError):
    def __init__(self, port: int, command: Sequence[str]):
        self.command = list(command)
        super().__init__(
            port,
            f"Command '{' '.join(self.command)}' or its runtime could not be found"
        )


class SpawnFailedError(ServerStartError):
    def __init__(self, port: int, command: Sequence[str], reason: str):
        self.command = list(command)
        self.reason = reason
        super().__init__(
            port,
            f"Failed to start process '{' '.join(self.command)}': {reason}"
        )


class ProcessExitedError(ServerStartError):
    def __init__(self, port: int, code: Optional[int], cause: ExitCause = ExitCause.UNKNOWN):
        self.code = code
        self.cause = cause
        super().__init__(
            port,
            f"Server process exited with code {code} (likely cause: {cause.value})"
        )


class CommandFailedError(ScaffoldError):
    def __init__(self, command: Sequence[str], returncode: Optional[int], reason: str = ""):
        self.command = list(command)
        self.returncode = returncode
        if returncode is None:
            message = f"Failed to start process '{' '.join(self.command)}': {reason}"
        else:
            message = f"Command '{' '.join(self.command)}' exited with code {returncode}"
        super().__init__(message)


class ProjectExistsError(ScaffoldError):
    def __init__(self, project_path: Path):
        self.project_path = project_path
        super().__init__(f"Directory '{project_path.name}' already exists.")
