import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional, Sequence, Union

from ..core.errors import CommandFailedError

logger = logging.getLogger(__name__)


async def run_command(
    command: str,
    args: Sequence[str] = (),
    cwd: Optional[Union[str, Path]] = None,
    capture: bool = False
) -> str:
    """
    Run an external command to completion.

    Args:
        command: Executable name, resolved on PATH
        args: Command arguments
        cwd: Working directory for the child process
        capture: Capture stdout/stderr instead of inheriting the host's streams

    Returns:
        Captured stdout, or an empty string when not capturing

    Raises:
        CommandFailedError: if the command cannot be started or exits non-zero
    """
    argv = [command, *args]
    logger.info(f"Executing command: {' '.join(argv)}" + (f" (cwd: {cwd})" if cwd else ""))

    pipe = asyncio.subprocess.PIPE if capture else None
    try:
        process = await asyncio.create_subprocess_exec(
            shutil.which(command) or command, *args,
            cwd=str(cwd) if cwd else None,
            stdout=pipe,
            stderr=pipe
        )
    except OSError as e:
        logger.error(f"Failed to start process '{command}': {e}")
        raise CommandFailedError(argv, None, str(e)) from e

    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        if stderr:
            logger.error(f"'{command}' stderr: {stderr.decode('utf-8', errors='replace').strip()}")
        raise CommandFailedError(argv, process.returncode)

    if stderr:
        # npm reports warnings on stderr
        logger.info(f"'{command}' details: {stderr.decode('utf-8', errors='replace').strip()}")

    logger.info(f"Command '{command}' completed successfully.")
    return stdout.decode("utf-8", errors="replace") if stdout else ""
