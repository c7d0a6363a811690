"""Shell command executor for scheduled jobs."""

import asyncio
import os
import shlex
from datetime import datetime, timezone
from typing import Any, Dict, List, Union
import logging

from .base import BaseExecutor, ExecutionResult
from config import settings

logger = logging.getLogger(__name__)


def _elapsed(started_at: datetime) -> tuple:
    finished_at = datetime.now(timezone.utc)
    return finished_at, (finished_at - started_at).total_seconds()


class BashExecutor(BaseExecutor):
    """Runs a command on the host, once per firing."""

    def _validate_command(self, command: str) -> bool:
        """Check the command against the host command settings."""
        if not settings.allow_host_commands:
            logger.error("Host commands are disabled in configuration")
            return False

        if settings.allowed_commands:
            cmd_parts = shlex.split(command)
            if cmd_parts and cmd_parts[0] not in settings.allowed_commands:
                logger.error(f"Command '{cmd_parts[0]}' not in allowed commands list")
                return False

        return True

    def _build_command(self, command: str, args: List[str], use_shell: bool) -> Union[str, List[str]]:
        if use_shell:
            if not args:
                return command
            return f"{command} {' '.join(shlex.quote(arg) for arg in args)}"
        return shlex.split(command) + list(args)

    async def execute(self, config: Dict[str, Any]) -> ExecutionResult:
        """Run a command described by ``config``.

        Config structure:
        {
            "command": "echo 'Hello World'",
            "args": ["arg1", "arg2"],  # Optional arguments
            "env": {"VAR1": "value1"},  # Extra environment variables
            "working_dir": "/path/to/dir",
            "timeout": 300,  # seconds
            "shell": true
        }
        """
        started_at = datetime.now(timezone.utc)

        try:
            command = config.get("command")
            if not command:
                raise ValueError("Command is required")

            if not self._validate_command(command):
                raise ValueError(f"Command not allowed: {command}")

            args = config.get("args", [])
            timeout = config.get("timeout", settings.command_timeout)
            use_shell = config.get("shell", True)
            full_command = self._build_command(command, args, use_shell)

            env = os.environ.copy()
            env.update(config.get("env", {}))

            logger.info(f"Executing command: {command}")

            if use_shell:
                process = await asyncio.create_subprocess_shell(
                    full_command,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=config.get("working_dir"),
                    env=env
                )
            else:
                process = await asyncio.create_subprocess_exec(
                    *full_command,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=config.get("working_dir"),
                    env=env
                )

            try:
                stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()

                finished_at, duration = _elapsed(started_at)
                error_msg = f"Command timeout after {timeout} seconds"
                logger.error(error_msg)
                return ExecutionResult(
                    success=False,
                    started_at=started_at,
                    finished_at=finished_at,
                    duration=duration,
                    error=error_msg
                )

            finished_at, duration = _elapsed(started_at)
            success = process.returncode == 0
            if success:
                logger.info(f"Command completed in {duration:.2f}s")
            else:
                logger.warning(f"Command failed with exit code: {process.returncode}")

            return ExecutionResult(
                success=success,
                started_at=started_at,
                finished_at=finished_at,
                duration=duration,
                output={
                    "exit_code": process.returncode,
                    "stdout": stdout.decode("utf-8", errors="replace") if stdout else "",
                    "stderr": stderr.decode("utf-8", errors="replace") if stderr else "",
                    "command": command,
                    "args": args
                },
                error=None if success else f"Exit code: {process.returncode}"
            )

        except (ValueError, OSError) as e:
            finished_at, duration = _elapsed(started_at)
            error_msg = f"Command failed: {e}"
            logger.error(error_msg)
            return ExecutionResult(
                success=False,
                started_at=started_at,
                finished_at=finished_at,
                duration=duration,
                error=error_msg
            )
