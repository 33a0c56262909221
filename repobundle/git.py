"""
Git helper utilities for repobundle.

Wraps the two git operations a backup needs, a mirror clone and a bundle of
all refs, behind typed errors that never leak credentials.
"""

import subprocess
from pathlib import Path

from repobundle.exceptions import ConfigurationError, GitCommandError, GitTimeoutError
from repobundle.logging import log_git_command, mask_sensitive_data


class GitRunner:
    """
    Runs git as a blocking subprocess.

    Output is captured rather than printed; it only surfaces, masked, in the
    ``GitCommandError`` raised when a command fails.

    Example:
        ```python
        from repobundle.git import GitRunner

        git = GitRunner(timeout=600)
        git.mirror_clone("https://github.com/acme/widgets.git", "./scratch")
        git.create_bundle("./scratch", "widgets-1698796800000.bundle")
        ```
    """

    def __init__(self, executable: str = "git", timeout: float | None = None) -> None:
        """
        Initialize the runner.

        Args:
            executable: git executable name or path
            timeout: Seconds allowed per invocation; None waits indefinitely
        """
        self.executable = executable
        self.timeout = timeout

    def ensure_available(self) -> str:
        """
        Check that git can be executed.

        Returns:
            The ``git --version`` output

        Raises:
            ConfigurationError: If the executable cannot be run
        """
        try:
            return self._run(["--version"]).strip()
        except (OSError, GitCommandError) as e:
            raise ConfigurationError(f"git executable {self.executable!r} is not usable: {e}") from e

    def mirror_clone(self, url: str, destination: str | Path) -> None:
        """
        Mirror-clone ``url`` into the existing directory ``destination``.

        Raises:
            GitCommandError: If git clone fails
            GitTimeoutError: If git clone exceeds the timeout
        """
        self._run(["clone", "--mirror", url, "."], cwd=destination)

    def create_bundle(self, working_dir: str | Path, bundle_name: str) -> Path:
        """
        Bundle every branch and tag of the repository in ``working_dir``.

        Returns:
            Path of the created bundle, inside ``working_dir``

        Raises:
            GitCommandError: If git bundle fails
            GitTimeoutError: If git bundle exceeds the timeout
        """
        self._run(["bundle", "create", bundle_name, "--all"], cwd=working_dir)
        return Path(working_dir) / bundle_name

    def _run(self, args: list[str], cwd: str | Path | None = None) -> str:
        cmd = [self.executable, *args]
        masked_cmd = [mask_sensitive_data(arg) for arg in cmd]
        log_git_command(cmd, str(cwd) if cwd is not None else None)

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                check=True,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        # Not chained: the subprocess exceptions hold the unmasked command.
        except subprocess.TimeoutExpired as e:
            raise GitTimeoutError(
                masked_cmd, e.timeout, mask_sensitive_data(_as_text(e.stderr))
            ) from None
        except subprocess.CalledProcessError as e:
            raise GitCommandError(
                masked_cmd, e.returncode, mask_sensitive_data(_as_text(e.stderr))
            ) from None

        return result.stdout


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
