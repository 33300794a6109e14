"""Search engine backed by the ripgrep (rg) executable."""

import shutil
import subprocess
import threading
from typing import Optional

from hsdef.engines.base import Deadline, SearchEngine, Source
from hsdef.errors import SearchTimeoutError, ToolExecutionError, ToolUnavailableError
from hsdef.models import BufferSource, SearchResult, SearchStatus
from hsdef.normalize import parse_ripgrep_json


class RipgrepEngine(SearchEngine):
    """Run each pattern through `rg --json --multiline`.

    Exit code 0 means matches, 1 means no matches; anything else is a
    failure and stderr is kept as the diagnostic.
    """

    name = "ripgrep"

    # How often a running process is checked for cancellation
    POLL_INTERVAL = 0.05

    def __init__(self, executable: str = "rg", timeout: float = 5.0, logger=None):
        super().__init__(timeout=timeout, logger=logger)
        self.executable = executable

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def version(self) -> str:
        """Return the first line of `rg --version`.

        Raises:
            ToolUnavailableError: If rg cannot be started.
            ToolExecutionError: If rg exits abnormally.
            SearchTimeoutError: If rg does not answer in time.
        """
        try:
            completed = subprocess.run(
                [self.executable, "--version"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except OSError as e:
            raise ToolUnavailableError(f"{self.executable}: {e}")
        except subprocess.TimeoutExpired:
            raise SearchTimeoutError(f"{self.executable} --version timed out after {self.timeout}s")

        if completed.returncode != 0:
            raise ToolExecutionError(
                f"{self.executable} --version exited with code {completed.returncode}"
            )
        return completed.stdout.strip().splitlines()[0] if completed.stdout.strip() else ""

    def build_args(self, pattern: str, source: Source) -> list[str]:
        """Build the rg command line for one pattern."""
        args = [self.executable, "--no-config", "--json", "--multiline", "--regexp", pattern]
        if isinstance(source, BufferSource):
            # Read the buffer from stdin
            args.append("-")
        else:
            # Single-threaded but gives a stable file order
            args.extend(["--sort", "path"])
            # Same file set as iter_source_files: .gitignore and friends are not read
            args.append("--no-ignore")
            for glob in source.globs:
                args.extend(["--glob", glob])
            for skip in sorted(source.skip_dirs):
                args.extend(["--glob", f"!{skip}"])
            args.append(str(source.root))
        return args

    def search(
        self,
        pattern: str,
        source: Source,
        cancel: Optional[threading.Event] = None,
    ) -> SearchResult:
        from_buffer = isinstance(source, BufferSource)
        args = self.build_args(pattern, source)
        deadline = Deadline(self.timeout, cancel)

        self.logger.debug(f"Executing: {subprocess.list2cmdline(args)}")

        try:
            process = subprocess.Popen(
                args,
                stdin=subprocess.PIPE if from_buffer else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except (FileNotFoundError, PermissionError) as e:
            return SearchResult.fail(SearchStatus.UNAVAILABLE, f"{self.executable}: {e}")
        except OSError as e:
            return SearchResult.fail(SearchStatus.FAILED, f"{self.executable}: {e}")

        with process:
            pending_input = source.text if from_buffer else None
            while True:
                if deadline.cancelled:
                    self._kill(process)
                    return SearchResult.fail(SearchStatus.CANCELLED, "Search cancelled")
                if deadline.expired:
                    self._kill(process)
                    return SearchResult.fail(
                        SearchStatus.TIMEOUT, f"rg timed out after {self.timeout}s"
                    )
                try:
                    stdout, stderr = process.communicate(
                        input=pending_input,
                        timeout=min(self.POLL_INTERVAL, deadline.remaining()),
                    )
                    break
                except subprocess.TimeoutExpired:
                    # Input has been handed over; it must not be sent twice
                    pending_input = None

        if process.returncode == 0:
            return SearchResult.ok(parse_ripgrep_json(stdout, from_buffer=from_buffer))
        if process.returncode == 1:
            return SearchResult.no_matches()
        detail = (stderr or stdout or "").strip()
        return SearchResult.fail(
            SearchStatus.FAILED,
            f"rg exited with code {process.returncode}: {detail}",
        )

    @staticmethod
    def _kill(process: subprocess.Popen) -> None:
        """Kill the process and drain its pipes so it is reaped."""
        process.kill()
        process.communicate()
