"""
Builds and runs the external song downloader script.
"""

import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from tagbatch.core.actions import SongDownloader
from tagbatch.exceptions import ExternalProcessFailure, InvalidInvocation, ScriptNotFound

log = logging.getLogger(__name__)

SCRIPT_DIR = "YoutubeToSpotify"
SCRIPT_NAME = "downloader.py"


@dataclass(frozen=True)
class ProcessSpec:
    """A fully built, validated invocation."""

    executable: str
    args: list[str]
    cwd: Path
    output_dir: Path

    @property
    def command(self) -> list[str]:
        return [self.executable, *self.args]


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str


class DownloaderInvoker:
    """
    Runs the downloader script exactly once per call.

    Argument groups are validated before anything touches the file system or
    spawns a process.
    """

    def __init__(self, cwd: Path | None = None, interpreter: str | None = None):
        self.cwd = cwd or Path.cwd()
        self.interpreter = interpreter or sys.executable or "python"

    @property
    def script_path(self) -> Path:
        return self.cwd / SCRIPT_DIR / SCRIPT_NAME

    def build_spec(self, request: SongDownloader) -> ProcessSpec:
        """
        Validates the request and builds the argument list.

        Raises:
            InvalidInvocation: If a coupled argument group is incomplete.
            ScriptNotFound: If the downloader script is missing.
        """
        if not 0.0 <= request.confidence <= 1.0:
            raise InvalidInvocation(
                f"Confidence must be between 0.0 and 1.0, got {request.confidence}."
            )
        if request.enable_audio_features and not (
            request.client_id and request.client_secret
        ):
            raise InvalidInvocation(
                "Spotify client ID and secret are required for audio features."
            )

        script = self.script_path
        if not script.is_file():
            raise ScriptNotFound(f"Song downloader script not found at '{script}'")

        args = [
            str(script),
            "--url",
            request.url,
            "--output",
            str(request.output),
            "--confidence",
            str(request.confidence),
        ]
        if request.enable_auto_tag:
            args.append("--enable-auto-tag")
            if request.auto_tag_config:
                args += ["--auto-tag-config", str(request.auto_tag_config)]
        elif request.auto_tag_config:
            log.warning("--auto-tag-config is ignored without --enable-auto-tag.")

        if request.enable_audio_features:
            args += [
                "--enable-audio-features",
                "--client-id",
                request.client_id,
                "--client-secret",
                request.client_secret,
            ]

        return ProcessSpec(
            executable=self.interpreter,
            args=args,
            cwd=self.cwd,
            output_dir=request.output,
        )

    def invoke(self, spec: ProcessSpec) -> ProcessResult:
        """
        Runs the process and waits for it without a timeout.

        Returns:
            The result with stdout captured verbatim.

        Raises:
            ExternalProcessFailure: If the process exits with a non-zero status or
            cannot be started.
        """
        spec.output_dir.mkdir(parents=True, exist_ok=True)
        log.debug(f"Running: {' '.join(spec.command[:2])} ...")
        try:
            completed = subprocess.run(
                spec.command,
                cwd=spec.cwd,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise ExternalProcessFailure(f"Failed to start downloader: {e}") from e

        if completed.returncode != 0:
            log.error(f"Failed to download songs: {completed.stderr}")
            raise ExternalProcessFailure(
                f"Failed to download songs (exit code {completed.returncode}).",
                returncode=completed.returncode,
                stderr=completed.stderr,
            )
        return ProcessResult(completed.returncode, completed.stdout, completed.stderr)
