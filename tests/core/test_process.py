"""Tests for the external downloader invocation."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest
from pytest_mock import MockerFixture

from tagbatch.core.actions import SongDownloader
from tagbatch.core.process import DownloaderInvoker
from tagbatch.exceptions import (
    ExternalProcessFailure,
    InvalidInvocation,
    ScriptNotFound,
)


def _install_script(root: Path, body: str = "print('ok')\n") -> Path:
    script = root / "YoutubeToSpotify" / "downloader.py"
    script.parent.mkdir(parents=True)
    _ = script.write_text(body)
    return script


class TestBuildSpec:
    def test_audio_features_without_credentials(
        self, tmp_path: Path, mocker: MockerFixture
    ) -> None:
        run = mocker.patch("tagbatch.core.process.subprocess.run")
        _ = _install_script(tmp_path)
        output = tmp_path / "out"
        request = SongDownloader(
            url="https://youtu.be/x",
            output=output,
            enable_audio_features=True,
            client_id="id",
        )

        with pytest.raises(InvalidInvocation):
            _ = DownloaderInvoker(cwd=tmp_path).build_spec(request)

        run.assert_not_called()
        assert not output.exists()

    def test_credentials_checked_before_script(self, tmp_path: Path) -> None:
        request = SongDownloader(
            url="u", output=tmp_path / "out", enable_audio_features=True
        )

        with pytest.raises(InvalidInvocation):
            _ = DownloaderInvoker(cwd=tmp_path).build_spec(request)

    def test_confidence_out_of_range(self, tmp_path: Path) -> None:
        _ = _install_script(tmp_path)
        request = SongDownloader(url="u", output=tmp_path, confidence=1.5)

        with pytest.raises(InvalidInvocation):
            _ = DownloaderInvoker(cwd=tmp_path).build_spec(request)

    def test_missing_script(self, tmp_path: Path) -> None:
        request = SongDownloader(url="u", output=tmp_path / "out")

        with pytest.raises(ScriptNotFound):
            _ = DownloaderInvoker(cwd=tmp_path).build_spec(request)

    def test_argument_order(self, tmp_path: Path) -> None:
        script = _install_script(tmp_path)
        output = tmp_path / "out"
        config = tmp_path / "tag.json"
        request = SongDownloader(
            url="https://youtu.be/x",
            output=output,
            confidence=0.5,
            enable_auto_tag=True,
            auto_tag_config=config,
            enable_audio_features=True,
            client_id="id",
            client_secret="secret",
        )

        spec = DownloaderInvoker(cwd=tmp_path, interpreter="py").build_spec(request)

        assert spec.command == [
            "py",
            str(script),
            "--url",
            "https://youtu.be/x",
            "--output",
            str(output),
            "--confidence",
            "0.5",
            "--enable-auto-tag",
            "--auto-tag-config",
            str(config),
            "--enable-audio-features",
            "--client-id",
            "id",
            "--client-secret",
            "secret",
        ]
        assert spec.cwd == tmp_path

    def test_auto_tag_config_ignored_without_auto_tag(self, tmp_path: Path) -> None:
        _ = _install_script(tmp_path)
        request = SongDownloader(
            url="u", output=tmp_path / "out", auto_tag_config=tmp_path / "tag.json"
        )

        spec = DownloaderInvoker(cwd=tmp_path).build_spec(request)

        assert "--auto-tag-config" not in spec.args
        assert "--enable-auto-tag" not in spec.args


class TestInvoke:
    def test_success_returns_stdout(self, tmp_path: Path, mocker: MockerFixture) -> None:
        _ = _install_script(tmp_path)
        run = mocker.patch(
            "tagbatch.core.process.subprocess.run",
            return_value=subprocess.CompletedProcess([], 0, stdout="done\n", stderr=""),
        )
        invoker = DownloaderInvoker(cwd=tmp_path)
        spec = invoker.build_spec(SongDownloader(url="u", output=tmp_path / "out"))

        result = invoker.invoke(spec)

        assert result.stdout == "done\n"
        assert (tmp_path / "out").is_dir()
        run.assert_called_once()
        assert run.call_args.kwargs["cwd"] == tmp_path

    def test_non_zero_exit(self, tmp_path: Path, mocker: MockerFixture) -> None:
        _ = _install_script(tmp_path)
        _ = mocker.patch(
            "tagbatch.core.process.subprocess.run",
            return_value=subprocess.CompletedProcess([], 2, stdout="", stderr="boom"),
        )
        invoker = DownloaderInvoker(cwd=tmp_path)
        spec = invoker.build_spec(SongDownloader(url="u", output=tmp_path / "out"))

        with pytest.raises(ExternalProcessFailure) as exc_info:
            _ = invoker.invoke(spec)

        assert exc_info.value.returncode == 2
        assert exc_info.value.stderr == "boom"

    def test_interpreter_missing(self, tmp_path: Path) -> None:
        _ = _install_script(tmp_path)
        invoker = DownloaderInvoker(cwd=tmp_path, interpreter=str(tmp_path / "nope"))
        spec = invoker.build_spec(SongDownloader(url="u", output=tmp_path / "out"))

        with pytest.raises(ExternalProcessFailure):
            _ = invoker.invoke(spec)

    def test_real_script_receives_arguments(self, tmp_path: Path) -> None:
        _ = _install_script(
            tmp_path, "import sys\nprint(' '.join(sys.argv[1:]))\n"
        )
        invoker = DownloaderInvoker(cwd=tmp_path, interpreter=sys.executable)
        spec = invoker.build_spec(
            SongDownloader(url="https://youtu.be/x", output=tmp_path / "out")
        )

        result = invoker.invoke(spec)

        assert result.stdout.strip() == (
            f"--url https://youtu.be/x --output {tmp_path / 'out'} --confidence 0.75"
        )

    def test_real_script_failure(self, tmp_path: Path) -> None:
        _ = _install_script(
            tmp_path, "import sys\nsys.stderr.write('bad url')\nsys.exit(3)\n"
        )
        invoker = DownloaderInvoker(cwd=tmp_path, interpreter=sys.executable)
        spec = invoker.build_spec(SongDownloader(url="u", output=tmp_path / "out"))

        with pytest.raises(ExternalProcessFailure) as exc_info:
            _ = invoker.invoke(spec)

        assert exc_info.value.returncode == 3
        assert "bad url" in exc_info.value.stderr
