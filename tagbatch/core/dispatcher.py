"""
Runs exactly one action per invocation and reports how long the delegated
work took.
"""

import logging
import time
from dataclasses import dataclass

from rich.console import Console

from tagbatch.api.auth import AuthMode, SpotifyAuthorizer
from tagbatch.cli.formatters import (
    print_apply_summary,
    print_rename_preview,
    print_report_summary,
    print_url_info,
)
from tagbatch.cli.progress_monitor import MonitorReport, ProgressMonitor
from tagbatch.exceptions import QueryError, TagbatchError
from tagbatch.media.files import enumerate_files
from tagbatch.models.config import RenamerConfig
from tagbatch.storage.config_manager import ConfigManager

from .actions import (
    Action,
    AudioFeatures,
    AuthorizeSpotify,
    Autotagger,
    QueryUrl,
    Renamer,
    Server,
    SongDownloader,
)
from .engines import EngineRegistry
from .process import DownloaderInvoker
from .renamer import ApplyResult
from .renamer import Renamer as FileRenamer

log = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    """What an action produced."""

    action: str
    elapsed: float = 0.0
    exit_code: int = 0
    # Set when the process should exit right after this action.
    terminate: bool = False
    report: MonitorReport | None = None
    apply_result: ApplyResult | None = None


class ActionDispatcher:
    """Selects the flow for an action. Holds no state between dispatches."""

    def __init__(
        self,
        console: Console,
        engines: EngineRegistry,
        authorizer: SpotifyAuthorizer,
        config_manager: ConfigManager | None = None,
        invoker: DownloaderInvoker | None = None,
    ):
        self.console = console
        self.engines = engines
        self.authorizer = authorizer
        self.config_manager = config_manager or ConfigManager()
        self.invoker = invoker or DownloaderInvoker()

    def dispatch(self, action: Action) -> DispatchOutcome:
        start = time.monotonic()
        match action:
            case Autotagger():
                outcome = self._run_autotagger(action)
            case AudioFeatures():
                outcome = self._run_audio_features(action)
            case QueryUrl():
                outcome = self._run_query_url(action)
            case SongDownloader():
                outcome = self._run_song_downloader(action)
            case AuthorizeSpotify():
                outcome = self._run_authorize(action)
            case Renamer():
                outcome = self._run_renamer(action)
            case Server():
                outcome = self._run_server(action)
            case _:
                raise TypeError(f"Unsupported action: {type(action).__name__}")
        outcome.elapsed = time.monotonic() - start
        log.debug(f"Action '{outcome.action}' finished in {outcome.elapsed:.2f}s")
        return outcome

    def _run_autotagger(self, action: Autotagger) -> DispatchOutcome:
        config = self.config_manager.resolve_tagger(action)
        engine = self.engines.require("tagger")
        files = enumerate_files(action.path, config.include_subfolders)

        channel = engine.tag_files(config, files)
        report = ProgressMonitor(self.console, "Tagging").drain(channel)
        log.info(f"Tagging finished, took: {int(report.elapsed)} seconds.")
        print_report_summary(self.console, report)
        return DispatchOutcome("autotagger", report=report)

    def _run_audio_features(self, action: AudioFeatures) -> DispatchOutcome:
        config = self.config_manager.resolve_audio_features(action)
        engine = self.engines.require("audiofeatures")
        token = self.authorizer.cached_token(action.client_id, action.client_secret)
        files = enumerate_files(action.path, config.include_subfolders)

        channel = engine.start(config, token, files)
        report = ProgressMonitor(self.console, "Audio features").drain(channel)
        log.info(f"Tagging finished, took: {int(report.elapsed)} seconds.")
        print_report_summary(self.console, report)
        return DispatchOutcome("audiofeatures", report=report)

    def _run_query_url(self, action: QueryUrl) -> DispatchOutcome:
        service = self.engines.require("url_info")
        log.info(f"Querying URL: {action.url} with confidence: {action.confidence}")
        try:
            info = service.query(action.url, action.confidence)
        except TagbatchError:
            raise
        except Exception as e:
            raise QueryError(f"Failed to get URL information: {e}") from e
        print_url_info(self.console, info)
        return DispatchOutcome("query-url")

    def _run_song_downloader(self, action: SongDownloader) -> DispatchOutcome:
        log.info(f"Starting song downloader for URL: {action.url}")
        spec = self.invoker.build_spec(action)
        result = self.invoker.invoke(spec)
        log.info("[green]Songs downloaded successfully![/green]")
        self.console.print(result.stdout, markup=False, highlight=False)
        return DispatchOutcome("song-downloader")

    def _run_authorize(self, action: AuthorizeSpotify) -> DispatchOutcome:
        mode = AuthMode.PROMPT if action.prompt else AuthMode.SERVER
        self.authorizer.authorize(
            action.client_id, action.client_secret, mode, expose=action.expose
        )
        return DispatchOutcome("authorize-spotify", terminate=True)

    def _run_renamer(self, action: Renamer) -> DispatchOutcome:
        config = RenamerConfig(
            path=action.path,
            template=action.template,
            out_dir=action.output,
            copy=action.copy,
            subfolders=not action.no_subfolders,
            overwrite=action.overwrite,
            separator=action.separator,
            keep_subfolders=action.keep_subfolders,
        )
        renamer = FileRenamer(config.template)
        files = enumerate_files(config.path, config.subfolders)
        mapping = renamer.generate(files, config)

        if action.preview:
            print_rename_preview(self.console, mapping)
            return DispatchOutcome("renamer")

        result = renamer.apply(mapping, config)
        print_apply_summary(self.console, result, copy=config.copy)
        return DispatchOutcome(
            "renamer", exit_code=0 if result.ok else 1, apply_result=result
        )

    def _run_server(self, action: Server) -> DispatchOutcome:
        server = self.engines.require("ui_server")
        server.start(action.expose, action.path, action.browser)
        return DispatchOutcome("server")
