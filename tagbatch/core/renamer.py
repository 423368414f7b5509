"""
Generates new file names from a template and applies them by copying or
moving files.
"""

import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from tagbatch.exceptions import DestinationExists
from tagbatch.media.playlist import is_playlist
from tagbatch.models.config import RenamerConfig
from tagbatch.models.files import FileDescriptor
from tagbatch.utils.template import ParsedTemplate, parse, render, template_vars

log = logging.getLogger(__name__)

RenameMapping = list[tuple[Path, Path]]


@dataclass
class RenameFailure:
    source: Path
    destination: Path
    error: Exception


@dataclass
class ApplyResult:
    succeeded: RenameMapping = field(default_factory=list)
    skipped: RenameMapping = field(default_factory=list)
    failures: list[RenameFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class _PendingEntry:
    source: Path
    destination: Path
    current: Path = field(init=False)

    def __post_init__(self):
        self.current = self.source


def _path_key(path: Path) -> Path:
    return Path(os.path.abspath(path))


class Renamer:
    """
    Two-step renamer: `generate` is pure and only computes the mapping,
    `apply` performs the file operations.
    """

    def __init__(self, template: ParsedTemplate | str):
        self.template = parse(template) if isinstance(template, str) else template

    def generate(
        self, files: Iterable[FileDescriptor], config: RenamerConfig
    ) -> RenameMapping:
        """Renders the template for every file. Never touches the file system."""
        source_root = config.path.parent if is_playlist(config.path) else config.path
        out_root = config.out_dir or source_root

        mapping: RenameMapping = []
        taken: set[Path] = set()
        for file in files:
            name = render(self.template, template_vars(file, config.separator))
            name = name or file.path.stem
            extension = f".{file.format}"
            if not name.lower().endswith(extension.lower()):
                name += extension

            dest_dir = out_root
            if config.keep_subfolders:
                try:
                    dest_dir = out_root / file.path.parent.relative_to(source_root)
                except ValueError:
                    log.debug(f"'{file.path}' is outside '{source_root}', flattening.")

            destination = self._unique(dest_dir / name, taken)
            taken.add(destination)
            mapping.append((file.path, destination))
        return mapping

    @staticmethod
    def _unique(destination: Path, taken: set[Path]) -> Path:
        """Suffixes ' (1)', ' (2)', ... when two sources render to one name."""
        candidate = destination
        counter = 1
        while candidate in taken:
            candidate = destination.with_name(
                f"{destination.stem} ({counter}){destination.suffix}"
            )
            counter += 1
        return candidate

    def apply(self, mapping: RenameMapping, config: RenamerConfig) -> ApplyResult:
        """
        Copies or moves every entry. A failing entry is recorded and the
        remaining entries are still processed.

        An entry whose destination is the source of another pending entry
        waits until that source has been handled, so chains such as
        `1 -> 2, 2 -> 3` never clobber a file before it is renamed. Cycles
        are broken by staging one source under a temporary name.
        """
        result = ApplyResult()
        pending: list[_PendingEntry] = []
        for source, destination in mapping:
            if _path_key(source) == _path_key(destination):
                result.skipped.append((source, destination))
            else:
                pending.append(_PendingEntry(source, destination))

        # Sources whose file is still in place because its entry failed.
        held: set[Path] = set()
        while pending:
            waiting_on = {_path_key(entry.current) for entry in pending}
            ready = [e for e in pending if _path_key(e.destination) not in waiting_on]
            if not ready:
                entry = pending[0]
                try:
                    entry.current = self._stage(entry.current, config)
                except OSError as e:
                    pending.remove(entry)
                    self._record_failure(result, entry, e)
                    held.add(_path_key(entry.source))
                continue

            for entry in ready:
                pending.remove(entry)
                try:
                    if _path_key(entry.destination) in held:
                        raise DestinationExists(
                            f"Destination '{entry.destination}' holds a file that "
                            "could not be renamed"
                        )
                    self._apply_one(entry.current, entry.destination, config)
                    result.succeeded.append((entry.source, entry.destination))
                except (DestinationExists, OSError) as e:
                    self._record_failure(result, entry, e)
                    held.add(_path_key(entry.source))
                finally:
                    self._unstage(entry, config)
        return result

    @staticmethod
    def _record_failure(
        result: ApplyResult, entry: _PendingEntry, error: Exception
    ) -> None:
        log.warning(f"[yellow]Failed renaming '{entry.source}':[/yellow] {error}")
        result.failures.append(RenameFailure(entry.source, entry.destination, error))

    @staticmethod
    def _stage(source: Path, config: RenamerConfig) -> Path:
        """Copies or moves a source to an unused temporary name beside it."""
        counter = 0
        staged = source.with_name(f".{source.name}.tagbatch")
        while staged.exists():
            counter += 1
            staged = source.with_name(f".{source.name}.tagbatch{counter}")
        log.debug(f"Staging '{source}' as '{staged}'")
        if config.copy:
            shutil.copy2(source, staged)
        else:
            shutil.move(str(source), str(staged))
        return staged

    @staticmethod
    def _unstage(entry: _PendingEntry, config: RenamerConfig) -> None:
        """Removes a staged copy, or moves a staged source back if it was not renamed."""
        if entry.current == entry.source or not entry.current.exists():
            return
        try:
            if config.copy:
                entry.current.unlink()
            elif not entry.source.exists():
                shutil.move(str(entry.current), str(entry.source))
            else:
                log.warning(f"Left '{entry.source}' staged as '{entry.current}'")
        except OSError as e:
            log.warning(f"Failed cleaning up '{entry.current}': {e}")

    @staticmethod
    def _apply_one(source: Path, destination: Path, config: RenamerConfig) -> None:
        if destination.exists():
            if not config.overwrite:
                raise DestinationExists(f"Destination already exists: '{destination}'")
            log.debug(f"Overwriting '{destination}'")
        destination.parent.mkdir(parents=True, exist_ok=True)
        if config.copy:
            shutil.copy2(source, destination)
        else:
            shutil.move(str(source), str(destination))
