"""Generic named-definition registry with atomic reload and hot watching."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ixp_core.errors import ConfigurationError, field_errors_from_pydantic

from ..watcher import DefinitionFileWatcher

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DefinitionSource = str | os.PathLike[str] | Mapping[str, Any] | Iterable[Any]

D = TypeVar("D", bound=BaseModel)


class DefinitionRegistry(Generic[D]):
    """Stores definitions by unique name.

    Subclasses set :attr:`model` (the pydantic definition type),
    :attr:`kind` (used in messages) and :attr:`container_key` (the top-level
    key of the JSON file).

    Every load builds the replacement map on the side, validates every entry
    and swaps it in under the lock only when all of them pass, so a bad file
    never leaves the registry half-updated.
    """

    model: ClassVar[type[BaseModel]]
    kind: ClassVar[str]
    container_key: ClassVar[str]

    def __init__(self, source: DefinitionSource | None = None) -> None:
        self._definitions: dict[str, D] = {}
        self._path: Path | None = None
        self._lock = threading.RLock()
        self._listeners: list[Callable[[], None]] = []
        self._watcher: DefinitionFileWatcher | None = None
        if source is not None:
            self.load(source)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path | None:
        """Backing file, or ``None`` for in-memory construction."""
        return self._path

    def load(self, source: DefinitionSource) -> None:
        """Replace every definition from a JSON file or in-memory structure."""
        if isinstance(source, (str, os.PathLike)):
            path = Path(source)
            entries = self._unwrap(self._read_file(path), from_file=True)
        else:
            path = None
            entries = self._unwrap(source, from_file=False)

        replacement = self._build(entries)
        with self._lock:
            self._definitions = replacement
            self._path = path
        logger.info(
            "Loaded %d %s definitions from %s",
            len(replacement),
            self.kind,
            path or "memory",
        )
        self._notify()

    def _read_file(self, path: Path) -> Any:
        resolved = path.resolve()
        if not resolved.is_file():
            msg = f"{self.kind.capitalize()} configuration file not found: {resolved}"
            raise ConfigurationError(msg, details={"path": str(resolved)})
        try:
            return json.loads(resolved.read_text(encoding="utf-8"))
        except OSError as exc:
            msg = f"Cannot read {self.kind} configuration {resolved}: {exc}"
            raise ConfigurationError(msg, details={"path": str(resolved)}) from exc
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            msg = f"Malformed {self.kind} configuration {resolved}: {exc}"
            raise ConfigurationError(msg, details={"path": str(resolved)}) from exc

    def _unwrap(self, payload: Any, *, from_file: bool) -> list[Any]:
        """Flatten the accepted container shapes into a list of raw entries."""
        key = self.container_key
        if isinstance(payload, Mapping) and key in payload:
            payload = payload[key]
        elif from_file:
            msg = f'Invalid {self.kind} configuration: missing "{key}"'
            raise ConfigurationError(msg)

        if isinstance(payload, Mapping):
            entries = []
            for name, entry in payload.items():
                if isinstance(entry, BaseModel):
                    dumped = entry.model_dump(by_alias=True, exclude_unset=True)
                    entries.append({**dumped, "name": name})
                elif isinstance(entry, Mapping):
                    entries.append({**entry, "name": name})
                else:
                    msg = f"{self.kind.capitalize()} {name!r} must be an object"
                    raise ConfigurationError(msg, details={"name": name})
            return entries
        if isinstance(payload, Iterable) and not isinstance(payload, (str, bytes)):
            return list(payload)
        msg = f'Invalid {self.kind} configuration: "{key}" must be a list or object'
        raise ConfigurationError(msg)

    def _build(self, entries: list[Any]) -> dict[str, D]:
        replacement: dict[str, D] = {}
        for index, entry in enumerate(entries):
            definition = self._validate(entry, index)
            name = definition.name  # type: ignore[attr-defined]
            if name in replacement:
                msg = f"Duplicate {self.kind} name {name!r}"
                raise ConfigurationError(msg, details={"name": name})
            replacement[name] = definition
        return replacement

    def _validate(self, entry: Any, index: int | None = None) -> D:
        """Parse one raw entry, raising :class:`ConfigurationError` naming it."""
        if isinstance(entry, BaseModel):
            name = getattr(entry, "name", None)
            entry = entry.model_dump(by_alias=True, exclude_unset=True)
        elif isinstance(entry, Mapping):
            name = entry.get("name")
        else:
            label = f"at index {index}" if index is not None else repr(entry)
            msg = f"{self.kind.capitalize()} definition {label} must be an object"
            raise ConfigurationError(msg)

        label = repr(name) if isinstance(name, str) and name else f"at index {index}"
        try:
            definition = self.model.model_validate(entry)
        except PydanticValidationError as exc:
            errors = field_errors_from_pydantic(exc)
            summary = "; ".join(str(e) for e in errors)
            msg = f"{self.kind.capitalize()} {label} is invalid: {summary}"
            raise ConfigurationError(
                msg, details={"name": name, "errors": [str(e) for e in errors]}
            ) from exc
        self._check(definition)
        return definition  # type: ignore[return-value]

    def _check(self, definition: D) -> None:
        """Hook for checks beyond the model's own (warnings, cross-field)."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, name: str) -> D | None:
        with self._lock:
            return self._definitions.get(name)

    def get_all(self) -> list[D]:
        with self._lock:
            return list(self._definitions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._definitions

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, definition: D | Mapping[str, Any]) -> D:
        """Validate and insert (or replace) a single definition."""
        parsed = self._validate(definition)
        name = parsed.name  # type: ignore[attr-defined]
        with self._lock:
            replaced = name in self._definitions
            updated = dict(self._definitions)
            updated[name] = parsed
            self._definitions = updated
        logger.info("%s %r %s", self.kind.capitalize(), name, "replaced" if replaced else "added")
        self._notify()
        return parsed

    def remove(self, name: str) -> bool:
        with self._lock:
            if name not in self._definitions:
                return False
            updated = dict(self._definitions)
            del updated[name]
            self._definitions = updated
        logger.info("%s %r removed", self.kind.capitalize(), name)
        self._notify()
        return True

    def reload(self) -> None:
        """Re-read the backing file; no-op for in-memory registries."""
        if self._path is None:
            logger.debug("No %s configuration file to reload", self.kind)
            return
        self.load(self._path)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def on_change(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Error in %s registry listener", self.kind)

    # ------------------------------------------------------------------
    # File watching
    # ------------------------------------------------------------------

    @property
    def watching(self) -> bool:
        return self._watcher is not None

    def enable_file_watching(self) -> None:
        """Reload whenever the backing file changes."""
        if self._path is None:
            logger.warning(
                "Cannot enable file watching: no %s configuration path", self.kind
            )
            return
        if self._watcher is not None:
            logger.warning("File watching is already enabled for %s", self._path)
            return
        try:
            loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        watcher = DefinitionFileWatcher(self._path, self._reload_from_watch, loop)
        watcher.start()
        self._watcher = watcher

    def disable_file_watching(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

    def _reload_from_watch(self) -> None:
        logger.info("%s configuration changed, reloading", self.kind.capitalize())
        try:
            self.reload()
        except Exception:
            logger.exception(
                "Failed to reload %s definitions; keeping the previous set", self.kind
            )

    def close(self) -> None:
        """Stop watching and drop every listener."""
        self.disable_file_watching()
        with self._lock:
            self._listeners.clear()
