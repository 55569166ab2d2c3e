"""Flat-file access for the three stores.

Every write opens the store in append mode, writes exactly one
newline-terminated line and closes the file again. A crash can therefore
lose or truncate at most the line being written.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pyrental.config import RentalConfig
from pyrental.exceptions import RentalStorageError, RentalValidationError
from pyrental.report import StoreName

_logger = logging.getLogger(__name__)


class FlatFileStore:
    """Line-oriented reader/appender for the vehicle, customer and record files."""

    def __init__(self, config: RentalConfig | None = None) -> None:
        self._config = config or RentalConfig()

    @property
    def config(self) -> RentalConfig:
        return self._config

    def path_for(self, store: StoreName) -> Path:
        paths = {
            StoreName.VEHICLES: self._config.vehicles_path,
            StoreName.CUSTOMERS: self._config.customers_path,
            StoreName.RECORDS: self._config.records_path,
        }
        return paths[store]

    def read_lines(self, store: StoreName) -> list[str] | None:
        """Return every line of *store* without line terminators.

        Returns ``None`` when the file is missing or unreadable; both mean
        "no data yet" to the caller.
        """
        path = self.path_for(store)
        try:
            with path.open("r", encoding=self._config.encoding, newline="") as handle:
                return [line.rstrip("\r\n") for line in handle]
        except FileNotFoundError:
            _logger.debug("No %s store at %s yet", store, path)
            return None
        except (OSError, UnicodeDecodeError) as err:
            _logger.warning("Could not read %s store at %s: %s", store, path, err)
            return None

    def append_line(self, store: StoreName, line: str) -> None:
        """Append one line to *store*.

        Raises :class:`RentalValidationError` if *line* spans several lines
        and :class:`RentalStorageError` if the file cannot be written.
        """
        if "\n" in line or "\r" in line:
            raise RentalValidationError(f"refusing to write a multi-line entry to the {store} store")
        path = self.path_for(store)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding=self._config.encoding, newline="\n") as handle:
                handle.write(line + "\n")
        except OSError as err:
            _logger.error("Failed to append to %s store at %s", store, path, exc_info=True)
            raise RentalStorageError(f"could not write to {path}: {err}", path=str(path)) from err
