"""Catalog configuration for pyrental."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pyrental._constants import CUSTOMERS_FILE, RECORDS_FILE, VEHICLES_FILE
from pyrental.exceptions import RentalConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class RentalConfig:
    """Catalog configuration.

    Parameters
    ----------
    data_dir : Path
        Directory holding the three store files. Defaults to the process
        working directory.
    vehicles_file : str
        File name of the vehicle store.
    customers_file : str
        File name of the customer store.
    records_file : str
        File name of the rental record store.
    encoding : str
        Text encoding used for reading and appending lines.
    derive_status_from_history : bool
        After loading, set each vehicle's status from its latest rental
        record. The vehicle store is append-only, so the status written when
        a vehicle was added goes stale once it is rented.
    """

    data_dir: Path = dataclasses.field(default_factory=Path)
    vehicles_file: str = VEHICLES_FILE
    customers_file: str = CUSTOMERS_FILE
    records_file: str = RECORDS_FILE
    encoding: str = "utf-8"
    derive_status_from_history: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.data_dir, Path):
            object.__setattr__(self, "data_dir", Path(self.data_dir))
        for field_name in ("vehicles_file", "customers_file", "records_file"):
            value = getattr(self, field_name)
            if not value or not str(value).strip():
                raise RentalConfigError(f"{field_name} must be a non-empty file name")

    @property
    def vehicles_path(self) -> Path:
        return self.data_dir / self.vehicles_file

    @property
    def customers_path(self) -> Path:
        return self.data_dir / self.customers_file

    @property
    def records_path(self) -> Path:
        return self.data_dir / self.records_file

    @classmethod
    def from_env(cls, **overrides: Any) -> RentalConfig:
        """Create configuration from environment variables.

        Reads ``RENTAL_DATA_DIR``, ``RENTAL_VEHICLES_FILE``,
        ``RENTAL_CUSTOMERS_FILE``, ``RENTAL_RECORDS_FILE``,
        ``RENTAL_ENCODING`` and ``RENTAL_DERIVE_STATUS``. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        RentalConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "RENTAL_VEHICLES_FILE": "vehicles_file",
            "RENTAL_CUSTOMERS_FILE": "customers_file",
            "RENTAL_RECORDS_FILE": "records_file",
            "RENTAL_ENCODING": "encoding",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        data_dir_env = env.get("RENTAL_DATA_DIR")
        if data_dir_env is not None and "data_dir" not in overrides:
            config_kwargs["data_dir"] = Path(data_dir_env).expanduser()

        if "derive_status_from_history" not in overrides:
            config_kwargs["derive_status_from_history"] = _env_bool(env.get("RENTAL_DERIVE_STATUS"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
