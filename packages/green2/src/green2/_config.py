from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

from . import _types


if _typing.TYPE_CHECKING:
    from . import _originator


__all__ = [
    "CONFIG_ENV",
    "Config",
]


_LOGGER = _logging.getLogger(__name__)

CONFIG_ENV = "GREEN2_CONFIG"
DEFAULT_CONFIG_FILENAME = "green2.yml"


@_dataclasses.dataclass(frozen=True, slots=True, kw_only=True)
class Config:
    sepa_with_bom: bool = True
    default_contribution_cents: int | None = None
    sequence_type: _types.SequenceType = _types.SequenceType.RECURRING
    duplicate_members: _types.DuplicatePolicy = _types.DuplicatePolicy.ERROR
    max_workers: int | None = None
    originator_file: _pathlib.Path | None = None

    @staticmethod
    def __to_bool(name: str, value: bool | str) -> bool:
        if isinstance(value, bool):
            return value
        s_low = str(value).lower()
        if s_low in {"true", "t", "1", "yes"}:
            return True
        elif s_low in {"false", "f", "0", "no"}:
            return False
        else:
            raise ValueError(f"Invalid config {name}! Expected bool, got {value!r}")

    @classmethod
    def from_dict(
        cls,
        config: _typing.Mapping[str, _typing.Any],
        *,
        base_dir: _pathlib.Path | None = None,
    ) -> _typing.Self:
        from . import _util

        kwargs: dict[str, _typing.Any] = {}
        if "sepa_with_bom" in config:
            kwargs["sepa_with_bom"] = cls.__to_bool(
                "sepa_with_bom", config["sepa_with_bom"]
            )
        if (contribution := config.get("default_contribution")) is not None:
            try:
                cents = _util.amount_to_cents(str(contribution))
            except ValueError as exc:
                raise ValueError(f"Invalid config default_contribution: {exc}") from None
            if cents <= 0:
                raise ValueError(
                    f"Invalid config default_contribution: {contribution!r} must be > 0"
                )
            kwargs["default_contribution_cents"] = cents
        if (sequence_type := config.get("sequence_type")) is not None:
            kwargs["sequence_type"] = _types.SequenceType(str(sequence_type).upper())
        if (duplicates := config.get("duplicate_members")) is not None:
            kwargs["duplicate_members"] = _types.DuplicatePolicy(str(duplicates))
        if (max_workers := config.get("max_workers")) is not None:
            kwargs["max_workers"] = int(max_workers)
        if (originator_file := config.get("originator_file")) is not None:
            originator_path = _pathlib.Path(originator_file)
            if base_dir is not None and not originator_path.is_absolute():
                originator_path = base_dir / originator_path
            kwargs["originator_file"] = originator_path
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str | _pathlib.Path | None = None) -> _typing.Self:
        import yaml as _yaml

        if path is None:
            _LOGGER.debug("[config] Check if env %s is set", CONFIG_ENV)
            if (path_from_env := _os.environ.get(CONFIG_ENV)) is not None:
                _LOGGER.info("[config] Use env %s=%s", CONFIG_ENV, path_from_env)
                path = path_from_env
            else:
                path = DEFAULT_CONFIG_FILENAME
        _LOGGER.info("[config] Read config file %s", path)
        path = _pathlib.Path(path)
        with open(path, "r", encoding="utf-8") as f:
            config = _yaml.load(f, Loader=_yaml.FullLoader) or {}
        return cls.from_dict(config, base_dir=path.parent)

    def load_originator(self) -> _originator.Originator:
        from . import _originator

        if self.originator_file is None:
            raise RuntimeError("No originator_file configured")
        return _originator.Originator.from_file(self.originator_file)
