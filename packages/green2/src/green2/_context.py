from __future__ import annotations

import logging as _logging
import logging.handlers as _logging_handlers
import os as _os
import pathlib as _pathlib
import typing as _typing


if _typing.TYPE_CHECKING:
    import argparse as _argparse
    import datetime as _datetime

    from . import _config


__all__ = [
    "Green2Context",
]


_LOGGER = _logging.getLogger(__name__)

START_TIME_ENV = "GREEN2_START_TIME"
OUTPUT_DIR_ENV = "GREEN2_OUTPUT_DIR"


class Green2Context:
    """Context of a script execution (config, start time, output dir)."""

    _config: _config.Config
    _logger: _logging.Logger | _logging.LoggerAdapter
    _buffering_handler: _UnlimitedBufferingHandler | None = None
    _start_time: _datetime.datetime
    _out_dir: _pathlib.Path
    _dry_run: bool = False
    _parsed_args: _argparse.Namespace | None = None

    def __init__(
        self,
        config: _config.Config | _pathlib.Path | str | None = None,
        *,
        setup_logging: bool = True,
        log_level: int | str | None = None,
        start_time: _datetime.datetime | str | None = None,
        out_dir: _pathlib.Path | str | None = "data",
        dry_run: bool | None = None,
        parse_arguments: bool = True,
        argument_parser: _argparse.ArgumentParser | None = None,
        argv: list[str] | None = None,
    ) -> None:
        """Initialize this context.

        Args:
          config: The config as a config object or filename
          setup_logging: Configure console logging and buffer all
            records until :obj:`configure_log_file` is called
          log_level: Console logging level (default INFO)
          start_time: Start time of script execution (default now)
          out_dir: Output directory, a Jinja2 template if given as
            :obj:`str` (default ``"data"``)
          dry_run: Run in dry-run mode if `True`.
          parse_arguments: Parse command line arguments if `True`.
          argument_parser: Custom argument parser to extend with the
            common arguments.
          argv: The argument vector to parse.

        ..
           >>> import datetime
           >>> tmp_path = getfixture("tmp_path")
           >>> getfixture("monkeypatch").chdir(tmp_path)

        >>> from green2 import Config
        >>> ctx = Green2Context(Config(), setup_logging=False, parse_arguments=False,
        ...                     start_time=datetime.datetime(2017, 2, 20, 12, 0),
        ...                     out_dir="data/sepa_{{ filename_suffix }}")
        >>> ctx.out_dir.name
        'sepa_20170220-120000'
        """
        from . import _config, _util

        if setup_logging:
            console_level = _util.to_log_level(log_level, default=_logging.INFO)
            self._buffering_handler = _UnlimitedBufferingHandler()
            self._buffering_handler.setLevel(_logging.DEBUG)
            stream_handler = _logging.StreamHandler()
            stream_handler.setLevel(console_level)
            _logging.basicConfig(
                level=_logging.DEBUG,
                format="%(asctime)s %(levelname)-1s %(message)s",
                handlers=[stream_handler, self._buffering_handler],
            )
            self._stream_handler = stream_handler
        else:
            self._stream_handler = None
        self._logger = _util.PrefixLoggerAdapter(_LOGGER, prefix="[ctx]")

        if parse_arguments:
            self.parse_arguments(argument_parser=argument_parser, argv=argv)

        if config is None:
            config_arg = self._parsed_args.config if self._parsed_args else None
            config = _config.Config.from_file(config_arg)
        elif not isinstance(config, _config.Config):
            config = _config.Config.from_file(config)
        self._config = config

        self._start_time = self._determine_start_time(start_time)
        self._out_dir = self._determine_out_dir(out_dir)
        if dry_run is not None:
            self._dry_run = dry_run

    def _determine_start_time(
        self, start_time: _datetime.datetime | str | None = None
    ) -> _datetime.datetime:
        import datetime

        from . import _util

        env_val = _os.environ.get(START_TIME_ENV)
        if start_time is not None:
            result = _util.to_datetime_or_none(start_time)
            source = "explicitly given"
        elif self._parsed_args and self._parsed_args.start_time:
            result = self._parsed_args.start_time
            source = "from command line"
        elif env_val:
            result = _util.to_datetime_or_none(env_val)
            source = f"from {START_TIME_ENV}"
        else:
            result = datetime.datetime.now().astimezone()
            source = "current time"
        self._logger.info("start_time=%s (%s)", result.isoformat(), source)
        return result

    def _determine_out_dir(
        self, p: _pathlib.Path | str | None = None
    ) -> _pathlib.Path:
        if p is None:
            if env_val := _os.environ.get(OUTPUT_DIR_ENV):
                out_dir = _pathlib.Path(env_val)
                source = f"from env {OUTPUT_DIR_ENV}"
            else:
                out_dir = _pathlib.Path(".")
                source = "default"
        elif isinstance(p, str):
            out_dir = _pathlib.Path(self.render_template(p))
            source = "explicitly given"
        else:
            out_dir = p
            source = "explicitly given"
        out_dir = out_dir.resolve()
        self._logger.info(
            "output_directory=%s (%s)", _os.path.relpath(out_dir, "."), source
        )
        return out_dir

    def add_common_argument_parser_arguments(
        self, p: _argparse.ArgumentParser, /
    ) -> None:
        p.add_argument(
            "--config",
            metavar="<file>",
            help="Config file (default: $GREEN2_CONFIG or green2.yml)",
        )
        p.add_argument(
            "--dry-run",
            "-n",
            action="store_true",
            default=None,
            help="Run in dry-run mode, do not write any output.",
        )
        p.add_argument(
            "--start-time",
            metavar="<datetime>",
            help="Simulate that the script was started at <datetime>",
        )
        p.add_argument(
            "--log-level",
            metavar="<level>",
            help="Console log level (default INFO)",
        )

    def parse_arguments(
        self,
        *,
        argument_parser: _argparse.ArgumentParser | None = None,
        argv: list[str] | None = None,
    ) -> _argparse.Namespace:
        import argparse
        import copy
        import sys

        from . import _util

        if argv is None:
            argv = sys.argv
        p = copy.deepcopy(argument_parser) if argument_parser else argparse.ArgumentParser()
        self.add_common_argument_parser_arguments(p)

        args = p.parse_args(argv[1:])
        if args.dry_run is not None:
            self._dry_run = args.dry_run
        args.start_time = _util.to_datetime_or_none(args.start_time or None)
        if args.log_level and self._stream_handler is not None:
            self._stream_handler.setLevel(_util.to_log_level(args.log_level))

        self._parsed_args = args
        return self._parsed_args

    @property
    def parsed_args(self) -> _argparse.Namespace:
        if self._parsed_args is None:
            err_msg = "Command line have not been parsed"
            self._logger.error(err_msg)
            raise RuntimeError(err_msg)
        return self._parsed_args

    @property
    def config(self) -> _config.Config:
        return self._config

    @property
    def dry_run(self) -> bool:
        """`True` if in dry run mode, `False` otherwise."""
        return self._dry_run

    @property
    def start_time(self) -> _datetime.datetime:
        return self._start_time

    @property
    def today(self) -> _datetime.date:
        return self._start_time.date()

    @property
    def out_dir(self) -> _pathlib.Path:
        return self._out_dir

    @property
    def filename_suffix(self) -> str:
        return self.start_time.strftime("%Y%m%d-%H%M%S")

    def render_template(self, template: str, *, extra_context: dict | None = None) -> str:
        from . import _util

        context = {
            "filename_suffix": self.filename_suffix,
            "start_time": self.start_time,
        }
        return _util.render_template(template, context, extra_context=extra_context)

    def make_out_path(self, template: str, *, mkdir: bool = True) -> _pathlib.Path:
        path = self.out_dir / self.render_template(template)
        if not path.resolve().is_relative_to(self.out_dir):
            raise RuntimeError(f"Invalid out_path, not under out_dir={self.out_dir}")
        if mkdir:
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def configure_log_file(
        self, filename: str | _pathlib.Path, level: int | str | None = None
    ) -> _logging.Handler:
        from . import _util

        _LOGGER.info("[ctx] Writing log file %s", filename)
        file_handler = _util.configure_file_logging(filename, level=level)
        if self._buffering_handler is not None:
            buffering_handler, self._buffering_handler = self._buffering_handler, None
            buffering_handler.setTarget(file_handler)
            buffering_handler.flush()
            _logging.getLogger().removeHandler(buffering_handler)
        return file_handler


class _UnlimitedBufferingHandler(_logging_handlers.MemoryHandler):
    def __init__(self, target=None, flushOnClose: bool = True) -> None:
        super().__init__(
            10_000_000_000_000,
            flushLevel=_logging.CRITICAL + 10,
            target=target,
            flushOnClose=flushOnClose,
        )

    def shouldFlush(self, record) -> bool:
        return False
