from __future__ import annotations

import logging as _logging
import re as _re
import typing as _typing


if _typing.TYPE_CHECKING:
    import datetime as _datetime
    import decimal as _decimal
    import pathlib as _pathlib

    import pandas as _pandas


_LOGGER = _logging.getLogger(__name__)


__all__ = [
    "PrefixLoggerAdapter",
    "amount_to_cents",
    "collation_key",
    "configure_file_logging",
    "console_confirm",
    "format_cents",
    "format_cents_as_eur_de",
    "german_transliterate",
    "render_template",
    "sepa_transliterate",
    "to_date_or_none",
    "to_datetime_or_none",
    "to_log_level",
    "write_dataframe_to_xlsx",
]


class PrefixLoggerAdapter(_logging.LoggerAdapter):
    def __init__(
        self,
        logger: _logging.Logger | _logging.LoggerAdapter,
        *,
        prefix: str,
    ) -> None:
        self._prefix = prefix
        super().__init__(logger)

    def process(self, msg, kwargs):
        return (f"{self._prefix} {msg}", kwargs)


_CONSOLE_CONFIRM_DEFAULT_TO_CHOICE_DISPLAY = {
    None: "y/n",
    True: "Y/n",
    False: "y/N",
}

_CONSOLE_CONFIRM_INPUT_TO_VALUE = {
    "yes": True,
    "ye": True,
    "y": True,
    "ja": True,
    "j": True,
    "no": False,
    "n": False,
    "nein": False,
}


def console_confirm(question, *, default: bool | None = False) -> bool:
    allowed_choices = _CONSOLE_CONFIRM_DEFAULT_TO_CHOICE_DISPLAY.get(default, "y/n")
    while True:
        user_input = input(f"{question} [{allowed_choices}] ").strip().lower()
        if not user_input and default is not None:
            return default
        elif (val := _CONSOLE_CONFIRM_INPUT_TO_VALUE.get(user_input)) is not None:
            return val
        else:
            print("Please respond with 'yes' or 'no' (or 'y' or 'n').\n", flush=True)


def to_log_level(level: int | str | None, default: int | None = None) -> int:
    """Return the numeric logging level for *level*.

    >>> to_log_level("WARNING")
    30
    >>> to_log_level(None, default=20)
    20
    """
    import logging

    if default is None:
        default = logging.DEBUG
    if level is None:
        return default
    elif isinstance(level, str):
        return logging.getLevelNamesMapping()[level.upper()]
    else:
        return level


def configure_file_logging(
    filename: str | _pathlib.Path,
    *,
    level: int | str | None,
    logger: _logging.Logger | str | None = None,
) -> _logging.Handler:
    import logging

    if logger is None:
        logger = logging.getLogger()
    elif isinstance(logger, str):
        logger = logging.getLogger(logger)
    level = to_log_level(level, default=logging.NOTSET)

    formatter = logging.Formatter("%(asctime)s %(levelname)-1s %(message)s")
    handler = logging.FileHandler(filename, encoding="utf-8")
    handler.setFormatter(formatter)
    handler.setLevel(level)
    logger.addHandler(handler)
    return handler


@_typing.overload
def to_date_or_none(date: _datetime.date | str, /) -> _datetime.date: ...


@_typing.overload
def to_date_or_none(date: None, /) -> None: ...


def to_date_or_none(date: _datetime.date | str | None, /) -> _datetime.date | None:
    """Return a date.

    Examples:

      >>> to_date_or_none(None) is None
      True
      >>> to_date_or_none("2017-02-20")
      datetime.date(2017, 2, 20)
      >>> to_date_or_none("2017-02-20 00:00:00")
      datetime.date(2017, 2, 20)
      >>> to_date_or_none("20.02.2017")
      datetime.date(2017, 2, 20)
    """
    import datetime
    import re

    if date is None:
        return None
    elif isinstance(date, datetime.datetime):
        return date.date()
    elif isinstance(date, str):
        date = date.strip()
        if date.upper() == "TODAY":
            return datetime.date.today()
        elif re.fullmatch("[0-9]+[.][0-9]+[.][0-9]+", date):
            return datetime.datetime.strptime(date, "%d.%m.%Y").date()
        try:
            return datetime.date.fromisoformat(date)
        except ValueError:
            pass
        try:
            return datetime.datetime.fromisoformat(date).date()
        except ValueError:
            raise ValueError(f"Unsupported date format: {date!r}") from None
    else:
        return date


def to_datetime_or_none(
    dt: _datetime.datetime | _datetime.date | str | None, /
) -> _datetime.datetime | None:
    """Return an aware datetime for *dt* (local time if naive).

    Supports ``NOW``, ``TODAY``, ``DD.MM.YYYY`` and ISO 8601.

    >>> to_datetime_or_none(None) is None
    True
    >>> to_datetime_or_none("2017-02-20T12:00:00+01:00").isoformat()
    '2017-02-20T12:00:00+01:00'

    Dates are taken at midnight:

    >>> to_datetime_or_none("20.02.2017").time()
    datetime.time(0, 0)
    """
    import datetime
    import re

    if dt is None:
        return None
    elif isinstance(dt, datetime.datetime):
        return dt if dt.tzinfo else dt.astimezone()
    elif isinstance(dt, datetime.date):
        return datetime.datetime.combine(dt, datetime.time()).astimezone()
    elif isinstance(dt, str):
        if dt.upper() == "NOW":
            return datetime.datetime.now().astimezone()
        elif dt.upper() == "TODAY" or re.fullmatch("[0-9]+[.][0-9]+[.][0-9]+", dt):
            return to_datetime_or_none(to_date_or_none(dt))
        try:
            parsed = datetime.datetime.fromisoformat(dt)
        except ValueError:
            raise ValueError(f"Unsupported datetime format: {dt!r}") from None
        return parsed if parsed.tzinfo else parsed.astimezone()
    else:
        raise ValueError(
            f"Cannot convert {type(dt).__qualname__!r} value {dt!r} to datetime"
        )


def amount_to_cents(amount: str | int | _decimal.Decimal, /) -> int:
    """Convert a euro amount to integer cents.

    Amounts with more than two decimal places are rejected, never rounded.

    >>> amount_to_cents("10.00")
    1000
    >>> amount_to_cents("12,5")
    1250
    >>> amount_to_cents(7)
    700
    >>> amount_to_cents("0.125")
    Traceback (most recent call last):
    ...
    ValueError: Amount '0.125' has sub-cent precision
    """
    import decimal

    if isinstance(amount, bool) or isinstance(amount, float):
        raise ValueError(f"Unsupported amount type {type(amount).__qualname__!r}")
    if isinstance(amount, str):
        text = amount.strip()
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            value = decimal.Decimal(text)
        except decimal.InvalidOperation:
            raise ValueError(f"Invalid amount {amount!r}") from None
    else:
        value = decimal.Decimal(amount)
    if not value.is_finite():
        raise ValueError(f"Invalid amount {amount!r}")
    cents = value * 100
    if cents != cents.to_integral_value():
        raise ValueError(f"Amount {amount!r} has sub-cent precision")
    return int(cents)


def format_cents(cents: int, /) -> str:
    """Format *cents* as a decimal euro amount with two decimal places.

    >>> format_cents(2000)
    '20.00'
    >>> format_cents(5)
    '0.05'
    """
    import decimal

    return str((decimal.Decimal(cents) / 100).quantize(decimal.Decimal("0.01")))


def format_cents_as_eur_de(cents: int, zero_cents: str = ",—") -> str:
    from babel.numbers import format_currency

    return format_currency(int(round(cents)) / 100, "EUR", locale="de_DE").replace(
        ",00", zero_cents
    )


def german_transliterate(s: str) -> str:
    """Replace German umlauts and sharp s.

    >>> german_transliterate("Jürgen Weiß")
    'Juergen Weiss'
    """
    import unicodedata

    s = unicodedata.normalize("NFC", s)

    replacements = {
        "Ä": "Ae",
        "Ö": "Oe",
        "Ü": "Ue",
        "ä": "ae",
        "ö": "oe",
        "ü": "ue",
        "ß": "ss",
    }
    for key, replacement in replacements.items():
        s = s.replace(key, replacement)
    return s


_SEPA_CHARS_RE = _re.compile(r"[^a-zA-Z0-9/ \-?:().,'+]")

_SEPA_REPLACEMENTS = {
    "&": "+",
    "_": "-",
    '"': "'",
    "Æ": "Ae",
    "æ": "ae",
    "Œ": "Oe",
    "œ": "oe",
    "Ø": "O",
    "ø": "o",
    "Ł": "L",
    "ł": "l",
    "Đ": "D",
    "đ": "d",
}


def sepa_transliterate(s: str) -> str:
    """Restrict *s* to the SEPA character set.

    German umlauts are transliterated, accents are dropped and any
    remaining character outside the set becomes a space.

    >>> sepa_transliterate("Jürgen Weiß & Søren Dupré")
    'Juergen Weiss + Soren Dupre'
    >>> sepa_transliterate("Beitrag 10 € (2017)")
    'Beitrag 10 (2017)'
    """
    import unicodedata

    s = german_transliterate(s)
    for key, replacement in _SEPA_REPLACEMENTS.items():
        s = s.replace(key, replacement)
    decomposed = unicodedata.normalize("NFKD", s)
    s = "".join(c for c in decomposed if not unicodedata.combining(c))
    s = _SEPA_CHARS_RE.sub(" ", s)
    return " ".join(s.split())


def collation_key(s: str) -> tuple[str, str]:
    """Sort key approximating a German collator.

    Case is ignored and accented letters sort next to their base
    letter.

    >>> sorted(["Zander", "müller", "Mueller", "Muller"], key=collation_key)
    ['Mueller', 'Muller', 'müller', 'Zander']
    """
    import unicodedata

    decomposed = unicodedata.normalize("NFD", s.casefold())
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base, decomposed)


def render_template(
    template: str,
    context: dict | None,
    *,
    extra_context: dict | None = None,
) -> str:
    """Render the Jinja2 *template*.

    >>> render_template("Hello {{ name }}", dict(name="World"))
    'Hello World'

    >>> import datetime
    >>> now = datetime.datetime(2017, 2, 20, 12, 0, 0)
    >>> render_template("{{ now | strftime('%Y%m%d-%H%M%S') }}", {'now': now})
    '20170220-120000'
    """
    import jinja2 as _jinja2

    def _strftime(dt: _datetime.datetime, format="%Y-%m-%d %H:%M:%S") -> str:
        return dt.strftime(format)

    jinja_env = _jinja2.Environment(undefined=_jinja2.StrictUndefined)
    jinja_env.filters["strftime"] = _strftime
    jinja_template = jinja_env.from_string(template)
    context = (context or {}).copy()
    context.update(extra_context or {})
    return jinja_template.render(context)


def write_dataframe_to_xlsx(
    df: _pandas.DataFrame,
    path: str | _pathlib.Path,
    *,
    add_autofilter: bool = True,
    index: bool = False,
    na_rep: str = "",
    sheet_name: str = "Sheet 1",
    log_level: int | None = None,
) -> None:
    import pandas as pd

    if log_level is None:
        log_level = _logging.INFO
    _LOGGER.log(log_level, "Write %s", path)
    writer = pd.ExcelWriter(
        path, engine="xlsxwriter", engine_kwargs={"options": {"remove_timezone": True}}
    )
    df.to_excel(writer, index=index, na_rep=na_rep, sheet_name=sheet_name)
    (max_row, max_col) = df.shape

    worksheet = writer.sheets[sheet_name]
    worksheet.freeze_panes(1, 0)
    if add_autofilter and max_col:
        worksheet.autofilter(0, 0, max_row, max_col - 1)
    worksheet.autofit()

    writer.close()
