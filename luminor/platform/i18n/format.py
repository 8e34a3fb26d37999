"""Locale-aware formatting of dates and numbers."""

from __future__ import annotations

from datetime import date

from luminor.platform.i18n.context import Context, locale_from_context
from luminor.platform.i18n.locale import Locale

_MONTHS_LONG: dict[Locale, tuple[str, ...]] = {
    Locale.EN: ("January", "February", "March", "April", "May", "June", "July",
                "August", "September", "October", "November", "December"),
    Locale.DE: ("Januar", "Februar", "Marz", "April", "Mai", "Juni", "Juli",
                "August", "September", "Oktober", "November", "Dezember"),
    Locale.FR: ("janvier", "fevrier", "mars", "avril", "mai", "juin", "juillet",
                "aout", "septembre", "octobre", "novembre", "decembre"),
}

_MONTHS_SHORT: dict[Locale, tuple[str, ...]] = {
    Locale.EN: ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep",
                "Oct", "Nov", "Dec"),
    Locale.DE: ("Jan", "Feb", "Mar", "Apr", "Mai", "Jun", "Jul", "Aug", "Sep",
                "Okt", "Nov", "Dez"),
    Locale.FR: ("janv.", "fevr.", "mars", "avr.", "mai", "juin", "juil.", "aout",
                "sept.", "oct.", "nov.", "dec."),
}

_GROUP_SEPARATORS = {Locale.EN: ",", Locale.DE: ".", Locale.FR: "\u00a0"}


def format_date_long(ctx: Context, value: date) -> str:
    """Format a date with the full month name."""
    locale = locale_from_context(ctx)
    month = _MONTHS_LONG[locale][value.month - 1]
    if locale is Locale.DE:
        return f"{value.day}. {month} {value.year}"
    if locale is Locale.FR:
        return f"{value.day} {month} {value.year}"
    return f"{month} {value.day}, {value.year}"


def format_date_short(ctx: Context, value: date) -> str:
    """Format a day and month without the year."""
    locale = locale_from_context(ctx)
    if locale is Locale.DE:
        return f"{value.day:02d}.{value.month:02d}."
    month = _MONTHS_SHORT[locale][value.month - 1]
    if locale is Locale.FR:
        return f"{value.day} {month}"
    return f"{month} {value.day}"


def format_number(ctx: Context, value: int) -> str:
    """Format an integer with the locale's thousands separator."""
    separator = _GROUP_SEPARATORS[locale_from_context(ctx)]
    sign = "-" if value < 0 else ""
    return sign + f"{abs(value):,}".replace(",", separator)