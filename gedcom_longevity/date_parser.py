"""
date_parser.py - Tolerant date parsing for ancestor birth and death records.

Provides the DateParser class for turning loosely formatted date text into a datetime.date.
Supports:
    - Conventional calendar dates ('1970-06-01', '1 January 1970', '1 JAN 1970') using dateutil
    - GEDCOM date values ('ABT 12 MAR 1970', 'BET 1900 AND 1910') using ged4py
    - Narrative text containing a year ('about 1970'), resolved to 1 January of that year

Parsing never raises: any failure is signalled by returning None.
"""
from __future__ import annotations

import logging
import re
from datetime import date as _date, datetime
from typing import Any, Optional, Union

from dateutil import parser as dateutil_parser
from ged4py.date import DateValue

logger = logging.getLogger(__name__)

YEAR_RE = re.compile(r'\b(18|19|20)\d{2}\b')

_MONTH_ABBR_TO_NUM = {
    "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4, "MAY": 5, "JUN": 6,
    "JUL": 7, "AUG": 8, "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
}

# Two defaults differing only in year: if both parses agree on the year, the text carried one.
_DEFAULT_FIRST = datetime(1, 1, 1)
_DEFAULT_SECOND = datetime(2, 1, 1)

# Text that opens with a 4-digit year is read year, month, day.
_YEAR_FIRST_RE = re.compile(r"^\d{4}\b")

DateLike = Union[str, DateValue, _date, None]


class DateParser:
    """
    Parses birth and death date values into datetime.date objects.

    Each strategy is tried in order and the first success wins:
        1. General calendar parse (dateutil); missing month and day default to January 1.
           Numeric dates are read day first (01/06/1970 is 1 June) unless they open with the year.
        2. GEDCOM date grammar (ged4py); ranges and periods are simplified to one bound.
        3. Calendar date embedded in narrative text ('died 3 June 1970'), dateutil fuzzy mode.
        4. First 4-digit year from 1800 to 2099 found in the text, as January 1 of that year.

    Attributes:
        min_year: Lowest year accepted from a GEDCOM date value.
        max_year: Highest year accepted from a GEDCOM date value.
        simplify_range_policy: Which bound of a GEDCOM range to use ('first' or 'last').
    """
    __slots__ = [
        'min_year',
        'max_year',
        'simplify_range_policy'
    ]

    def __init__(self, min_year: int = 1000, max_year: int = 2100, simplify_range_policy: str = 'first') -> None:
        if simplify_range_policy not in ('first', 'last'):
            raise ValueError(f"Unsupported range policy: {simplify_range_policy!r}")
        self.min_year = min_year
        self.max_year = max_year
        self.simplify_range_policy = simplify_range_policy

    def parse(self, value: DateLike) -> Optional[_date]:
        """
        Parse a date value.

        Args:
            value: Date text, a ged4py DateValue, a date/datetime, or None.

        Returns:
            datetime.date if any strategy succeeds, otherwise None.
        """
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, _date):
            return value
        if isinstance(value, DateValue):
            return self._from_gedcom_value(value)

        text = str(value).strip()
        if not text:
            return None

        parsed = self._parse_calendar(text)
        if parsed is None:
            parsed = self._parse_gedcom(text)
        if parsed is None:
            parsed = self._parse_narrative(text)
        if parsed is None:
            parsed = self._parse_year(text)
        if parsed is None:
            logger.debug(f"Unable to parse date: '{text}'")
        return parsed

    def looks_like_year(self, num: Any) -> bool:
        """Return True if num is plausibly a year."""
        return isinstance(num, int) and self.min_year <= num <= self.max_year

    def _parse_calendar(self, text: str, fuzzy: bool = False) -> Optional[_date]:
        # dateutil's dayfirst also swaps month and day after a leading year
        dayfirst = _YEAR_FIRST_RE.match(text) is None
        try:
            first = dateutil_parser.parse(text, default=_DEFAULT_FIRST, dayfirst=dayfirst, fuzzy=fuzzy)
            second = dateutil_parser.parse(text, default=_DEFAULT_SECOND, dayfirst=dayfirst, fuzzy=fuzzy)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Calendar parse failed for '{text}': {e}")
            return None
        if first.year != second.year:
            logger.debug(f"Calendar parse of '{text}' found no year")
            return None
        return first.date()

    def _parse_narrative(self, text: str) -> Optional[_date]:
        """
        Find a calendar date inside free text, skipping words dateutil does not know.

        The result must fall in the first year mentioned in the text, so text
        naming several years ('died 1885, buried 1886') is left to the year fallback.
        """
        parsed = self._parse_calendar(text, fuzzy=True)
        if parsed is None:
            return None
        match = YEAR_RE.search(text)
        if match is not None and parsed.year != int(match.group(0)):
            logger.debug(f"Narrative parse of '{text}' gave {parsed}, not in the first year mentioned")
            return None
        return parsed

    def _parse_gedcom(self, text: str) -> Optional[_date]:
        try:
            value = DateValue.parse(text)
        except Exception as e:
            logger.debug(f"GEDCOM parse failed for '{text}': {e}")
            return None
        return self._from_gedcom_value(value)

    def _from_gedcom_value(self, value: DateValue) -> Optional[_date]:
        """
        Resolve a ged4py DateValue to a single date.

        Phrases resolve to None; ranges and periods use the bound chosen by
        simplify_range_policy, or the other bound when that one is open.
        """
        kind = getattr(value, 'kind', None)
        if kind is None:
            return None
        if kind.name in ("RANGE", "PERIOD"):
            date1 = getattr(value, 'date1', None)
            date2 = getattr(value, 'date2', None)
            if self.simplify_range_policy == "last":
                calendar_date = date2 if date2 is not None else date1
            else:
                calendar_date = date1 if date1 is not None else date2
        elif kind.name == "PHRASE":
            return None
        else:
            calendar_date = getattr(value, 'date', None)
        return self._calendar_to_pydate(calendar_date)

    def _calendar_to_pydate(self, calendar_date: Any) -> Optional[_date]:
        if calendar_date is None:
            return None
        try:
            year = int(getattr(calendar_date, 'year', None))
        except (TypeError, ValueError):
            return None
        if not self.looks_like_year(year):
            return None

        month = getattr(calendar_date, 'month', None)
        if month is None:
            month_num = 1
        elif isinstance(month, str):
            month_num = _MONTH_ABBR_TO_NUM.get(month.upper()[:3])
        else:
            month_num = int(month)
        if not month_num:
            return None

        day = getattr(calendar_date, 'day', None) or 1
        try:
            return _date(year, month_num, int(day))
        except ValueError:
            return None

    def _parse_year(self, text: str) -> Optional[_date]:
        match = YEAR_RE.search(text)
        if match is None:
            return None
        return _date(int(match.group(0)), 1, 1)


_default_parser = DateParser()


def parse_date(value: DateLike) -> Optional[_date]:
    """
    Parse a date value with the default DateParser.

    Args:
        value: Date text, a ged4py DateValue, a date/datetime, or None.

    Returns:
        datetime.date or None if the value could not be parsed.
    """
    return _default_parser.parse(value)
