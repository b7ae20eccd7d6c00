"""
Pre-filter deciding whether an individual record carries enough data to process.
"""
from __future__ import annotations

from typing import Any, Mapping, Union

from .model import RawIndividualRecord


def is_sufficient(record: Union[RawIndividualRecord, Mapping[str, Any]]) -> bool:
    """
    Check that birth date, death date and gender are present.

    Dates only need to be present (not None); whether they parse is decided
    later. Gender must be present and non-empty.

    Args:
        record: RawIndividualRecord or a row keyed by 'Birth date', 'Death date', 'Gender'.

    Returns:
        bool: True if the record can be processed further.
    """
    record = RawIndividualRecord.coerce(record)
    if record.birth_date is None or record.death_date is None:
        return False
    return record.gender is not None and record.gender != ''
