"""
csv_io.py - CSV reading and writing for ancestor records and mortality tables.

Handles:
    - Reading an ancestor export (header row with 'Birth date', 'Death date', 'Gender', ...)
    - Reading male and female mortality tables, with headers symbolized
      ('Modal age at death' -> 'modal_age_at_death')
    - Writing per-ancestor comparison details
"""

import csv
import logging
import re
from dataclasses import asdict, fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from gedcom_longevity.mortality.model import EnrichedDeathRecord, Gender

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DETAIL_FIELDNAMES = [f.name for f in fields(EnrichedDeathRecord)]


def symbolize_header(header: str) -> str:
    """
    Normalize a column header to a lower_snake_case key.

    Punctuation is dropped, surrounding whitespace stripped and inner
    whitespace runs replaced by a single underscore.

    Args:
        header (str): Raw header text.

    Returns:
        str: Normalized key, e.g. 'Median age at death (years)' -> 'median_age_at_death_years'.
    """
    text = header.replace('\ufeff', '').lower()
    text = re.sub(r'[^\s\w]+', '', text).strip()
    return re.sub(r'\s+', '_', text)


def _read_rows(path: PathLike, symbolize: bool) -> List[Dict[str, Optional[str]]]:
    rows: List[Dict[str, Optional[str]]] = []
    try:
        with open(path, newline='', encoding='utf-8-sig') as f:
            csv_reader = csv.DictReader(f, dialect='excel')
            for line in csv_reader:
                row: Dict[str, Optional[str]] = {}
                for key, value in line.items():
                    if key is None:
                        # surplus cells beyond the header
                        continue
                    name = symbolize_header(key) if symbolize else key.strip()
                    # An empty cell is an absent value.
                    row[name] = value if value != '' else None
                rows.append(row)
    except FileNotFoundError:
        logger.error(f'CSV file not found: {path}')
        raise
    except csv.Error as e:
        logger.error(f'CSV error reading {path}: {e}')
        raise
    logger.info(f'Read {len(rows)} rows from {path}')
    return rows


def read_ancestors(path: PathLike) -> List[Dict[str, Optional[str]]]:
    """
    Read an ancestor CSV export.

    Args:
        path: CSV file with a header row.

    Returns:
        List of rows keyed by header; empty cells are None.
    """
    return _read_rows(path, symbolize=False)


def read_death_stats(path: PathLike) -> List[Dict[str, Optional[str]]]:
    """
    Read one mortality reference table.

    Args:
        path: CSV file with a header row (year, modal and median age at death, ...).

    Returns:
        List of rows keyed by symbolized header, values left as text.
    """
    return _read_rows(path, symbolize=True)


def compile_death_stats(male_file: PathLike, female_file: PathLike) -> Dict[Gender, List[Dict[str, Optional[str]]]]:
    """
    Read the male and female mortality tables.

    Args:
        male_file: Male table CSV.
        female_file: Female table CSV.

    Returns:
        {Gender.MALE: rows, Gender.FEMALE: rows}
    """
    return {
        Gender.MALE: read_death_stats(male_file),
        Gender.FEMALE: read_death_stats(female_file),
    }


def write_details_csv(buckets: Mapping[Gender, Sequence[EnrichedDeathRecord]], path: PathLike) -> Path:
    """
    Write one row per compared ancestor.

    Deviations are written in seconds, as computed. A '.csv' suffix is added
    if the path has none.

    Args:
        buckets: Enriched records per gender.
        path: Output file.

    Returns:
        Path: The file written.
    """
    output_path = Path(path)
    if output_path.suffix.lower() != '.csv':
        output_path = output_path.with_name(output_path.name + '.csv')

    count = 0
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        csv_writer = csv.DictWriter(f, fieldnames=DETAIL_FIELDNAMES, dialect='excel')
        csv_writer.writeheader()
        for gender in (Gender.MALE, Gender.FEMALE):
            for record in buckets.get(gender, []):
                row = asdict(record)
                row['gender'] = str(record.gender) if record.gender else ''
                csv_writer.writerow(row)
                count += 1
    logger.info(f'Saved {count} ancestor comparison rows to: {output_path}')
    return output_path
