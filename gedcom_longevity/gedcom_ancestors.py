"""
gedcom_ancestors.py - Direct ancestors of one individual from a GEDCOM file.

Reads INDI and FAM records with ged4py, links each child to its father and
mother, then walks up the tree from a subject individual recording how many
generations removed each ancestor is (parents = 1, grandparents = 2, ...).
"""
from collections import deque
import logging
from pathlib import Path
from typing import Deque, Dict, List, Optional, Tuple, Union

from ged4py.parser import GedcomReader
from ged4py.model import Record

from gedcom_longevity.mortality.model import RawIndividualRecord

logger = logging.getLogger(__name__)

SEX_TO_GENDER = {'M': 'Male', 'F': 'Female'}


def normalize_xref(xref: str) -> str:
    """Return an xref in '@I1@' form, accepting 'I1' or '@I1@'."""
    xref = xref.strip()
    if not xref.startswith('@'):
        xref = f'@{xref}@'
    return xref


def _event_date(record: Record, event_tag: str):
    event = record.sub_tag(event_tag)
    if event is None:
        return None
    date = event.sub_tag('DATE')
    return date.value if date else None


def _individual_to_record(record: Record, generations_removed: int) -> RawIndividualRecord:
    name = None
    if record.sub_tag('NAME'):
        name = record.name.format() or None
    sex = record.sub_tag_value('SEX')
    gender = SEX_TO_GENDER.get(sex.strip().upper()) if sex else None
    return RawIndividualRecord(
        birth_date=_event_date(record, 'BIRT'),
        death_date=_event_date(record, 'DEAT'),
        gender=gender,
        xref_id=record.xref_id,
        name=name,
        generations_removed=generations_removed,
    )


def _parent_links(records0) -> Dict[str, Tuple[Optional[str], Optional[str]]]:
    """Map each child xref to its (father, mother) xrefs from FAM records."""
    parents: Dict[str, Tuple[Optional[str], Optional[str]]] = {}
    for family in records0('FAM'):
        husband = family.sub_tag('HUSB')
        wife = family.sub_tag('WIFE')
        father = husband.xref_id if husband else None
        mother = wife.xref_id if wife else None
        for child in family.sub_tags('CHIL'):
            if child.xref_id in parents:
                logger.warning(f"Individual {child.xref_id} is a child in more than one family; using {family.xref_id}")
            parents[child.xref_id] = (father, mother)
    return parents


def walk_ancestors(subject: str, parents: Dict[str, Tuple[Optional[str], Optional[str]]]) -> Dict[str, int]:
    """
    Breadth-first walk from subject to every direct ancestor.

    Args:
        subject: Xref of the starting individual.
        parents: Child xref -> (father xref, mother xref).

    Returns:
        Ancestor xref -> generations removed, in discovery order. An ancestor
        reachable along several lines keeps its nearest generation.
    """
    generations: Dict[str, int] = {}
    queue: Deque[Tuple[str, int]] = deque([(subject, 0)])
    visited = {subject}
    while queue:
        xref, generation = queue.popleft()
        for parent in parents.get(xref, (None, None)):
            if parent is None or parent in visited:
                continue
            visited.add(parent)
            generations[parent] = generation + 1
            queue.append((parent, generation + 1))
    return generations


def read_direct_ancestors(gedcom_file: Union[str, Path], subject_xref: Optional[str] = None) -> List[RawIndividualRecord]:
    """
    Read the direct ancestors of a subject from a GEDCOM file.

    Args:
        gedcom_file: Path to GEDCOM file.
        subject_xref: Xref of the subject ('@I1@' or 'I1'); the first individual in the file if None.

    Returns:
        List[RawIndividualRecord]: One record per ancestor, nearest generations first.
        Dates are ged4py DateValue objects; SEX 'M'/'F' become 'Male'/'Female'.

    Raises:
        FileNotFoundError: gedcom_file does not exist.
        ValueError: the file has no individuals, or subject_xref is not among them.
    """
    gedcom_path = Path(gedcom_file)
    if not gedcom_path.exists():
        logger.error(f"GEDCOM file not found: {gedcom_path}")
        raise FileNotFoundError(f"GEDCOM file not found: {gedcom_path}")

    with GedcomReader(str(gedcom_path)) as g:
        records0 = g.records0
        individuals: Dict[str, Record] = {}
        for record in records0('INDI'):
            individuals[record.xref_id] = record
        if not individuals:
            raise ValueError(f"No individuals found in GEDCOM file '{gedcom_path}'")

        if subject_xref:
            subject = normalize_xref(subject_xref)
            if subject not in individuals:
                raise ValueError(f"Subject {subject} not found in GEDCOM file '{gedcom_path}'")
        else:
            subject = next(iter(individuals))

        generations = walk_ancestors(subject, _parent_links(records0))

        ancestors = []
        for xref, generation in generations.items():
            record = individuals.get(xref)
            if record is None:
                logger.warning(f"Ancestor {xref} has no INDI record; skipping")
                continue
            ancestors.append(_individual_to_record(record, generation))

    logger.info(f"Found {len(ancestors)} direct ancestors of {subject} in {gedcom_path}")
    return ancestors
