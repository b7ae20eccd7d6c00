from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from gedcom_longevity.app_hooks import AppHooks
from .aggregate import AggregateStatsCalculator
from .config import MortalityConfig
from .extractor import DeathDetailExtractor, RecordLike, bucket_outcomes
from .model import Buckets, Gender, GenderAggregateStats, Rejected
from .reference_table import ReferenceRow, ReferenceTableIndex
from . import report

logger = logging.getLogger(__name__)


@dataclass
class ComparisonResult:
    """
    Output of a mortality comparison run.

    Attributes:
        buckets: Enriched records per gender, in input order.
        aggregates: Average deviations per gender, in years (None if omitted).
        overall: Average deviations over both genders, or None if there were no records.
        rejections: Count of skipped records per rejection reason.
        country_label: Name of the reference population used in report wording.
    """
    buckets: Buckets
    aggregates: Dict[Gender, Optional[GenderAggregateStats]]
    overall: Optional[GenderAggregateStats] = None
    rejections: Dict[str, int] = field(default_factory=dict)
    country_label: str = "UK"

    def summary(self, gender: Gender) -> report.BucketSummary:
        """Counts and year span for one gender."""
        return report.summarize_bucket(self.buckets.get(gender, []))

    def report_lines(self) -> List[str]:
        """Summary sentences for both genders."""
        return report.report_lines(self.buckets, self.aggregates, self.country_label)

    def detail_lines(self) -> List[str]:
        """Per-ancestor table over both genders."""
        records = [r for gender in (Gender.MALE, Gender.FEMALE) for r in self.buckets.get(gender, [])]
        return report.detail_lines(records)

    def to_dict(self) -> Dict[str, Any]:
        """Export as plain data (gender keys as strings)."""
        return {
            'aggregates': {str(g): asdict(s) if s else None for g, s in self.aggregates.items()},
            'overall': asdict(self.overall) if self.overall else None,
            'summaries': {str(g): asdict(self.summary(g)) for g in (Gender.MALE, Gender.FEMALE)},
            'rejections': dict(self.rejections),
        }


class MortalityComparison:
    """
    High-level interface for comparing ancestors against mortality tables.

    This is a convenience wrapper that builds the reference index, runs the
    extractor and the aggregate calculator and keeps the result.

    Example:
        comparison = MortalityComparison(
            records=ancestors,
            death_stats={'male': male_rows, 'female': female_rows},
        )
        for line in comparison.results.report_lines():
            print(line)
    """

    def __init__(
        self,
        records: Optional[Iterable[RecordLike]] = None,
        death_stats: Optional[Mapping[Any, Iterable[ReferenceRow]]] = None,
        index: Optional[ReferenceTableIndex] = None,
        config: Optional[MortalityConfig] = None,
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[Path] = None,
        app_hooks: Optional[AppHooks] = None
    ) -> None:
        """
        Initialize, and run the comparison straight away if records are given.

        Args:
            records: Raw ancestor records.
            death_stats: {'male': rows, 'female': rows} reference tables.
            index: Prebuilt reference index (takes precedence over death_stats).
            config: Configuration instance.
            config_dict: Dictionary to configure the comparison (used if config is None).
            config_file: Path to YAML config file (used if neither config nor config_dict is given).
            app_hooks: Optional application hooks for progress reporting
        """
        self.app_hooks = app_hooks

        if config is not None:
            self.config = config
        elif config_dict:
            self.config = MortalityConfig.from_dict(config_dict)
        elif config_file:
            self.config = MortalityConfig(config_file=config_file)
        else:
            self.config = MortalityConfig()

        if index is None and death_stats is not None:
            index = ReferenceTableIndex.from_death_stats(death_stats)
        self.index = index

        self.extractor = DeathDetailExtractor.from_config(self.config, app_hooks=app_hooks)
        self.calculator = AggregateStatsCalculator.from_config(self.config)

        self._results: Optional[ComparisonResult] = None
        if records is not None:
            self._results = self.run(records)

    @property
    def results(self) -> Optional[ComparisonResult]:
        """Get the comparison results."""
        return self._results

    def run(self, records: Iterable[RecordLike]) -> ComparisonResult:
        """
        Compare the given records with the reference tables.

        Args:
            records: Raw ancestor records.

        Returns:
            ComparisonResult

        Raises:
            ValueError: no reference tables were provided.
            InsufficientDataError: a gender has no qualifying records under the 'raise' policy.
        """
        if self.index is None:
            raise ValueError("No mortality reference tables provided")

        outcomes = self.extractor.extract_outcomes(records, self.index)
        buckets = bucket_outcomes(outcomes)
        rejections = Counter(o.reason for o in outcomes if isinstance(o, Rejected))
        for reason, count in sorted(rejections.items()):
            self._update_key_value(f"rejected.{reason}", count)

        aggregates = self.calculator.calculate(buckets)
        overall = None
        if any(buckets[g] for g in (Gender.MALE, Gender.FEMALE)):
            overall = self.calculator.calculate_overall(buckets)

        logger.info(
            f"Compared {len(buckets[Gender.MALE])} male and {len(buckets[Gender.FEMALE])} female ancestors"
        )
        self._results = ComparisonResult(
            buckets=buckets,
            aggregates=aggregates,
            overall=overall,
            rejections=dict(rejections),
            country_label=self.config.country_label,
        )
        return self._results

    def _update_key_value(self, key: str, value: Any) -> None:
        if self.app_hooks and callable(getattr(self.app_hooks, "update_key_value", None)):
            self.app_hooks.update_key_value(key, value)
