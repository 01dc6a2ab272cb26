"""
Multi-file consolidation.

Takes any mix of BOM files, folders and ZIP archives, resolves each source
file on its own (a file is one BOM forest; sequences restart per file) and
concatenates the resolved rows. Rows without a product label are tagged with
the source file's stem so the merged table stays groupable.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from .adapters import default_adapters
from .archive import is_archive, open_archive
from .config import HierarchyConfig
from .hierarchy import Diagnostic, HierarchyResolver, compute_statistics, HierarchyStatistics
from .normalizer import BomRow
from .parser import BomParser

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class ConsolidationReport:
    """Run summary shown after processing."""
    file_count: int = 0
    total_rows: int = 0
    elapsed_ms: float = 0.0
    files: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    statistics: Optional[HierarchyStatistics] = None

    @property
    def avg_ms_per_file(self) -> float:
        return self.elapsed_ms / self.file_count if self.file_count else 0.0

    @property
    def rows_per_second(self) -> float:
        return self.total_rows / (self.elapsed_ms / 1000) if self.elapsed_ms > 0 else 0.0


class BomConsolidator:
    """Resolves and merges BOM exports from files, folders and ZIP archives.

    Args:
        config: resolver configuration applied to every file
        parser: BomParser with adapters registered (default: all built-in adapters)
        archive_suffix: member suffix extracted from archives
        skip_errors: log and skip unreadable files instead of raising
    """

    def __init__(self, config: HierarchyConfig, parser: Optional[BomParser] = None,
                 archive_suffix: str = ".xls", skip_errors: bool = False):
        self.config = config
        self.archive_suffix = archive_suffix
        self.skip_errors = skip_errors

        if parser is None:
            parser = BomParser()
            for adapter in default_adapters():
                parser.register_adapter(adapter)
        self.parser = parser

    def collect_sources(self, inputs: Iterable[PathLike]) -> Tuple[List[Path], List[Path]]:
        """Split inputs into parseable files and archives; folders are walked recursively.

        Returns:
            (files, archives), each sorted within its folder
        """
        files: List[Path] = []
        archives: List[Path] = []

        for item in inputs:
            path = Path(item)
            if path.is_dir():
                candidates = sorted(p for p in path.rglob("*") if p.is_file())
            elif path.exists():
                candidates = [path]
            else:
                raise FileNotFoundError(f"Input not found: {path}")

            for candidate in candidates:
                if is_archive(candidate):
                    archives.append(candidate)
                elif self.parser.can_parse(str(candidate)):
                    files.append(candidate)
                elif candidate == path:
                    raise ValueError(f"No adapter found for {path}")

        return files, archives

    def _resolve_file(self, path: Path, label: str, report: ConsolidationReport) -> List[BomRow]:
        try:
            rows = self.parser.parse(str(path))
        except (ValueError, OSError) as e:
            if not self.skip_errors:
                raise
            logger.error(f"Skipping {label}: {e}", exc_info=True)
            report.failed.append((label, str(e)))
            return []

        for row in rows:
            if not row.product:
                row.product = Path(label).stem

        resolver = HierarchyResolver(rows, **self.config.resolver_kwargs())
        resolved = resolver.process()

        report.file_count += 1
        report.files.append(label)
        report.diagnostics.extend(resolver.diagnostics)
        return resolved

    def consolidate(self, inputs: Iterable[PathLike]) -> Tuple[List[BomRow], ConsolidationReport]:
        """Resolve every source and concatenate the results.

        Returns:
            (merged rows, ConsolidationReport)
        """
        started = time.perf_counter()
        report = ConsolidationReport()
        merged: List[BomRow] = []

        files, archives = self.collect_sources(inputs)

        for path in files:
            merged.extend(self._resolve_file(path, str(path), report))

        for archive_path in archives:
            with open_archive(archive_path, self.archive_suffix) as extracted:
                for path in extracted:
                    label = f"{archive_path.name}/{path.name}"
                    if not self.parser.can_parse(str(path)):
                        logger.warning(f"No adapter for archive member {label}; skipped")
                        continue
                    merged.extend(self._resolve_file(path, label, report))

        report.total_rows = len(merged)
        report.elapsed_ms = (time.perf_counter() - started) * 1000
        report.statistics = compute_statistics(merged, report.diagnostics)

        logger.info(
            f"Consolidated {report.file_count} files, {report.total_rows} rows "
            f"in {report.elapsed_ms:.0f} ms"
        )
        return merged, report
