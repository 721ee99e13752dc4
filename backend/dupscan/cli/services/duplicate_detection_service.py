"""Service for selecting, writing and summarizing duplicate file groups."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TextIO

from ...scanner.models import ScanResult

_DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}

logger = logging.getLogger(__name__)


@dataclass(**_DATACLASS_KWARGS)
class DuplicateGroup:
    """A group of files that share the same content hash."""

    file_hash: str
    paths: List[str] = field(default_factory=list)
    size_bytes: int = 0  # Size of one copy
    wasted_bytes: int = 0  # Size that could be saved by deduplication

    @property
    def count(self) -> int:
        return len(self.paths)

    @property
    def is_duplicate(self) -> bool:
        return len(self.paths) > 1


@dataclass(**_DATACLASS_KWARGS)
class DuplicateAnalysisResult:
    """Results from duplicate file analysis."""

    files_hashed: int = 0
    files_skipped: int = 0
    walk_completed: bool = True
    duplicate_groups: List[DuplicateGroup] = field(default_factory=list)
    total_duplicate_files: int = 0
    total_wasted_bytes: int = 0

    @property
    def duplicate_groups_count(self) -> int:
        return len(self.duplicate_groups)

    @property
    def space_savings_percent(self) -> float:
        """Percentage of the duplicated bytes that removing copies would free."""
        if self.total_wasted_bytes == 0:
            return 0.0
        total_dup_size = sum(g.size_bytes * g.count for g in self.duplicate_groups)
        if total_dup_size == 0:
            return 0.0
        return (self.total_wasted_bytes / total_dup_size) * 100


class DuplicateDetectionService:
    """Turns an aggregated scan into duplicate groups and writes them out."""

    def analyze_duplicates(
        self,
        scan_result: Optional[ScanResult],
        *,
        order: str = "first-seen",
    ) -> DuplicateAnalysisResult:
        """
        Select every digest shared by more than one path.

        Args:
            scan_result: The complete aggregate of a scan
            order: ``first-seen`` keeps aggregate order, ``digest`` sorts
                groups by hash and members by path, ``wasted`` puts the
                groups wasting the most bytes first

        Returns:
            DuplicateAnalysisResult with grouped duplicates and statistics
        """
        result = DuplicateAnalysisResult()

        if not scan_result:
            return result

        result.files_hashed = scan_result.files_hashed
        result.files_skipped = sum(1 for issue in scan_result.issues if issue.code != "WALK_ERROR")
        result.walk_completed = scan_result.walk_completed

        for file_hash, paths in scan_result.groups.items():
            if len(paths) < 2:
                continue
            size = scan_result.sizes.get(file_hash, 0)
            group = DuplicateGroup(
                file_hash=file_hash,
                paths=list(paths),
                size_bytes=size,
                wasted_bytes=size * (len(paths) - 1),  # All but one copy
            )
            result.duplicate_groups.append(group)
            result.total_duplicate_files += group.count
            result.total_wasted_bytes += group.wasted_bytes

        if order == "digest":
            for group in result.duplicate_groups:
                group.paths.sort()
            result.duplicate_groups.sort(key=lambda g: g.file_hash)
        elif order == "wasted":
            result.duplicate_groups.sort(key=lambda g: g.wasted_bytes, reverse=True)
        elif order != "first-seen":
            raise ValueError(f"Unknown group order: {order}")

        return result

    def write_report(self, result: DuplicateAnalysisResult, stream: TextIO) -> int:
        """
        Write each group as one path per line followed by a blank line.

        Returns the number of groups written.
        """
        for group in result.duplicate_groups:
            logger.info(f"Duplicate files found (hash: {group.file_hash}):")
            for path in group.paths:
                logger.info(path)
                stream.write(path + "\n")
            stream.write("\n")
        stream.flush()
        logger.info(f"{result.duplicate_groups_count} duplicates found.")
        return result.duplicate_groups_count

    def format_duplicate_summary(self, result: DuplicateAnalysisResult) -> str:
        """Format a human-readable summary of duplicate analysis."""
        lines = ["Duplicate File Analysis", ""]

        if result.files_hashed == 0 and result.files_skipped == 0:
            lines.append("No files to analyze.")
            return "\n".join(lines)

        lines.append(f"Files hashed: {result.files_hashed}")
        if result.files_skipped:
            lines.append(f"Files skipped (unreadable): {result.files_skipped}")
        if not result.walk_completed:
            lines.append("Warning: directory walk stopped early; results are partial.")
        lines.append("")

        if not result.duplicate_groups:
            lines.append("No duplicate files found!")
            return "\n".join(lines)

        lines.append(f"Found {result.duplicate_groups_count} sets of duplicate files")
        lines.append(f"Total duplicate files: {result.total_duplicate_files}")
        lines.append(f"Potential space savings: {self._format_size(result.total_wasted_bytes)}")
        lines.append(f"Space savings: {result.space_savings_percent:.1f}%")

        return "\n".join(lines)

    def export_duplicates_json(self, result: DuplicateAnalysisResult) -> Dict[str, Any]:
        """Export duplicate analysis as JSON-serializable dict."""
        return {
            "summary": {
                "files_hashed": result.files_hashed,
                "files_skipped": result.files_skipped,
                "walk_completed": result.walk_completed,
                "duplicate_groups_count": result.duplicate_groups_count,
                "total_duplicate_files": result.total_duplicate_files,
                "total_wasted_bytes": result.total_wasted_bytes,
                "space_savings_percent": round(result.space_savings_percent, 2),
            },
            "duplicate_groups": [
                {
                    "hash": group.file_hash,
                    "file_count": group.count,
                    "size_bytes": group.size_bytes,
                    "wasted_bytes": group.wasted_bytes,
                    "paths": list(group.paths),
                }
                for group in result.duplicate_groups
            ],
        }

    @staticmethod
    def _format_size(size: int) -> str:
        """Format bytes as human-readable size."""
        if size < 0:
            return "unknown"
        units = ["B", "KB", "MB", "GB", "TB"]
        value = float(size)
        for unit in units:
            if value < 1024 or unit == units[-1]:
                return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} {unit}"
            value /= 1024
        return f"{value:.1f} TB"
