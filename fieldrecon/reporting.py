"""
Plain-text summaries for the CLI.
"""

from typing import List

from .records import ComparisonReport

MAX_LISTED = 10


def format_comparison_stats(report: ComparisonReport, max_listed: int = MAX_LISTED) -> str:
    """Coverage statistics, per-category breakdown and the first found/missing fields."""
    stats = report.stats
    lines: List[str] = []

    lines.append("\n📈 FUNDAMENTAL FIELD STATISTICS:")
    lines.append(f"   Total fundamental fields: {stats.total_fundamentals}")
    lines.append(f"   Fields found: {stats.found} ({stats.coverage_percent}%)")
    lines.append(f"   Fields missing: {stats.missing}")

    if report.by_category:
        lines.append("\n📂 BY CATEGORY:")
        for category, cat_stats in report.by_category.items():
            lines.append(f"   - {category}: {cat_stats.found}/{cat_stats.total} ({cat_stats.percent}%)")

    if report.found_fields:
        lines.append("\n✅ FUNDAMENTAL FIELDS FOUND:")
        for found in report.found_fields[:max_listed]:
            icon = "✅" if found.completed else "⚠️"
            lines.append(f"   {icon} {found.field_name} ({found.matched_label})")
        if len(report.found_fields) > max_listed:
            lines.append(f"   ... and {len(report.found_fields) - max_listed} more")

    if report.missing_fields:
        lines.append("\n❌ FUNDAMENTAL FIELDS MISSING:")
        for missing in report.missing_fields[:max_listed]:
            lines.append(f"   ❌ {missing.field_name} - {missing.description}")
        if len(report.missing_fields) > max_listed:
            lines.append(f"   ... and {len(report.missing_fields) - max_listed} more")

    return "\n".join(lines)


def format_update_summary(summary) -> str:
    lines = [
        f"\n📊 Update run: {summary.state.value}",
        f"   Real fields: {summary.real_field_count}",
        f"   Learned variants: {summary.variants_added}",
        f"   Metadata corrections: {summary.corrections_applied}",
        f"   New fields: {summary.fields_created}",
        f"   Total fundamental fields: {summary.total_fundamental_field_count}",
    ]
    if summary.fields_skipped:
        lines.append(f"   Skipped new fields: {summary.fields_skipped}")
    for batch in summary.degraded_batches:
        lines.append(f"   ⚠️ Batch {batch.batch_number} ({batch.size} fields) degraded: {batch.status} - {batch.reason}")
    if summary.registry_path:
        lines.append(f"   📄 Registry: {summary.registry_path}")
    return "\n".join(lines)
