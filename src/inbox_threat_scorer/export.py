"""Export a verdict to CSV or JSON."""

import csv
import json

from .models import Verdict


def export_verdict(verdict: Verdict, format: str, output_path: str) -> None:
    """Write a verdict to a file.

    Args:
        verdict: The verdict to export.
        format: Output format, either 'csv' or 'json'.
        output_path: Path to write the output file.

    CSV output has one row per finding, each repeating the verdict level;
    a verdict without findings writes a single summary row.
    """
    if format == "csv":
        fieldnames = ["level", "confidence", "detail", "index", "item", "reason", "indicators"]
        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            base = {
                "level": verdict.level,
                "confidence": "" if verdict.confidence is None else verdict.confidence,
                "detail": verdict.detail,
            }
            if not verdict.findings:
                writer.writerow(base)
            for finding in verdict.findings:
                writer.writerow(
                    {
                        **base,
                        "index": finding.index,
                        "item": finding.subject_or_href,
                        "reason": finding.reason,
                        "indicators": "; ".join(finding.indicators),
                    }
                )
    elif format == "json":
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(verdict.to_dict(), f, indent=2, ensure_ascii=False)
    else:
        raise ValueError(f"Unsupported export format: {format}")
