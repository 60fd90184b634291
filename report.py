from __future__ import annotations

from typing import Any, Dict, List, Optional

from distribution import DistributionSummary
from source import ActiveSource, UploadedSource


def _fmt_mean(summary: DistributionSummary, display: Dict[str, Any]) -> str:
    decimals = int(display.get("mean_decimals", 2))
    value = summary.rounded_mean(decimals)
    # "9.15", "9.1", "9": trailing zeros dropped like a plain number print
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def summary_lines(summary: DistributionSummary, display: Dict[str, Any]) -> List[str]:
    mean = _fmt_mean(summary, display)
    return [
        display["title"],
        display["total_caption"].format(total=summary.total, unit=display["people_unit"]),
        display["mean_caption"].format(mean=mean),
    ]


def bucket_cards(summary: DistributionSummary, display: Dict[str, Any]) -> List[Dict[str, str]]:
    return [
        {
            "label": b.label(display["label_format"]),
            "count": f"{b.count} {display['people_unit']}",
            "percentage": f"{b.percentage}%",
        }
        for b in summary.buckets
    ]


def reference_caption(summary: DistributionSummary, display: Dict[str, Any]) -> Optional[str]:
    if summary.reference_bucket is None:
        return None
    return display["reference_caption"].format(mean=_fmt_mean(summary, display))


def source_caption(active: ActiveSource, display: Dict[str, Any]) -> str:
    if isinstance(active, UploadedSource):
        return display["upload_source_caption"].format(
            file_name=active.file_name, loaded_at=active.loaded_at
        )
    return display["default_source_caption"]


def render_text_report(
    summary: DistributionSummary,
    active: ActiveSource,
    display: Dict[str, Any],
) -> str:
    lines: List[str] = summary_lines(summary, display)
    lines.append(source_caption(active, display))
    lines.append("")

    for card in bucket_cards(summary, display):
        lines.append(f"• {card['label']}: {card['count']} ({card['percentage']})")

    caption = reference_caption(summary, display)
    if caption is not None:
        lines.append("")
        lines.append(caption)
        lines.append(display["footnote"].format(mean=_fmt_mean(summary, display)))

    return "\n".join(lines)
