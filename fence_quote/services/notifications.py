# fence_quote/services/notifications.py
"""
Owner and customer notification bodies for a normalized lead.

Every builder is a pure function of the lead. HTML variants escape every
interpolated value since name, address and page URL are attacker controlled.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from html import escape
from typing import Any, Optional

from fence_quote.schemas.lead import LeadSubmission

CUSTOMER_SUBJECT = "We received your fence quote request"
ESTIMATE_DISCLAIMER = "This is an estimate range. Final pricing will be confirmed by the owner."

_WRAPPER_STYLE = "font-family:Arial,Helvetica,sans-serif;color:#102531;line-height:1.45;"
_SEGMENTS_STYLE = (
    "white-space:pre-wrap;font-size:12px;background:#f5f8fa;"
    "border:1px solid #d6e3ea;border-radius:8px;padding:10px;"
)
_FOOTNOTE_STYLE = "font-size:12px;color:#5f7480;"


def format_feet(value: Optional[float]) -> str:
    return f"{float(value or 0):.1f}"


def format_usd(value: Optional[float]) -> str:
    # to_integral_value is not bounded by the context precision, unlike quantize
    dollars = Decimal(str(float(value or 0))).to_integral_value(rounding=ROUND_HALF_UP)
    sign = "-" if dollars < 0 else ""
    return f"{sign}${abs(int(dollars)):,}"


def format_range(lead: LeadSubmission) -> str:
    return f"{format_usd(lead.estimated_min)} - {format_usd(lead.estimated_max)}"


def _h(value: Any) -> str:
    return escape("" if value is None else str(value), quote=True)


def _submitted_at(lead: LeadSubmission) -> str:
    if lead.created_at:
        return lead.created_at
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_segments(lead: LeadSubmission) -> str:
    """One segment per line, points compact."""
    lines = [json.dumps(segment, separators=(",", ":")) for segment in lead.segments_as_lists()]
    return "[\n" + ",\n".join(lines) + "\n]"


def owner_subject(lead: LeadSubmission) -> str:
    return (
        f"New Fence Lead – {format_feet(lead.total_linear_feet)} ft – "
        f"{format_usd(lead.estimated_min)}-{format_usd(lead.estimated_max)}"
    )


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def build_owner_html(lead: LeadSubmission) -> str:
    gates = f"{lead.walk_gates_qty} walk, {lead.double_gates_qty} double"

    segments_block = ""
    if lead.segments:
        segments_block = (
            "<p><strong>Segments Data:</strong></p>"
            f'<pre style="{_SEGMENTS_STYLE}">{_h(format_segments(lead))}</pre>'
        )

    return f"""
    <div style="{_WRAPPER_STYLE}">
      <h2 style="margin:0 0 12px;">New Fence Lead</h2>
      <p><strong>Customer:</strong> {_h(lead.full_name)}</p>
      <p><strong>Phone:</strong> {_h(lead.phone)}</p>
      <p><strong>Email:</strong> {_h(lead.email)}</p>
      <p><strong>Address:</strong> {_h(lead.address)}</p>
      <hr style="border:none;border-top:1px solid #dbe7ee;margin:14px 0;" />
      <p><strong>Company:</strong> {_h(lead.company_label)}</p>
      <p><strong>Fence type:</strong> {_h(lead.fence_type or "N/A")}</p>
      <p><strong>Gates:</strong> {_h(gates)}</p>
      <p><strong>Remove old fence:</strong> {_yes_no(lead.remove_old_fence)}</p>
      <p><strong>Total linear feet:</strong> {_h(format_feet(lead.total_linear_feet))} ft</p>
      <p><strong>Segments count:</strong> {_h(lead.segments_count)}</p>
      <p><strong>Estimated range:</strong> {_h(format_range(lead))}</p>
      {segments_block}
      <p style="{_FOOTNOTE_STYLE}margin-top:14px;">Submitted at: {_h(_submitted_at(lead))}</p>
      <p style="{_FOOTNOTE_STYLE}">Page: {_h(lead.page_url)}</p>
    </div>
    """


def build_owner_text(lead: LeadSubmission) -> str:
    lines = [
        "New Fence Lead",
        "",
        f"Customer: {lead.full_name}",
        f"Phone: {lead.phone}",
        f"Email: {lead.email}",
        f"Address: {lead.address}",
        "",
        f"Company: {lead.company_label}",
        f"Fence type: {lead.fence_type or 'N/A'}",
        f"Walk gates: {lead.walk_gates_qty}",
        f"Double gates: {lead.double_gates_qty}",
        f"Remove old fence: {_yes_no(lead.remove_old_fence)}",
        f"Total feet: {format_feet(lead.total_linear_feet)} ft",
        f"Segments: {lead.segments_count}",
        f"Estimated range: {format_range(lead)}",
    ]
    if lead.segments:
        lines += ["", "Segments data:", format_segments(lead)]
    lines += [
        "",
        f"Submitted at: {_submitted_at(lead)}",
        f"Page: {lead.page_url}",
    ]
    return "\n".join(lines)


def build_customer_html(lead: LeadSubmission) -> str:
    return f"""
    <div style="{_WRAPPER_STYLE}">
      <h2 style="margin:0 0 10px;">{_h(CUSTOMER_SUBJECT)}</h2>
      <p>Hi {_h(lead.full_name)},</p>
      <p>Thanks for your request. Here is a summary of your estimate:</p>
      <p><strong>Address:</strong> {_h(lead.address)}</p>
      <p><strong>Fence type:</strong> {_h(lead.fence_type or "N/A")}</p>
      <p><strong>Total linear feet:</strong> {_h(format_feet(lead.total_linear_feet))} ft</p>
      <p><strong>Estimated range:</strong> {_h(format_range(lead))}</p>
      <p style="margin-top:14px;color:#4f6570;">{_h(ESTIMATE_DISCLAIMER)}</p>
    </div>
    """


def build_customer_text(lead: LeadSubmission) -> str:
    return "\n".join(
        [
            CUSTOMER_SUBJECT,
            "",
            f"Address: {lead.address}",
            f"Fence type: {lead.fence_type or 'N/A'}",
            f"Total linear feet: {format_feet(lead.total_linear_feet)} ft",
            f"Estimated range: {format_range(lead)}",
            "",
            ESTIMATE_DISCLAIMER,
        ]
    )
