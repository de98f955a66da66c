# procureai/rfp_format.py

from procureai.schemas import RfpRequirements


def _fmt_number(value) -> str:
    if value is None:
        return "Not specified"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_rfp_content(rfp: RfpRequirements) -> str:
    """Plain-text rendering of an RFP for vendor invitation mails."""
    lines = [f"Title: {rfp.title}", "", "Items Required:"]
    for i, item in enumerate(rfp.items, start=1):
        lines.append(
            f"{i}. {item.name} - Quantity: {_fmt_number(item.quantity)}, "
            f"Specifications: {item.specifications or 'Not specified'}"
        )
    lines += [
        "",
        f"Budget: {_fmt_number(rfp.budget)}",
        f"Delivery Timeline: {rfp.delivery_timeline or 'Not specified'}",
        f"Payment Terms: {rfp.payment_terms or 'Not specified'}",
        f"Warranty: {rfp.warranty or 'Not specified'}",
    ]
    if rfp.other_requirements:
        lines.append(f"Other Requirements: {rfp.other_requirements}")
    return "\n".join(lines) + "\n"
