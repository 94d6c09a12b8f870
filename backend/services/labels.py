from __future__ import annotations

from fpdf import FPDF

from backend.services.procurement import ReceivingSession


def _latin1(text: str) -> str:
    # polices core FPDF : latin-1 uniquement
    return text.encode("latin-1", "replace").decode("latin-1")


def render_receiving_pdf(session: ReceivingSession) -> bytes:
    """Bon de réception : une ligne par variante reçue dans cette session."""
    order = session.order
    summary = session.summary()

    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Arial", "B", 16)
    pdf.cell(190, 10, _latin1(f"BON DE RECEPTION - PO {order.order_id}"), new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.ln(5)

    pdf.set_font("Arial", size=11)
    pdf.cell(190, 8, _latin1(f"Marque : {order.brand}"), new_x="LMARGIN", new_y="NEXT")
    pdf.cell(190, 8, _latin1(f"Saison : {order.season}"), new_x="LMARGIN", new_y="NEXT")
    pdf.cell(190, 8, f"Unites recues : {summary.units_added}", new_x="LMARGIN", new_y="NEXT")
    pdf.cell(190, 8, f"Precommandes arretees : {summary.preorder_stopped}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(5)

    for v in session.state.variants():
        if v.receiving_now == 0:
            continue
        pdf.set_font("Arial", "B", 11)
        pdf.cell(190, 7, _latin1(f"{v.name} - {v.color} / {v.size}"), new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("Arial", size=10)
        pdf.cell(190, 6, _latin1(f"SKU {v.sku}   Code-barres {v.barcode}"), new_x="LMARGIN", new_y="NEXT")
        pdf.cell(190, 6, f"Recu : {v.receiving_now}   Defectueux : {v.defective}", new_x="LMARGIN", new_y="NEXT")
        if v.pre_order and v.fulfillment_refs:
            pdf.multi_cell(190, 6, _latin1(f"A expedier : {v.fulfillment_label}"))
        pdf.ln(2)

    pdf.ln(10)
    pdf.set_font("Arial", "I", 9)
    pdf.cell(190, 8, f"Progression PO : {session.progress.percentage:.0f}%", new_x="LMARGIN", new_y="NEXT")
    return bytes(pdf.output())
