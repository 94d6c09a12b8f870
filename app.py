import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from backend.app import config
from backend.app.clients.commerce import CommerceContext, OrderSnapshotLoader, OrderUpdateService
from backend.services.errors import OrderNotFound, SnapshotError, SubmissionError, ValidationRejection
from backend.services.labels import render_receiving_pdf
from backend.services.procurement import ReceivingSession

# --- CONFIGURATION & DESIGN ---
st.set_page_config(page_title="PO RECEIVING", layout="wide", page_icon="📦")

st.markdown("""
    <style>
    .stMetric {
        background-color: #1e2130;
        padding: 15px;
        border-radius: 10px;
        border-left: 5px solid #00ffcc;
    }
    h1 {
        color: #00ffcc;
    }
    </style>
    """, unsafe_allow_html=True)


# --- CONTEXTE EXPLICITE (pas de token global) ---
def build_context(token):
    return CommerceContext(
        base_url=config.COMMERCE_API_BASE_URL,
        base_path=config.COMMERCE_API_BASE_PATH,
        token=token or config.COMMERCE_API_TOKEN,
        timeout=config.COMMERCE_API_TIMEOUT,
    )


def open_session(order_id, token):
    ctx = build_context(token)
    return ReceivingSession.open(order_id, loader=OrderSnapshotLoader(ctx), updater=OrderUpdateService(ctx))


def gauge(percentage):
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=percentage,
        number={"suffix": "%"},
        gauge={"axis": {"range": [0, max(100, percentage)]}, "bar": {"color": "#00ffcc"}},
    ))
    fig.update_layout(template="plotly_dark", height=250, margin=dict(l=20, r=20, t=30, b=20))
    return fig


with st.sidebar:
    st.header("📥 PURCHASE ORDER")
    order_id = st.text_input("PO #", value=st.query_params.get("orderId", ""))
    token = st.text_input("Token", type="password")
    if st.button("Charger") and order_id:
        try:
            st.session_state["receiving"] = open_session(order_id.strip(), token)
            st.session_state.pop("flash", None)
        except OrderNotFound:
            st.error("Purchase order not found")
        except SnapshotError as e:
            st.error(f"Error loading order: {e}")

session = st.session_state.get("receiving")
if session is None:
    st.info("Saisir un numéro de PO pour commencer la réception.")
    st.stop()

order = session.order
progress = session.progress

st.title(f"📦 Order #{order.order_id} -- Receiving Inventory")
st.write(f"**Marque :** {order.brand} | **Saison :** {order.season} | "
         f"**Statut :** {'Completed' if progress.completed else 'In Progress'}")

if "flash" in st.session_state:
    st.success(st.session_state.pop("flash"))

c1, c2, c3 = st.columns([1, 1, 2])
c1.metric("COMMANDÉ", f"{progress.total_quantity} un.")
c2.metric("REÇU (cumul)", f"{progress.total_received_so_far} un.")
c3.plotly_chart(gauge(progress.percentage), use_container_width=True)

# --- TABLEAU DES VARIANTES ---
rows = []
for v in session.state.variants():
    vp = progress.variants[v.key]
    rows.append({
        "Produit": v.name,
        "Couleur": v.color,
        "Taille": v.size,
        "SKU": v.sku,
        "Commandé": v.ordered,
        "Déjà reçu": v.prior_received,
        "Reçu maintenant": v.receiving_now,
        "Défectueux": v.defective,
        "Précommande": "oui" if v.pre_order else "",
        "Statut": vp.status.value,
    })
st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

# --- CONTRÔLES (callbacks : exécutés avant le rerun) ---
def on_step(action, product_id, variant_id):
    try:
        action(product_id, variant_id)
    except ValidationRejection as err:
        st.session_state["rejection"] = str(err)


def on_defective(product_id, variant_id, key):
    try:
        session.set_defective(product_id, variant_id, int(st.session_state[key]))
    except ValidationRejection as err:
        st.session_state["rejection"] = str(err)


if "rejection" in st.session_state:
    st.warning(st.session_state.pop("rejection"))

for product in order.products:
    st.markdown("---")
    st.markdown(f"### {product.name} {'(Canceled)' if product.canceled else ''}")
    for v in session.state.product_variants(product.product_ref):
        vp = progress.variants[v.key]
        k = f"{v.product_id}:{v.variant_id}"
        a, b, c, d, e = st.columns([3, 1, 1, 1, 2])
        a.write(f"{v.color} / {v.size} : {vp.total_received}/{v.ordered}"
                + (" ⚠️ sur-reçu" if vp.is_over_received else ""))
        b.button("➕", key=f"inc_{k}", disabled=not vp.can_increment,
                 on_click=on_step, args=(session.increment, v.product_id, v.variant_id))
        c.button("➖", key=f"dec_{k}", disabled=not vp.can_decrement,
                 on_click=on_step, args=(session.decrement, v.product_id, v.variant_id))
        d.write(str(v.receiving_now))
        # le moteur reste la source de vérité du champ
        st.session_state[f"def_{k}"] = v.defective
        e.number_input("Défectueux", min_value=0, key=f"def_{k}", disabled=not vp.can_set_defective,
                       label_visibility="collapsed", on_change=on_defective,
                       args=(v.product_id, v.variant_id, f"def_{k}"))

# --- ENVOI ---
st.divider()
summary = session.summary()
st.write(f"**Current Receiving Total:** {summary.units_added} units")
if summary.over_received:
    st.warning(f"{len(summary.over_received)} variante(s) en sur-reçu")

left, right = st.columns(2)
right.download_button(
    label="🖨️ Bon de réception",
    data=render_receiving_pdf(session),
    file_name=f"reception_{order.order_id}.pdf",
    mime="application/pdf",
)

if left.button("Update Inventory", disabled=not session.can_submit):
    st.session_state["confirm"] = True

if st.session_state.get("confirm"):
    st.info(summary.message())
    ok, cancel = st.columns(2)
    if cancel.button("Cancel"):
        st.session_state["confirm"] = False
        st.rerun()
    if ok.button("Add Inventory"):
        st.session_state["confirm"] = False
        try:
            session.submit()
            st.session_state["flash"] = "Inventory updates submitted successfully"
        except SubmissionError as err:
            st.error(f"Failed to update inventory: {err}")
        except SnapshotError as err:
            st.error(f"Inventory updated, reload failed: {err}")
            st.session_state.pop("receiving", None)
        else:
            st.rerun()

st.caption("PO Receiving | réconciliation commandé / reçu / défectueux")
