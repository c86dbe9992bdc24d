"""
Streamlit Frontend for Receipt Splitter

Four steps, one room per browser session:
1. Join your room (name + 4-digit PIN)
2. Upload the receipt photo
3. Review, edit and assign the items
4. See who owes what

All state lives in st.session_state for the lifetime of the tab;
every number shown is recomputed from the room state on each rerun.
"""

import asyncio

import streamlit as st

from splitter.audit import create_correlation_id
from splitter.config import get_settings, validate_all_settings
from splitter.orchestrator import ReceiptScanFlow, RoomSession, create_app_components, join_room
from splitter.services.recognition import RecognitionError, UnsupportedUploadError
from splitter.validation import (
    clean_price_text,
    clean_quantity_text,
    format_currency,
    parse_quantity,
)


# Page configuration
st.set_page_config(
    page_title="Receipt Splitter",
    page_icon="🧾",
    layout="centered",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 6px;
    }
    .step-label {
        font-size: 0.75em;
        letter-spacing: 0.15em;
        text-transform: uppercase;
        color: #6b7280;
    }
    .total-row {
        font-size: 1.4em;
        font-weight: bold;
        color: #312e81;
    }
</style>
""", unsafe_allow_html=True)


STEPS = {
    1: ("Join your room", "Enter the room name and 4-digit PIN."),
    2: ("Upload receipt", "Take a photo or upload an image of your receipt."),
    3: ("Review & edit items", "Edit names and prices, then tap who shared each item."),
    4: ("Split summary", "Totals per person based on assignments."),
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> ReceiptScanFlow:
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def step_header(step: int):
    title, subtitle = STEPS[step]
    st.markdown(f'<div class="step-label">Step {step}</div>', unsafe_allow_html=True)
    st.subheader(title)
    st.caption(subtitle)


def main():
    """Main application entry point."""
    scan_flow = get_components()

    if "step" not in st.session_state:
        st.session_state.step = 1
    if "session" not in st.session_state:
        st.session_state.session = None

    session: RoomSession = st.session_state.session

    st.title("🧾 Receipt Splitter")
    if session:
        st.caption(f"Room: {session.room_name}")
        render_member_sidebar(session)
    render_connection_status()

    step = st.session_state.step
    if step == 1 or session is None:
        render_join_step()
    elif step == 2:
        render_upload_step(session, scan_flow)
    elif step == 3:
        render_review_step(session)
    else:
        render_summary_step(session)


def render_join_step():
    step_header(1)

    with st.form("join_room"):
        room_name = st.text_input("Room name", placeholder="e.g., Grocery Gang")
        pin = st.text_input("PIN", placeholder="4 digits", max_chars=4, type="password")
        submitted = st.form_submit_button("Enter Room", type="primary")

    if submitted:
        session, errors = join_room(room_name, pin)
        if errors:
            for message in errors.values():
                st.error(message)
            return
        st.session_state.session = session
        st.session_state.step = 2
        st.rerun()


def render_member_sidebar(session: RoomSession):
    """Room settings: who is splitting this receipt."""
    room = get_settings().room

    st.sidebar.header("⚙️ Room Settings")
    st.sidebar.markdown(f"**Members** ({len(session.members)}/{room.max_members})")

    can_remove = session.state.registry.can_remove()
    for name in session.members:
        col1, col2 = st.sidebar.columns([4, 1])
        col1.write(name)
        if col2.button("✕", key=f"remove_member_{name}", disabled=not can_remove):
            session.remove_member(name)
            st.rerun()

    with st.sidebar.form("add_member", clear_on_submit=True):
        new_name = st.text_input(
            "Add member",
            max_chars=room.max_member_name_length,
            disabled=not session.state.registry.can_add(),
        )
        if st.form_submit_button("Add") and new_name:
            if not session.add_member(new_name):
                st.warning("That name is empty, already taken, or the room is full.")
            else:
                st.rerun()


def render_connection_status():
    """Configuration check, shown in the sidebar."""
    status = validate_all_settings()
    backend = "mindee" if "mindee" in status else "mock"

    with st.sidebar.expander("🔌 Connection Status"):
        sections = [
            ("Room limits", "room"),
            (f"Receipt recognition ({backend})", "recognition"),
            ("App settings", "app"),
        ]
        if backend == "mindee":
            sections.append(("Mindee API key", "mindee"))

        for name, key in sections:
            if status.get(key):
                st.success(f"✅ {name}")
            else:
                st.error(f"❌ {name}")
                if f"{key}_error" in status:
                    st.caption(status[f"{key}_error"][:200])


def render_upload_step(session: RoomSession, scan_flow: ReceiptScanFlow):
    step_header(2)

    app_settings = get_settings().app
    uploaded_file = st.file_uploader(
        "Choose receipt image",
        type=app_settings.supported_formats_list,
        help=f"PNG, JPG up to {app_settings.max_upload_size_mb}MB",
    )

    if uploaded_file is None:
        return

    st.image(uploaded_file, use_container_width=True)

    if st.button("🔍 Scan Receipt", type="primary"):
        with st.spinner("Scanning receipt..."):
            try:
                items, message = run_async(
                    scan_flow.scan_receipt(
                        session,
                        image_bytes=uploaded_file.getvalue(),
                        filename=uploaded_file.name,
                        mime_type=uploaded_file.type,
                        correlation_id=create_correlation_id(),
                    )
                )
            except UnsupportedUploadError as e:
                st.error(str(e))
                return
            except RecognitionError as e:
                st.error(f"Could not read the receipt: {e}")
                return

        st.session_state.scan_message = message
        st.session_state.step = 3
        st.rerun()


def render_item(session: RoomSession, item):
    key = str(item.id)

    col1, col2 = st.columns([5, 1])
    name = col1.text_input("Item name", value=item.name, key=f"name_{key}",
                           label_visibility="collapsed")
    if col2.button("✕", key=f"remove_{key}"):
        session.remove_item(item.id)
        st.rerun()

    col1, col2, col3 = st.columns([1, 2, 2])
    quantity = col1.text_input("Qty", value=str(item.quantity), key=f"qty_{key}")
    price = col2.text_input("Price", value=item.price_text, key=f"price_{key}",
                            placeholder="0.00")
    patch = {}
    if name != item.name:
        patch["name"] = name
    if clean_price_text(price) != item.price_text:
        patch["price"] = price
    if parse_quantity(clean_quantity_text(quantity)) != item.quantity:
        patch["quantity"] = quantity
    if patch:
        session.update_item(item.id, patch)
    col3.markdown(f"= **{money(item.subtotal)}**")

    chips = st.columns(max(len(session.members), 1))
    for col, member in zip(chips, session.members):
        assigned = member in item.assignees
        label = f"✓ {member}" if assigned else member
        if col.button(label, key=f"assign_{key}_{member}",
                      type="primary" if assigned else "secondary"):
            session.toggle_assignment(item.id, member)
            st.rerun()


def render_review_step(session: RoomSession):
    step_header(3)

    if st.session_state.get("scan_message"):
        st.info(st.session_state.scan_message)

    for item in session.items:
        with st.container(border=True):
            render_item(session, item)

    with st.form("add_item", clear_on_submit=True):
        st.markdown("**Add New Item**")
        name = st.text_input("Item name...")
        col1, col2 = st.columns([1, 3])
        quantity = col1.text_input("Qty", value="1")
        price = col2.text_input("Price", placeholder="0.00")
        if st.form_submit_button("Add"):
            if session.add_item(name, price, quantity) is None:
                st.warning("Enter both a name and a price.")
            else:
                st.rerun()

    summary = session.summary()
    st.markdown(
        f'<div class="total-row">Grand total: {money(summary.grand_total)}</div>',
        unsafe_allow_html=True,
    )
    if summary.unallocated_total:
        st.caption(f"{money(summary.unallocated_total)} not assigned to anyone yet.")

    col1, col2 = st.columns(2)
    if col1.button("⬅️ Scan Another Receipt"):
        st.session_state.step = 2
        st.rerun()
    if col2.button("View Split Summary", type="primary"):
        st.session_state.step = 4
        st.rerun()


def render_summary_step(session: RoomSession):
    step_header(4)

    summary = session.summary()
    for member, total in summary.member_totals.items():
        rows = session.items_for_member(member)
        with st.expander(f"{member} ({len(rows)} items) · {money(total)}"):
            if not rows:
                st.caption("No items assigned")
            for row in rows:
                st.markdown(
                    f"{row.name} (qty: {row.quantity} × {money(row.unit_price)} "
                    f"÷ {row.share_count}) = **{money(row.per_person_share)}**"
                )

    if summary.unallocated_total:
        st.warning(f"Unassigned items: {money(summary.unallocated_total)}")

    st.markdown(
        f'<div class="total-row">Grand total: {money(summary.grand_total)}</div>',
        unsafe_allow_html=True,
    )

    with st.expander("📜 Activity"):
        for event in reversed(session.audit.events):
            if event.severity.value != "debug":
                st.caption(f"{event.timestamp:%H:%M:%S} · {event.description}")

    if st.button("⬅️ Back to Edit Items"):
        st.session_state.step = 3
        st.rerun()


if __name__ == "__main__":
    main()
