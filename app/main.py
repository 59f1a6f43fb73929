"""
Streamlit Frontend for Subscription Tracker

The page users open to see what they pay for, what renews soon, and to
add, edit or remove subscriptions.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Renewal notices at the top, urgent ones in red
3. Explicit confirmation before deleting
4. No hidden actions

UI state (form fields, the id being edited, the active filter) lives in
st.session_state and belongs to this page only. The core never sees it.
"""

import asyncio
from datetime import date

import streamlit as st

from subtracker.audit import configure_logging, create_correlation_id
from subtracker.config import get_settings, validate_all_settings
from subtracker.core import (
    SubscriptionFilter,
    cadence_suffix,
    display_next_renewal,
    evaluate_notification,
    filter_subscriptions,
    format_date,
    format_price,
    renewal_label,
)
from subtracker.models.subscription import RenewalType, Subscription
from subtracker.models.validation import SubscriptionForm
from subtracker.orchestrator import SubscriptionService, create_app_components
from subtracker.services.store import StoreError


# Page configuration
st.set_page_config(
    page_title="Subscription Tracker",
    page_icon="🔔",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .notice-urgent {
        padding: 12px;
        background-color: #f8d7da;
        border-radius: 8px;
        border-left: 5px solid #dc3545;
        margin: 6px 0;
    }
    .notice-soon {
        padding: 12px;
        background-color: #fff3cd;
        border-radius: 8px;
        border-left: 5px solid #ffc107;
        margin: 6px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    configure_logging(get_settings().app.log_level)
    return create_app_components(use_storage=True)


def init_state():
    defaults = {
        "subscriptions": None,
        "show_form": False,
        "editing_id": None,
        "form": SubscriptionForm(),
        "active_filter": SubscriptionFilter.ALL,
        "pending_delete": None,
        "busy": False,
        "error": None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def reload(service: SubscriptionService):
    try:
        st.session_state.subscriptions = run_async(service.load())
        st.session_state.error = None
    except StoreError as e:
        st.session_state.error = f"Could not load subscriptions: {e}"
        if st.session_state.subscriptions is None:
            st.session_state.subscriptions = []


def reset_form():
    st.session_state.form = SubscriptionForm()
    st.session_state.editing_id = None
    st.session_state.show_form = False


def main():
    """Main application entry point."""
    service, _ = get_components()
    app_settings = get_settings().app
    init_state()

    if st.session_state.subscriptions is None:
        with st.spinner("Loading subscriptions..."):
            reload(service)

    subscriptions = st.session_state.subscriptions
    today = date.today()

    render_sidebar()
    render_header(service, subscriptions, today, app_settings.currency_symbol)

    if st.session_state.show_form:
        render_form(service, subscriptions)

    render_filters()
    render_list(service, subscriptions, today, app_settings)


def render_sidebar():
    st.sidebar.title("🔔 Subscription Tracker")
    st.sidebar.markdown("---")
    status = validate_all_settings()
    if status.get("store"):
        st.sidebar.success("✅ Store - Connected")
    else:
        st.sidebar.warning(
            "⚠️ Store not configured - changes are kept in memory only. "
            "Set STORE_API_BASE_URL in `.env`."
        )


def render_header(
    service: SubscriptionService,
    subscriptions: list[Subscription],
    today: date,
    symbol: str,
):
    """Totals, notification count and the upcoming-renewals panel."""
    header, action = st.columns([4, 1])
    with header:
        st.title("Subscriptions")
        if st.session_state.error:
            st.error(st.session_state.error)
    with action:
        if st.button("➕ New subscription", disabled=st.session_state.busy):
            reset_form()
            st.session_state.show_form = True
            st.rerun()

    summary = run_async(service.dashboard(subscriptions, today))

    col1, col2, col3 = st.columns(3)
    col1.metric("Monthly total", format_price(summary.monthly_total, symbol))
    col2.metric("Yearly total", format_price(summary.yearly_total, symbol))
    col3.metric("Notifications", summary.notification_count)

    if summary.upcoming:
        st.markdown("### ⚠️ Upcoming renewals")
        for item in summary.upcoming:
            css = "notice-urgent" if item.notice.urgent else "notice-soon"
            st.markdown(
                f'<div class="{css}"><strong>{item.subscription.name}</strong>'
                f" &middot; {renewal_label(item.notice.days_until)}</div>",
                unsafe_allow_html=True,
            )


def render_filters():
    options = list(SubscriptionFilter)
    st.session_state.active_filter = st.radio(
        "Show",
        options=options,
        index=options.index(st.session_state.active_filter),
        format_func=lambda f: f.label,
        horizontal=True,
    )


def render_list(service, subscriptions, today, app_settings):
    if not subscriptions:
        st.info("No subscriptions yet. Use **New subscription** to add the first one.")
        return

    visible = filter_subscriptions(subscriptions, st.session_state.active_filter, today)
    columns = st.columns(3)
    for idx, sub in enumerate(visible):
        with columns[idx % 3]:
            render_card(service, sub, today, app_settings)


def render_card(service, sub: Subscription, today: date, app_settings):
    notice = evaluate_notification(sub, today)
    with st.container(border=True):
        st.markdown(f"**{sub.name}**  \n{sub.category}")
        if sub.description:
            st.caption(sub.description)
        st.markdown(
            f"Price: **{format_price(sub.price, app_settings.currency_symbol)}"
            f"/{cadence_suffix(sub.renewal_type)}**  \n"
            f"Next renewal: {format_date(display_next_renewal(sub, today), app_settings.date_format)}  \n"
            f"Type: `{sub.renewal_type.value}`"
        )
        if notice:
            label = f"⏰ {renewal_label(notice.days_until)}"
            if notice.urgent:
                st.error(label)
            else:
                st.warning(label)

        edit_col, delete_col = st.columns(2)
        if edit_col.button("✏️ Edit", key=f"edit-{sub.id}", disabled=st.session_state.busy):
            st.session_state.form = SubscriptionForm.from_subscription(sub)
            st.session_state.editing_id = sub.id
            st.session_state.show_form = True
            st.rerun()
        if delete_col.button("🗑️ Delete", key=f"delete-{sub.id}", disabled=st.session_state.busy):
            st.session_state.pending_delete = sub.id

        if st.session_state.pending_delete == sub.id:
            st.warning(f"Delete **{sub.name}**? This cannot be undone.")
            yes, no = st.columns(2)
            if yes.button("Yes, delete", key=f"confirm-{sub.id}"):
                st.session_state.busy = True
                try:
                    run_async(service.delete(sub.id, create_correlation_id()))
                    reload(service)
                except StoreError as e:
                    st.session_state.error = f"Could not delete subscription: {e}"
                finally:
                    st.session_state.busy = False
                    st.session_state.pending_delete = None
                st.rerun()
            if no.button("Cancel", key=f"cancel-{sub.id}"):
                st.session_state.pending_delete = None
                st.rerun()


def render_form(service: SubscriptionService, subscriptions: list[Subscription]):
    """Create/edit form."""
    editing_id = st.session_state.editing_id
    current: SubscriptionForm = st.session_state.form
    renewal_options = [t.value for t in RenewalType]

    st.markdown("### " + ("Edit subscription" if editing_id else "New subscription"))
    with st.form("subscription_form"):
        name = st.text_input("Name *", value=current.name)
        category = st.text_input(
            "Category *",
            value=current.category,
            placeholder="e.g. Software, Design, Infrastructure",
        )
        description = st.text_area("Description", value=current.description, height=68)
        col1, col2 = st.columns(2)
        price = col1.text_input("Price *", value=current.price)
        renewal_type = col2.selectbox(
            "Renewal type",
            options=renewal_options,
            index=(
                renewal_options.index(current.renewal_type)
                if current.renewal_type in renewal_options else 0
            ),
        )
        start_date = st.date_input(
            "Start date *",
            value=date.fromisoformat(current.start_date) if current.start_date else None,
        )

        save_col, cancel_col = st.columns(2)
        submitted = save_col.form_submit_button(
            "Save" if editing_id else "Create",
            type="primary",
            disabled=st.session_state.busy,
        )
        cancelled = cancel_col.form_submit_button("Cancel")

    if cancelled:
        reset_form()
        st.rerun()

    if not submitted:
        return

    form = SubscriptionForm(
        name=name,
        category=category,
        description=description,
        price=price,
        renewal_type=renewal_type,
        start_date=start_date.isoformat() if start_date else "",
    )
    st.session_state.form = form
    st.session_state.busy = True
    try:
        outcome = run_async(service.save(
            form,
            editing_id=editing_id,
            existing=subscriptions,
            correlation_id=create_correlation_id(),
        ))
    except StoreError as e:
        st.error(f"Could not save subscription: {e}")
        return
    finally:
        st.session_state.busy = False

    if not outcome.saved:
        st.error(service.validator.get_user_friendly_summary(outcome.validation))
        return

    if outcome.validation.warnings:
        st.toast(service.validator.get_user_friendly_summary(outcome.validation))
    reset_form()
    reload(service)
    st.rerun()


if __name__ == "__main__":
    main()
