import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
from datetime import datetime
from uuid import uuid4

import pandas as pd
import streamlit as st

from tracker.analytics import RANGE_MONTH, RANGE_QUARTER, RANGE_YTD
from tracker.charts import (
    budget_status_frame,
    budget_usage_figure,
    category_figure,
    format_currency,
    trend_figure,
)
from tracker.config import SAMPLE_PATH, STORE_PATH, WEEK_STARTS, Settings, ensure_data_directories, setup_logging
from tracker.csv_io import CsvMapping, analyze_csv
from tracker.dates import start_of_month
from tracker.domain import FREQUENCIES, PERIODS, TRANSACTION_TYPES, TRANSFER, Budget, RecurrenceRule, Transaction
from tracker.events import BUDGET_ALERT
from tracker.recurrence import parse_month_days
from tracker.repository import JsonStore
from tracker.rollup import step_cursor
from tracker.services import BudgetTracker
from tracker.transforms import transaction_to_dict

setup_logging()
ensure_data_directories()
st.set_page_config(page_title="Budget Tracker", layout="wide")

tracker = BudgetTracker(JsonStore(STORE_PATH))
settings = tracker.settings
now = datetime.now()

if "alerts" not in st.session_state:
    st.session_state.alerts = []


def collect_alert(event, payload: dict) -> dict:
    st.session_state.alerts.append(payload)
    return {}


tracker.bus.subscribe(BUDGET_ALERT, collect_alert)

if "cursor" not in st.session_state:
    st.session_state.cursor = start_of_month(now)

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "💰 Budgets", "🧾 Transactions", "📊 Analytics", "📂 Data", "⚙️ Settings"]
)


def money(value: float) -> str:
    return format_currency(value, settings.currency)


if menu == "🏠 Dashboard":
    prev_col, label_col, next_col = st.columns([1, 3, 1])
    with prev_col:
        if st.button("◀ Previous"):
            st.session_state.cursor = step_cursor(st.session_state.cursor, -1, now)
    with next_col:
        if st.button("Next ▶"):
            st.session_state.cursor = step_cursor(st.session_state.cursor, 1, now)

    view = tracker.dashboard(st.session_state.cursor, now)
    with label_col:
        st.subheader(view.month_label)

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Balance", money(view.total_balance))
    with k2:
        st.metric("Income", money(view.summary.income))
    with k3:
        st.metric("Expenses", money(view.summary.expense))
    with k4:
        st.metric("Savings Rate", f"{view.savings_pct}%")

    st.plotly_chart(trend_figure(view.trend), use_container_width=True)

    pie_col, usage_col = st.columns(2)
    with pie_col:
        if view.summary.category_breakdown:
            st.plotly_chart(category_figure(view.summary.category_breakdown), use_container_width=True)
        else:
            st.info("No expenses this month")
    with usage_col:
        if view.summary.budget_usage:
            st.plotly_chart(budget_usage_figure(view.summary.budget_usage), use_container_width=True)
        else:
            st.info("No monthly budgets defined")

elif menu == "💰 Budgets":
    st.title("💰 Budgets")
    statuses = tracker.budget_statuses(now)
    if statuses:
        df = budget_status_frame(statuses, lambda s: tracker.budget_label(s.budget))
        for _, row in df.iterrows():
            st.markdown(
                f"**{row['budget']}** ({row['period']}, {row['from']} – {row['to']}): "
                f"{money(row['spent'])} / {money(row['limit'])}"
                + (f" · carry {money(row['carry'])}" if row["carry"] else "")
            )
            st.progress(int(row["used_pct"]))
            if row["alert"] == "over":
                st.error("Over budget")
            elif row["alert"] == "high":
                st.warning("Approaching budget limit")
    else:
        st.info("No budgets yet.")

    st.subheader("Add or edit budget")
    expense_cats = [c for c in tracker.categories.list_all() if c.type == "expense"]
    with st.form("budget_form"):
        existing = {b.id: b for b in tracker.budgets.list_all()}
        edit_id = st.selectbox("Budget", ["(new)"] + list(existing))
        period = st.selectbox("Period", PERIODS, index=1)
        cat_choice = st.selectbox("Category", ["All expenses"] + [c.name for c in expense_cats])
        amount = st.number_input("Amount", min_value=0.0, value=500.0, step=10.0)
        carryover = st.checkbox("Carry over unspent amount")
        submitted = st.form_submit_button("Save")
    if submitted:
        cat_id = next((c.id for c in expense_cats if c.name == cat_choice), None)
        budget = Budget(
            id=str(uuid4()) if edit_id == "(new)" else edit_id,
            period=period,
            amount=amount,
            start_date=now.date().isoformat(),
            category_id=cat_id,
            carryover=carryover,
        )
        result = tracker.save_budget(budget)
        if result.is_right():
            st.success("Budget saved")
        else:
            st.error(result.get_error()["message"])

    if existing:
        drop = st.selectbox("Delete budget", list(existing), key="drop_budget")
        if st.button("Delete"):
            tracker.delete_budget(drop)
            st.success(f"Deleted {drop}")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    accounts = tracker.accounts.list_all()
    categories = tracker.categories.list_all()

    with st.form("transaction_form"):
        kind = st.selectbox("Type", TRANSACTION_TYPES, index=1)
        amount = st.number_input("Amount", min_value=0.0, value=0.0, step=1.0)
        day = st.date_input("Date", value=now.date())
        cat_choice = st.selectbox("Category", ["(none)"] + [c.name for c in categories if c.type == kind])
        acc_choice = st.selectbox("Account", [a.name for a in accounts])
        target_choice = st.selectbox("Transfer to", [a.name for a in accounts]) if kind == TRANSFER else None
        notes = st.text_input("Notes")
        tags = st.text_input("Tags (separated by |)")
        recurring = st.checkbox("Recurring")
        freq = st.selectbox("Frequency", FREQUENCIES, index=2)
        interval = st.number_input("Every", min_value=1, value=1, step=1)
        month_days = st.text_input("Days of month (e.g. 5, 20)")
        end_date = st.text_input("Ends on (YYYY-MM-DD)")
        submitted = st.form_submit_button("Add")

    rule = RecurrenceRule(
        freq=freq, interval=int(interval), by_month_day=parse_month_days(month_days), end_date=end_date or None
    ) if recurring else None
    draft = Transaction(
        id=str(uuid4()),
        type=kind,
        amount=amount,
        ts=day.isoformat(),
        currency=settings.currency,
        category_id=next((c.id for c in categories if c.name == cat_choice), None),
        account_id=next((a.id for a in accounts if a.name == acc_choice), None),
        counterparty_account_id=next((a.id for a in accounts if a.name == target_choice), None),
        notes=notes,
        tags=tuple(t.strip() for t in tags.split("|") if t.strip()),
        rule=rule,
    )
    nxt = tracker.next_date(draft)
    if rule is not None:
        st.caption(f"Next occurrence: {nxt.date().isoformat() if nxt else 'none'}")

    if submitted:
        st.session_state.alerts = []
        result = tracker.add_transaction(draft, now)
        if result.is_right():
            st.success("Transaction added")
            for alert in st.session_state.alerts:
                st.warning(f"{alert['label']}: {alert['alert']} ({alert['used_pct']}% used)")
        else:
            st.error(result.get_error()["message"])

    trans = tracker.transactions.list_all()
    if trans:
        df = pd.DataFrame([transaction_to_dict(t) for t in trans])
        st.dataframe(df, use_container_width=True)
        drop = st.multiselect("Delete transactions", [t.id for t in trans])
        if drop and st.button("Delete selected"):
            tracker.delete_transactions(drop)
            st.success(f"Deleted {len(drop)} transaction(s)")
    else:
        st.info("No transactions yet.")

elif menu == "📊 Analytics":
    st.title("📊 Analytics")
    labels = {RANGE_MONTH: "This Month", RANGE_QUARTER: "Last 3 Months", RANGE_YTD: "Year to Date"}
    range_name = st.selectbox("Time range", list(labels), format_func=labels.get)
    accounts = tracker.accounts.list_all()
    acc_choice = st.selectbox("Account", ["all"] + [a.id for a in accounts],
                              format_func=lambda i: "All Accounts" if i == "all" else next(a.name for a in accounts if a.id == i))
    summary = tracker.analytics(now, range_name, acc_choice)

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", money(summary.income))
    with k2:
        st.metric("Expenses", money(summary.expense))
    with k3:
        st.metric("Savings", money(summary.savings))
    with k4:
        st.metric("Budget used", f"{summary.budget_pct}%")

    st.caption(f"Top category: {summary.top_category or 'none'} · "
               f"Average daily spend: {money(summary.avg_daily_spend)}")
    if summary.by_category:
        st.plotly_chart(category_figure(summary.by_category), use_container_width=True)
    st.plotly_chart(trend_figure(tracker.dashboard(now, now).trend), use_container_width=True)

    st.subheader("Accounts")
    balance_cols = st.columns(len(accounts) or 1)
    for col, (account, balance) in zip(balance_cols, tracker.account_balances()):
        with col:
            st.metric(account.name, money(balance))

elif menu == "📂 Data":
    st.title("📂 Data")
    st.download_button("⬇ Export JSON", data=json.dumps(tracker.export_bundle(now), indent=2),
                       file_name="budget-tracker-export.json", mime="application/json")
    st.download_button("⬇ Export CSV", data=tracker.export_csv(), file_name="transactions.csv", mime="text/csv")

    uploaded_json = st.file_uploader("Import JSON", type=["json"])
    if uploaded_json is not None and st.button("Import JSON"):
        bundle = tracker.import_bundle(uploaded_json.getvalue().decode("utf-8"))
        st.success(f"Imported {len(bundle.transactions)} transactions")

    uploaded_csv = st.file_uploader("Import CSV", type=["csv"])
    if uploaded_csv is not None:
        text = uploaded_csv.getvalue().decode("utf-8")
        headers, sample = analyze_csv(text)
        st.table(pd.DataFrame(sample, columns=headers))
        optional = ["(none)"] + headers
        with st.form("csv_mapping"):
            date_col = st.selectbox("Date column", headers)
            amount_col = st.selectbox("Amount column", headers)
            type_col = st.selectbox("Type column", optional)
            cat_col = st.selectbox("Category column", optional)
            acc_col = st.selectbox("Account column", optional)
            note_col = st.selectbox("Note column", optional)
            go_import = st.form_submit_button("Import CSV")
        if go_import:
            picked = [None if v == "(none)" else v for v in (type_col, cat_col, acc_col, note_col)]
            mapping = CsvMapping(date_col, amount_col, *picked)
            before = len(tracker.transactions.list_all())
            after = len(tracker.import_csv(text, mapping))
            st.success(f"Imported {after - before} transactions")

    if st.button("Load sample data"):
        with open(SAMPLE_PATH, "r", encoding="utf-8") as f:
            tracker.import_bundle(f.read())
        st.success("Sample data loaded")
    if st.button("Reset all data"):
        tracker.store.clear()
        st.success("All data removed")

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")
    with st.form("settings_form"):
        currency = st.text_input("Currency", value=settings.currency)
        locale = st.text_input("Locale", value=settings.locale)
        week = st.selectbox("Week starts on", WEEK_STARTS, index=WEEK_STARTS.index(settings.start_of_week))
        month_day = st.number_input("Month starts on day", min_value=1, max_value=28, value=settings.start_of_month)
        saved = st.form_submit_button("Save")
    if saved:
        tracker.settings_provider.save(Settings(currency, locale, week, int(month_day)))
        st.success("Settings saved")
