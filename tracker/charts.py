from typing import Callable, Iterable, Sequence

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from tracker.budgets import ALERT_HIGH, ALERT_OVER, BudgetStatus
from tracker.rollup import BudgetUsage, Slice, TrendPoint

TEMPLATE = "plotly_dark"
OVER_COLOR = "#dc2626"
HIGH_COLOR = "#f59e0b"
OK_COLOR = "#059669"


def format_currency(value: float, currency: str = "USD") -> str:
    return f"{value:,.0f} {currency}"


def trend_frame(points: Sequence[TrendPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "label": [p.label for p in points],
            "income": [p.income for p in points],
            "expense": [p.expense for p in points],
        }
    )


def trend_figure(points: Sequence[TrendPoint]) -> go.Figure:
    df = trend_frame(points)
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=df["label"], y=df["income"], mode="lines+markers", name="Income"))
    fig.add_trace(go.Scatter(x=df["label"], y=df["expense"], mode="lines+markers", name="Expense"))
    fig.update_layout(template=TEMPLATE, margin=dict(t=30, b=10, l=10, r=10))
    return fig


def category_figure(breakdown: Iterable[Slice], title: str = "Spending by category") -> go.Figure:
    df = pd.DataFrame(list(breakdown), columns=["name", "value"])
    fig = px.pie(df, values="value", names="name", title=title, template=TEMPLATE)
    fig.update_layout(height=320)
    return fig


def budget_usage_figure(usage: Iterable[BudgetUsage]) -> go.Figure:
    df = pd.DataFrame(list(usage), columns=["name", "spent", "remaining"])
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df["name"], y=df["spent"], name="Spent"))
    fig.add_trace(go.Bar(x=df["name"], y=df["remaining"], name="Remaining"))
    fig.update_layout(barmode="stack", template=TEMPLATE, margin=dict(t=30, b=10, l=10, r=10))
    return fig


def budget_status_frame(
    statuses: Iterable[BudgetStatus], label: Callable[[BudgetStatus], str]
) -> pd.DataFrame:
    """One row per budget with a bar colour picked from its alert level."""
    rows = [
        {
            "budget": label(s),
            "period": s.budget.period,
            "from": s.current.start.date(),
            "to": s.current.end.date(),
            "spent": s.spent_current,
            "carry": s.carry,
            "limit": s.limit,
            "used_pct": s.used_pct,
            "alert": s.alert or "",
        }
        for s in statuses
    ]
    df = pd.DataFrame(rows, columns=["budget", "period", "from", "to", "spent", "carry",
                                     "limit", "used_pct", "alert"])
    df["color"] = np.where(
        df["alert"] == ALERT_OVER, OVER_COLOR, np.where(df["alert"] == ALERT_HIGH, HIGH_COLOR, OK_COLOR)
    )
    return df
