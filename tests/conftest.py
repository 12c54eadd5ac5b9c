from datetime import datetime

import pytest

from tracker.domain import Account, Budget, Category, Transaction


@pytest.fixture
def now():
    return datetime(2024, 3, 15, 12)


@pytest.fixture
def cats():
    return (
        Category("food", "Groceries", "expense"),
        Category("rent", "Rent", "expense"),
        Category("salary", "Salary", "income"),
    )


@pytest.fixture
def accs():
    return (
        Account("bank", "Checking", "bank"),
        Account("cash", "Cash", "cash", opening_balance=50),
    )


@pytest.fixture
def trans():
    return (
        Transaction("i1", "income", 4000, "2024-03-01", category_id="salary", account_id="bank"),
        Transaction("e1", "expense", 120, "2024-03-02", category_id="food", account_id="bank"),
        Transaction("e2", "expense", 1500, "2024-03-03", category_id="rent", account_id="bank"),
        Transaction("e3", "expense", 80, "2024-03-05", category_id="food", account_id="cash"),
        Transaction("e4", "expense", 50, "2024-03-05", account_id="cash"),
        Transaction("x1", "transfer", 300, "2024-03-06", account_id="bank", counterparty_account_id="cash"),
        Transaction("i0", "income", 4000, "2024-02-01", category_id="salary", account_id="bank"),
        Transaction("e0", "expense", 310, "2024-02-10", category_id="food", account_id="bank"),
    )


@pytest.fixture
def budgets():
    return (
        Budget("bf", "monthly", 500, "2024-01-01", category_id="food"),
        Budget("ball", "monthly", 2000, "2024-01-01"),
        Budget("bw", "weekly", 100, "2024-01-01"),
    )
