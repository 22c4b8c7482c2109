"""
Ledger Engine

This module holds the one stateful object of finledger. The engine owns the
whole ledger (accounts, cards, incomes, expenses, budgets, budget payments)
and every read and write goes through its methods.

DESIGN DECISION: The engine enforces the boundaries:
- Input is validated before any state is touched
- Every public mutation ends with exactly one full-state save
- Create and delete of every entity are exact inverses
- Every mutation is audited

LIFECYCLE:
    construct -> load snapshot (or bootstrap a default cash account)
    accrue_interest() once per session
    ... operations ...
    factory_reset(confirmed=True) -> engine is closed, host builds a new one

UPDATES ARE DELETE-THEN-CREATE. update_income() and update_expense() undo
the old record's effect on balances/debts and then post the new record
exactly as create would. This is only safe because the engine is
single-threaded: between the two halves nothing else may touch the ledger.
If the engine is ever shared, the whole read-modify-save sequence must be
serialized (one engine per store, or a lock around every public call).

SAVE FAILURES. State is changed in memory first and saved second. If the
save fails the engine raises PersistenceError and memory is ahead of the
store. Call save() to retry or reload() to go back to the stored state.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, TypeVar

from pydantic import ValidationError

from finledger.audit import AuditLogger
from finledger.billing import effective_billing_date, plan_installments
from finledger.config import LedgerSettings, get_settings
from finledger.interest import plan_interest
from finledger.models.audit import AuditEventBuilder, AuditEventType
from finledger.models.ledger import (
    Account,
    Budget,
    BudgetPayment,
    Card,
    Expense,
    ExpenseType,
    Income,
    InstallmentType,
    LedgerModel,
    LedgerSnapshot,
    MonthlyTotals,
)
from finledger.queries import monthly_totals, net_worth, total_assets, total_debt
from finledger.services.ids import IdGenerator, generate_id
from finledger.services.storage import (
    CorruptSnapshotError,
    JsonFileSnapshotStorage,
    PersistenceError,
    SnapshotStorageInterface,
)
from finledger.validation import LedgerInputValidator

Entity = TypeVar("Entity", bound=LedgerModel)

ChangeHook = Callable[[LedgerSnapshot], None]
Clock = Callable[[], datetime]


class ResetNotConfirmedError(Exception):
    """factory_reset() was called without explicit confirmation."""
    pass


class LedgerClosedError(Exception):
    """The engine was factory reset; build a new one from bootstrap."""
    pass


class LedgerEngine:
    """
    Personal finance ledger: state, mutations and derived totals.

    Collaborators (all injectable):
    - storage: key-value store holding the serialized snapshot
    - id_generator: returns unique string ids
    - clock: returns the current datetime ("today" is its date)
    - on_change: called with a snapshot after every successful save
    - audit_logger: receives an event for every mutation
    """

    def __init__(
        self,
        storage: SnapshotStorageInterface,
        settings: Optional[LedgerSettings] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
        on_change: Optional[ChangeHook] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings()
        self._storage = storage
        self._storage_key = self._settings.storage_key
        self._new_id = id_generator or generate_id
        self._clock = clock or datetime.now
        self._on_change = on_change
        self._audit = audit_logger or AuditLogger(self._settings.audit_history_size)
        self._validator = LedgerInputValidator(self._audit)
        self._closed = False
        self._state = LedgerSnapshot()
        self._load_or_bootstrap()

    # =========================================================================
    # LIFECYCLE & PERSISTENCE
    # =========================================================================

    def _load_or_bootstrap(self) -> None:
        payload = self._storage.load(self._storage_key)

        if payload is None:
            self._state = LedgerSnapshot()
            account = self._post_account(
                self._settings.default_account_name,
                Decimal("0"),
                Decimal("0"),
            )
            self._audit.log(AuditEventBuilder.lifecycle(
                AuditEventType.LEDGER_BOOTSTRAPPED,
                "First start: created default account",
                {"account_id": account.id},
            ))
            self._commit()
            return

        try:
            self._state = LedgerSnapshot.from_json(payload)
        except ValidationError as e:
            raise CorruptSnapshotError(
                f"Snapshot under {self._storage_key!r} could not be parsed: {e}"
            ) from e

        self._audit.log(AuditEventBuilder.lifecycle(
            AuditEventType.LEDGER_LOADED,
            "Ledger loaded from store",
            {
                "accounts": len(self._state.accounts),
                "cards": len(self._state.cards),
                "incomes": len(self._state.incomes),
                "expenses": len(self._state.expenses),
                "budgets": len(self._state.budgets),
            },
        ))

    def _ensure_open(self) -> None:
        if self._closed:
            raise LedgerClosedError("Ledger was reset; start a new engine")

    @property
    def _ledger(self) -> LedgerSnapshot:
        self._ensure_open()
        return self._state

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    def _today(self) -> date:
        return self._clock().date()

    def _commit(self) -> None:
        """Write the full state to the store, then notify the presentation layer."""
        payload = self._ledger.to_json()
        try:
            self._storage.save(self._storage_key, payload)
        except Exception as e:
            self._audit.log_save_failed(self._storage_key, str(e))
            raise PersistenceError(
                f"Failed to save ledger under {self._storage_key!r}: {e}. "
                "In-memory state is ahead of the store; retry save() or call reload().",
                storage_key=self._storage_key,
            ) from e
        self._notify()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.snapshot())
        except Exception as e:
            # save already succeeded; hook errors are only logged
            self._audit.log(AuditEventBuilder.notify_failed(str(e)))

    def save(self) -> None:
        """Save the current in-memory state again (retry after PersistenceError)."""
        self._commit()

    def reload(self) -> None:
        """Discard in-memory changes and reload the stored state."""
        self._ensure_open()
        self._load_or_bootstrap()
        self._audit.log(AuditEventBuilder.lifecycle(
            AuditEventType.LEDGER_RELOADED,
            "In-memory state replaced by stored snapshot",
        ))

    def snapshot(self) -> LedgerSnapshot:
        """Deep copy of the whole ledger."""
        return self._ledger.model_copy(deep=True)

    def factory_reset(self, confirmed: bool = False) -> None:
        """
        Erase the stored ledger and close this engine.

        DESTRUCTIVE. The caller must have asked the user and pass
        confirmed=True. Afterwards every call on this engine raises
        LedgerClosedError; the host must create a new engine, which will
        bootstrap from an empty store.
        """
        self._ensure_open()
        if not confirmed:
            raise ResetNotConfirmedError(
                "Factory reset deletes all accounts, cards, incomes, expenses and budgets; "
                "pass confirmed=True after the user has agreed"
            )
        self._storage.remove(self._storage_key)
        self._closed = True
        self._audit.log(AuditEventBuilder.lifecycle(
            AuditEventType.FACTORY_RESET,
            "All ledger data erased",
            {"storage_key": self._storage_key},
        ))

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _index_of(items: list[Entity], entity_id: Optional[str]) -> Optional[int]:
        if entity_id is None:
            return None
        for index, item in enumerate(items):
            if item.id == entity_id:
                return index
        return None

    @staticmethod
    def _find(items: list[Entity], entity_id: Optional[str]) -> Optional[Entity]:
        index = LedgerEngine._index_of(items, entity_id)
        return None if index is None else items[index]

    @staticmethod
    def _copies(items: Iterable[Entity]) -> list[Entity]:
        return [item.model_copy(deep=True) for item in items]

    def _merge(
        self,
        entity_type: str,
        current: Entity,
        changes: dict[str, Any],
        parsers: dict[str, Callable[[Any], Any]],
    ) -> Entity:
        """Validate a partial update and return the merged record (not stored yet)."""
        if "id" in changes:
            raise self._validator.reject("id", "immutable", f"{entity_type} id cannot be changed", changes["id"])
        for field in changes:
            if field not in parsers:
                allowed = ", ".join(sorted(parsers))
                raise self._validator.reject(
                    field,
                    "unknown_field",
                    f"{entity_type} has no editable field {field!r} (editable: {allowed})",
                )

        parsed = {field: parsers[field](value) for field, value in changes.items()}
        try:
            return type(current).model_validate({**current.model_dump(), **parsed})
        except ValidationError as e:
            raise self._validator.from_validation_error(e)

    def _replace(self, items: list[Entity], updated: Entity) -> None:
        items[self._index_of(items, updated.id)] = updated

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def _post_account(self, name: str, balance: Decimal, interest_rate: Decimal) -> Account:
        account = Account(
            id=self._new_id(),
            name=name,
            balance=balance,
            interest_rate=interest_rate,
            last_interest_date=self._today(),
        )
        self._ledger.accounts.append(account)
        self._audit.log(AuditEventBuilder.entity_created(
            "account",
            account.id,
            account.name,
            {"balance": str(balance), "interest_rate": str(interest_rate)},
        ))
        return account

    def create_account(
        self,
        name: str,
        balance: Any = 0,
        interest_rate: Any = 0,
    ) -> Account:
        """
        Open an account.

        Interest accrual starts counting from today.

        Raises:
            LedgerValidationError: balance or rate is not a finite number,
                or the rate is negative
        """
        name = self._validator.text(name, "name")
        balance = self._validator.decimal(balance, "balance")
        interest_rate = self._validator.rate(interest_rate)

        account = self._post_account(name, balance, interest_rate)
        self._commit()
        return account.model_copy()

    def update_account(self, account_id: str, **changes: Any) -> Optional[Account]:
        """
        Change fields of an account.

        Editable: name, balance, interest_rate, last_interest_date.
        Returns None (and changes nothing) if the account does not exist.
        """
        current = self._find(self._ledger.accounts, account_id)
        if current is None:
            self._audit.log_not_found("account", account_id, "update")
            return None

        updated = self._merge("account", current, changes, {
            "name": lambda v: self._validator.text(v, "name"),
            "balance": lambda v: self._validator.decimal(v, "balance"),
            "interest_rate": lambda v: self._validator.rate(v),
            "last_interest_date": lambda v: (
                None if v is None else self._validator.calendar_date(v, "last_interest_date")
            ),
        })
        self._replace(self._ledger.accounts, updated)
        self._audit.log(AuditEventBuilder.entity_updated("account", account_id, sorted(changes)))
        self._commit()
        return updated.model_copy()

    def delete_account(self, account_id: str) -> bool:
        """
        Remove an account.

        Incomes that point at it are kept; they become dangling references.
        Returns False if the account does not exist.
        """
        index = self._index_of(self._ledger.accounts, account_id)
        if index is None:
            self._audit.log_not_found("account", account_id, "delete")
            return False

        del self._ledger.accounts[index]
        self._audit.log(AuditEventBuilder.entity_deleted("account", account_id))
        self._commit()
        return True

    def get_account(self, account_id: str) -> Optional[Account]:
        account = self._find(self._ledger.accounts, account_id)
        return None if account is None else account.model_copy()

    @property
    def accounts(self) -> list[Account]:
        return self._copies(self._ledger.accounts)

    # =========================================================================
    # CARDS
    # =========================================================================

    def create_card(
        self,
        name: str,
        limit: Any = 0,
        cutoff_day: Any = None,
        payment_day: Any = None,
    ) -> Card:
        """
        Add a credit card with no debt.

        cutoff_day falls back to 1 and payment_day to unset when the value
        given is not a day of month.
        """
        card = Card(
            id=self._new_id(),
            name=self._validator.text(name, "name"),
            credit_limit=self._validator.decimal(limit, "limit"),
            current_debt=Decimal("0"),
            cutoff_day=self._validator.day(cutoff_day, default=1),
            payment_day=self._validator.day(payment_day, default=None),
        )
        self._ledger.cards.append(card)
        self._audit.log(AuditEventBuilder.entity_created(
            "card",
            card.id,
            card.name,
            {
                "limit": str(card.credit_limit),
                "cutoff_day": card.cutoff_day,
                "payment_day": card.payment_day,
            },
        ))
        self._commit()
        return card.model_copy()

    def update_card(self, card_id: str, **changes: Any) -> Optional[Card]:
        """
        Change fields of a card.

        Editable: name, credit_limit, current_debt, cutoff_day, payment_day.
        Returns None (and changes nothing) if the card does not exist.
        """
        current = self._find(self._ledger.cards, card_id)
        if current is None:
            self._audit.log_not_found("card", card_id, "update")
            return None

        updated = self._merge("card", current, changes, {
            "name": lambda v: self._validator.text(v, "name"),
            "credit_limit": lambda v: self._validator.decimal(v, "credit_limit"),
            "current_debt": lambda v: self._validator.decimal(v, "current_debt"),
            "cutoff_day": lambda v: self._validator.strict_day(v, "cutoff_day"),
            "payment_day": lambda v: self._validator.strict_day(v, "payment_day", optional=True),
        })
        self._replace(self._ledger.cards, updated)
        self._audit.log(AuditEventBuilder.entity_updated("card", card_id, sorted(changes)))
        self._commit()
        return updated.model_copy()

    def delete_card(self, card_id: str) -> bool:
        """
        Remove a card.

        Expenses charged to it are kept; they become dangling references.
        Returns False if the card does not exist.
        """
        index = self._index_of(self._ledger.cards, card_id)
        if index is None:
            self._audit.log_not_found("card", card_id, "delete")
            return False

        del self._ledger.cards[index]
        self._audit.log(AuditEventBuilder.entity_deleted("card", card_id))
        self._commit()
        return True

    def get_card(self, card_id: str) -> Optional[Card]:
        card = self._find(self._ledger.cards, card_id)
        return None if card is None else card.model_copy()

    @property
    def cards(self) -> list[Card]:
        return self._copies(self._ledger.cards)

    # =========================================================================
    # INCOMES
    # =========================================================================

    def _parse_income(
        self,
        account_id: Any,
        amount: Any,
        description: Any,
        entry_date: Any,
    ) -> dict[str, Any]:
        """Parse every income argument; nothing is touched yet."""
        return {
            "account_id": self._validator.reference(account_id, "account_id"),
            "amount": self._validator.decimal(amount, "amount"),
            "description": self._validator.text(description, "description"),
            "entry_date": (
                self._today() if entry_date is None
                else self._validator.calendar_date(entry_date)
            ),
        }

    def _post_income(
        self,
        account_id: Optional[str],
        amount: Decimal,
        description: str,
        entry_date: date,
    ) -> Income:
        income = Income(
            id=self._new_id(),
            account_id=account_id,
            amount=amount,
            description=description,
            date=entry_date,
        )
        self._ledger.incomes.append(income)

        account = self._find(self._ledger.accounts, account_id)
        if account is not None:
            account.balance += amount
        else:
            self._audit.log_dangling_reference("income", income.id, "account", account_id)

        self._audit.log(AuditEventBuilder.entity_created(
            "income",
            income.id,
            description,
            {"account_id": account_id, "amount": str(amount), "date": entry_date.isoformat()},
        ))
        return income

    def _remove_income(self, income: Income) -> None:
        account = self._find(self._ledger.accounts, income.account_id)
        if account is not None:
            account.balance -= income.amount
        else:
            self._audit.log_dangling_reference("income", income.id, "account", income.account_id)

        self._ledger.incomes.remove(income)
        self._audit.log(AuditEventBuilder.entity_deleted(
            "income",
            income.id,
            {"account_id": income.account_id, "amount": str(income.amount)},
        ))

    def create_income(
        self,
        account_id: Optional[str],
        amount: Any,
        description: str = "",
        entry_date: Any = None,
    ) -> Income:
        """
        Record money received into an account.

        The account's balance grows by amount. If the account does not
        exist the income is still recorded, with no balance effect.
        entry_date defaults to today.
        """
        parsed = self._parse_income(account_id, amount, description, entry_date)

        income = self._post_income(**parsed)
        self._commit()
        return income.model_copy()

    def delete_income(self, income_id: str) -> bool:
        """
        Remove an income and take its stored amount back out of the account.

        Returns False if the income does not exist.
        """
        income = self._find(self._ledger.incomes, income_id)
        if income is None:
            self._audit.log_not_found("income", income_id, "delete")
            return False

        self._remove_income(income)
        self._commit()
        return True

    def update_income(
        self,
        income_id: str,
        account_id: Optional[str],
        amount: Any,
        description: str = "",
        entry_date: Any = None,
    ) -> Optional[Income]:
        """
        Replace an income: delete it, then create the new one (new id).

        Returns the new income, or None (and changes nothing) if the old
        one does not exist. Input is validated before anything is deleted.
        """
        parsed = self._parse_income(account_id, amount, description, entry_date)

        current = self._find(self._ledger.incomes, income_id)
        if current is None:
            self._audit.log_not_found("income", income_id, "update")
            return None

        self._remove_income(current)
        income = self._post_income(**parsed)
        self._commit()
        return income.model_copy()

    def get_income(self, income_id: str) -> Optional[Income]:
        income = self._find(self._ledger.incomes, income_id)
        return None if income is None else income.model_copy()

    @property
    def incomes(self) -> list[Income]:
        return self._copies(self._ledger.incomes)

    # =========================================================================
    # EXPENSES
    # =========================================================================

    def _parse_expense(
        self,
        expense_type: Any,
        card_id: Any,
        amount: Any,
        description: Any,
        expense_date: Any,
        installment_count: Any,
        installment_type: Any,
    ) -> dict[str, Any]:
        """Parse every expense argument; nothing is touched yet."""
        return {
            "expense_type": self._validator.text(expense_type, "type") or ExpenseType.CASH.value,
            "card_id": self._validator.reference(card_id, "card_id"),
            "amount": self._validator.decimal(amount, "amount"),
            "description": self._validator.text(description, "description"),
            "expense_date": (
                self._today() if expense_date is None
                else self._validator.calendar_date(expense_date)
            ),
            "count": self._validator.installment_count(installment_count),
            "split": self._validator.installment_type(installment_type),
        }

    def _post_expense(
        self,
        expense_type: str,
        card_id: Optional[str],
        amount: Decimal,
        description: str,
        expense_date: date,
        count: int,
        split: InstallmentType,
    ) -> list[Expense]:
        is_credit_card = expense_type == ExpenseType.CREDIT_CARD.value
        card = self._find(self._ledger.cards, card_id) if is_credit_card else None

        booked_on = effective_billing_date(expense_date, expense_type, card)
        plan = plan_installments(amount, description, booked_on, count, split)

        rows = [
            Expense(
                id=self._new_id(),
                type=expense_type,
                card_id=card_id if is_credit_card else None,
                amount=row.amount,
                description=row.description,
                date=row.date,
                installments=row.installments,
            )
            for row in plan.rows
        ]
        self._ledger.expenses.extend(rows)

        if is_credit_card and card_id:
            if card is not None:
                # the whole purchase counts against the card at once
                card.current_debt += plan.total_amount
            else:
                self._audit.log_dangling_reference("expense", rows[0].id, "card", card_id)

        self._audit.log(AuditEventBuilder.entity_created(
            "expense",
            rows[0].id,
            description,
            {
                "type": expense_type,
                "card_id": card_id if is_credit_card else None,
                "total_amount": str(plan.total_amount),
                "installments": count,
                "purchase_date": expense_date.isoformat(),
                "booked_on": booked_on.isoformat(),
                "row_ids": [row.id for row in rows],
            },
        ))
        return rows

    def _remove_expense(self, expense: Expense) -> None:
        if expense.is_credit_card and expense.card_id:
            card = self._find(self._ledger.cards, expense.card_id)
            if card is not None:
                # only this row's share; sibling installments keep theirs
                card.current_debt -= expense.amount
            else:
                self._audit.log_dangling_reference("expense", expense.id, "card", expense.card_id)

        self._ledger.expenses.remove(expense)
        self._audit.log(AuditEventBuilder.entity_deleted(
            "expense",
            expense.id,
            {"card_id": expense.card_id, "amount": str(expense.amount)},
        ))

    def create_expense(
        self,
        expense_type: str,
        card_id: Optional[str],
        amount: Any,
        description: str = "",
        expense_date: Any = None,
        installment_count: Any = 1,
        installment_type: Any = "total",
    ) -> list[Expense]:
        """
        Record a purchase.

        Credit card purchases are booked on the date their billing cycle is
        paid (see finledger.billing.cycle) and raise the card's debt by the
        full purchase amount. With installment_count > 1 the purchase is
        stored as one row per month; installment_type says whether amount
        is the total ('total') or one month's share ('monthly').

        Returns the stored rows in month order.
        """
        parsed = self._parse_expense(
            expense_type,
            card_id,
            amount,
            description,
            expense_date,
            installment_count,
            installment_type,
        )
        rows = self._post_expense(**parsed)
        self._commit()
        return self._copies(rows)

    def delete_expense(self, expense_id: str) -> bool:
        """
        Remove one expense row.

        A credit card's debt drops by this row's amount only. Other
        installments of the same purchase are untouched.
        Returns False if the row does not exist.
        """
        expense = self._find(self._ledger.expenses, expense_id)
        if expense is None:
            self._audit.log_not_found("expense", expense_id, "delete")
            return False

        self._remove_expense(expense)
        self._commit()
        return True

    def update_expense(
        self,
        expense_id: str,
        expense_type: str,
        card_id: Optional[str],
        amount: Any,
        description: str = "",
        expense_date: Any = None,
        installment_count: Any = 1,
        installment_type: Any = "total",
    ) -> Optional[list[Expense]]:
        """
        Replace one expense row: delete it, then create a new purchase.

        Only the row with expense_id is removed. If the new parameters ask
        for several installments, that many new rows are created; the
        caller is responsible for passing the installment parameters it
        wants, since the engine does not know which rows once belonged to
        the same purchase.

        Returns the new rows, or None (and changes nothing) if the row
        does not exist.
        """
        parsed = self._parse_expense(
            expense_type,
            card_id,
            amount,
            description,
            expense_date,
            installment_count,
            installment_type,
        )

        current = self._find(self._ledger.expenses, expense_id)
        if current is None:
            self._audit.log_not_found("expense", expense_id, "update")
            return None

        self._remove_expense(current)
        rows = self._post_expense(**parsed)
        self._commit()
        return self._copies(rows)

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        expense = self._find(self._ledger.expenses, expense_id)
        return None if expense is None else expense.model_copy(deep=True)

    @property
    def expenses(self) -> list[Expense]:
        return self._copies(self._ledger.expenses)

    # =========================================================================
    # BUDGETS
    # =========================================================================

    def create_budget(
        self,
        budget_type: Any,
        amount: Any,
        description: str = "",
        day: Any = None,
    ) -> Budget:
        """Add a recurring planned income or expense. day falls back to 1."""
        budget = Budget(
            id=self._new_id(),
            type=self._validator.budget_type(budget_type),
            amount=self._validator.decimal(amount, "amount"),
            description=self._validator.text(description, "description"),
            day=self._validator.day(day, default=1),
        )
        self._ledger.budgets.append(budget)
        self._audit.log(AuditEventBuilder.entity_created(
            "budget",
            budget.id,
            budget.description,
            {"type": budget.type.value, "amount": str(budget.amount), "day": budget.day},
        ))
        self._commit()
        return budget.model_copy()

    def update_budget(self, budget_id: str, **changes: Any) -> Optional[Budget]:
        """
        Change fields of a budget item.

        Editable: type, amount, description, day.
        Returns None (and changes nothing) if the budget does not exist.
        """
        current = self._find(self._ledger.budgets, budget_id)
        if current is None:
            self._audit.log_not_found("budget", budget_id, "update")
            return None

        updated = self._merge("budget", current, changes, {
            "type": lambda v: self._validator.budget_type(v),
            "amount": lambda v: self._validator.decimal(v, "amount"),
            "description": lambda v: self._validator.text(v, "description"),
            "day": lambda v: self._validator.strict_day(v, "day"),
        })
        self._replace(self._ledger.budgets, updated)
        self._audit.log(AuditEventBuilder.entity_updated("budget", budget_id, sorted(changes)))
        self._commit()
        return updated.model_copy()

    def delete_budget(self, budget_id: str) -> bool:
        """
        Remove a budget item together with all of its monthly payment records.

        Returns False if the budget does not exist.
        """
        index = self._index_of(self._ledger.budgets, budget_id)
        if index is None:
            self._audit.log_not_found("budget", budget_id, "delete")
            return False

        del self._ledger.budgets[index]
        before = len(self._ledger.budget_payments)
        self._ledger.budget_payments = [
            payment for payment in self._ledger.budget_payments
            if payment.budget_id != budget_id
        ]
        self._audit.log(AuditEventBuilder.entity_deleted(
            "budget",
            budget_id,
            {"payments_removed": before - len(self._ledger.budget_payments)},
        ))
        self._commit()
        return True

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        budget = self._find(self._ledger.budgets, budget_id)
        return None if budget is None else budget.model_copy()

    @property
    def budgets(self) -> list[Budget]:
        return self._copies(self._ledger.budgets)

    def _payment_index(self, budget_id: str, month_str: str) -> Optional[int]:
        for index, payment in enumerate(self._ledger.budget_payments):
            if payment.budget_id == budget_id and payment.month_str == month_str:
                return index
        return None

    def toggle_budget_payment(
        self,
        budget_id: str,
        month_str: str,
        is_paid: bool,
    ) -> Optional[BudgetPayment]:
        """
        Mark a budget item paid or unpaid for one month (YYYY-MM).

        Paid: the record is created, or its paid date refreshed.
        Unpaid: the record is removed; nothing is kept for unpaid months.
        Returns the paid record, or None after marking unpaid.
        """
        month_str = self._validator.month_key(month_str)
        index = self._payment_index(budget_id, month_str)
        result: Optional[BudgetPayment] = None

        if is_paid:
            now = self._clock()
            if index is not None:
                payment = self._ledger.budget_payments[index]
                payment.is_paid = True
                payment.paid_date = now
            else:
                payment = BudgetPayment(
                    budget_id=budget_id,
                    month_str=month_str,
                    is_paid=True,
                    paid_date=now,
                )
                self._ledger.budget_payments.append(payment)
            result = payment.model_copy()
        elif index is not None:
            del self._ledger.budget_payments[index]

        self._audit.log(AuditEventBuilder.budget_payment_toggled(budget_id, month_str, bool(is_paid)))
        self._commit()
        return result

    def get_budget_payment_status(self, budget_id: str, month_str: str) -> Optional[BudgetPayment]:
        """The payment record for (budget, month), or None if unpaid."""
        index = self._payment_index(budget_id, month_str)
        if index is None:
            return None
        return self._ledger.budget_payments[index].model_copy()

    @property
    def budget_payments(self) -> list[BudgetPayment]:
        return [payment.model_copy() for payment in self._ledger.budget_payments]

    # =========================================================================
    # AGGREGATES
    # =========================================================================

    def get_monthly_totals(self, year: int, month: int) -> MonthlyTotals:
        """Income and expense dated within a calendar month (month is 1-12)."""
        year, month = self._validator.month(year, month)
        return monthly_totals(self._ledger.incomes, self._ledger.expenses, year, month)

    def get_total_assets(self) -> Decimal:
        return total_assets(self._ledger.accounts)

    def get_total_debt(self) -> Decimal:
        return total_debt(self._ledger.cards)

    def get_net_worth(self) -> Decimal:
        return net_worth(self._ledger.accounts, self._ledger.cards)

    # =========================================================================
    # INTEREST
    # =========================================================================

    def accrue_interest(self) -> list[Income]:
        """
        Pay interest owed since each account's last accrual.

        Run once when a session starts. Each account with a positive rate
        and positive balance gets one income covering every day since its
        last accrual, computed on its current balance; the income goes
        through the normal income path and so raises the balance. Every
        account is then stamped with today, including accounts that earned
        nothing. Returns the interest incomes posted.
        """
        today = self._today()
        posted: list[Income] = []

        for account in self._ledger.accounts:
            posting = plan_interest(account, today)
            if posting is not None:
                income = self._post_income(account.id, posting.amount, posting.description, today)
                self._audit.log(AuditEventBuilder.interest_accrued(
                    account.id,
                    posting.days,
                    str(posting.amount),
                ))
                posted.append(income.model_copy())
            account.last_interest_date = today

        self._commit()
        return posted


def create_ledger_engine(
    settings: Optional[LedgerSettings] = None,
    storage: Optional[SnapshotStorageInterface] = None,
    on_change: Optional[ChangeHook] = None,
    accrue_interest: bool = True,
    **engine_kwargs: Any,
) -> LedgerEngine:
    """
    Factory function to start a ledger session.

    Args:
        settings: Settings to use (defaults to get_settings())
        storage: Store to use (defaults to the JSON file from settings)
        on_change: Hook called after every successful save
        accrue_interest: Run interest accrual as part of startup
        engine_kwargs: Passed through to LedgerEngine (id_generator, clock, ...)

    Returns:
        A loaded (or freshly bootstrapped) engine
    """
    settings = settings or get_settings()
    if settings.debug_mode:
        logging.basicConfig(level=logging.DEBUG)

    if storage is None:
        storage = JsonFileSnapshotStorage(
            path=settings.storage_path,
            retry_attempts=settings.save_retry_attempts,
        )

    engine = LedgerEngine(
        storage=storage,
        settings=settings,
        on_change=on_change,
        **engine_kwargs,
    )
    if accrue_interest:
        engine.accrue_interest()
    return engine


__all__ = [
    "LedgerClosedError",
    "LedgerEngine",
    "ResetNotConfirmedError",
    "create_ledger_engine",
]
