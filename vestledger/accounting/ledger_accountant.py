"""LedgerAccountant — учёт агрегатов пула.

Ведёт LedgerTotals (committed, released_total, pool_balance и аудиторские
funded_total / withdrawn_total) и обеспечивает глобальные инварианты:
- released_total ≤ committed
- pool_balance ≥ 0
- released_total + pool_balance + withdrawn_total == funded_total

Каждая операция разделена на preview_* (чистая функция, возвращает
новый LedgerTotals или бросает ошибку) и commit (замена ссылки).
Это позволяет ReleaseExecutor провалидировать всё до первой мутации.
"""

import logging

from vestledger.core.domain.ledger_totals import LedgerTotals
from vestledger.core.errors import InsufficientPoolBalance, LedgerInvariantViolation
from vestledger.core.math.integer_safeguards import (
    MAX_AMOUNT_UINT256,
    checked_add,
    checked_sub,
    clamp_amount,
    validate_amount,
)

logger = logging.getLogger(__name__)


def audit_totals(totals: LedgerTotals) -> list[str]:
    """Список нарушенных инвариантов (пустой, если всё в порядке)."""
    violations = []
    if totals.released_total > totals.committed:
        violations.append(
            f"released_total {totals.released_total} exceeds committed {totals.committed}"
        )
    if totals.pool_balance < 0:
        violations.append(f"pool_balance {totals.pool_balance} is negative")
    accounted = totals.released_total + totals.pool_balance + totals.withdrawn_total
    if accounted != totals.funded_total:
        violations.append(
            f"released_total + pool_balance + withdrawn_total = {accounted} "
            f"!= funded_total {totals.funded_total}"
        )
    return violations


class LedgerAccountant:
    """Учёт пула с инъецируемым состоянием LedgerTotals."""

    def __init__(
        self,
        totals: LedgerTotals | None = None,
        max_amount: int = MAX_AMOUNT_UINT256,
    ):
        """
        Args:
            totals: начальное состояние (по умолчанию пустой пул)
            max_amount: представимый максимум сумм

        Raises:
            LedgerInvariantViolation: если переданное состояние противоречиво
        """
        self._totals = totals or LedgerTotals()
        self._max_amount = max_amount
        self.check_invariants()

    def totals(self) -> LedgerTotals:
        """Immutable снапшот агрегатов."""
        return self._totals

    def outstanding(self) -> int:
        """Обязательства перед получателями: committed - released_total."""
        return self._totals.outstanding

    def withdrawable(self) -> int:
        """Часть пула, не нужная для покрытия обязательств."""
        return clamp_amount(self._totals.pool_balance - self.outstanding())

    def check_invariants(self) -> None:
        """
        Raises:
            LedgerInvariantViolation: при любом нарушенном инварианте
        """
        violations = audit_totals(self._totals)
        if violations:
            raise LedgerInvariantViolation("; ".join(violations))

    # -------------------------------------------------------------------------
    # Previews (pure)
    # -------------------------------------------------------------------------

    def _update(self, **changes: int) -> LedgerTotals:
        return LedgerTotals(**{**self._totals.model_dump(), **changes})

    def preview_fund(self, amount: int) -> LedgerTotals:
        validate_amount(amount, "amount", self._max_amount, allow_zero=False)
        t = self._totals
        return self._update(
            pool_balance=checked_add(t.pool_balance, amount, self._max_amount),
            funded_total=checked_add(t.funded_total, amount, self._max_amount),
        )

    def preview_reserve(self, amount: int) -> LedgerTotals:
        validate_amount(amount, "amount", self._max_amount, allow_zero=False)
        return self._update(
            committed=checked_add(self._totals.committed, amount, self._max_amount),
        )

    def preview_release(self, amount: int) -> LedgerTotals:
        """
        Raises:
            InsufficientPoolBalance: amount > pool_balance
            LedgerInvariantViolation: released_total превысил бы committed
        """
        validate_amount(amount, "amount", self._max_amount, allow_zero=False)
        t = self._totals
        if amount > t.pool_balance:
            raise InsufficientPoolBalance(amount, t.pool_balance)
        released_total = checked_add(t.released_total, amount, self._max_amount)
        if released_total > t.committed:
            raise LedgerInvariantViolation(
                f"release of {amount} would drive released_total {released_total} "
                f"above committed {t.committed}"
            )
        return self._update(
            released_total=released_total,
            pool_balance=checked_sub(t.pool_balance, amount),
        )

    def preview_withdraw(self, amount: int) -> LedgerTotals:
        """
        Raises:
            InsufficientPoolBalance: amount > withdrawable()
        """
        validate_amount(amount, "amount", self._max_amount, allow_zero=False)
        available = self.withdrawable()
        if amount > available:
            raise InsufficientPoolBalance(amount, available)
        t = self._totals
        return self._update(
            pool_balance=checked_sub(t.pool_balance, amount),
            withdrawn_total=checked_add(t.withdrawn_total, amount, self._max_amount),
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def commit(self, totals: LedgerTotals) -> None:
        """Замена состояния подготовленным preview_* снапшотом."""
        self._totals = totals

    def fund_pool(self, amount: int) -> LedgerTotals:
        self.commit(self.preview_fund(amount))
        logger.info("Pool funded: +%s, balance=%s", amount, self._totals.pool_balance)
        return self._totals

    def reserve(self, amount: int) -> LedgerTotals:
        self.commit(self.preview_reserve(amount))
        logger.debug("Committed +%s, committed=%s", amount, self._totals.committed)
        return self._totals

    def release(self, amount: int) -> LedgerTotals:
        self.commit(self.preview_release(amount))
        return self._totals

    def withdraw(self, amount: int) -> LedgerTotals:
        self.commit(self.preview_withdraw(amount))
        logger.info("Pool withdrawal: -%s, balance=%s", amount, self._totals.pool_balance)
        return self._totals
