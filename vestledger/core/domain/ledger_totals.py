"""
LedgerTotals — Снапшот агрегатов пула

Immutable Pydantic модель. Принадлежит LedgerAccountant и передаётся ему
явно (инъекция), а не живёт глобальным синглтоном: несколько независимых
экземпляров движка (например, в тестах) не разделяют состояние.
"""

from pydantic import BaseModel, Field


class LedgerTotals(BaseModel):
    """
    Агрегаты пула.

    Инварианты (проверяются LedgerAccountant.check_invariants):
    - released_total ≤ committed
    - pool_balance ≥ 0
    - released_total + pool_balance + withdrawn_total == funded_total
    """

    committed: int = Field(default=0, ge=0, strict=True, description="Сумма total_amount всех расписаний")
    released_total: int = Field(default=0, ge=0, strict=True, description="Сумма released всех расписаний")
    pool_balance: int = Field(default=0, ge=0, strict=True, description="Доступно к выплате")
    funded_total: int = Field(default=0, ge=0, strict=True, description="Всего внесено в пул")
    withdrawn_total: int = Field(default=0, ge=0, strict=True, description="Всего выведено из пула")

    model_config = {"frozen": True}

    @property
    def outstanding(self) -> int:
        """Обязательства перед получателями: committed - released_total."""
        return self.committed - self.released_total
