"""Конфигурация движка vesting-учёта.

Загрузка определений фаз и получателей из файлов — забота внешнего
загрузчика; здесь только параметры самого движка.
"""

from dataclasses import dataclass

from vestledger.core.math.integer_safeguards import MAX_AMOUNT_UINT256


@dataclass(frozen=True)
class EngineConfig:
    """Конфигурация движка.

    - max_amount: представимый максимум сумм и промежуточных произведений
      (по умолчанию uint256); выход за него → ArithmeticOverflow
    - audit_after_mutation: проверять инварианты ledger после каждой мутации
    """

    max_amount: int = MAX_AMOUNT_UINT256
    audit_after_mutation: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.max_amount, bool) or not isinstance(self.max_amount, int):
            raise ValueError(f"max_amount must be an integer, got {self.max_amount!r}")
        if self.max_amount <= 0:
            raise ValueError(f"max_amount must be positive, got {self.max_amount}")
