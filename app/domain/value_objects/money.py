"""Value Object Money - representa un valor monetario con su moneda."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.domain.errors import InvalidMoneyError

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """
    Value Object inmutable que representa un monto monetario.

    Attributes:
        amount: Monto decimal (hasta 2 decimales).
        currency_code: Código ISO 4217 de la moneda (ej: USD, SAR, AED).
    """

    amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if len(self.currency_code) != 3:
            raise InvalidMoneyError(f"currency_code must have 3 characters: {self.currency_code}")

        if self.amount < 0:
            raise InvalidMoneyError(f"amount cannot be negative: {self.amount}")

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            raise TypeError(f"Cannot add Money and {type(other)}")
        if self.currency_code != other.currency_code:
            raise InvalidMoneyError(
                f"Cannot add amounts in different currencies: "
                f"{self.currency_code} vs {other.currency_code}"
            )
        return Money(amount=self.amount + other.amount, currency_code=self.currency_code)

    def divided_by(self, parts: int) -> "Money":
        """Reparte el monto en partes iguales, redondeado a centavos."""
        if parts <= 0:
            raise InvalidMoneyError(f"parts must be positive: {parts}")
        return Money(
            amount=(self.amount / parts).quantize(CENTS, rounding=ROUND_HALF_UP),
            currency_code=self.currency_code,
        )

    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"

    @classmethod
    def zero(cls, currency_code: str = "USD") -> "Money":
        """Crea un Money con valor cero."""
        return cls(amount=Decimal("0"), currency_code=currency_code)

    @classmethod
    def total_of(cls, values: list["Money"], currency_code: str = "USD") -> "Money":
        """Suma una lista de montos de la misma moneda."""
        total = cls.zero(values[0].currency_code if values else currency_code)
        for value in values:
            total = total + value
        return total
