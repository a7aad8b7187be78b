"""Domain value objects for authcore.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from authcore.core.constants import MAX_AMOUNT_DECIMALS, MAX_AMOUNT_INTEGER_DIGITS


@dataclass(frozen=True)
class PermissionCode:
    """Value object for a permission code: exactly one character.

    The code is the atomic unit of the wire-encoded permission string.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate length.

        Raises:
            ValueError: If the code is not exactly one character.
        """
        if not isinstance(self.value, str) or len(self.value) != 1:
            raise ValueError(
                f"Permission code must be a single character, got: {self.value!r}"
            )


@dataclass(frozen=True)
class TransferAmount:
    """Value object for a transfer amount.

    Positive, at most two decimal places. Stored as Decimal so the decimal
    count is what the user typed, not a float artefact.
    """

    value: Decimal

    def __post_init__(self) -> None:
        """Validate sign and precision.

        Raises:
            ValueError: If the amount is not finite, not positive, too large
                to quantize to cents, or has more than two decimal places.
        """
        if not self.value.is_finite():
            raise ValueError("Amount must be a finite number")
        if self.value <= 0:
            raise ValueError("Amount must be positive")
        if self.value.adjusted() >= MAX_AMOUNT_INTEGER_DIGITS:
            raise ValueError(
                f"Amount is too large: at most {MAX_AMOUNT_INTEGER_DIGITS} integer digits"
            )
        exponent = self.value.normalize().as_tuple().exponent
        if isinstance(exponent, int) and -exponent > MAX_AMOUNT_DECIMALS:
            raise ValueError(
                f"Amount must have at most {MAX_AMOUNT_DECIMALS} decimal places"
            )

    @classmethod
    def parse(cls, raw: str | int | float | Decimal) -> "TransferAmount":
        """Parse user input; a comma is accepted as decimal separator.

        Raises:
            ValueError: If the input is empty, not a number, or invalid.
        """
        text = str(raw).strip().replace(",", ".")
        if not text:
            raise ValueError("Amount is required")
        try:
            value = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"Amount is not a number: {raw!r}") from e
        return cls(value)
