from __future__ import annotations

import logging
from typing import Optional

from pos_core.errors import IncompleteChangeInfo, PreconditionViolation
from pos_core.models import PAY_CASH, PAY_TRANSFER, VALID_CHANGE_METHODS, ChangeInfo
from pos_core.services.currency import to_local
from pos_core.utils import is_blank

logger = logging.getLogger(__name__)


class ChangeSettlement:
    """
    Overpayment that has to be handed back before a sale is written.

    Built from the checkout totals; `confirm()` records how the excess was
    returned (cash, or transfer with reference and bank).
    """

    def __init__(self, amount: float, rate: float):
        if not float(amount) > 0:
            raise PreconditionViolation("Change only applies when the payments exceed the total.")
        self.amount = float(amount)
        self.amount_local = to_local(self.amount, rate)
        self.rate = float(rate)
        self._info: Optional[ChangeInfo] = None

    @classmethod
    def for_overpayment(cls, total: float, paid: float, rate: float) -> "ChangeSettlement":
        return cls(float(paid) - float(total), rate)

    @property
    def info(self) -> Optional[ChangeInfo]:
        return self._info

    @property
    def confirmed(self) -> bool:
        return self._info is not None

    def confirm(self, method: str, reference: Optional[str] = None, bank: Optional[str] = None) -> ChangeInfo:
        if method not in VALID_CHANGE_METHODS:
            raise PreconditionViolation(f"Invalid change method '{method}'. Use 'cash' or 'transfer'.")

        if method == PAY_TRANSFER:
            if is_blank(reference) or is_blank(bank):
                raise IncompleteChangeInfo(
                    "Transfer change needs both a reference and a bank.",
                    details={"reference": reference, "bank": bank},
                )
            info = ChangeInfo(
                amount=self.amount,
                amount_local=self.amount_local,
                method=PAY_TRANSFER,
                reference=str(reference).strip(),
                bank=str(bank).strip(),
            )
        else:
            info = ChangeInfo(amount=self.amount, amount_local=self.amount_local, method=PAY_CASH)

        self._info = info
        logger.info("Change of %.2f confirmed via %s", self.amount, method)
        return info
