import pytest

from pos_core.errors import IncompleteChangeInfo, PreconditionViolation
from pos_core.services.change import ChangeSettlement


def test_for_overpayment():
    s = ChangeSettlement.for_overpayment(50, 70, 10)
    assert s.amount == pytest.approx(20.0)
    assert s.amount_local == pytest.approx(200.0)
    assert not s.confirmed


def test_no_change_without_overpayment():
    with pytest.raises(PreconditionViolation):
        ChangeSettlement.for_overpayment(50, 50, 10)


def test_cash_drops_transfer_details():
    s = ChangeSettlement(5, 10)
    info = s.confirm('cash', reference='R-9', bank='Banesco')
    assert (info.method, info.reference, info.bank) == ('cash', None, None)
    assert s.confirmed and s.info == info


@pytest.mark.parametrize('reference,bank', [('R-1', None), (None, 'Banesco'), ('  ', 'Banesco')])
def test_transfer_needs_reference_and_bank(reference, bank):
    s = ChangeSettlement(5, 10)
    with pytest.raises(IncompleteChangeInfo):
        s.confirm('transfer', reference=reference, bank=bank)
    assert not s.confirmed


def test_transfer_confirmed():
    info = ChangeSettlement(5, 10).confirm('transfer', reference=' R-1 ', bank='Mercantil')
    assert (info.reference, info.bank, info.amount_local) == ('R-1', 'Mercantil', 50.0)


def test_unknown_method():
    with pytest.raises(PreconditionViolation):
        ChangeSettlement(5, 10).confirm('card')
