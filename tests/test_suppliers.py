import pytest

from pos_core.errors import NotFound, PreconditionViolation
from pos_core.models import SupplierUpdate


def test_add_and_active_filter(ctx):
    one = ctx.suppliers.add(name='Supplier 1', contact_person='John Doe')
    two = ctx.suppliers.add(name='Supplier 2', active=False)

    assert one.active is True
    assert [s.id for s in ctx.suppliers.active()] == [one.id]

    ctx.suppliers.update(two.id, SupplierUpdate(active=True))
    assert {s.id for s in ctx.suppliers.active()} == {one.id, two.id}


def test_name_is_required(ctx):
    with pytest.raises(PreconditionViolation):
        ctx.suppliers.add(name='')


def test_update_keeps_unset_fields(ctx):
    s = ctx.suppliers.add(name='Acme', email='a@acme.test', phone='1')
    updated = ctx.suppliers.update(s.id, SupplierUpdate(phone='2'))
    assert (updated.email, updated.phone) == ('a@acme.test', '2')


def test_get_unknown(ctx):
    with pytest.raises(NotFound):
        ctx.suppliers.get(7)


def test_search_by_contact(ctx):
    ctx.suppliers.add(name='Acme', contact_person='Jane Smith')
    ctx.suppliers.add(name='Globex')
    assert [s.name for s in ctx.suppliers.search('smith')] == ['Acme']


def test_to_frame(ctx):
    ctx.suppliers.add(name='Acme')
    df = ctx.suppliers.to_frame()
    assert df.loc[0, 'name'] == 'Acme'
    assert bool(df.loc[0, 'active']) is True
