import pytest

from pos_core.errors import NotFound, PreconditionViolation
from pos_core.models import ID_PASSPORT, ClientUpdate


@pytest.fixture
def juan(ctx):
    return ctx.clients.add(
        name='Juan',
        surname='Perez',
        identification='123456789',
        phone='555-1234',
        email='juan.perez@example.com',
    )


def test_add_assigns_id_and_timestamp(ctx, juan):
    assert juan.id == 1
    assert juan.created_at
    assert juan.last_updated is None
    assert ctx.clients.get(1) == juan


def test_add_same_identification_updates_in_place(ctx, juan):
    again = ctx.clients.add(name='Juan', surname='Perez', identification=' 123456789 ', phone='555-0000')

    assert len(ctx.clients) == 1
    assert again.id == juan.id
    assert again.phone == '555-0000'
    assert again.email == 'juan.perez@example.com'
    assert again.last_updated is not None


def test_same_number_other_id_type_is_a_new_client(ctx, juan):
    other = ctx.clients.add(name='Juan', surname='Perez', identification='123456789', identification_type=ID_PASSPORT)
    assert other.id != juan.id
    assert len(ctx.clients) == 2


def test_identification_is_required(ctx):
    with pytest.raises(PreconditionViolation):
        ctx.clients.add(name='No', surname='Id', identification='  ')


def test_update_merges_only_given_fields(ctx, juan):
    updated = ctx.clients.update(juan.id, ClientUpdate(email='jp@example.com'))

    assert updated.email == 'jp@example.com'
    assert updated.phone == '555-1234'
    assert updated.created_at == juan.created_at


def test_update_unknown_client(ctx):
    with pytest.raises(NotFound):
        ctx.clients.update(99, ClientUpdate(name='Ghost'))


def test_delete_is_noop_for_unknown_id(ctx, juan):
    ctx.clients.delete(99)
    assert len(ctx.clients) == 1
    ctx.clients.delete(juan.id)
    assert ctx.clients.find(juan.id) is None


@pytest.mark.parametrize('term', ['juan', 'PEREZ', 'juan perez', '3456', 'example.com', '555-12'])
def test_search_matches_case_insensitive(ctx, juan, term):
    assert [c.id for c in ctx.clients.search(term)] == [juan.id]


def test_blank_search_returns_newest_first(ctx, juan):
    maria = ctx.clients.add(name='Maria', surname='Gomez', identification='987654321')
    assert [c.id for c in ctx.clients.search('  ')] == [maria.id, juan.id]


def test_full_name(juan):
    assert juan.full_name == 'Juan Perez'


def test_update_cannot_take_another_clients_identification(ctx, juan):
    maria = ctx.clients.add(name='Maria', surname='Gomez', identification='987654321')

    with pytest.raises(PreconditionViolation):
        ctx.clients.update(maria.id, ClientUpdate(identification='123456789'))

    assert ctx.clients.get(maria.id).identification == '987654321'
    assert [c.id for c in ctx.clients.all() if c.identification == '123456789'] == [juan.id]


def test_update_identification_type_clash(ctx, juan):
    passport = ctx.clients.add(name='Juan', surname='Perez', identification='123456789', identification_type=ID_PASSPORT)

    with pytest.raises(PreconditionViolation):
        ctx.clients.update(passport.id, ClientUpdate(identification_type='national-id'))


def test_update_keeping_own_identification(ctx, juan):
    updated = ctx.clients.update(juan.id, ClientUpdate(identification=' 123456789 ', phone='555-4321'))
    assert (updated.identification, updated.phone) == ('123456789', '555-4321')


@pytest.mark.parametrize('name,surname', [('', 'Perez'), ('Juan', '  ')])
def test_name_and_surname_are_required(ctx, name, surname):
    with pytest.raises(PreconditionViolation):
        ctx.clients.add(name=name, surname=surname, identification='555')
    assert len(ctx.clients) == 0


def test_update_cannot_blank_the_surname(ctx, juan):
    with pytest.raises(PreconditionViolation):
        ctx.clients.update(juan.id, ClientUpdate(surname=''))
    assert ctx.clients.get(juan.id).surname == 'Perez'
