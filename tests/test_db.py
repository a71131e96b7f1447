from pos_core.db import connect, delete_store, ensure_schema, load_store, save_store, store_names
from pos_core.services.clients import ClientStore


def test_store_roundtrip_and_upsert(conn):
    assert load_store(conn, 'clients', []) == []

    save_store(conn, 'clients', [{'id': 1}])
    save_store(conn, 'clients', [{'id': 1}, {'id': 2}])

    assert load_store(conn, 'clients') == [{'id': 1}, {'id': 2}]
    assert store_names(conn) == ['clients']


def test_delete_store(conn):
    save_store(conn, 'temp_payments_1', [])
    delete_store(conn, 'temp_payments_1')
    assert load_store(conn, 'temp_payments_1') is None


def test_writes_are_visible_to_a_new_connection(conn, settings):
    ClientStore(conn).add(name='Juan', surname='Perez', identification='1')

    other = connect(settings.db_path)
    try:
        ensure_schema(other)
        clients = ClientStore(other).all()
    finally:
        other.close()

    assert [c.full_name for c in clients] == ['Juan Perez']
