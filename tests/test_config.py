import json

from pos_core.config import ENV_DATA_DIR, load_settings


def test_explicit_data_dir(tmp_path):
    s = load_settings(tmp_path / 'data')

    assert s.data_dir == (tmp_path / 'data').resolve()
    assert s.db_path.name == 'pos.db'
    assert s.log_dir.is_dir()
    assert s.local_currency == 'Bs'


def test_env_data_dir_and_persisted_values(tmp_path, monkeypatch):
    data_dir = tmp_path / 'env'
    data_dir.mkdir()
    (data_dir / 'settings.json').write_text(
        json.dumps({'local_currency': 'VES', 'default_rate': 36.5, 'operator': 'Cashier 1'}),
        encoding='utf-8',
    )
    monkeypatch.setenv(ENV_DATA_DIR, str(data_dir))

    s = load_settings()

    assert s.data_dir == data_dir.resolve()
    assert (s.local_currency, s.default_rate, s.operator) == ('VES', 36.5, 'Cashier 1')


def test_unreadable_settings_fall_back_to_defaults(tmp_path):
    (tmp_path / 'settings.json').write_text('{not json', encoding='utf-8')
    s = load_settings(tmp_path)
    assert s.operator == 'System user'
