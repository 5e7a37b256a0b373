from __future__ import annotations

from pathlib import Path

from clinicease.settings import load_settings, resolve_data_dirs


def test_defaults_without_file_or_env():
    settings = load_settings(environ={})
    assert settings == {'data_dir': 'data', 'prescriptions_dir': 'prescriptions', 'log_level': 'INFO', 'log_file': None}


def test_yaml_file_then_env_then_overrides(tmp_path):
    config = tmp_path / "clinic.yaml"
    config.write_text("data_dir: /srv/clinic\nlog_level: debug\nunknown_key: 1\n", encoding="utf-8")
    settings = load_settings(config, environ={}, overrides={})
    assert settings['data_dir'] == '/srv/clinic'
    assert settings['log_level'] == 'DEBUG'
    assert 'unknown_key' not in settings

    env = {'CLINICEASE_DATA_DIR': '/env/data', 'CLINICEASE_PRESCRIPTIONS_DIR': '/env/rx'}
    settings = load_settings(config, environ=env, overrides={'data_dir': '/cli/data', 'log_level': None})
    assert settings['data_dir'] == '/cli/data'
    assert settings['prescriptions_dir'] == '/env/rx'
    assert settings['log_level'] == 'DEBUG'


def test_settings_file_in_working_directory_is_picked_up(tmp_path):
    (tmp_path / "clinicease.yaml").write_text("prescriptions_dir: out\n", encoding="utf-8")
    assert load_settings(environ={})['prescriptions_dir'] == 'out'


def test_invalid_yaml_falls_back_to_defaults(tmp_path):
    config = tmp_path / "broken.yaml"
    config.write_text("data_dir: [unclosed\n", encoding="utf-8")
    assert load_settings(config, environ={})['data_dir'] == 'data'
    config.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_settings(config, environ={})['data_dir'] == 'data'


def test_resolve_data_dirs():
    dirs = resolve_data_dirs({'data_dir': 'records', 'prescriptions_dir': 'rx', 'log_file': None})
    assert dirs.root == Path('records')
    assert dirs.prescriptions == Path('rx')
    assert dirs.log_file == Path('records') / 'clinicease.log'
    assert resolve_data_dirs({'data_dir': 'd', 'prescriptions_dir': 'p', 'log_file': 'x.log'}).log_file == Path('x.log')
