from pathlib import Path

import pytest

from notes_website.backend.config import build_parser, configure_logging, parse_config


def test_parse_short_options():
    config = parse_config(['-h', '127.0.0.1', '-p', '3000', '-c', './cache'])
    assert config.host == '127.0.0.1'
    assert config.port == 3000
    assert config.cache_dir == Path('./cache')
    assert config.log_level == 'INFO'


def test_parse_long_options():
    config = parse_config(['--host', 'localhost', '--port', '8080', '--cache', '/tmp/notes',
                           '--log-level', 'debug'])
    assert config.port == 8080
    assert config.log_level == 'DEBUG'


@pytest.mark.parametrize('argv', [
    ['-p', '3000', '-c', 'cache'],
    ['-h', 'localhost', '-c', 'cache'],
    ['-h', 'localhost', '-p', '3000'],
    ['-h', 'localhost', '-p', 'http', '-c', 'cache'],
    ['-h', 'localhost', '-p', '70000', '-c', 'cache'],
    ['-h', 'localhost', '-p', '3000', '-c', 'cache', '--log-level', 'loud'],
])
def test_invalid_arguments_exit(argv):
    with pytest.raises(SystemExit) as excinfo:
        parse_config(argv)
    assert excinfo.value.code == 2


def test_help_is_long_option_only(capsys):
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(['--help'])
    assert excinfo.value.code == 0
    assert '--cache' in capsys.readouterr().out


def test_configure_logging_is_idempotent():
    logger = configure_logging('DEBUG')
    handlers = list(logger.handlers)
    assert configure_logging('WARNING') is logger
    assert logger.handlers == handlers
    assert logger.level == 30
