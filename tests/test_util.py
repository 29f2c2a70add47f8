import pytest
from colors import yellow, red

from util import UserError, Logger, merge_into, prompt, AuthenticationError, NoBillingAccountError, \
    NoTrialAccountError, ProjectLookupError, InvalidIdentifierError, CreationError, LinkError, GcloudError


def test_new_usererror():
    msg = f"hello!"
    e: UserError = UserError(msg)
    assert e.message == msg


@pytest.mark.parametrize("error_type", [AuthenticationError, NoBillingAccountError, NoTrialAccountError,
                                        ProjectLookupError, InvalidIdentifierError, CreationError, LinkError,
                                        GcloudError])
def test_error_taxonomy(error_type):
    e = error_type("failed!")
    assert isinstance(e, UserError)
    assert e.message == "failed!"
    with pytest.raises(UserError, match='failed!'):
        raise e


@pytest.mark.parametrize("header", ["test header", None])
@pytest.mark.parametrize("indent_amount", [0, 2, 4])
@pytest.mark.parametrize("spacious", [True, False])
@pytest.mark.parametrize("info_content", ["info-line", None])
@pytest.mark.parametrize("warn_content", ["warn-line", None])
@pytest.mark.parametrize("error_content", ["error-line", None])
def test_logger_header(capsys,
                       header: str,
                       indent_amount: int,
                       spacious: bool,
                       info_content: str,
                       warn_content: str,
                       error_content):
    with Logger(header=header, indent_amount=indent_amount, spacious=spacious) as logger:
        if info_content is not None:
            logger.info(info_content)
        if warn_content is not None:
            logger.warn(warn_content)
        if error_content is not None:
            logger.error(error_content)

    expected = ''
    expected = expected + (f'{header}\n' if header is not None else '')
    expected = expected + (f'\n' if header is not None and spacious else '')
    expected = expected + (f'{" " * indent_amount}{info_content}\n' if info_content else '')
    expected = expected + (f'{" " * indent_amount}{yellow(warn_content)}\n' if warn_content else '')
    expected = expected + (f'{" " * indent_amount}\n' if spacious else '')
    readouterr = capsys.readouterr()
    assert readouterr.out == expected
    assert readouterr.err == (f'{" " * indent_amount}{red(error_content)}\n' if error_content else '')


def test_logger_nested_indent(capsys):
    with Logger(header='outer', indent_amount=2, spacious=False) as outer:
        outer.info('a')
        with Logger(header='inner', indent_amount=3, spacious=False) as inner:
            inner.info('b')
        outer.info('c')
    assert capsys.readouterr().out == 'outer\n  a\n  inner\n     b\n  c\n'


def test_logger_emoji_aliases(capsys):
    with Logger(indent_amount=0, spacious=False) as logger:
        logger.info(':heavy_check_mark: done')
    out = capsys.readouterr().out
    assert ':heavy_check_mark:' not in out
    assert out.endswith(' done\n')


def test_merge_into():
    dst = {'k4': {'v41': 'vv41'}}
    src1 = {'k1': 'v1'}
    src2 = {'k2': 'v2'}
    src3 = {'k3': {'v3': 'vv3'}}
    src4 = {'k4': {'v4': 'vv4'}}
    result = merge_into(dst, src1, src2, src3, src4)
    assert result is dst
    assert result['k1'] == 'v1'
    assert result['k2'] == 'v2'
    assert result['k3']['v3'] == 'vv3'
    assert result['k4']['v41'] == 'vv41'
    assert result['k4']['v4'] == 'vv4'


@pytest.mark.parametrize("answer,expected", [("my-project-1", "my-project-1"),
                                             ("  spaced-project  ", "spaced-project"),
                                             ("", "workshop-abcdef"),
                                             ("   ", "workshop-abcdef")])
def test_prompt(capsys, monkeypatch, answer: str, expected: str):
    monkeypatch.setattr('builtins.input', lambda: answer)
    with Logger(indent_amount=0, spacious=False) as logger:
        assert prompt(logger, "Enter project ID:", "workshop-abcdef") == expected
    out = capsys.readouterr().out
    assert out.startswith("Enter project ID: ")
    if not answer.strip():
        assert "Using suggested value" in out


def test_prompt_eof(capsys, monkeypatch):
    def eof():
        raise EOFError()

    monkeypatch.setattr('builtins.input', eof)
    with Logger(indent_amount=0, spacious=False) as logger:
        assert prompt(logger, "Enter project ID:", "workshop-000000") == "workshop-000000"
