import collections.abc
import sys
from contextlib import AbstractContextManager
from typing import Any, Callable

import emoji
from colors import yellow, red, bold


class UserError(Exception):
    def __init__(self, message) -> None:
        super().__init__(message)
        self.message = message


class GcloudError(UserError):
    pass


class AuthenticationError(UserError):
    pass


class NoBillingAccountError(UserError):
    pass


class NoTrialAccountError(UserError):
    pass


class ProjectLookupError(UserError):
    pass


class InvalidIdentifierError(UserError):
    pass


class CreationError(UserError):
    pass


class LinkError(UserError):
    pass


class Logger(AbstractContextManager):
    _global_indent: int = 0

    def __init__(self, header: str = None, indent_amount: int = 6, spacious: bool = True) -> None:
        super().__init__()
        self._header: str = header
        self._indent_amount: int = indent_amount
        self._spacious: bool = spacious
        self._indent: int = Logger._global_indent
        self._line_ended: bool = True

    def __enter__(self) -> 'Logger':
        if self._header:
            self.info(self._header)
            if self._spacious:
                self.info('')

        Logger._global_indent += self._indent_amount
        self._indent: int = Logger._global_indent
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> Any:
        if self._spacious:
            self.info('')

        Logger._global_indent -= self._indent_amount
        self._indent: int = Logger._global_indent

        # returning None lets the exception propagate to the caller
        return None

    def _wrap_message(self, message: str, color: Callable[[str], str] = None) -> str:
        if color: message = color(message)
        lines: list = message.split('\n')
        if self._line_ended:
            return "\n".join([(' ' * self._indent) + emoji.emojize(line, language='alias') for line in lines])
        else:
            first_line = emoji.emojize(lines.pop(0), language='alias')
            rest_lines = "\n".join([emoji.emojize(line, language='alias') for line in lines])
            return first_line + rest_lines

    def info(self, message: str, newline: bool = True) -> None:
        print(self._wrap_message(message), file=sys.stdout, end='\n' if newline else '')
        sys.stdout.flush()
        self._line_ended: bool = newline

    def warn(self, message: str, newline: bool = True) -> None:
        print(self._wrap_message(message, yellow), file=sys.stdout, end='\n' if newline else '')
        sys.stdout.flush()
        self._line_ended: bool = newline

    def error(self, message: str, newline: bool = True) -> None:
        print(self._wrap_message(message, red), file=sys.stderr, end='\n' if newline else '')
        sys.stderr.flush()
        self._line_ended: bool = newline


def merge_into(target: dict, *args) -> dict:
    for source in args:
        for k, v in source.items():
            if k in target and isinstance(target[k], dict) and isinstance(source[k], collections.abc.Mapping):
                merge_into(target[k], source[k])
            else:
                target[k] = source[k]
    return target


def prompt(logger: Logger, message: str, default: str) -> str:
    logger.info(f"{message} ", newline=False)
    try:
        answer: str = input().strip()
        # the terminal echoed the user's newline
        logger._line_ended = True
    except EOFError:
        answer: str = ''
        logger.info('')

    if answer:
        return answer
    logger.info(f"Using suggested value: {bold(default)}")
    return default
