import re
import shutil
from enum import Enum, auto, unique
from pathlib import Path
from typing import Union

from dotenv import dotenv_values


@unique
class WriteMode(Enum):
    UPDATED = auto()
    APPENDED = auto()
    FROM_TEMPLATE = auto()
    CREATED = auto()


def read_value(path: Path, key: str) -> Union[None, str]:
    if not path.is_file():
        return None
    value = dotenv_values(path, interpolate=False, encoding='utf-8').get(key)
    return value if value else None


def _set_value(path: Path, key: str, value: str) -> bool:
    # newline='' keeps each line's own terminator (\n or \r\n) untouched
    with path.open('r', encoding='utf-8', newline='') as f:
        content: str = f.read()

    pattern = re.compile(r'^[ \t]*(?:export[ \t]+)?' + re.escape(key) + r'[ \t]*=[^\r\n]*', re.M)
    updated, count = pattern.subn(lambda match: f"{key}={value}", content)
    if count == 0:
        eol = '\r\n' if '\r\n' in content else '\n'
        if updated and not updated.endswith('\n'):
            updated += eol
        updated += f"{key}={value}{eol}"

    with path.open('w', encoding='utf-8', newline='') as f:
        f.write(updated)
    return count > 0


def write_value(path: Path, template: Path, key: str, value: str) -> WriteMode:
    """
    Persists 'key=value' into the environment file at 'path'.

    An existing file gets its 'key' lines replaced in place (or the line appended when missing); every other line is
    kept as-is. If the file is missing but 'template' exists, the template is copied first. Otherwise a new file is
    created with that single line.
    """
    if path.is_file():
        return WriteMode.UPDATED if _set_value(path, key, value) else WriteMode.APPENDED

    elif template.is_file():
        shutil.copyfile(template, path)
        _set_value(path, key, value)
        return WriteMode.FROM_TEMPLATE

    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8', newline='') as f:
            f.write(f"{key}={value}\n")
        return WriteMode.CREATED
