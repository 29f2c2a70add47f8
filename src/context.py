import os
import re
from importlib.metadata import version as distribution_version, PackageNotFoundError
from pathlib import Path
from typing import Any, Mapping

import jsonschema
import yaml
from colors import bold, underline, italic

from util import UserError, merge_into, Logger

CONFIG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "verbose": {"type": "boolean"},
        "env_file": {"type": "string", "minLength": 1},
        "env_template": {"type": "string", "minLength": 1},
        "project_key": {"type": "string", "pattern": r"^[A-Za-z_][A-Za-z0-9_]*$"},
        "trial_marker": {"type": "string", "minLength": 1},
        "project_prefix": {"type": "string", "pattern": r"^[a-z][a-z0-9-]{0,17}$"},
        "gcloud": {"type": "string", "minLength": 1}
    }
}


def _read_version() -> str:
    try:
        return distribution_version('workshop-setup')
    except PackageNotFoundError:
        return "0.0.0"


class Context:

    def __init__(self, env: Mapping[str, str] = os.environ) -> None:
        self._data = {}
        self.add_variable('_version', _read_version())

        # whether increased verbosity was requested
        self.add_variable('verbose',
                          True if "VERBOSE" in env and env["VERBOSE"].lower() in ['1', 'yes', 'true'] else False)

        # work paths
        self.add_variable('_conf', env["CONF_DIR"] if 'CONF_DIR' in env else os.path.expanduser('~/.workshop-setup'))
        self.add_variable('_workspace', env["WORKSPACE_DIR"] if 'WORKSPACE_DIR' in env else os.path.abspath('.'))

        # environment record & provider settings
        self.add_variable('env_file', env.get('ENV_FILE', '.env'))
        self.add_variable('env_template', env.get('ENV_TEMPLATE', '.env.example'))
        self.add_variable('project_key', env.get('PROJECT_ENV_KEY', 'GOOGLE_CLOUD_PROJECT'))
        self.add_variable('trial_marker', 'Trial')
        self.add_variable('project_prefix', 'workshop-')
        self.add_variable('gcloud', env.get('GCLOUD', 'gcloud'))

    def load_auto_files(self) -> None:
        for directory in [self.conf_dir, self.workspace_dir]:
            if directory.exists() and directory.is_dir():
                for file in sorted(os.listdir(str(directory))):
                    if re.match(r'^setup\.(.*\.)?auto\.yaml$', file):
                        self.add_file(str(directory / file))

    @property
    def conf_dir(self) -> Path:
        return Path(self._data['_conf'])

    @property
    def workspace_dir(self) -> Path:
        return Path(self._data['_workspace'])

    @property
    def version(self) -> str:
        return self.data['_version']

    @property
    def verbose(self) -> bool:
        return self.data['verbose']

    @verbose.setter
    def verbose(self, value: bool):
        self.add_variable('verbose', value)

    @property
    def env_file_path(self) -> Path:
        return self.workspace_dir / self.data['env_file']

    @property
    def env_template_path(self) -> Path:
        return self.workspace_dir / self.data['env_template']

    @property
    def project_key(self) -> str:
        return self.data['project_key']

    @property
    def trial_marker(self) -> str:
        return self.data['trial_marker']

    @property
    def project_prefix(self) -> str:
        return self.data['project_prefix']

    @property
    def gcloud(self) -> str:
        return self.data['gcloud']

    def add_file(self, path: str) -> None:
        with open(path, 'r') as stream:
            try:
                source = yaml.safe_load(stream.read())
            except yaml.YAMLError as e:
                raise UserError(f"illegal config: malformed settings file at '{path}': {e}") from e

        if source is None:
            return
        try:
            jsonschema.validate(source, CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise UserError(f"illegal config: invalid settings file at '{path}': {e.message}") from e
        merge_into(self._data, source)

    def add_variable(self, key: str, value: Any) -> None:
        self._data[key] = value

    @property
    def data(self) -> dict:
        return self._data

    def display(self) -> None:
        with Logger(header=f":clipboard: {underline('Context:')}") as logger:
            largest_name_length: int = len(max(list(self.data.keys()), key=lambda key: len(key)))
            for name in sorted(self.data.keys()):
                msg: str = f":point_right: {name.ljust(largest_name_length, '.')}..: {bold(str(self.data[name]))}"
                if name.startswith("_"):
                    msg = italic(msg)
                logger.info(msg)
