# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Parser for declarative project files describing a compose document.

A project file looks like:

    name_suffix: dev
    services:
      db:
        image: mysql:8
        env_file: db.env
      web:
        image: nginx
        depends_on: [db]
        ports:
          - {published: 8080, target: 80}
        volumes:
          - {type: volume, source: html, target: /var/www/html}
"""
import logging
import os
from typing import Any, Dict, List, Optional
import yaml
from dotenv import dotenv_values
from ..BUILDERS.docker_compose import DockerCompose
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

class ComposeSpecParser:
    """
    Builds a DockerCompose from a YAML project file.
    """
    def __init__(self, base_dir: str = "."):
        """
        Initializes the parser.

        :param base_dir: Directory env files are resolved against when parsing from a string.
        """
        self.base_dir = base_dir

    def parse(self, spec_path: str, name_suffix: Optional[str] = None) -> DockerCompose:
        """
        Parses a project file from a path. Env files are resolved relative to it.

        :param spec_path: Path to the project file.
        :param name_suffix: Overrides the name_suffix of the file.
        :return: The populated builder.
        """
        with open(spec_path, 'r') as f:
            content = f.read()
        base_dir = os.path.dirname(os.path.abspath(spec_path))
        return self.parse_from_string(content, name_suffix=name_suffix, base_dir=base_dir)

    def parse_from_string(
        self,
        content: str,
        name_suffix: Optional[str] = None,
        base_dir: Optional[str] = None,
    ) -> DockerCompose:
        """
        Parses a project file from a string.

        :param content: YAML content of the project file.
        :param name_suffix: Overrides the name_suffix of the file.
        :param base_dir: Directory env files are resolved against.
        :return: The populated builder.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"project file is not valid YAML: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("project file must contain a top level mapping")

        services = data.get('services') or {}
        if not isinstance(services, dict):
            raise ConfigurationError("'services' must be a mapping of service name to service spec")

        compose = DockerCompose(
            name_suffix=name_suffix or data.get('name_suffix'),
            schema_version=data.get('schema_version'),
        )
        for name, spec in services.items():
            compose.add_service(str(name), self._parse_service(str(name), spec, base_dir or self.base_dir))
        return compose

    def _parse_service(self, name: str, spec: Any, base_dir: str) -> Dict[str, Any]:
        """
        Merges the env files of a service into its inline environment.

        :param name: The name of the service.
        :param spec: The service spec mapping from the project file.
        :param base_dir: Directory env files are resolved against.
        :return: The service spec without env_file.
        """
        if spec is None:
            spec = {}
        if not isinstance(spec, dict):
            raise ConfigurationError(f"service '{name}' must be a mapping")

        spec = dict(spec)
        env_files = self._to_list(spec.pop('env_file', None))
        if env_files and not isinstance(spec.get('environment') or {}, dict):
            raise ConfigurationError(f"service '{name}' must declare 'environment' as a mapping")
        if env_files:
            environment: Dict[str, Any] = {}
            for env_file in env_files:
                environment.update(self._load_env_file(name, os.path.join(base_dir, env_file)))
            # Inline values win over env files
            environment.update(spec.get('environment') or {})
            spec['environment'] = environment
        return spec

    def _load_env_file(self, name: str, path: str) -> Dict[str, str]:
        if not os.path.isfile(path):
            raise ConfigurationError(f"env file '{path}' of service '{name}' does not exist")

        values = {}
        for key, value in dotenv_values(path, interpolate=False).items():
            if value is None:
                logger.warning("Skipping %s in %s: no value", key, path)
                continue
            values[key] = value
        return values

    def _to_list(self, val: Any) -> List[str]:
        if val is None:
            return []
        if isinstance(val, str):
            return [val]
        return list(val)
