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
Default values shared by the models, the builder and the writers.
"""

DEFAULT_PROTOCOL = "tcp"
DEFAULT_PORT_MODE = "host"

DEFAULT_FILE_NAME = "docker-compose"
FILE_EXTENSION = ".yml"

# Declarative project file read by the CLI when -f is not given
DEFAULT_SPEC_FILE = "compose-spec.yml"

GENERATED_MARKER = "# ~~ Generated by dcsynth. To modify, edit the project spec and re-run synthesis."


def compose_file_name(name_suffix=None) -> str:
    """
    Builds the logical output file name for a compose document.

    :param name_suffix: Optional suffix placed between the base name and the extension.
    :return: 'docker-compose.yml' or 'docker-compose.<suffix>.yml'.
    """
    if name_suffix:
        return f"{DEFAULT_FILE_NAME}.{name_suffix}{FILE_EXTENSION}"
    return f"{DEFAULT_FILE_NAME}{FILE_EXTENSION}"
