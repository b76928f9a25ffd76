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
dcsynth - docker-compose synthesizer

Builds docker-compose documents from a declarative or imperative description
of services, validating cross-service references before anything is written.
"""

from .errors import ConfigurationError
from .BUILDERS.docker_compose import DockerCompose
from .BUILDERS.service import Service
from .MODELS.port_mapping import PortMapping, Protocol
from .MODELS.volume_declaration import BindVolume, NamedVolume
from .MODELS.dependency_reference import ServiceHandleReference, ServiceNameReference
from .MODELS.service_definition import BuildSpec, ServiceSpec

__version__ = "0.1.0"
__author__ = "Michael Maillet, Damien Davison, Sacha Davison"
__license__ = "Apache-2.0"

__all__ = [
    "ConfigurationError",
    "DockerCompose",
    "Service",
    "PortMapping",
    "Protocol",
    "BindVolume",
    "NamedVolume",
    "ServiceHandleReference",
    "ServiceNameReference",
    "BuildSpec",
    "ServiceSpec",
]
