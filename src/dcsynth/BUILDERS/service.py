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
A single named service of a compose document and its mutation API.
"""
from typing import Any, Dict, List, Optional, Sequence, Union
from pydantic import ValidationError
from ..errors import ConfigurationError
from ..MODELS.dependency_reference import (
    DependencyReference,
    ServiceHandleReference,
    ServiceNameReference,
)
from ..MODELS.port_mapping import PortMapping, Protocol
from ..MODELS.service_definition import BuildSpec, stringify_value
from ..MODELS.volume_declaration import BindVolume, NamedVolume
from ..UTILS.defaults import DEFAULT_PORT_MODE, DEFAULT_PROTOCOL

ServiceReferenceLike = Union["Service", ServiceNameReference, ServiceHandleReference, str]


class Service:
    """
    One container workload: its image source, command, environment,
    ports, volumes and the services it depends on.

    Services are created by DockerCompose.add_service and mutated in place
    afterwards. Dependencies are kept as references and only resolved to
    names when the owning document is synthesized.
    """

    def __init__(
        self,
        name: str,
        image: Optional[str] = None,
        image_build: Optional[BuildSpec] = None,
        command: Optional[Sequence[str]] = None,
    ):
        """
        Initializes the service.

        :param name: Name of the service, unique within its document.
        :param image: Image reference to run, e.g. 'nginx:latest'.
        :param image_build: Build specification used instead of an image.
        :param command: Command overriding the image default.
        """
        self.name = name
        self.image = image
        self.image_build = image_build
        self.command: Optional[List[str]] = list(command) if command is not None else None
        self.environment: Dict[str, str] = {}
        self.ports: List[PortMapping] = []
        self.volumes: List[Union[BindVolume, NamedVolume]] = []
        self.depends_on: List[DependencyReference] = []

    def __repr__(self) -> str:
        return f"Service(name={self.name!r})"

    def add_port(
        self,
        published: int,
        target: int,
        protocol: Union[Protocol, str] = DEFAULT_PROTOCOL,
        mode: str = DEFAULT_PORT_MODE,
    ) -> PortMapping:
        """
        Publishes a container port on the host. Duplicate mappings are kept.

        :param published: Host-side port.
        :param target: Container-side port.
        :param protocol: 'tcp' (default) or 'udp'.
        :param mode: Publish mode, 'host' by default.
        :return: The appended port mapping.
        """
        try:
            mapping = PortMapping(published=published, target=target, protocol=protocol, mode=mode)
        except ValidationError as e:
            raise ConfigurationError(f"service '{self.name}' has an invalid port mapping: {e}") from e
        self.ports.append(mapping)
        return mapping

    def add_volume(self, volume: Union[BindVolume, NamedVolume]):
        """
        Mounts a bind or named volume into the service.

        Named volumes are registered in the document's volumes map when the
        document is synthesized, not here.

        :param volume: Declaration from DockerCompose.bind_volume or DockerCompose.named_volume.
        """
        if not isinstance(volume, (BindVolume, NamedVolume)):
            raise ConfigurationError(
                f"service '{self.name}' cannot mount {volume!r}: expected a bind or named volume"
            )
        self.volumes.append(volume)

    def add_environment(self, key: str, value: Any):
        """
        Sets an environment variable; the last value set for a key wins.
        Numbers and booleans are stored as strings.
        """
        self.environment[key] = stringify_value(value)

    def add_depends_on(self, *services: ServiceReferenceLike):
        """
        Declares that this service depends on other services.

        :param services: Service objects, name references or bare names.
        """
        for service in services:
            self.depends_on.append(self._to_reference(service))

    def _to_reference(self, value: ServiceReferenceLike) -> DependencyReference:
        if isinstance(value, (ServiceNameReference, ServiceHandleReference)):
            return value
        if isinstance(value, Service):
            return ServiceHandleReference(value)
        if isinstance(value, str):
            return ServiceNameReference(value)
        raise ConfigurationError(
            f"service '{self.name}' cannot depend on {value!r}: expected a service or a service name"
        )

    def synthesize(self, depends_on: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """
        Renders the plain fragment of this service.

        Empty collections are left out of the fragment.

        :param depends_on: Resolved names of the declared dependencies, in declaration order.
        :return: The service entry of the compose document.
        """
        fragment: Dict[str, Any] = {}
        if self.image is not None:
            fragment["image"] = self.image
        if self.image_build is not None:
            fragment["build"] = self.image_build.to_fragment()
        if self.command is not None:
            fragment["command"] = list(self.command)
        if self.environment:
            fragment["environment"] = dict(self.environment)
        if self.ports:
            fragment["ports"] = [port.to_fragment() for port in self.ports]
        if self.volumes:
            fragment["volumes"] = [volume.to_fragment() for volume in self.volumes]
        if depends_on:
            fragment["depends_on"] = list(depends_on)
        return fragment
