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
Builder for docker-compose documents.

Services are declared up front as a mapping, or added one by one with
add_service. Nothing is resolved until synthesize_document is called, so
services may depend on siblings that are added later.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union
from pydantic import ValidationError
from ..errors import ConfigurationError
from ..MODELS.dependency_reference import (
    DependencyReference,
    ServiceHandleReference,
    ServiceNameReference,
)
from ..MODELS.port_mapping import PortMapping, Protocol
from ..MODELS.service_definition import ServiceSpec
from ..MODELS.volume_declaration import BindVolume, NamedVolume
from ..UTILS.defaults import DEFAULT_PORT_MODE, DEFAULT_PROTOCOL, compose_file_name
from ..WRITERS.yaml_writer import YamlFileWriter
from .service import Service

logger = logging.getLogger(__name__)

ServiceSpecLike = Union[ServiceSpec, Mapping[str, Any]]


class DockerCompose:
    """
    Accumulates named services and synthesizes them into a compose document.
    """

    def __init__(
        self,
        services: Optional[Mapping[str, ServiceSpecLike]] = None,
        name_suffix: Optional[str] = None,
        schema_version: Optional[str] = None,
        writer: Optional[YamlFileWriter] = None,
    ):
        """
        Initializes the builder.

        :param services: Initial services, name -> declarative service spec.
        :param name_suffix: Suffix of the output file, 'docker-compose.<suffix>.yml'.
        :param schema_version: Value of the top-level 'version' key; omitted when not set.
        :param writer: Encoder/writer used by synth.
        """
        self.name_suffix = name_suffix
        self.schema_version = schema_version
        self.writer = writer or YamlFileWriter()
        self._services: Dict[str, Service] = {}

        for name, spec in (services or {}).items():
            self.add_service(name, spec)

    @property
    def file_name(self) -> str:
        return compose_file_name(self.name_suffix)

    @property
    def services(self) -> Dict[str, Service]:
        return dict(self._services)

    # Declaration helpers

    @staticmethod
    def port_mapping(
        published: int,
        target: int,
        protocol: Union[Protocol, str] = DEFAULT_PROTOCOL,
        mode: str = DEFAULT_PORT_MODE,
    ) -> PortMapping:
        """
        Declares a published port, e.g. port_mapping(8080, 80).
        """
        try:
            return PortMapping(published=published, target=target, protocol=protocol, mode=mode)
        except ValidationError as e:
            raise ConfigurationError(f"invalid port mapping {published}:{target}: {e}") from e

    @staticmethod
    def bind_volume(source_path: str, target_path: str) -> BindVolume:
        """
        Declares a host path mounted into the container.
        """
        try:
            return BindVolume(source=source_path, target=target_path)
        except ValidationError as e:
            raise ConfigurationError(f"invalid bind volume {source_path!r}: {e}") from e

    @staticmethod
    def named_volume(
        volume_name: str,
        target_path: str,
        driver: Optional[str] = None,
        driver_opts: Optional[Mapping[str, str]] = None,
    ) -> NamedVolume:
        """
        Declares a named volume mounted into the container.

        :param volume_name: Key of the volume in the top-level volumes map.
        :param target_path: Mount point inside the container.
        :param driver: Volume driver, left to the engine default when not set.
        :param driver_opts: Options passed to the volume driver.
        """
        try:
            return NamedVolume(
                source=volume_name,
                target=target_path,
                driver=driver,
                driver_opts=dict(driver_opts or {}),
            )
        except ValidationError as e:
            raise ConfigurationError(f"invalid named volume {volume_name!r}: {e}") from e

    @staticmethod
    def service_name(name: str) -> ServiceNameReference:
        """
        Refers to a service by name, for services not yet added.
        """
        return ServiceNameReference(name)

    # Registration

    def add_service(self, name: str, spec: Optional[ServiceSpecLike] = None) -> Service:
        """
        Adds a service to the document.

        :param name: Name of the service.
        :param spec: Declarative service spec, as a ServiceSpec or a plain mapping.
        :return: The service, for further imperative changes.
        :raises ConfigurationError: If the spec is invalid, does not name exactly
            one of image_build and image, or the name is already taken.
        """
        spec = self._load_spec(name, spec)

        if not spec.has_exactly_one_image_source:
            raise ConfigurationError(
                f"service '{name}' requires exactly one of 'image_build' or 'image'"
            )
        if name in self._services:
            raise ConfigurationError(f"a service named '{name}' already exists")

        service = Service(
            name,
            image=spec.image,
            image_build=spec.image_build,
            command=spec.command,
        )
        for port in spec.ports:
            service.ports.append(port)
        for volume in spec.volumes:
            service.add_volume(volume)
        for key, value in spec.environment.items():
            service.add_environment(key, value)
        service.add_depends_on(*spec.depends_on)

        self._services[name] = service
        logger.debug("Registered service %s", name)
        return service

    @staticmethod
    def _load_spec(name: str, spec: Optional[ServiceSpecLike]) -> ServiceSpec:
        if isinstance(spec, ServiceSpec):
            return spec
        try:
            return ServiceSpec.model_validate(dict(spec or {}))
        except ValidationError as e:
            raise ConfigurationError(f"service '{name}' has an invalid spec: {e}") from e

    # Synthesis

    def synthesize_document(self) -> Dict[str, Any]:
        """
        Validates the declared services and renders the compose document.

        The document is recomputed from the current state on every call;
        the services themselves are only read.

        :return: A plain mapping with 'services' and, when any named volume
            is mounted, 'volumes'.
        :raises ConfigurationError: If no service is declared, a dependency
            cannot be resolved, or a service depends on itself.
        """
        if not self._services:
            raise ConfigurationError("at least one service is required")

        resolved = {name: self._resolve_dependencies(service) for name, service in self._services.items()}

        document: Dict[str, Any] = {}
        if self.schema_version is not None:
            document["version"] = self.schema_version
        document["services"] = {
            name: service.synthesize(depends_on=resolved[name])
            for name, service in self._services.items()
        }

        volumes = self._collect_volumes()
        if volumes:
            document["volumes"] = volumes

        logger.debug(
            "Synthesized %d service(s) and %d volume(s)", len(document["services"]), len(volumes)
        )
        return document

    def _resolve_dependencies(self, service: Service) -> List[str]:
        """
        Resolves the dependency references of a service to service names.

        :param service: The depending service.
        :return: Names of the dependencies, in declaration order, each listed once.
        """
        names = []
        for reference in service.depends_on:
            target = self._resolve_reference(reference)
            if target is None:
                raise ConfigurationError(
                    f"unable to resolve service named '{reference.describe()}' "
                    f"referenced by service '{service.name}'"
                )
            if target is service:
                raise ConfigurationError(f"service '{service.name}' cannot depend on itself")
            if target.name not in names:
                names.append(target.name)
        return names

    def _resolve_reference(self, reference: DependencyReference) -> Optional[Service]:
        if isinstance(reference, ServiceHandleReference):
            candidate = self._services.get(reference.service.name)
            # Handles to services of another document do not resolve
            return candidate if candidate is reference.service else None
        return self._services.get(reference.name)

    def _collect_volumes(self) -> Dict[str, Dict[str, Any]]:
        """
        Builds the top-level volumes map from the named volumes of all services.

        The first declaration of a name creates its entry. An entry without
        driver settings takes those of the first later declaration that has
        them; once set they are not replaced.
        """
        declarations: Dict[str, NamedVolume] = {}
        for service in self._services.values():
            for volume in service.volumes:
                if not isinstance(volume, NamedVolume):
                    continue

                existing = declarations.get(volume.source)
                if existing is None or (volume.has_configuration and not existing.has_configuration):
                    declarations[volume.source] = volume
                elif volume.has_configuration and volume.registry_entry() != existing.registry_entry():
                    logger.warning(
                        "Ignoring driver settings of volume %s declared by service %s; "
                        "an earlier declaration already configures it",
                        volume.source,
                        service.name,
                    )

        return {name: volume.registry_entry() for name, volume in declarations.items()}

    # Output

    def synth(self, outdir: str) -> str:
        """
        Synthesizes the document and writes it to outdir under file_name.

        :param outdir: Directory the compose file is written to.
        :return: Path of the written file.
        """
        document = self.synthesize_document()
        return self.writer.write(document, outdir, self.file_name)
