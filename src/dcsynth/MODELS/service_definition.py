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
Models for declaring services: image builds and the declarative service shape.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, field_validator
from .port_mapping import PortMapping
from .volume_declaration import VolumeDeclaration

def stringify_value(value: Any) -> str:
    """
    Renders an environment or build-arg value as compose expects it.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

class BuildSpec(BaseModel):
    """
    Builds the service image from a local context instead of pulling one.
    """
    context: str
    dockerfile: Optional[str] = None
    args: Dict[str, str] = {}

    @field_validator("args", mode="before")
    @classmethod
    def _stringify_args(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): stringify_value(v) for k, v in value.items()}
        return value

    def to_fragment(self) -> Dict[str, Any]:
        """
        Renders the 'build' entry of a service.

        :return: A plain mapping with context and, when set, dockerfile and args.
        """
        fragment: Dict[str, Any] = {"context": self.context}
        if self.dockerfile is not None:
            fragment["dockerfile"] = self.dockerfile
        if self.args:
            fragment["args"] = dict(self.args)
        return fragment

class ServiceSpec(BaseModel):
    """
    The declarative description of a single service.

    Exactly one of image and image_build must be given; the builder checks
    this when the service is added so the error can name the service.
    depends_on holds service names, name references or service handles.
    """
    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    image: Optional[str] = None
    image_build: Optional[BuildSpec] = None
    command: Optional[List[str]] = None

    environment: Dict[str, str] = {}
    ports: List[PortMapping] = []
    volumes: List[VolumeDeclaration] = []
    depends_on: List[Any] = []

    @field_validator("environment", mode="before")
    @classmethod
    def _stringify_environment(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): stringify_value(v) for k, v in value.items()}
        return value

    @property
    def has_exactly_one_image_source(self) -> bool:
        return (self.image is None) != (self.image_build is None)
