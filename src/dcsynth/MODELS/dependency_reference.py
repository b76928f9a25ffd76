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
References from one service to another, resolved when the document is synthesized.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ..BUILDERS.service import Service


@dataclass(frozen=True)
class ServiceNameReference:
    """
    Refers to a sibling service by its name.

    Examples:
        - DockerCompose.service_name("db")
        - "db" in a declarative depends_on list
    """

    name: str

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class ServiceHandleReference:
    """
    Refers to a sibling service through the object returned by add_service.
    Two handle references are equal only when they point at the same object.
    """

    service: "Service"

    def describe(self) -> str:
        return self.service.name

    def __eq__(self, other) -> bool:
        if not isinstance(other, ServiceHandleReference):
            return NotImplemented
        return self.service is other.service

    def __hash__(self) -> int:
        return id(self.service)


DependencyReference = Union[ServiceNameReference, ServiceHandleReference]
