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
Models for volumes mounted into services: host bind mounts and named volumes.
"""
from typing import Annotated, Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field

class BindVolume(BaseModel):
    """
    Mounts a host path directly into the container.
    Bind mounts never appear in the top-level volumes map.
    """
    type: Literal["bind"] = "bind"
    source: str
    target: str

    def to_fragment(self) -> Dict[str, Any]:
        """
        Renders the long-syntax volume entry of a service.
        """
        return {"type": self.type, "source": self.source, "target": self.target}

class NamedVolume(BaseModel):
    """
    Mounts a document-scoped named volume into the container.

    The source is the key of the volume in the top-level volumes map,
    which the builder registers when the document is synthesized.
    """
    type: Literal["volume"] = "volume"
    source: str
    target: str
    driver: Optional[str] = None
    driver_opts: Dict[str, str] = {}

    def to_fragment(self) -> Dict[str, Any]:
        """
        Renders the long-syntax volume entry of a service.
        Driver settings belong to the registry entry, not to the mount.
        """
        return {"type": self.type, "source": self.source, "target": self.target}

    @property
    def has_configuration(self) -> bool:
        return self.driver is not None or bool(self.driver_opts)

    def registry_entry(self) -> Dict[str, Any]:
        """
        Renders the top-level volumes map entry for this volume.

        :return: An empty mapping, or one holding driver and/or driver_opts.
        """
        entry: Dict[str, Any] = {}
        if self.driver is not None:
            entry["driver"] = self.driver
        if self.driver_opts:
            entry["driver_opts"] = dict(self.driver_opts)
        return entry

VolumeDeclaration = Annotated[Union[BindVolume, NamedVolume], Field(discriminator="type")]
