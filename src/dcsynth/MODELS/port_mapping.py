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
Models for published container ports.
"""
from typing import Any, Dict
from enum import Enum
from pydantic import BaseModel
from ..UTILS.defaults import DEFAULT_PORT_MODE, DEFAULT_PROTOCOL

class Protocol(str, Enum):
    """
    Network protocol of a port mapping.
    """
    TCP = "tcp"
    UDP = "udp"

class PortMapping(BaseModel):
    """
    Maps a published (host-side) port to a target (container-side) port.
    """
    published: int
    target: int
    protocol: Protocol = Protocol(DEFAULT_PROTOCOL)
    mode: str = DEFAULT_PORT_MODE

    def to_fragment(self) -> Dict[str, Any]:
        """
        Renders the long-syntax port entry of a service.

        :return: A plain mapping with published, target, protocol and mode.
        """
        return {
            "published": self.published,
            "target": self.target,
            "protocol": self.protocol.value,
            "mode": self.mode,
        }
