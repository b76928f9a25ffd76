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
Writes synthesized compose documents as YAML files.
"""
import logging
import os
from typing import Any, Dict, Optional
import yaml
from ..UTILS.defaults import GENERATED_MARKER

logger = logging.getLogger(__name__)

class YamlFileWriter:
    """
    Encodes a plain compose document to YAML and persists it.
    """
    def __init__(self, marker: Optional[str] = GENERATED_MARKER):
        """
        Initializes the writer.

        :param marker: Comment written as the first line of each file, or None for no comment.
        """
        self.marker = marker

    def encode(self, document: Dict[str, Any]) -> str:
        """
        Encodes a document, keeping the key order of the document.

        :param document: The synthesized compose document.
        :return: YAML text.
        """
        content = yaml.safe_dump(document, sort_keys=False, default_flow_style=False)
        if self.marker:
            return f"{self.marker}\n{content}"
        return content

    def write(self, document: Dict[str, Any], outdir: str, file_name: str) -> str:
        """
        Writes a document to outdir/file_name, creating outdir if needed.

        :param document: The synthesized compose document.
        :param outdir: Target directory.
        :param file_name: Logical file name, e.g. 'docker-compose.yml'.
        :return: Path of the written file.
        """
        content = self.encode(document)
        os.makedirs(outdir, exist_ok=True)
        path = os.path.join(outdir, file_name)
        with open(path, 'w') as f:
            f.write(content)
        logger.debug("Wrote %s", path)
        return path
