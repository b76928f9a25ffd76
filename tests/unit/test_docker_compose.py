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
Unit tests for the compose document builder.
"""
import logging
import pytest
from dcsynth import ConfigurationError, DockerCompose, Protocol, ServiceSpec


class TestAddService:
    """Tests for DockerCompose.add_service."""

    def test_requires_image_or_build(self):
        """Test that a spec without image and image_build is rejected."""
        dc = DockerCompose()
        with pytest.raises(ConfigurationError, match=r"(?i)service.*requires exactly one of.*image_build.*image"):
            dc.add_service("service", {})

    def test_rejects_image_and_build(self):
        """Test that a spec with both image and image_build is rejected."""
        dc = DockerCompose()
        with pytest.raises(ConfigurationError, match=r"requires exactly one of.*image_build.*image"):
            dc.add_service("service", {"image": "nginx", "image_build": {"context": "."}})

    def test_rejects_missing_spec(self):
        """Test that no spec at all is rejected the same way."""
        with pytest.raises(ConfigurationError, match="'service' requires exactly one of"):
            DockerCompose().add_service("service")

    def test_rejects_duplicate_name(self):
        """Test that a service name can only be used once."""
        dc = DockerCompose()
        dc.add_service("web", {"image": "nginx"})
        with pytest.raises(ConfigurationError, match="'web' already exists"):
            dc.add_service("web", {"image": "httpd"})

    def test_invalid_spec(self):
        """Test that malformed specs are reported against the service."""
        dc = DockerCompose()
        with pytest.raises(ConfigurationError, match="'web' has an invalid spec"):
            dc.add_service("web", {"image": "nginx", "imageBuild": {"context": "."}})

    def test_accepts_model(self):
        """Test passing a ServiceSpec instead of a mapping."""
        dc = DockerCompose()
        service = dc.add_service("web", ServiceSpec(image="nginx", environment={"DEBUG": True, "WORKERS": 4}))
        assert service.environment == {"DEBUG": "true", "WORKERS": "4"}

    def test_initial_services_use_same_checks(self):
        """Test that constructor services are validated like added ones."""
        with pytest.raises(ConfigurationError, match="requires exactly one of"):
            DockerCompose(services={"broken": {"command": ["true"]}})

    def test_returns_service_for_mutation(self):
        """Test that the returned service is the one that gets synthesized."""
        dc = DockerCompose()
        service = dc.add_service("www", {"image": "nginx"})
        service.add_environment("FOO", "bar")
        assert dc.synthesize_document()["services"]["www"]["environment"] == {"FOO": "bar"}
        assert dc.services["www"] is service


class TestSynthesizeDocument:
    """Tests for DockerCompose.synthesize_document."""

    def test_requires_a_service(self):
        """Test that an empty document is rejected."""
        with pytest.raises(ConfigurationError, match=r"(?i)at least one service"):
            DockerCompose().synthesize_document()

    def test_depends_on_declaratively(self):
        """Test resolving a name reference declared up front."""
        dc = DockerCompose(services={
            "first": {"image": "alpine"},
            "second": {"image": "nginx", "depends_on": [DockerCompose.service_name("first")]},
        })
        assert dc.synthesize_document() == {
            "services": {
                "first": {"image": "alpine"},
                "second": {"image": "nginx", "depends_on": ["first"]},
            },
        }

    def test_depends_on_imperatively(self):
        """Test resolving a handle added after both services exist."""
        dc = DockerCompose()
        first = dc.add_service("first", {"image": "alpine"})
        second = dc.add_service("second", {"image": "nginx"})
        second.add_depends_on(first)
        assert dc.synthesize_document() == {
            "services": {
                "first": {"image": "alpine"},
                "second": {"image": "nginx", "depends_on": ["first"]},
            },
        }

    def test_depends_on_later_service(self):
        """Test that a name may refer to a service added afterwards."""
        dc = DockerCompose()
        dc.add_service("web", {"image": "nginx", "depends_on": ["db"]})
        dc.add_service("db", {"image": "mysql:8"})
        assert dc.synthesize_document()["services"]["web"]["depends_on"] == ["db"]

    def test_depends_on_declaration_order(self):
        """Test that dependencies keep declaration order, not alphabetical order."""
        dc = DockerCompose()
        dc.add_service("a", {"image": "alpine"})
        dc.add_service("z", {"image": "alpine"})
        web = dc.add_service("web", {"image": "nginx", "depends_on": ["z"]})
        web.add_depends_on("a")
        assert dc.synthesize_document()["services"]["web"]["depends_on"] == ["z", "a"]

    def test_depends_on_listed_once(self):
        """Test that a name and a handle to the same service yield one entry."""
        dc = DockerCompose()
        db = dc.add_service("db", {"image": "mysql:8"})
        dc.add_service("cache", {"image": "redis"})
        web = dc.add_service("web", {"image": "nginx", "depends_on": ["db", "cache"]})
        web.add_depends_on(db, DockerCompose.service_name("cache"), "db")
        assert dc.synthesize_document()["services"]["web"]["depends_on"] == ["db", "cache"]

    def test_unresolved_dependency(self):
        """Test that an unknown name fails naming both services."""
        dc = DockerCompose(services={
            "www": {"image": "nginx", "depends_on": [DockerCompose.service_name("nope")]},
        })
        with pytest.raises(ConfigurationError, match=r"(?i)unable to resolve.*nope.*www"):
            dc.synthesize_document()

    def test_handle_from_other_document(self):
        """Test that a service of another document does not resolve."""
        other = DockerCompose().add_service("db", {"image": "mysql:8"})
        dc = DockerCompose()
        dc.add_service("db", {"image": "postgres"})
        web = dc.add_service("web", {"image": "nginx"})
        web.add_depends_on(other)
        with pytest.raises(ConfigurationError, match="unable to resolve.*db.*web"):
            dc.synthesize_document()

    def test_self_dependency(self):
        """Test that a service cannot depend on itself by name."""
        dc = DockerCompose(services={
            "www": {"image": "nginx", "depends_on": [DockerCompose.service_name("www")]},
        })
        with pytest.raises(ConfigurationError, match=r"(?i)'www' cannot depend on itself"):
            dc.synthesize_document()

    def test_self_dependency_by_handle(self):
        """Test that a service cannot depend on itself by handle."""
        dc = DockerCompose()
        www = dc.add_service("www", {"image": "nginx"})
        www.add_depends_on(www)
        with pytest.raises(ConfigurationError, match="depend on itself"):
            dc.synthesize_document()

    def test_idempotent(self):
        """Test that repeated synthesis yields the same document."""
        dc = DockerCompose(services={
            "db": {"image": "mysql:8", "volumes": [DockerCompose.named_volume("data", "/var/lib/mysql")]},
            "web": {"image": "nginx", "depends_on": ["db"], "ports": [DockerCompose.port_mapping(80, 80)]},
        })
        assert dc.synthesize_document() == dc.synthesize_document()

    def test_reflects_later_mutation(self):
        """Test that synthesis reads the current state each time."""
        dc = DockerCompose()
        web = dc.add_service("web", {"image": "nginx"})
        assert "ports" not in dc.synthesize_document()["services"]["web"]
        web.add_port(8080, 80)
        assert len(dc.synthesize_document()["services"]["web"]["ports"]) == 1

    def test_registration_order(self):
        """Test that services appear in the order they were added."""
        dc = DockerCompose()
        for name in ("setup", "db", "wordpress"):
            dc.add_service(name, {"image": "alpine"})
        assert list(dc.synthesize_document()["services"]) == ["setup", "db", "wordpress"]

    def test_schema_version(self):
        """Test that a schema version is emitted first when set."""
        dc = DockerCompose(services={"web": {"image": "nginx"}}, schema_version="3.3")
        document = dc.synthesize_document()
        assert list(document) == ["version", "services"]
        assert document["version"] == "3.3"

    def test_no_schema_version_by_default(self):
        """Test that the version key is omitted by default."""
        assert "version" not in DockerCompose(services={"web": {"image": "nginx"}}).synthesize_document()


class TestPorts:
    """Tests for declared port mappings."""

    expected = {
        "services": {
            "port": {
                "image": "nginx",
                "ports": [
                    {"published": 8080, "target": 80, "protocol": "tcp", "mode": "host"},
                    {"published": 8080, "target": 80, "protocol": "udp", "mode": "host"},
                ],
            },
        },
    }

    def test_declaratively(self):
        """Test ports given in the spec."""
        dc = DockerCompose(services={
            "port": {
                "image": "nginx",
                "ports": [
                    DockerCompose.port_mapping(8080, 80),
                    DockerCompose.port_mapping(8080, 80, protocol=Protocol.UDP),
                ],
            },
        })
        assert dc.synthesize_document() == self.expected

    def test_imperatively(self):
        """Test ports added to the service."""
        dc = DockerCompose()
        service = dc.add_service("port", {"image": "nginx"})
        service.add_port(8080, 80)
        service.add_port(8080, 80, protocol=Protocol.UDP)
        assert dc.synthesize_document() == self.expected

    def test_plain_mappings(self):
        """Test ports given as plain mappings."""
        dc = DockerCompose(services={
            "port": {
                "image": "nginx",
                "ports": [{"published": 8080, "target": 80}, {"published": 8080, "target": 80, "protocol": "udp"}],
            },
        })
        assert dc.synthesize_document() == self.expected


class TestVolumes:
    """Tests for the top-level volumes map."""

    def test_bind_volume(self):
        """Test that bind mounts do not register volumes."""
        dc = DockerCompose(services={
            "myservice": {"image": "nginx", "volumes": [DockerCompose.bind_volume("./docroot", "/var/www/html")]},
        })
        assert dc.synthesize_document() == {
            "services": {
                "myservice": {
                    "image": "nginx",
                    "volumes": [{"type": "bind", "source": "./docroot", "target": "/var/www/html"}],
                },
            },
        }

    def test_named_volume(self):
        """Test that a named volume registers an empty entry."""
        dc = DockerCompose(services={
            "myservice": {"image": "nginx", "volumes": [DockerCompose.named_volume("html", "/var/www/html")]},
        })
        assert dc.synthesize_document() == {
            "services": {
                "myservice": {
                    "image": "nginx",
                    "volumes": [{"type": "volume", "source": "html", "target": "/var/www/html"}],
                },
            },
            "volumes": {"html": {}},
        }

    def test_named_volume_imperatively(self):
        """Test a named volume added after registration."""
        dc = DockerCompose()
        service = dc.add_service("myservice", {"image": "nginx"})
        service.add_volume(DockerCompose.named_volume("html", "/var/www/html"))
        assert dc.synthesize_document()["volumes"] == {"html": {}}

    def test_driver_opts(self):
        """Test that driver options end up in the registry entry only."""
        driver_opts = {"type": "nfs", "o": "addr=10.40.0.199,nolock,soft,rw", "device": ":/docker/example"}
        dc = DockerCompose(services={
            "web": {
                "image": "nginx",
                "volumes": [DockerCompose.named_volume("web", "/var/www/html", driver_opts=driver_opts)],
            },
        })
        assert dc.synthesize_document() == {
            "services": {
                "web": {
                    "image": "nginx",
                    "volumes": [{"type": "volume", "source": "web", "target": "/var/www/html"}],
                },
            },
            "volumes": {"web": {"driver_opts": driver_opts}},
        }

    def test_driver(self):
        """Test that a driver name is kept."""
        dc = DockerCompose(services={
            "web": {"image": "nginx", "volumes": [DockerCompose.named_volume("data", "/data", driver="local")]},
        })
        assert dc.synthesize_document()["volumes"] == {"data": {"driver": "local"}}

    def test_shared_volume_registered_once(self):
        """Test that two services mounting one volume produce one entry."""
        dc = DockerCompose(services={
            "setup": {"image": "alpine", "volumes": [DockerCompose.named_volume("uploads", "/uploads")]},
            "web": {"image": "nginx", "volumes": [DockerCompose.named_volume("uploads", "/var/www/uploads")]},
        })
        assert dc.synthesize_document()["volumes"] == {"uploads": {}}

    def test_later_declaration_configures_bare_entry(self):
        """Test that driver options need not be given by the first declaration."""
        dc = DockerCompose(services={
            "setup": {"image": "alpine", "volumes": [DockerCompose.named_volume("uploads", "/uploads")]},
            "web": {
                "image": "nginx",
                "volumes": [DockerCompose.named_volume("uploads", "/srv", driver_opts={"type": "tmpfs"})],
            },
        })
        assert dc.synthesize_document()["volumes"] == {"uploads": {"driver_opts": {"type": "tmpfs"}}}

    def test_first_configuration_wins(self, caplog):
        """Test that conflicting driver options keep the first and warn."""
        dc = DockerCompose(services={
            "a": {"image": "alpine", "volumes": [DockerCompose.named_volume("data", "/a", driver_opts={"type": "nfs"})]},
            "b": {"image": "alpine", "volumes": [DockerCompose.named_volume("data", "/b", driver_opts={"type": "tmpfs"})]},
            "c": {"image": "alpine", "volumes": [DockerCompose.named_volume("data", "/c")]},
        })
        with caplog.at_level(logging.WARNING, logger="dcsynth.BUILDERS.docker_compose"):
            volumes = dc.synthesize_document()["volumes"]
        assert volumes == {"data": {"driver_opts": {"type": "nfs"}}}
        assert "data" in caplog.text
        assert "service b" in caplog.text

    def test_plain_mappings(self):
        """Test volumes given as plain mappings discriminated by type."""
        dc = DockerCompose(services={
            "web": {
                "image": "nginx",
                "volumes": [
                    {"type": "bind", "source": "./conf", "target": "/etc/nginx"},
                    {"type": "volume", "source": "html", "target": "/usr/share/nginx/html"},
                ],
            },
        })
        assert dc.synthesize_document()["volumes"] == {"html": {}}


class TestDeclarationHelpers:
    """Tests for the static declaration helpers."""

    def test_port_mapping_invalid_protocol(self):
        """Test that an unknown protocol is a configuration error."""
        with pytest.raises(ConfigurationError, match="invalid port mapping 8080:80"):
            DockerCompose.port_mapping(8080, 80, protocol="sctp")

    def test_port_mapping_invalid_port(self):
        """Test that a non-numeric port is a configuration error."""
        with pytest.raises(ConfigurationError, match="invalid port mapping"):
            DockerCompose.port_mapping("http", 80)

    def test_bind_volume_missing_target(self):
        """Test that a bind mount needs a target path."""
        with pytest.raises(ConfigurationError, match="invalid bind volume './docroot'"):
            DockerCompose.bind_volume("./docroot", None)

    def test_named_volume_missing_target(self):
        """Test that a named volume needs a target path."""
        with pytest.raises(ConfigurationError, match="invalid named volume 'v'"):
            DockerCompose.named_volume("v", None)


class TestFileName:
    """Tests for DockerCompose.file_name."""

    def test_default(self):
        assert DockerCompose().file_name == "docker-compose.yml"

    def test_suffix(self):
        assert DockerCompose(name_suffix="myname").file_name == "docker-compose.myname.yml"
