# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodeseed/userdata/models.py

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)


class _Model(BaseModel):
    # Unknown keys are dropped so newer documents still decode.
    model_config = ConfigDict(frozen=True, extra="ignore")


# ---------------------------------------------------------------------
# Security
# ---------------------------------------------------------------------
class CertificateAndKey(_Model):
    """Base64 encoded PEM pair. Kept verbatim, consumers decode it."""

    crt: StrictStr = ""
    key: StrictStr = ""


class DomainSecurity(_Model):
    ca: Optional[CertificateAndKey] = None
    identity: Optional[CertificateAndKey] = None


class Security(_Model):
    os: DomainSecurity = Field(default_factory=DomainSecurity)
    kubernetes: DomainSecurity = Field(default_factory=DomainSecurity)

    @field_validator("os", "kubernetes", mode="before")
    @classmethod
    def empty_when_null(cls, value):
        return {} if value is None else value


# ---------------------------------------------------------------------
# Networking
# ---------------------------------------------------------------------
class Route(_Model):
    network: StrictStr = ""
    gateway: StrictStr = ""


class Bond(_Model):
    mode: StrictStr = ""
    hashpolicy: StrictStr = ""
    lacprate: StrictStr = ""
    interfaces: Tuple[StrictStr, ...] = ()


class Device(_Model):
    interface: StrictStr
    cidr: Optional[StrictStr] = None
    dhcp: StrictBool = False
    routes: Tuple[Route, ...] = ()
    bond: Optional[Bond] = None


class OSNet(_Model):
    devices: Tuple[Device, ...] = ()


class KubernetesNet(_Model):
    cni: StrictStr = ""


class Networking(_Model):
    """An empty section means "use defaults"."""

    os: OSNet = Field(default_factory=OSNet)
    kubernetes: KubernetesNet = Field(default_factory=KubernetesNet)

    @field_validator("os", "kubernetes", mode="before")
    @classmethod
    def empty_when_null(cls, value):
        return {} if value is None else value


# ---------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------
class InitServiceConfig(_Model):
    cni: StrictStr = ""


class KubeadmServiceConfig(_Model):
    # Multi-document kubeadm YAML, passed through untouched.
    configuration: StrictStr = ""
    extra_args: Tuple[StrictStr, ...] = Field(default=(), alias="extraArgs")
    ignore_preflight_errors: Tuple[StrictStr, ...] = Field(default=(), alias="ignorePreflightErrors")


class ImageServiceConfig(_Model):
    image: StrictStr = ""


class TrustdServiceConfig(ImageServiceConfig):
    username: StrictStr = ""
    password: StrictStr = ""
    # Order matters: clients try endpoints front to back.
    endpoints: Tuple[StrictStr, ...] = ()
    cert_sans: Tuple[StrictStr, ...] = Field(default=(), alias="certSANs")


class ProxydServiceConfig(ImageServiceConfig):
    pass


class BlockdServiceConfig(ImageServiceConfig):
    pass


class OSDServiceConfig(ImageServiceConfig):
    pass


ServiceConfig = Union[
    InitServiceConfig,
    KubeadmServiceConfig,
    TrustdServiceConfig,
    ProxydServiceConfig,
    BlockdServiceConfig,
    OSDServiceConfig,
]


class Services(_Model):
    init: Optional[InitServiceConfig] = None
    kubeadm: Optional[KubeadmServiceConfig] = None
    trustd: Optional[TrustdServiceConfig] = None
    proxyd: Optional[ProxydServiceConfig] = None
    blockd: Optional[BlockdServiceConfig] = None
    osd: Optional[OSDServiceConfig] = None

    def names(self) -> List[str]:
        """Names of the services present in the document."""
        return [name for name in type(self).model_fields if getattr(self, name) is not None]

    def get(self, name: str) -> Optional[ServiceConfig]:
        if name not in type(self).model_fields:
            return None
        return getattr(self, name)


# ---------------------------------------------------------------------
# Install
# ---------------------------------------------------------------------
class InstallDevice(_Model):
    device: StrictStr = ""
    size: StrictInt = Field(default=0, ge=0)  # bytes


class Install(_Model):
    wipe: StrictBool = False
    boot: Optional[InstallDevice] = None
    root: Optional[InstallDevice] = None
    data: Optional[InstallDevice] = None


# ---------------------------------------------------------------------
# Extras
# ---------------------------------------------------------------------
class File(_Model):
    """A file the node writes to disk before starting services."""

    contents: StrictStr = ""
    permissions: StrictInt = 0o644
    path: StrictStr


class MachineConfig(_Model):
    """
    Root userdata document.

    Built once per boot from the first successful fetch and never mutated.
    Every section defaults to its zero value so consumers can read it
    without None checks.
    """

    version: StrictStr = ""
    security: Security = Field(default_factory=Security)
    networking: Networking = Field(default_factory=Networking)
    services: Services = Field(default_factory=Services)
    install: Install = Field(default_factory=Install)
    debug: StrictBool = False
    env: Mapping[StrictStr, StrictStr] = Field(default_factory=lambda: MappingProxyType({}))
    files: Tuple[File, ...] = ()

    @field_validator("security", "networking", "services", "install", "env", mode="before")
    @classmethod
    def empty_when_null(cls, value):
        return {} if value is None else value

    @field_validator("env")
    @classmethod
    def read_only_env(cls, value):
        return MappingProxyType(dict(value))
