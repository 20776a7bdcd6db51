"""Typed views over vCAV API responses. Unknown fields are kept, missing ones are None."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Site(_ApiModel):
    site: str
    description: Optional[str] = None
    is_local: Optional[bool] = Field(default=None, alias="isLocal")
    cloud_type: Optional[str] = Field(default=None, alias="cloudType")


class ReplicationEndpoint(_ApiModel):
    site: Optional[str] = None
    org: Optional[str] = None
    vdc_name: Optional[str] = Field(default=None, alias="vdcName")
    vm_name: Optional[str] = Field(default=None, alias="vmName")


class ReplicationInstance(_ApiModel):
    timestamp: Optional[int] = None  # epoch milliseconds
    transfer_bytes: Optional[int] = Field(default=None, alias="transferBytes")
    transfer_seconds: Optional[int] = Field(default=None, alias="transferSeconds")


class VmReplication(_ApiModel):
    id: str
    owner: Optional[str] = None
    vm_name: Optional[str] = Field(default=None, alias="vmName")
    source: ReplicationEndpoint = Field(default_factory=ReplicationEndpoint)
    destination: ReplicationEndpoint = Field(default_factory=ReplicationEndpoint)
    rpo: Optional[int] = None  # minutes
    is_paused: Optional[bool] = Field(default=None, alias="isPaused")
    overall_health: Optional[str] = Field(default=None, alias="overallHealth")
    replica_storage_bytes: Optional[int] = Field(default=None, alias="replicaStorageBytes")
    last_instance: Optional[ReplicationInstance] = Field(default=None, alias="lastInstance")
    instances_count: Optional[int] = Field(default=None, alias="instancesCount")

    @property
    def display_name(self) -> str:
        return self.vm_name or self.source.vm_name or self.id


class VappReplication(_ApiModel):
    id: str
    owner: Optional[str] = None
    name: Optional[str] = None
    source: ReplicationEndpoint = Field(default_factory=ReplicationEndpoint)
    destination: ReplicationEndpoint = Field(default_factory=ReplicationEndpoint)
    vm_replications: List[VmReplication] = Field(default_factory=list, alias="vmReplications")
