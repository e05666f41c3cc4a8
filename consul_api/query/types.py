"""
Prepared query types.

Field names follow Python conventions; ``to_dict``/``from_dict`` map them to
the server's CamelCase wire names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class QueryDatacenterOptions:
    """Failover policy: try the N nearest datacenters, then the listed ones."""

    nearest_n: int = 0
    datacenters: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"NearestN": self.nearest_n, "Datacenters": list(self.datacenters)}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> QueryDatacenterOptions:
        data = data or {}
        return cls(
            nearest_n=data.get("NearestN") or 0,
            datacenters=list(data.get("Datacenters") or []),
        )


@dataclass
class QueryDNSOptions:
    """DNS answer settings; ``ttl`` is a duration string such as "10s"."""

    ttl: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"TTL": self.ttl}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> QueryDNSOptions:
        return cls(ttl=(data or {}).get("TTL") or "")


@dataclass
class QueryTemplate:
    """Turns a prepared query into a template matched by name prefix or regexp."""

    type: str = ""  # "name_prefix_match" is the only type the server knows
    regexp: str = ""
    remove_empty_tags: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "Type": self.type,
            "Regexp": self.regexp,
            "RemoveEmptyTags": self.remove_empty_tags,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> QueryTemplate:
        data = data or {}
        return cls(
            type=data.get("Type") or "",
            regexp=data.get("Regexp") or "",
            remove_empty_tags=bool(data.get("RemoveEmptyTags")),
        )


@dataclass
class ServiceQuery:
    """What a prepared query looks up and how results are filtered."""

    service: str
    near: str = ""
    failover: QueryDatacenterOptions = field(default_factory=QueryDatacenterOptions)
    only_passing: bool = False
    ignore_check_ids: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    node_meta: dict[str, str] = field(default_factory=dict)
    service_meta: dict[str, str] = field(default_factory=dict)
    connect: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "Service": self.service,
            "Near": self.near,
            "Failover": self.failover.to_dict(),
            "OnlyPassing": self.only_passing,
            "IgnoreCheckIDs": list(self.ignore_check_ids),
            "Tags": list(self.tags),
            "NodeMeta": dict(self.node_meta),
            "ServiceMeta": dict(self.service_meta),
            "Connect": self.connect,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ServiceQuery:
        data = data or {}
        return cls(
            service=data.get("Service") or "",
            near=data.get("Near") or "",
            failover=QueryDatacenterOptions.from_dict(data.get("Failover")),
            only_passing=bool(data.get("OnlyPassing")),
            ignore_check_ids=list(data.get("IgnoreCheckIDs") or []),
            tags=list(data.get("Tags") or []),
            node_meta=dict(data.get("NodeMeta") or {}),
            service_meta=dict(data.get("ServiceMeta") or {}),
            connect=bool(data.get("Connect")),
        )


@dataclass
class PreparedQueryDefinition:
    """A stored prepared query.

    Attributes:
        service: Service lookup definition
        id: Server-assigned id; empty until created
        name: Optional name usable instead of the id when executing
        session: Session whose invalidation deletes the query
        token: ACL token the query executes with
        dns: DNS answer settings
        template: Template settings, when the query is a template
    """

    service: ServiceQuery
    id: str = ""
    name: str = ""
    session: str = ""
    token: str = ""
    dns: QueryDNSOptions = field(default_factory=QueryDNSOptions)
    template: QueryTemplate = field(default_factory=QueryTemplate)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "Name": self.name,
            "Session": self.session,
            "Token": self.token,
            "Service": self.service.to_dict(),
            "DNS": self.dns.to_dict(),
            "Template": self.template.to_dict(),
        }
        if self.id:
            data["ID"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreparedQueryDefinition:
        return cls(
            id=data.get("ID") or "",
            name=data.get("Name") or "",
            session=data.get("Session") or "",
            token=data.get("Token") or "",
            service=ServiceQuery.from_dict(data.get("Service")),
            dns=QueryDNSOptions.from_dict(data.get("DNS")),
            template=QueryTemplate.from_dict(data.get("Template")),
        )


@dataclass
class ServiceEntry:
    """One healthy service instance returned by an executed query.

    Node, service and check records are kept as the server sent them.
    """

    node: dict[str, Any] = field(default_factory=dict)
    service: dict[str, Any] = field(default_factory=dict)
    checks: list[dict[str, Any]] = field(default_factory=list)

    @property
    def address(self) -> str:
        """Service address, falling back to the node address."""
        return self.service.get("Address") or self.node.get("Address") or ""

    @property
    def port(self) -> int:
        return int(self.service.get("Port") or 0)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceEntry:
        return cls(
            node=dict(data.get("Node") or {}),
            service=dict(data.get("Service") or {}),
            checks=list(data.get("Checks") or []),
        )


@dataclass
class PreparedQueryExecuteResponse:
    """Result of executing a prepared query."""

    service: str = ""
    nodes: list[ServiceEntry] = field(default_factory=list)
    dns: QueryDNSOptions = field(default_factory=QueryDNSOptions)
    datacenter: str = ""
    failovers: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreparedQueryExecuteResponse:
        return cls(
            service=data.get("Service") or "",
            nodes=[ServiceEntry.from_dict(n) for n in data.get("Nodes") or []],
            dns=QueryDNSOptions.from_dict(data.get("DNS")),
            datacenter=data.get("Datacenter") or "",
            failovers=int(data.get("Failovers") or 0),
        )
