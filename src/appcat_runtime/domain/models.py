"""Domain value objects for the merge-and-synthesis engine.

Purpose
-------
Give names to the shapes that flow between the merge stage and the synthesis
stage. The objects are frozen dataclasses; the parameter trees they carry stay
plain ``dict`` structures so they can be serialised as-is.

Contents
--------
* :class:`ChartIdentity` – Helm chart repository, name, and default version.
* :class:`SecretFieldTemplate` – one ``key``/``value`` template pair.
* :class:`ConnectionSecretTemplate` – how the connection secret is surfaced.
* :class:`ServiceConfig` – validated composition function input.
* :class:`MergedConfig` – the output of :func:`merge_configs`.
* :class:`InstanceIdentity` / :class:`SecretReference` – who the descriptors
  belong to and where the connection secret is written.
* :class:`SynthesisResult` – descriptors keyed by role plus connection values.

System Role
-----------
Parsing from wire mappings happens in the ``from_mapping`` constructors so the
application layer only ever sees validated objects.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from .errors import MissingField, TypeMismatch
from .tree import ParameterTree, clone_tree, kind_of

DEPLOYMENT_ROLE: Final[str] = "helmrelease"
"""Role key of the Helm release descriptor in observed and desired state."""

SECRET_ROLE: Final[str] = "secret"
"""Role key of the connection secret descriptor in observed and desired state."""

PASSWORD_PLACEHOLDER: Final[str] = "${password}"

REQUIRED_SERVICE_KEYS: Final[tuple[str, ...]] = ("chart", "defaultHelmValues", "mapping", "connectionSecret")

_ALIASES: Final[dict[str, str]] = {
    "defaultHelmValues": "defaultParameterTree",
    "mapping": "fieldMapping",
    "passwordPath": "passwordInjectionPath",
    "existingSecretPath": "existingSecretNameInjectionPath",
    "value": "valueTemplate",
}


@dataclass(frozen=True, slots=True)
class ChartIdentity:
    """Identify the Helm chart a service deploys.

    Fields are optional at parse time; :meth:`require` enforces presence when a
    deployment descriptor is about to be built.
    """

    repository: str | None
    name: str | None
    default_version: str | None

    @classmethod
    def from_mapping(cls, data: object) -> ChartIdentity:
        if not isinstance(data, Mapping):
            raise TypeMismatch("chart", "chart", expected="mapping", actual=kind_of(data))
        return cls(
            repository=_optional_str(data.get("repository")),
            name=_optional_str(data.get("name")),
            default_version=_optional_str(data.get("defaultVersion")),
        )

    def require(self) -> None:
        """Raise :class:`MissingField` for the first absent identity field.

        Examples
        --------
        >>> ChartIdentity("https://charts.example", "redis", None).require()
        Traceback (most recent call last):
        ...
        appcat_runtime.domain.errors.MissingField: required field chart.defaultVersion is missing
        """

        for wire_name, value in (
            ("repository", self.repository),
            ("name", self.name),
            ("defaultVersion", self.default_version),
        ):
            if not value:
                raise MissingField(f"chart.{wire_name}")

    def as_dict(self) -> dict[str, str | None]:
        return {"repository": self.repository, "name": self.name, "defaultVersion": self.default_version}


@dataclass(frozen=True, slots=True)
class SecretFieldTemplate:
    """A connection secret entry whose value may contain ``${name}`` placeholders."""

    key: str
    value: str


@dataclass(frozen=True, slots=True)
class ConnectionSecretTemplate:
    """Declare how the generated secret is surfaced.

    Why
    ----
    The same credential can be embedded into chart values, materialised as a
    separate Secret descriptor, or returned as connection details on the
    response. The template shape selects the strategies; nothing is hard-coded.

    Attributes
    ----------
    fields:
        Ordered ``key``/``value`` templates rendered into connection values.
    password_path:
        Dotted path in the chart values that receives the secret value.
    existing_secret_path:
        Dotted path in the chart values that receives the connection secret
        name, for charts that read credentials from an existing secret.
    write_secret:
        Emit a Secret descriptor carrying the rendered fields.
    publish_connection_details:
        Return the rendered fields as connection details.

    Examples
    --------
    >>> template = ConnectionSecretTemplate.from_mapping({
    ...     "fields": [{"key": "password", "value": "${password}"}],
    ...     "passwordPath": "auth.password",
    ... })
    >>> template.password_key, template.write_secret
    ('password', True)
    """

    fields: tuple[SecretFieldTemplate, ...] = ()
    password_path: str | None = None
    existing_secret_path: str | None = None
    write_secret: bool = True
    publish_connection_details: bool = True

    @classmethod
    def from_mapping(cls, data: object) -> ConnectionSecretTemplate:
        if not isinstance(data, Mapping):
            raise TypeMismatch("connectionSecret", "connectionSecret", expected="mapping", actual=kind_of(data))
        fields: list[SecretFieldTemplate] = []
        raw_fields = data.get("fields") or []
        if not isinstance(raw_fields, (list, tuple)):
            raise TypeMismatch(
                "connectionSecret.fields", "fields", expected="sequence", actual=kind_of(raw_fields)
            )
        for entry in raw_fields:
            if not isinstance(entry, Mapping):
                continue
            key = _optional_str(entry.get("key")) or ""
            value = _optional_str(_lookup(entry, "value")) or ""
            fields.append(SecretFieldTemplate(key=key, value=value))
        return cls(
            fields=tuple(fields),
            password_path=_optional_str(_lookup(data, "passwordPath")),
            existing_secret_path=_optional_str(_lookup(data, "existingSecretPath")),
            write_secret=_flag(data, "writeSecret"),
            publish_connection_details=_flag(data, "publishConnectionDetails"),
        )

    @property
    def password_key(self) -> str | None:
        """Return the key of the first field whose template is exactly ``${password}``."""

        for item in self.fields:
            if item.value == PASSWORD_PLACEHOLDER and item.key:
                return item.key
        return None


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Validated composition function input for one service.

    All four top-level keys are mandatory; ``connectionSecret: null`` is a
    present declaration meaning "no connection secret".

    Examples
    --------
    >>> config = ServiceConfig.from_mapping({
    ...     "chart": {"repository": "r", "name": "redis", "defaultVersion": "1.0"},
    ...     "defaultHelmValues": {"auth": {"enabled": True}},
    ...     "mapping": {"spec.replicas": "replicaCount"},
    ...     "connectionSecret": None,
    ... })
    >>> config.chart.name, config.connection_secret is None
    ('redis', True)
    >>> ServiceConfig.from_mapping({"chart": {}})
    Traceback (most recent call last):
    ...
    appcat_runtime.domain.errors.MissingField: required field defaultHelmValues is missing: not found in service config
    """

    chart: ChartIdentity
    default_values: Mapping[str, Any]
    mapping: Mapping[str, object]
    connection_secret: ConnectionSecretTemplate | None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ServiceConfig:
        for required in REQUIRED_SERVICE_KEYS:
            if required not in data and _ALIASES.get(required) not in data:
                raise MissingField(required, "not found in service config")

        default_values = _lookup(data, "defaultHelmValues")
        if not isinstance(default_values, Mapping):
            raise TypeMismatch(
                "defaultHelmValues", "defaultHelmValues", expected="mapping", actual=kind_of(default_values)
            )
        mapping = _lookup(data, "mapping")
        if mapping is None:
            mapping = {}
        if not isinstance(mapping, Mapping):
            raise TypeMismatch("mapping", "mapping", expected="mapping", actual=kind_of(mapping))

        raw_secret = data.get("connectionSecret")
        return cls(
            chart=ChartIdentity.from_mapping(data["chart"]),
            default_values=default_values,
            mapping=mapping,
            connection_secret=None if raw_secret is None else ConnectionSecretTemplate.from_mapping(raw_secret),
        )


@dataclass(frozen=True, slots=True)
class MergedConfig:
    """Chart identity, merged chart values, and the optional secret template."""

    chart: ChartIdentity
    values: ParameterTree | None
    connection_secret: ConnectionSecretTemplate | None = None


@dataclass(frozen=True, slots=True)
class InstanceIdentity:
    """Name and namespace of the composite resource being reconciled."""

    name: str
    namespace: str


@dataclass(frozen=True, slots=True)
class SecretReference:
    """Optional override for where the connection secret is written.

    Examples
    --------
    >>> ref = SecretReference.from_mapping({"name": "creds"})
    >>> ref.resolve(InstanceIdentity("my-redis", "ns1"))
    ('creds', 'ns1')
    """

    name: str | None = None
    namespace: str | None = None

    @classmethod
    def from_mapping(cls, data: object) -> SecretReference | None:
        if not isinstance(data, Mapping):
            return None
        return cls(name=_optional_str(data.get("name")), namespace=_optional_str(data.get("namespace")))

    def resolve(self, identity: InstanceIdentity) -> tuple[str, str]:
        """Return ``(name, namespace)`` falling back to *identity* for empty values."""

        return self.name or identity.name, self.namespace or identity.namespace


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    """Everything a single synthesis call produces.

    Attributes
    ----------
    descriptors:
        Desired descriptors keyed by role (:data:`DEPLOYMENT_ROLE`,
        :data:`SECRET_ROLE`).
    connection_details:
        Rendered connection values; empty when no template is declared or the
        template opts out of publishing them.
    secret_value:
        The reused or freshly generated credential.
    """

    descriptors: dict[str, dict[str, Any]]
    connection_details: dict[str, str] = field(default_factory=dict)
    secret_value: str = field(default="", repr=False)

    def values(self) -> ParameterTree:
        """Return a copy of the chart values carried by the deployment descriptor."""

        release = self.descriptors[DEPLOYMENT_ROLE]
        return clone_tree(release["spec"]["forProvider"].get("values") or {})


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    """Return ``data[key]`` or the value under its documented alias."""

    if key in data:
        return data[key]
    alias = _ALIASES.get(key)
    return data.get(alias) if alias else None


def _flag(data: Mapping[str, Any], key: str, default: bool = True) -> bool:
    """Return the boolean at *key*; absent or null means *default*."""

    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise TypeMismatch(f"connectionSecret.{key}", key, expected="bool", actual=kind_of(value))
    return value


def _optional_str(value: object) -> str | None:
    """Return *value* when it is a non-empty string, else ``None``."""

    if isinstance(value, str) and value:
        return value
    return None
