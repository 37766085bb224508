# ltm_client/schemas/ltm.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ltm_client.core.enums import VirtualsStatus

PATH_SEPARATOR = "/"


class ObjectPath(BaseModel):
    """
    Partition-qualified identity of an LTM object: /partition[/subPath]/name.
    Equality is exact and case-sensitive; instances are hashable.
    """
    partition: str
    name: str
    sub_path: Optional[str] = None  # folder(s), e.g. "app.app" or "f1/f2"

    model_config = ConfigDict(frozen=True)

    @field_validator("partition", "name")
    @classmethod
    def _component(cls, value: str, info):
        if not value.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        if PATH_SEPARATOR in value:
            raise ValueError(f"{info.field_name} must not contain '{PATH_SEPARATOR}': {value!r}")
        return value

    @field_validator("sub_path")
    @classmethod
    def _folders(cls, value: Optional[str]):
        if value is None:
            return value
        if any(not segment.strip() for segment in value.split(PATH_SEPARATOR)):
            raise ValueError(f"sub_path has an empty folder segment: {value!r}")
        return value

    @classmethod
    def parse(cls, full_path: str) -> "ObjectPath":
        """Build from '/Common/name', '/Common/app.app/name' or '/Common/f1/f2/name'."""
        if not full_path or not full_path.startswith(PATH_SEPARATOR):
            raise ValueError(f"Not a partition-qualified path: {full_path!r}")
        parts = full_path[1:].split(PATH_SEPARATOR)
        if len(parts) < 2:
            raise ValueError(f"Not a partition-qualified path: {full_path!r}")
        sub_path = PATH_SEPARATOR.join(parts[1:-1]) if len(parts) > 2 else None
        return cls(partition=parts[0], sub_path=sub_path, name=parts[-1])

    @property
    def full_path(self) -> str:
        if self.sub_path:
            return f"/{self.partition}/{self.sub_path}/{self.name}"
        return f"/{self.partition}/{self.name}"

    @property
    def uri_name(self) -> str:
        """Name as used in REST URIs: ~Common~name."""
        return self.full_path.replace(PATH_SEPARATOR, "~")

    def __str__(self) -> str:
        return self.full_path


class Certificate(BaseModel):
    name: str
    partition: str
    sub_path: Optional[str] = None
    subject: Optional[str] = None
    subject_alternative_name: Optional[str] = None
    expiration_epoch: int
    expiration: datetime  # UTC, derived from expiration_epoch

    model_config = ConfigDict(frozen=True)

    @property
    def id(self) -> ObjectPath:
        return ObjectPath(partition=self.partition, sub_path=self.sub_path, name=self.name)


class ClientSSLProfile(BaseModel):
    name: str
    partition: str
    sub_path: Optional[str] = None
    cert_ref: Optional[ObjectPath] = None
    key_ref: Optional[ObjectPath] = None
    chain_ref: Optional[ObjectPath] = None

    model_config = ConfigDict(frozen=True)

    @property
    def id(self) -> ObjectPath:
        return ObjectPath(partition=self.partition, sub_path=self.sub_path, name=self.name)


class VirtualProfileRef(BaseModel):
    """A profile attached to a virtual server (only the identity matters here)."""
    name: str
    partition: str
    sub_path: Optional[str] = None
    context: Optional[str] = None  # all | clientside | serverside

    model_config = ConfigDict(frozen=True)

    @property
    def id(self) -> ObjectPath:
        return ObjectPath(partition=self.partition, sub_path=self.sub_path, name=self.name)


class VirtualServer(BaseModel):
    name: str
    partition: str
    sub_path: Optional[str] = None
    description: Optional[str] = None
    profiles_link: Optional[str] = None
    # None until deep mode fetched the attached profiles
    profiles: Optional[List[VirtualProfileRef]] = None

    @property
    def id(self) -> ObjectPath:
        return ObjectPath(partition=self.partition, sub_path=self.sub_path, name=self.name)


class VirtualRef(BaseModel):
    id: str
    description: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpiryReportRow(BaseModel):
    certificate_id: str
    partition: str
    profile_id: Optional[str] = None
    expiration: datetime
    subject: Optional[str] = None
    subject_alt_name: Optional[str] = None
    # None means "no virtual found or not looked up"; see virtuals_status
    virtuals: Optional[List[VirtualRef]] = None
    virtuals_status: VirtualsStatus = VirtualsStatus.NOT_CHECKED

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )
