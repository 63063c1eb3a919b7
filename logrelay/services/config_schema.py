from typing import Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    field_validator,
    model_validator,
)


class BasicAuthConfig(BaseModel):
    """Paths of the files holding basic auth credentials."""

    model_config = ConfigDict(populate_by_name=True)

    username_file: str = Field(alias="usernameFile")
    password_file: str = Field(alias="passwordFile")


class AuthConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    basic: Optional[BasicAuthConfig] = None


class BodyConfig(BaseModel):
    """Ordered template chain; the last template output is the request body."""

    templates: List[str] = []


class HttpRemoteConfig(BaseModel):
    """HTTP destination configuration."""

    method: str
    url: str
    auth: Optional[AuthConfig] = None
    headers: Dict[str, List[str]] = {}
    body: Optional[BodyConfig] = None

    @field_validator("headers", mode="before")
    @classmethod
    def _normalise_headers(cls, value):
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        normalised = {}
        for name, values in value.items():
            if values is None:
                normalised[name] = []
            elif isinstance(values, (str, int, float)):
                normalised[name] = [str(values)]
            else:
                normalised[name] = [str(v) for v in values]
        return normalised


class RemoteLoggerConfig(BaseModel):
    """One configured remote logger. ``http`` is the only transport for now."""

    http: Optional[HttpRemoteConfig] = None


class RemoteLoggersConfig(RootModel[Dict[str, RemoteLoggerConfig]]):
    """Top level document: remote logger name -> configuration."""

    root: Dict[str, RemoteLoggerConfig] = {}

    @model_validator(mode="before")
    @classmethod
    def _empty_document(cls, value: Union[dict, None]):
        return value or {}

    def items(self):
        return self.root.items()

    def __len__(self) -> int:
        return len(self.root)
