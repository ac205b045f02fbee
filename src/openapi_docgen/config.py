"""Generator configuration.

Values come from a YAML file (``load_config``) and/or CLI options; options
given on the command line win.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from openapi_docgen.errors import InputValidationError
from openapi_docgen.operation.loader import format_pydantic_error, load_yaml_file
from openapi_docgen.serialization import OpenApiFormat, OpenApiSpecVersion

DEFAULT_TITLE = "API"
DEFAULT_VERSION = "1.0.0"


class GeneratorConfig(BaseModel):
    """Document envelope and rendering settings."""

    title: str = DEFAULT_TITLE
    version: str = DEFAULT_VERSION
    description: str = ""
    servers: list[str] = []  # empty = derive from absolute operation URLs
    spec_version: OpenApiSpecVersion = OpenApiSpecVersion.V3
    output_format: OpenApiFormat = OpenApiFormat.JSON

    def info_object(self) -> dict[str, Any]:
        info: dict[str, Any] = {"title": self.title, "version": self.version}
        if self.description:
            info["description"] = self.description
        return info

    def merged(self, **overrides: Any) -> "GeneratorConfig":
        """Copy with every override that is not None applied."""
        values = {k: v for k, v in overrides.items() if v is not None and v != ()}
        if "servers" in values:
            values["servers"] = list(values["servers"])
        return self.model_validate({**self.model_dump(), **values})


def load_config(file_path: Path) -> GeneratorConfig:
    """Load and validate a generator config file."""
    data = load_yaml_file(file_path) or {}
    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as e:
        raise InputValidationError(format_pydantic_error(e, "config"), str(file_path)) from e
