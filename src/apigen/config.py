"""Generator settings, loaded from an optional YAML file."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from apigen.errors import DocumentError

DEFAULT_DOCS_PATH = "static/docs.html"
DEFAULT_STATIC_DIR = "static"


class GeneratorConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    docs_path: str = DEFAULT_DOCS_PATH  # documentation page, relative to the generated code
    static_dir: str = DEFAULT_STATIC_DIR  # where the OpenAPI documents are served from
    output: Path | None = None

    def spec_paths(self, file_paths: list[Path]) -> list[str]:
        """Paths the documents are embedded from in the generated code.

        Each document keeps its location relative to the deepest directory
        shared by all of them, so same-named files stay distinct.
        """
        resolved = [path.resolve() for path in file_paths]
        root = Path(os.path.commonpath([path.parent for path in resolved]))
        static_dir = self.static_dir.rstrip("/")
        return [f"{static_dir}/{path.relative_to(root).as_posix()}" for path in resolved]


def load_config(file_path: Path | None) -> GeneratorConfig:
    """Load settings from a YAML file, or return the defaults."""
    if file_path is None:
        return GeneratorConfig()

    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise DocumentError(f"Could not parse config {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentError(f"Config {file_path} must be a mapping")

    try:
        return GeneratorConfig.model_validate(data)
    except ValidationError as e:
        raise DocumentError(f"Invalid config {file_path}: {e}") from e
