"""Load manifest files into desired-state entries."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from warden.domain.model import BlockEntry, ResourceKind, TemplateEntry, ToolEntry

from .schema import BlockSpecDoc, ResourceDocument, TemplateSpecDoc, ToolSpecDoc

if TYPE_CHECKING:
    from collections.abc import Iterator

    from warden.domain.model import ManifestEntry

log = getLogger(__name__)

MANIFEST_SUFFIXES = frozenset({".yaml", ".yml", ".json"})

DOCUMENT_KINDS: dict[str, ResourceKind] = {
    "Block": ResourceKind.BLOCK,
    "Tool": ResourceKind.TOOL,
    "Template": ResourceKind.TEMPLATE,
}


class ManifestError(RuntimeError):
    """Raised when a manifest file cannot be read or holds an invalid document."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(f"{path}: {message}" if path is not None else message)
        self.path = path


@dataclass(frozen=True, slots=True)
class Manifest:
    blocks: tuple[BlockEntry, ...] = ()
    tools: tuple[ToolEntry, ...] = ()
    templates: tuple[TemplateEntry, ...] = ()

    def entries(self, kind: ResourceKind) -> tuple[ManifestEntry, ...]:
        match kind:
            case ResourceKind.BLOCK:
                return self.blocks
            case ResourceKind.TOOL:
                return self.tools
            case ResourceKind.TEMPLATE:
                return self.templates


def load_manifest(path: Path | str) -> Manifest:
    """Load one manifest file, or every manifest file below a directory.

    Files in a directory are read in sorted path order so the resulting
    entry order is stable.
    """

    root = Path(path)
    if not root.exists():
        raise ManifestError("manifest path not found", path=root)

    blocks: list[BlockEntry] = []
    tools: list[ToolEntry] = []
    templates: list[TemplateEntry] = []
    for file_path in _manifest_files(root):
        for entry in load_manifest_file(file_path):
            match entry:
                case BlockEntry():
                    blocks.append(entry)
                case ToolEntry():
                    tools.append(entry)
                case TemplateEntry():
                    templates.append(entry)

    log.info(
        "Loaded manifest %s: %d block(s), %d tool(s), %d template(s)",
        root,
        len(blocks),
        len(tools),
        len(templates),
    )
    return Manifest(blocks=tuple(blocks), tools=tuple(tools), templates=tuple(templates))


def load_manifest_file(path: Path) -> list[ManifestEntry]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"cannot read file: {exc}", path=path) from exc
    try:
        documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as exc:
        raise ManifestError(f"invalid YAML: {exc}", path=path) from exc

    entries: list[ManifestEntry] = []
    for index, raw in enumerate(documents):
        entry = parse_document(raw, path=path, index=index)
        if entry is not None:
            entries.append(entry)
    return entries


def parse_document(raw: Any, *, path: Path, index: int = 0) -> ManifestEntry | None:
    """Convert one YAML document. Unsupported kinds yield ``None``."""

    if not isinstance(raw, dict):
        raise ManifestError(f"document {index} is not a mapping", path=path)
    try:
        document = ResourceDocument.model_validate(raw)
    except PydanticValidationError as exc:
        raise ManifestError(f"document {index}: {_format_errors(exc)}", path=path) from exc

    kind = DOCUMENT_KINDS.get(document.kind)
    if kind is None:
        log.warning(
            "%s: skipping unsupported kind %r (%s)", path, document.kind, document.metadata.name
        )
        return None

    source_path = document.metadata.source_path or str(path)
    subject = f"{document.kind}.{document.metadata.name}"
    try:
        match kind:
            case ResourceKind.BLOCK:
                return _block_entry(document, source_path)
            case ResourceKind.TOOL:
                return _tool_entry(document, source_path)
            case ResourceKind.TEMPLATE:
                return _template_entry(document, source_path)
    except PydanticValidationError as exc:
        raise ManifestError(f"{subject}: {_format_errors(exc)}", path=path) from exc
    except ValueError as exc:
        raise ManifestError(f"{subject}: {exc}", path=path) from exc


def _block_entry(document: ResourceDocument, source_path: str) -> BlockEntry:
    spec = BlockSpecDoc.model_validate(document.spec)
    return BlockEntry(
        label=spec.label,
        value=spec.value,
        layer=spec.layer,
        org=spec.org,
        project=spec.project,
        description=document.metadata.description,
        limit=spec.limit,
        source_path=source_path,
    )


def _tool_entry(document: ResourceDocument, source_path: str) -> ToolEntry:
    spec = ToolSpecDoc.model_validate(document.spec)
    name = document.metadata.name
    if spec.function_name is not None and spec.function_name != name:
        msg = f"jsonSchema function name {spec.function_name!r} must match metadata.name"
        raise ValueError(msg)
    return ToolEntry(
        name=name,
        source_code=spec.source_code,
        json_schema=spec.json_schema,
        layer=spec.layer,
        source_type=spec.source_type,
        org=spec.org,
        project=spec.project,
        description=document.metadata.description,
        tool_type=spec.tool_type,
        tags=tuple(spec.tags),
        source_path=source_path,
    )


def _template_entry(document: ResourceDocument, source_path: str) -> TemplateEntry:
    spec = TemplateSpecDoc.model_validate(document.spec)
    return TemplateEntry(
        template_name=spec.template_name or document.metadata.name,
        label=spec.label,
        value=spec.value,
        deployment_id=spec.deployment_id,
        layer=spec.layer,
        limit=spec.limit,
        description=document.metadata.description,
        entity_id=spec.entity_id,
        project_id=spec.project_id,
        version=spec.version,
        environment=spec.environment,
        source_path=source_path,
    )


def _manifest_files(root: Path) -> Iterator[Path]:
    if root.is_file():
        yield root
        return
    for candidate in sorted(root.rglob("*")):
        if candidate.is_file() and candidate.suffix.lower() in MANIFEST_SUFFIXES:
            yield candidate


def _format_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
