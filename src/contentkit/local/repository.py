"""Local filesystem repository of templates and content documents."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import frontmatter
import yaml

from contentkit.content.models import ExtensionData, Metadata, NodeState, NodeType
from contentkit.content.structure import RESOURCE_LOCATOR_TAG, Structure
from contentkit.errors import NoSuchPropertyError, TemplateNotFoundError

from .models import LocalDocument, LocalDocumentMetadata, TemplateDefinition
from .naming import slugify

logger = logging.getLogger(__name__)


DOCUMENT_FILENAME = "page.md"
TEMPLATE_SUFFIXES = (".yaml", ".yml")

NODE_STATES = {
    "test": NodeState.TEST,
    "published": NodeState.PUBLISHED,
    "archived": NodeState.ARCHIVED,
}
NODE_TYPES = {
    "content": NodeType.CONTENT,
    "internal": NodeType.INTERNAL_LINK,
    "external": NodeType.EXTERNAL_LINK,
}


class TemplateRegistry:
    """Template definitions keyed by template key."""

    def __init__(self, templates: Iterable[TemplateDefinition] = ()) -> None:
        self._templates = {template.key: template for template in templates}

    @classmethod
    def from_directory(cls, directory: Path) -> "TemplateRegistry":
        """Load every YAML template file found directly inside ``directory``."""

        templates: list[TemplateDefinition] = []
        for path in sorted(directory.iterdir()):
            if path.suffix not in TEMPLATE_SUFFIXES:
                continue
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            data.setdefault("key", path.stem)
            templates.append(TemplateDefinition.model_validate(data))
            logger.debug("Loaded template %r from %s", data["key"], path)
        return cls(templates)

    def get(self, key: str) -> TemplateDefinition:
        try:
            return self._templates[key]
        except KeyError:
            raise TemplateNotFoundError(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._templates

    def keys(self) -> list[str]:
        return sorted(self._templates)


class LocalContentRepository:
    """Assemble structures from Markdown documents with YAML frontmatter.

    Every directory holding a ``page.md`` is a document; nested directories
    holding one are its children.
    """

    def __init__(self, root: Path, *, templates: TemplateRegistry) -> None:
        self.root = root
        self.templates = templates
        self._slug_usage: dict[Path, set[str]] = defaultdict(set)
        if self.root.exists():
            self._register_existing_slugs(self.root)

    # ------------------------------------------------------------------
    # Reading (disk -> structures)
    # ------------------------------------------------------------------
    def read_tree(self) -> LocalDocument:
        """Load all local documents from disk into memory."""

        document_file = self.root / DOCUMENT_FILENAME
        if not document_file.exists():
            raise FileNotFoundError(f"Missing {DOCUMENT_FILENAME!r} in repository root {self.root}")
        return self._read_directory(self.root)

    def _read_directory(self, directory: Path) -> LocalDocument:
        document_file = directory / DOCUMENT_FILENAME
        post = frontmatter.load(document_file)
        data = post.metadata
        metadata = LocalDocumentMetadata(
            template=str(data.get("template", "default")),
            uuid=_as_optional_str(data.get("uuid")),
            language=data.get("language"),
            webspace=data.get("webspace"),
            origin_template=data.get("origin_template"),
            node_state=str(data.get("node_state", "test")),
            node_type=str(data.get("node_type", "content")),
            internal_link=_as_optional_str(data.get("internal_link")),
            internal=data.get("internal"),
            nav_contexts=list(data.get("nav_contexts") or []),
            is_shadow=data.get("is_shadow"),
            shadow_base_language=data.get("shadow_base_language") or "",
            shadow_languages=list(data.get("shadow_languages") or []),
            concrete_languages=list(data.get("concrete_languages") or []),
            creator=data.get("creator"),
            changer=data.get("changer"),
            created=_as_optional_datetime(data.get("created")),
            changed=_as_optional_datetime(data.get("changed")),
            published=_as_optional_datetime(data.get("published")),
            ext=dict(data.get("ext") or {}),
            properties=dict(data.get("properties") or {}),
        )
        document = LocalDocument(path=document_file, metadata=metadata, body=post.content)
        for child in self.iter_document_directories(directory):
            document.children.append(self._read_directory(child))
        return document

    def load_tree(self) -> Structure:
        """Return the structure of the root document with all descendants attached."""

        root_document = self.read_tree()
        by_uuid: dict[str, Structure] = {}
        linked: list[tuple[Structure, str]] = []
        root = self._build(root_document, None, by_uuid, linked)

        for structure, target in linked:
            content = by_uuid.get(target)
            if content is None:
                logger.warning("Internal link of %s points to unknown document %s", structure.path, target)
                continue
            structure.internal_link_content = content
        return root

    def load_structure(self, raw_path: Union[str, Path]) -> Structure:
        """Return the structure of the document stored at ``raw_path``."""

        directory = self.resolve_document_directory(raw_path).resolve()
        for structure in _iter_structures(self.load_tree()):
            if (self.root.resolve() / structure.path.lstrip("/")).resolve() == directory:
                return structure
        raise FileNotFoundError(f"No document loaded from {directory}")

    def _build(
        self,
        document: LocalDocument,
        parent: Optional[Structure],
        by_uuid: dict[str, Structure],
        linked: list[tuple[Structure, str]],
    ) -> Structure:
        structure = self.to_structure(document, parent_global_state=parent.global_state if parent else None)
        if structure.uuid:
            by_uuid[structure.uuid] = structure
        if structure.node_type == NodeType.INTERNAL_LINK and document.metadata.internal_link:
            linked.append((structure, document.metadata.internal_link))

        children = [self._build(child, structure, by_uuid, linked) for child in document.children]
        structure.children = children
        structure.has_children = bool(children)
        return structure

    def to_structure(
        self,
        document: LocalDocument,
        *,
        parent_global_state: Optional[NodeState] = None,
    ) -> Structure:
        """Instantiate the document's template and decorate it with the document fields."""

        metadata = document.metadata
        template = self.templates.get(metadata.template)
        node_state = _lookup(NODE_STATES, metadata.node_state, "node state")
        if parent_global_state is None or parent_global_state == NodeState.PUBLISHED:
            global_state = node_state
        else:
            global_state = parent_global_state

        structure = Structure(
            key=template.key,
            view=template.view,
            controller=template.controller,
            cache_lifetime=template.cache_lifetime,
            metadata=Metadata(template.meta),
            properties=template.build_properties(),
            origin_template=metadata.origin_template or template.key,
            uuid=metadata.uuid,
            path=self._relative_path(document.directory),
            creator=metadata.creator,
            changer=metadata.changer,
            created=metadata.created,
            changed=metadata.changed,
            published=metadata.published,
            node_state=node_state,
            global_state=global_state,
            language_code=metadata.language,
            webspace_key=metadata.webspace,
            nav_contexts=list(metadata.nav_contexts),
            has_translation=metadata.language is not None,
            is_shadow=metadata.is_shadow,
            shadow_base_language=metadata.shadow_base_language,
            enabled_shadow_languages=list(metadata.shadow_languages),
            concrete_languages=list(metadata.concrete_languages),
            node_type=_lookup(NODE_TYPES, metadata.node_type, "node type"),
            internal=metadata.internal,
            ext=ExtensionData.model_validate(metadata.ext),
        )

        for name, value in metadata.properties.items():
            _assign(structure, name, value)
        if template.body and document.body.strip():
            _assign(structure, template.body, document.body)
        logger.debug("Assembled structure %s from template %r", structure.path, template.key)
        return structure

    def _relative_path(self, directory: Path) -> str:
        relative = directory.resolve().relative_to(self.root.resolve())
        return "/" + relative.as_posix() if relative.parts else "/"

    # ------------------------------------------------------------------
    # Writing (new documents -> disk)
    # ------------------------------------------------------------------
    def create_document(
        self,
        parent_directory: Path,
        *,
        title: str,
        template: str,
        language: Optional[str] = None,
        webspace: Optional[str] = None,
    ) -> LocalDocument:
        """Create a document below ``parent_directory`` in a fresh slugged directory."""

        definition = self.templates.get(template)
        if parent_directory.resolve() == self.root.resolve() and not (self.root / DOCUMENT_FILENAME).exists():
            directory = self.root
            directory.mkdir(parents=True, exist_ok=True)
        else:
            directory = self._allocate_child_directory(parent_directory, title)

        values: dict[str, Any] = {}
        for prop in definition.iter_property_definitions():
            if prop.name == "title":
                values["title"] = title
            elif any(tag.name == RESOURCE_LOCATOR_TAG for tag in prop.tags):
                values[prop.name] = self._relative_path(directory)

        metadata = LocalDocumentMetadata(
            template=definition.key,
            uuid=str(uuid.uuid4()),
            language=language,
            webspace=webspace,
            concrete_languages=[language] if language else [],
            properties=values,
        )
        document = LocalDocument(path=directory / DOCUMENT_FILENAME, metadata=metadata, body="")
        self.save_document(document)
        return document

    def save_document(self, document: LocalDocument) -> None:
        """Persist a document's metadata and body."""

        metadata = document.metadata
        post = frontmatter.Post(document.body)
        post.metadata.update(
            {
                "template": metadata.template,
                "uuid": metadata.uuid,
                "language": metadata.language,
                "webspace": metadata.webspace,
                "node_state": metadata.node_state,
                "node_type": metadata.node_type,
                "nav_contexts": metadata.nav_contexts,
                "concrete_languages": metadata.concrete_languages,
                "properties": metadata.properties,
            }
        )
        for key in ("origin_template", "internal_link", "internal", "is_shadow", "creator", "changer"):
            value = getattr(metadata, key)
            if value is not None:
                post.metadata[key] = value
        if metadata.shadow_base_language:
            post.metadata["shadow_base_language"] = metadata.shadow_base_language
        if metadata.ext:
            post.metadata["ext"] = metadata.ext
        with document.path.open("w", encoding="utf-8") as handle:
            handle.write(frontmatter.dumps(post))
            handle.write("\n")

    def _allocate_child_directory(self, parent_directory: Path, title: str) -> Path:
        slug = self._unique_slug(title, parent_directory)
        directory = parent_directory / slug
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------
    def iter_document_directories(self, parent: Path) -> Iterable[Path]:
        for candidate in sorted(parent.iterdir()):
            if candidate.is_dir() and (candidate / DOCUMENT_FILENAME).exists():
                yield candidate

    def _register_existing_slugs(self, directory: Path) -> None:
        for child in directory.iterdir():
            if child.is_dir():
                self._slug_usage[directory].add(child.name)
                self._register_existing_slugs(child)

    def _unique_slug(self, title: str, parent: Path) -> str:
        base = slugify(title)
        slug = base
        counter = 2
        used = self._slug_usage[parent]
        while slug in used:
            slug = f"{base}-{counter}"
            counter += 1
        used.add(slug)
        return slug

    def resolve_document_directory(self, raw_path: Union[str, Path]) -> Path:
        raw_path = Path(raw_path)
        base = self.root.resolve()
        candidate = raw_path if raw_path.is_absolute() else base / raw_path
        candidate = candidate.resolve()
        if candidate != base and base not in candidate.parents:
            raise ValueError(f"Path {raw_path} is outside of repository root {self.root}")
        if not candidate.exists():
            raise FileNotFoundError(f"Path {candidate} does not exist")
        directory = candidate if candidate.is_dir() else candidate.parent
        if not (directory / DOCUMENT_FILENAME).exists():
            raise FileNotFoundError(f"No {DOCUMENT_FILENAME} found in {directory}")
        return directory


def _iter_structures(structure: Structure) -> Iterable[Structure]:
    yield structure
    for child in structure.children or []:
        yield from _iter_structures(child)


def _assign(structure: Structure, name: str, value: Any) -> None:
    # Sections carry no value of their own.
    prop = structure.get_property(name)
    if prop.is_section:
        raise NoSuchPropertyError(name)
    prop.set_value(value)


def _lookup(table: dict[str, Any], value: str, label: str) -> Any:
    try:
        return table[value.lower()]
    except KeyError:
        raise ValueError(f"Unknown {label} {value!r}; expected one of {', '.join(table)}") from None


def _as_optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _as_optional_datetime(value: object) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
