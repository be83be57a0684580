"""In-memory representation of a content node instantiated from a template."""

from __future__ import annotations

import json
from dataclasses import InitVar, dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from contentkit.content.models import (
    ExtensionData,
    Metadata,
    NodeState,
    NodeType,
    Property,
    SectionProperty,
    StructureType,
)
from contentkit.errors import NoSuchPropertyError


AnyProperty = Union[Property, SectionProperty]

RESOURCE_LOCATOR_TAG = "sulu.rlp"
NODE_NAME_TAG = "sulu.node.name"
DEFAULT_CACHE_LIFETIME = 604800
# FIXME external links are always rendered with this scheme
EXTERNAL_LINK_SCHEME = "http://"


@dataclass(slots=True, eq=False)
class _TagEntry:
    """Priority index of all properties declaring one tag name."""

    tag: Any
    properties: dict[int, Property]
    highest: Property
    highest_priority: int
    lowest: Property
    lowest_priority: int


@dataclass(slots=True, eq=False)
class Structure:
    """A content node following a template.

    Properties are registered once, in template declaration order, when the
    structure is constructed; the tag index is maintained while they are
    added. The remaining fields are decorated by the content mapper after the
    node has been read from or before it is written to the backing store.
    """

    key: str
    view: Optional[str] = None
    controller: Optional[str] = None
    cache_lifetime: int = DEFAULT_CACHE_LIFETIME
    metadata: Metadata = field(default_factory=Metadata)
    properties: InitVar[Iterable[AnyProperty]] = ()

    origin_template: Optional[str] = None

    uuid: Optional[str] = None
    path: Optional[str] = None
    creator: Optional[int] = None
    changer: Optional[int] = None
    created: Optional[datetime] = None
    changed: Optional[datetime] = None
    published: Optional[datetime] = None

    node_state: NodeState = NodeState.TEST
    global_state: Optional[NodeState] = None
    has_children: bool = False
    children: Optional[list["Structure"]] = field(default=None, repr=False)

    language_code: Optional[str] = None
    webspace_key: Optional[str] = None
    nav_contexts: list[str] = field(default_factory=list)
    has_translation: Optional[bool] = None
    is_shadow: Optional[bool] = None
    shadow_base_language: str = ""
    enabled_shadow_languages: list[str] = field(default_factory=list)
    concrete_languages: list[str] = field(default_factory=list)

    node_type: NodeType = NodeType.CONTENT
    internal: Optional[bool] = None
    internal_link_content: Optional["Structure"] = field(default=None, repr=False)
    structure_type: Optional[StructureType] = None
    ext: ExtensionData = field(default_factory=ExtensionData)

    _properties: dict[str, AnyProperty] = field(init=False, repr=False, default_factory=dict)
    _tags: dict[str, _TagEntry] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self, properties: Iterable[AnyProperty]) -> None:
        for prop in properties:
            self.add_property(prop)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------
    def add_property(self, prop: AnyProperty) -> None:
        """Register ``prop`` under its name and index its tags.

        Sections contribute the tags of their children, never their own.
        Only meant to be used while the structure is being assembled.
        """

        if prop.is_section:
            for child in prop.child_properties:
                self._add_property_tags(child)
        else:
            self._add_property_tags(prop)
        self._properties[prop.name] = prop

    def _add_property_tags(self, prop: Property) -> None:
        for tag in prop.tags:
            priority = tag.effective_priority
            entry = self._tags.get(tag.name)
            if entry is None:
                self._tags[tag.name] = _TagEntry(
                    tag=tag,
                    properties={priority: prop},
                    highest=prop,
                    highest_priority=priority,
                    lowest=prop,
                    lowest_priority=priority,
                )
                continue

            entry.properties[priority] = prop
            if priority > entry.highest_priority:
                entry.highest = prop
                entry.highest_priority = priority
            if priority < entry.lowest_priority:
                entry.lowest = prop
                entry.lowest_priority = priority

    # ------------------------------------------------------------------
    # Property lookup
    # ------------------------------------------------------------------
    def get_properties(self, flatten: bool = False) -> Union[Mapping[str, AnyProperty], list[Property]]:
        """Return the registered properties.

        Without ``flatten`` the name -> property mapping is returned with
        sections as single entries; with ``flatten`` a list is returned in
        which every section is replaced by its children.
        """

        if not flatten:
            return MappingProxyType(self._properties)

        result: list[Property] = []
        for prop in self._properties.values():
            if prop.is_section:
                result.extend(prop.child_properties)
            else:
                result.append(prop)
        return result

    def get_property_names(self) -> list[str]:
        return list(self._properties)

    def _find_property(self, name: str) -> Optional[AnyProperty]:
        prop = self._properties.get(name)
        if prop is not None:
            return prop
        for candidate in self.get_properties(flatten=True):
            if candidate.name == name:
                return candidate
        return None

    def get_property(self, name: str) -> AnyProperty:
        prop = self._find_property(name)
        if prop is None:
            raise NoSuchPropertyError(name)
        return prop

    def has_property(self, name: str) -> bool:
        return self._find_property(name) is not None

    def get_property_value(self, name: str) -> Any:
        prop = self.get_property(name)
        if prop.is_section:
            raise NoSuchPropertyError(name)
        return prop.value

    def set_property_value(self, name: str, value: Any) -> None:
        """Assign the value of a registered top-level property."""

        prop = self._properties.get(name)
        if prop is None or prop.is_section:
            raise NoSuchPropertyError(name)
        prop.set_value(value)

    def __getitem__(self, name: str) -> Any:
        return self.get_property_value(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set_property_value(name, value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_property(name)

    # ------------------------------------------------------------------
    # Tag lookup
    # ------------------------------------------------------------------
    def has_tag(self, tag_name: str) -> bool:
        return tag_name in self._tags

    def get_property_by_tag_name(self, tag_name: str, highest: bool = True) -> Property:
        entry = self._tags.get(tag_name)
        if entry is None:
            raise NoSuchPropertyError(tag_name)
        return entry.highest if highest else entry.lowest

    def get_properties_by_tag_name(self, tag_name: str) -> Mapping[int, Property]:
        entry = self._tags.get(tag_name)
        if entry is None:
            raise NoSuchPropertyError(tag_name)
        return MappingProxyType(entry.properties)

    def get_property_value_by_tag_name(self, tag_name: str) -> Any:
        return self.get_property_by_tag_name(tag_name, highest=True).value

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def published_state(self) -> bool:
        return self.node_state == NodeState.PUBLISHED

    def get_title(self, locale: Optional[str]) -> str:
        return self.metadata.get("title", locale, self.key.capitalize())

    def get_resource_locator(self) -> Optional[str]:
        link = self.internal_link_content
        if (
            self.node_type == NodeType.INTERNAL_LINK
            and link is not None
            and link.has_tag(RESOURCE_LOCATOR_TAG)
        ):
            return link.get_property_value_by_tag_name(RESOURCE_LOCATOR_TAG)
        if self.node_type == NodeType.EXTERNAL_LINK:
            target = self.get_property_by_tag_name(RESOURCE_LOCATOR_TAG).value
            return f"{EXTERNAL_LINK_SCHEME}{target}"
        if self.has_tag(RESOURCE_LOCATOR_TAG):
            return self.get_property_value_by_tag_name(RESOURCE_LOCATOR_TAG)
        return None

    def get_node_name(self) -> Optional[str]:
        link = self.internal_link_content
        if (
            self.node_type == NodeType.INTERNAL_LINK
            and link is not None
            and link.has_tag(NODE_NAME_TAG)
        ):
            return link.get_property_value_by_tag_name(NODE_NAME_TAG)
        if self.has_tag(NODE_NAME_TAG):
            return self.get_property_value_by_tag_name(NODE_NAME_TAG)
        return None

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self, complete: bool = True) -> dict[str, Any]:
        """Return the presentation snapshot consumed by templates and APIs.

        Property values share the top-level namespace with the node fields,
        a property named like one of those fields overwrites it.
        """

        if complete:
            result: dict[str, Any] = {
                "id": self.uuid,
                "path": self.path,
                "nodeType": self.node_type,
                "internal": self.internal,
                "nodeState": self.node_state,
                "published": self.published,
                "globalState": self.global_state,
                "publishedState": self.published_state,
                "navContexts": self.nav_contexts,
                "enabledShadowLanguages": self.enabled_shadow_languages,
                "concreteLanguages": self.concrete_languages,
                "shadowOn": self.is_shadow,
                "shadowBaseLanguage": self.shadow_base_language,
                "template": self.key,
                "originTemplate": self.origin_template,
                "hasSub": self.has_children,
                "creator": self.creator,
                "changer": self.changer,
                "created": self.created,
                "changed": self.changed,
            }
        else:
            result = {
                "id": self.uuid,
                "path": self.path,
                "nodeType": self.node_type,
                "internal": self.internal,
                "nodeState": self.node_state,
                "globalState": self.global_state,
                "publishedState": self.published_state,
                "navContexts": self.nav_contexts,
                "hasSub": self.has_children,
                "title": self.get_property_value("title"),
            }

        if self.structure_type is not None:
            result["type"] = self.structure_type.to_dict()
        if self.node_type == NodeType.INTERNAL_LINK:
            result["linked"] = "internal"
        elif self.node_type == NodeType.EXTERNAL_LINK:
            result["linked"] = "external"

        if complete:
            for prop in self.get_properties(flatten=True):
                result[prop.name] = prop.value
            result["ext"] = self.ext.to_dict()
        return result

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(complete=True), default=_json_default, **kwargs)


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
