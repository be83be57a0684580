"""Unit tests for the content Structure."""

import json
from datetime import datetime

import pytest

from contentkit.content import (
    ExtensionData,
    Metadata,
    NodeState,
    NodeType,
    Property,
    SectionProperty,
    Structure,
    StructureType,
    Tag,
)
from contentkit.errors import NoSuchPropertyError


def prop(name, *tags, value=None):
    return Property(name=name, value=value, tags=[Tag(tag_name, priority) for tag_name, priority in tags])


@pytest.fixture
def structure():
    return Structure(
        key="default",
        view="pages/default",
        controller="DefaultController",
        metadata=Metadata({"title": {"de": "Standard"}}),
        properties=[
            prop("title", ("sulu.node.name", 10), ("sulu.title", 1), value="Hello"),
            prop("url", ("sulu.rlp", 1), value="/hello"),
            SectionProperty(
                name="highlight",
                child_properties=[
                    prop("subtitle", ("sulu.title", 5), value="Sub"),
                    prop("teaser", value="Read more"),
                ],
            ),
            prop("article", value="<p>Body</p>"),
        ],
    )


# ============================================================
# Property lookup
# ============================================================


class TestProperties:
    def test_get_property_by_name(self, structure):
        assert structure.get_property("title").value == "Hello"

    def test_get_property_inside_section(self, structure):
        assert structure.get_property("subtitle").value == "Sub"

    def test_get_section_by_name(self, structure):
        assert structure.get_property("highlight").is_section

    def test_missing_property_raises(self, structure):
        with pytest.raises(NoSuchPropertyError):
            structure.get_property("missing")

    def test_has_property(self, structure):
        assert structure.has_property("title")
        assert structure.has_property("teaser")
        assert not structure.has_property("missing")

    def test_get_properties_unflattened(self, structure):
        properties = structure.get_properties()
        assert list(properties) == ["title", "url", "highlight", "article"]
        assert properties["highlight"].is_section

    def test_get_properties_flattened(self, structure):
        names = [p.name for p in structure.get_properties(flatten=True)]
        assert names == ["title", "url", "subtitle", "teaser", "article"]

    def test_flattened_length(self, structure):
        flattened = structure.get_properties(flatten=True)
        assert len(flattened) == 3 + 2
        assert not any(p.is_section for p in flattened)

    def test_readding_a_name_overwrites(self):
        first = prop("title", value="first")
        second = prop("title", value="second")
        structure = Structure(key="default", properties=[first, second])
        assert structure.get_property("title") is second
        assert structure.get_property_names() == ["title"]

    def test_property_names(self, structure):
        assert structure.get_property_names() == ["title", "url", "highlight", "article"]


class TestPropertyValues:
    def test_item_access(self, structure):
        assert structure["title"] == "Hello"
        assert structure["teaser"] == "Read more"

    def test_set_value(self, structure):
        structure["title"] = "Changed"
        assert structure.get_property("title").value == "Changed"

    def test_set_unknown_property_raises(self, structure):
        with pytest.raises(NoSuchPropertyError):
            structure["missing"] = "value"
        assert not structure.has_property("missing")

    def test_set_section_child_through_dynamic_write_raises(self, structure):
        with pytest.raises(NoSuchPropertyError):
            structure.set_property_value("teaser", "value")

    def test_contains(self, structure):
        assert "subtitle" in structure
        assert "missing" not in structure

    def test_section_has_no_value(self, structure):
        with pytest.raises(NoSuchPropertyError):
            structure.get_property_value("highlight")


# ============================================================
# Tag index
# ============================================================


class TestTags:
    def test_has_tag(self, structure):
        assert structure.has_tag("sulu.rlp")
        assert not structure.has_tag("unknown")

    def test_section_children_are_indexed(self, structure):
        properties = structure.get_properties_by_tag_name("sulu.title")
        assert {priority: p.name for priority, p in properties.items()} == {1: "title", 5: "subtitle"}

    def test_highest_and_lowest(self, structure):
        assert structure.get_property_by_tag_name("sulu.title").name == "subtitle"
        assert structure.get_property_by_tag_name("sulu.title", highest=False).name == "title"

    def test_unknown_tag_raises(self, structure):
        with pytest.raises(NoSuchPropertyError):
            structure.get_property_by_tag_name("unknown")
        with pytest.raises(NoSuchPropertyError):
            structure.get_properties_by_tag_name("unknown")

    def test_same_priority_overwrites_mapping(self):
        first = prop("first", ("tag", 3))
        second = prop("second", ("tag", 3))
        structure = Structure(key="default", properties=[first, second])
        assert dict(structure.get_properties_by_tag_name("tag")) == {3: second}

    def test_ties_keep_first_extreme(self):
        first = prop("first", ("tag", 3))
        second = prop("second", ("tag", 3))
        structure = Structure(key="default", properties=[first, second])
        assert structure.get_property_by_tag_name("tag") is first
        assert structure.get_property_by_tag_name("tag", highest=False) is first

    def test_extremes_follow_registration_sequence(self):
        properties = [
            prop("a", ("tag", 5)),
            prop("b", ("tag", 1)),
            prop("c", ("tag", 9)),
            prop("d", ("tag", 0)),
            prop("e", ("tag", 4)),
        ]
        structure = Structure(key="default", properties=properties)
        assert structure.get_property_by_tag_name("tag").name == "c"
        assert structure.get_property_by_tag_name("tag", highest=False).name == "d"
        assert sorted(structure.get_properties_by_tag_name("tag")) == [0, 1, 4, 5, 9]

    def test_tag_without_priority_uses_default(self):
        structure = Structure(key="default", properties=[Property(name="title", tags=[Tag("sulu.title")])])
        assert list(structure.get_properties_by_tag_name("sulu.title")) == [1]

    def test_tag_mapping_is_read_only(self, structure):
        with pytest.raises(TypeError):
            structure.get_properties_by_tag_name("sulu.rlp")[7] = prop("x")

    def test_property_value_by_tag_name(self, structure):
        assert structure.get_property_value_by_tag_name("sulu.node.name") == "Hello"


# ============================================================
# Resource locator and node name
# ============================================================


class TestResourceLocator:
    def test_content_node(self, structure):
        assert structure.get_resource_locator() == "/hello"

    def test_without_tag(self):
        assert Structure(key="default", properties=[prop("title")]).get_resource_locator() is None

    def test_external_link(self):
        structure = Structure(
            key="external",
            node_type=NodeType.EXTERNAL_LINK,
            properties=[prop("external", ("sulu.rlp", 1), value="example.com/page")],
        )
        assert structure.get_resource_locator() == "http://example.com/page"

    def test_external_link_without_tag_raises(self):
        structure = Structure(key="external", node_type=NodeType.EXTERNAL_LINK)
        with pytest.raises(NoSuchPropertyError):
            structure.get_resource_locator()

    def test_internal_link_delegates(self, structure):
        link = Structure(
            key="internal",
            node_type=NodeType.INTERNAL_LINK,
            internal_link_content=structure,
            properties=[prop("url", ("sulu.rlp", 1), value="/own")],
        )
        assert link.get_resource_locator() == "/hello"

    def test_internal_link_without_target_uses_own_tag(self):
        link = Structure(
            key="internal",
            node_type=NodeType.INTERNAL_LINK,
            properties=[prop("url", ("sulu.rlp", 1), value="/own")],
        )
        assert link.get_resource_locator() == "/own"

    def test_node_name(self, structure):
        assert structure.get_node_name() == "Hello"

    def test_node_name_of_internal_link(self, structure):
        link = Structure(key="internal", node_type=NodeType.INTERNAL_LINK, internal_link_content=structure)
        assert link.get_node_name() == "Hello"

    def test_node_name_missing(self):
        assert Structure(key="default").get_node_name() is None


# ============================================================
# State, title and serialization
# ============================================================


class TestState:
    def test_defaults(self):
        structure = Structure(key="default")
        assert structure.node_state == NodeState.TEST
        assert structure.node_type == NodeType.CONTENT
        assert structure.cache_lifetime == 604800
        assert structure.shadow_base_language == ""
        assert structure.nav_contexts == []
        assert structure.published is None

    def test_published_state(self):
        structure = Structure(key="default", node_state=NodeState.PUBLISHED)
        assert structure.published_state is True
        structure.node_state = NodeState.ARCHIVED
        assert structure.published_state is False

    def test_title_from_metadata(self, structure):
        assert structure.get_title("de") == "Standard"

    def test_title_falls_back_to_key(self, structure):
        assert structure.get_title("fr") == "Default"


COMPLETE_KEYS = {
    "id",
    "path",
    "nodeType",
    "internal",
    "nodeState",
    "published",
    "globalState",
    "publishedState",
    "navContexts",
    "enabledShadowLanguages",
    "concreteLanguages",
    "shadowOn",
    "shadowBaseLanguage",
    "template",
    "originTemplate",
    "hasSub",
    "creator",
    "changer",
    "created",
    "changed",
    "ext",
}


class TestToDict:
    def test_complete_keys(self, structure):
        data = structure.to_dict()
        assert set(data) == COMPLETE_KEYS | {"title", "url", "subtitle", "teaser", "article"}
        assert "highlight" not in data

    def test_complete_values(self, structure):
        structure.uuid = "123"
        structure.path = "/hello"
        structure.ext = ExtensionData.model_validate({"seo": {"title": "SEO"}})
        data = structure.to_dict()
        assert data["id"] == "123"
        assert data["template"] == "default"
        assert data["teaser"] == "Read more"
        assert data["ext"] == {"seo": {"title": "SEO"}}
        assert data["publishedState"] is False
        assert "linked" not in data
        assert "type" not in data

    def test_summary(self, structure):
        data = structure.to_dict(complete=False)
        assert data["title"] == "Hello"
        assert set(data) < COMPLETE_KEYS | {"title"}
        assert "creator" not in data
        assert "article" not in data

    def test_summary_requires_title(self):
        with pytest.raises(NoSuchPropertyError):
            Structure(key="default").to_dict(complete=False)

    @pytest.mark.parametrize(
        "node_type, linked",
        [(NodeType.INTERNAL_LINK, "internal"), (NodeType.EXTERNAL_LINK, "external")],
    )
    def test_linked_marker(self, structure, node_type, linked):
        structure.node_type = node_type
        assert structure.to_dict()["linked"] == linked
        assert structure.to_dict(complete=False)["linked"] == linked

    def test_structure_type(self, structure):
        structure.structure_type = StructureType("ghost", "de")
        assert structure.to_dict()["type"] == {"name": "ghost", "value": "de"}
        assert structure.to_dict(complete=False)["type"] == {"name": "ghost", "value": "de"}

    def test_to_json(self, structure):
        structure.created = datetime(2024, 5, 1, 12, 30)
        data = json.loads(structure.to_json())
        assert data["created"] == "2024-05-01T12:30:00"
        assert data["nodeType"] == 1
        assert data["title"] == "Hello"
