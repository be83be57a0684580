"""Unit tests for the local template and document repository."""

from datetime import datetime

import frontmatter
import pytest
from pydantic import ValidationError

from contentkit.content import NodeState, NodeType
from contentkit.errors import NoSuchPropertyError, TemplateNotFoundError
from contentkit.local import LocalContentRepository, TemplateRegistry
from contentkit.local.naming import slugify


DEFAULT_TEMPLATE = """\
key: default
view: pages/default
controller: DefaultController
cache_lifetime: 3600
meta:
  title:
    en: Default page
body: article
properties:
  - name: title
    type: text_line
    mandatory: true
    tags:
      - name: sulu.node.name
        priority: 10
  - name: url
    type: resource_locator
    tags:
      - name: sulu.rlp
  - section: highlight
    properties:
      - name: subtitle
      - name: article
        type: text_editor
"""

LINK_TEMPLATE = """\
properties:
  - name: title
  - name: external
    tags:
      - name: sulu.rlp
"""


def write_document(directory, body="", **metadata):
    directory.mkdir(parents=True, exist_ok=True)
    post = frontmatter.Post(body)
    post.metadata.update(metadata)
    (directory / "page.md").write_text(frontmatter.dumps(post), encoding="utf-8")


@pytest.fixture
def templates_dir(tmp_path):
    directory = tmp_path / "templates"
    directory.mkdir()
    (directory / "default.yaml").write_text(DEFAULT_TEMPLATE, encoding="utf-8")
    (directory / "link.yml").write_text(LINK_TEMPLATE, encoding="utf-8")
    (directory / "README.txt").write_text("ignored", encoding="utf-8")
    return directory


@pytest.fixture
def workspace(tmp_path):
    root = tmp_path / "content"
    write_document(
        root,
        body="Welcome home",
        template="default",
        uuid="root-uuid",
        language="en",
        webspace="example",
        node_state="published",
        nav_contexts=["main"],
        created=datetime(2024, 1, 2, 3, 4, 5),
        ext={"seo": {"title": "Home"}},
        properties={"title": "Home", "url": "/", "subtitle": "Start here"},
    )
    write_document(
        root / "about",
        template="default",
        uuid="about-uuid",
        node_state="test",
        properties={"title": "About", "url": "/about"},
    )
    write_document(
        root / "about" / "team",
        template="default",
        uuid="team-uuid",
        node_state="published",
        properties={"title": "Team", "url": "/about/team"},
    )
    write_document(
        root / "shortcut",
        template="default",
        node_type="internal",
        internal_link="about-uuid",
        properties={"title": "Shortcut", "url": "/shortcut"},
    )
    write_document(
        root / "partner",
        template="link",
        node_type="external",
        properties={"title": "Partner", "external": "partner.example.com"},
    )
    return root


@pytest.fixture
def repository(workspace, templates_dir):
    return LocalContentRepository(workspace, templates=TemplateRegistry.from_directory(templates_dir))


class TestTemplateRegistry:
    def test_loads_yaml_files(self, templates_dir):
        registry = TemplateRegistry.from_directory(templates_dir)
        assert registry.keys() == ["default", "link"]
        assert "default" in registry

    def test_key_defaults_to_file_name(self, templates_dir):
        assert TemplateRegistry.from_directory(templates_dir).get("link").key == "link"

    def test_unknown_template(self, templates_dir):
        with pytest.raises(TemplateNotFoundError):
            TemplateRegistry.from_directory(templates_dir).get("missing")

    def test_invalid_template(self, tmp_path):
        (tmp_path / "broken.yaml").write_text("properties:\n  - typo: title\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            TemplateRegistry.from_directory(tmp_path)

    def test_sections_are_built(self, templates_dir):
        properties = TemplateRegistry.from_directory(templates_dir).get("default").build_properties()
        assert [prop.name for prop in properties] == ["title", "url", "highlight"]
        assert properties[2].is_section
        assert [child.name for child in properties[2].child_properties] == ["subtitle", "article"]


class TestLoadTree:
    def test_root_structure(self, repository):
        root = repository.load_tree()
        assert root.key == "default"
        assert root.path == "/"
        assert root.uuid == "root-uuid"
        assert root.cache_lifetime == 3600
        assert root.node_state == NodeState.PUBLISHED
        assert root.nav_contexts == ["main"]
        assert root.created == datetime(2024, 1, 2, 3, 4, 5)
        assert root.get_title("en") == "Default page"
        assert root["subtitle"] == "Start here"
        assert root["article"].strip() == "Welcome home"
        assert root.to_dict()["ext"] == {"seo": {"title": "Home"}}

    def test_children(self, repository):
        root = repository.load_tree()
        assert root.has_children
        assert [child.path for child in root.children] == ["/about", "/partner", "/shortcut"]
        about = root.children[0]
        assert about.has_children
        assert about.children[0].path == "/about/team"
        assert about.children[0].has_children is False

    def test_global_state_inherits_unpublished_ancestor(self, repository):
        team = repository.load_tree().children[0].children[0]
        assert team.node_state == NodeState.PUBLISHED
        assert team.global_state == NodeState.TEST

    def test_internal_link_is_resolved(self, repository):
        shortcut = repository.load_structure("shortcut")
        assert shortcut.node_type == NodeType.INTERNAL_LINK
        assert shortcut.get_resource_locator() == "/about"
        assert shortcut.get_node_name() == "About"
        assert shortcut.to_dict()["linked"] == "internal"

    def test_external_link(self, repository):
        partner = repository.load_structure("partner/page.md")
        assert partner.get_resource_locator() == "http://partner.example.com"

    def test_unknown_property_in_document(self, repository, workspace):
        write_document(workspace / "broken", template="default", properties={"missing": "value"})
        with pytest.raises(NoSuchPropertyError):
            repository.load_tree()

    def test_section_cannot_hold_a_value(self, repository, workspace):
        write_document(workspace / "broken", template="default", properties={"highlight": "value"})
        with pytest.raises(NoSuchPropertyError):
            repository.load_tree()

    def test_section_children_hold_values(self, repository, workspace):
        write_document(workspace / "intro", template="default", properties={"subtitle": "Hello"})
        assert repository.load_structure("intro")["subtitle"] == "Hello"

    def test_unknown_node_state(self, repository, workspace):
        write_document(workspace / "broken", template="default", node_state="deleted")
        with pytest.raises(ValueError):
            repository.load_tree()

    def test_missing_root_document(self, tmp_path, templates_dir):
        repository = LocalContentRepository(tmp_path / "empty", templates=TemplateRegistry.from_directory(templates_dir))
        with pytest.raises(FileNotFoundError):
            repository.load_tree()

    def test_path_outside_workspace(self, repository, tmp_path):
        with pytest.raises(ValueError):
            repository.load_structure(tmp_path / "templates")


class TestCreateDocument:
    def test_creates_child_document(self, repository, workspace):
        document = repository.create_document(workspace, title="About", template="default", language="de")
        assert document.path == workspace / "about-2" / "page.md"

        post = frontmatter.load(document.path)
        assert post.metadata["template"] == "default"
        assert post.metadata["language"] == "de"
        assert post.metadata["properties"] == {"title": "About", "url": "/about-2"}

        structure = repository.load_structure("about-2")
        assert structure["title"] == "About"
        assert structure.get_resource_locator() == "/about-2"
        assert structure.concrete_languages == ["de"]

    def test_creates_root_document(self, tmp_path, templates_dir):
        root = tmp_path / "fresh"
        repository = LocalContentRepository(root, templates=TemplateRegistry.from_directory(templates_dir))
        document = repository.create_document(root, title="Home", template="default")
        assert document.path == root / "page.md"
        assert repository.load_tree()["title"] == "Home"

    def test_unknown_template(self, repository, workspace):
        with pytest.raises(TemplateNotFoundError):
            repository.create_document(workspace, title="About", template="missing")


class TestSlugify:
    def test_basic(self):
        assert slugify("Hello, World!") == "hello-world"

    def test_fallback(self):
        assert slugify("!!!") == "document"

    def test_length_cap(self):
        assert len(slugify("a" * 200)) == 120
