"""
Unit Tests for the Field Base Class
===================================

Translation handling, HTML rendering, search keywords, storage, queries, and
element lifecycle events.
"""

from datetime import datetime, timezone

import pytest
from pydantic import BaseModel

from contentkit.core.elements import Element, ElementQuery
from contentkit.core.events import Component
from contentkit.core.fields import Field, FieldGroup, NotSupportedError, PlainText, Table
from contentkit.core.fields.base import (
    EVENT_AFTER_ELEMENT_SAVE,
    EVENT_BEFORE_ELEMENT_DELETE,
    EVENT_BEFORE_ELEMENT_RESTORE,
    EVENT_BEFORE_ELEMENT_SAVE,
    EVENT_DEFINE_INPUT_HTML,
    EVENT_DEFINE_KEYWORDS,
    STATUS_MODIFIED,
    STATUS_OUTDATED,
    value_to_string,
)


class TestFieldInit:
    """Test construction-time normalization."""

    def test_defaults(self):
        field = Field(name="Body", handle="body")
        assert field.translation_method == "none"
        assert field.translation_key_format is None
        assert field.is_new is True

    def test_unsupported_translation_method_falls_back(self):
        field = Table(name="Rows", handle="rows", translation_method="site")
        assert field.translation_method == "none"

    def test_key_format_cleared_unless_custom(self):
        field = PlainText(handle="body", translation_method="site", translation_key_format="{site.handle}")
        assert field.translation_key_format is None

    def test_key_format_kept_for_custom(self):
        field = PlainText(handle="body", translation_method="custom", translation_key_format="{site.handle}")
        assert field.translation_key_format == "{site.handle}"

    def test_supported_translation_methods(self):
        assert Table.supported_translation_methods() == ["none"]
        assert PlainText.supported_translation_methods() == ["none", "site", "siteGroup", "language", "custom"]

    def test_str_uses_name_then_class(self):
        assert str(Field(name="Body")) == "Body"
        assert str(PlainText()) == "PlainText"

    def test_display_name(self):
        assert PlainText.display_name() == "Plain Text"
        assert Field.value_type() == "mixed"


class TestTranslation:
    """Test translation keys and descriptions."""

    @pytest.mark.parametrize(
        "method, expected",
        [("none", "1"), ("site", "1"), ("siteGroup", "7"), ("language", "en-US")],
    )
    def test_translation_keys(self, element, method, expected):
        field = PlainText(handle="body", translation_method=method)
        assert field.get_translation_key(element) == expected

    def test_custom_shorthand_key(self, element):
        field = PlainText(handle="body", translation_method="custom", translation_key_format="{site.handle}")
        assert field.get_translation_key(element) == "default"

    def test_custom_template_key(self, element):
        field = PlainText(
            handle="body",
            translation_method="custom",
            translation_key_format="{{ object.site.language|lower }}",
        )
        assert field.get_translation_key(element) == "en-us"

    def test_is_translatable(self, element):
        assert not PlainText(handle="a").is_translatable(element)
        assert PlainText(handle="a", translation_method="language").is_translatable(element)

    def test_custom_translatable_depends_on_key(self, site):
        field = PlainText(handle="a", translation_method="custom", translation_key_format="{title}")
        assert field.is_translatable() is True
        assert field.is_translatable(Element(site=site, title="Hello")) is True
        assert field.is_translatable(Element(site=site, title=None)) is False

    def test_translation_description(self, element):
        assert PlainText(handle="a").get_translation_description(element) is None
        assert (
            PlainText(handle="a", translation_method="site").get_translation_description(element)
            == "This field is translated for each site."
        )

    def test_status(self, element):
        field = PlainText(handle="body")
        assert field.get_status(element) is None

        element.outdated_fields.add("body")
        assert field.get_status(element)[0] == STATUS_OUTDATED

        element.modified_fields.add("body")
        assert field.get_status(element) == (STATUS_MODIFIED, "This field has been modified.")


class TestInputHtml:
    """Test input, static, and table HTML."""

    def test_default_input_is_escaped_textarea(self):
        field = Field(handle="body")
        assert field.get_input_html("<b>hi</b>") == '<textarea name="body">&lt;b&gt;hi&lt;/b&gt;</textarea>'

    def test_define_input_html_event_can_replace_html(self):
        field = Field(handle="body")

        def replace(event):
            event.html = f"<div>{event.html}</div>"

        field.on(EVENT_DEFINE_INPUT_HTML, replace)
        assert field.get_input_html("x") == '<div><textarea name="body">x</textarea></div>'

    def test_static_html_disables_controls(self):
        assert PlainText(handle="title").get_static_html("x", None) == (
            '<input type="text" name="title" value="x" disabled>'
        )
        assert Field(handle="body").get_static_html("x", None) == (
            '<textarea name="body" disabled>x</textarea>'
        )

    def test_table_attribute_html_strips_and_escapes(self, element):
        field = Field(handle="body")
        assert field.get_table_attribute_html("<p>A & B</p>", element) == "A &amp; B"
        assert field.get_table_attribute_html(None, element) == ""

    def test_value_emptiness(self, element):
        field = Field(handle="body")
        assert field.is_value_empty(None, element)
        assert field.is_value_empty("", element)
        assert field.is_value_empty([], element)
        assert not field.is_value_empty(0, element)

    def test_defaults(self):
        field = Field(handle="body")
        assert field.use_fieldset() is False
        assert field.normalize_value("raw") == "raw"
        assert field.get_element_validation_rules() == []
        assert field.get_content_column_type() == "string"


class TestSearchKeywords:
    """Test keyword extraction and the defineKeywords event."""

    def test_value_flattened(self, element):
        field = Field(handle="tags")
        assert field.get_search_keywords(["a", ["b", "c"], None], element) == "a b c"

    def test_value_to_string(self):
        assert value_to_string(True) == "1"
        assert value_to_string(False) == ""
        assert value_to_string({"x": 1, "y": 2}) == "1 2"

    def test_handled_event_overrides_keywords(self, element):
        field = Field(handle="flag")

        def define(event):
            event.keywords = "foo" if event.value else "bar"
            event.handled = True

        Component.on_class(Field, EVENT_DEFINE_KEYWORDS, define)

        assert field.get_search_keywords(True, element) == "foo"
        assert field.get_search_keywords(False, element) == "bar"

    def test_unhandled_event_keeps_default(self, element):
        field = Field(handle="flag")

        def define(event):
            event.keywords = "ignored"

        field.on(EVENT_DEFINE_KEYWORDS, define)

        assert field.get_search_keywords("value", element) == "value"


class TestStorage:
    """Test serialization, copying, and sort options."""

    def test_serialize_datetime(self):
        value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert Field(handle="d").serialize_value(value) == "2024-01-02 03:04:05"

    def test_serialize_iso_8601_string_to_utc(self):
        assert Field(handle="d").serialize_value("2024-01-02T03:04:05+02:00") == "2024-01-02 01:04:05"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2020-01-01T00:00:00+0000", "2020-01-01 00:00:00"),
            ("2020-01-01T05:30:00+0530", "2020-01-01 00:00:00"),
            ("2020-01-01T00:00:00.5+00:00", "2020-01-01 00:00:00"),
            ("2020-01-01T00:00:00.123456789Z", "2020-01-01 00:00:00"),
        ],
    )
    def test_serialize_iso_8601_offset_and_fraction_variants(self, value, expected):
        assert Field(handle="d").serialize_value(value) == expected

    def test_serialize_leaves_plain_strings(self):
        field = Field(handle="d")
        assert field.serialize_value("2024-01-02") == "2024-01-02"
        assert field.serialize_value("hello") == "hello"

    def test_serialize_prefers_serialize_method(self):
        class Money:
            def serialize(self):
                return "10 USD"

        assert Field(handle="m").serialize_value(Money()) == "10 USD"

    def test_serialize_pydantic_model(self):
        class Point(BaseModel):
            x: int
            y: int

        assert Field(handle="p").serialize_value(Point(x=1, y=2)) == {"x": 1, "y": 2}

    def test_copy_value(self, site):
        field = Field(handle="d")
        source = Element(site=site, field_values={"d": datetime(2024, 5, 6, tzinfo=timezone.utc)})
        target = Element(site=site)

        field.copy_value(source, target)

        assert target.get_field_value("d") == "2024-05-06 00:00:00"

    def test_sort_option(self):
        field = PlainText(id=5, name="Body", handle="body", column_suffix="abc12345")
        assert field.get_sort_option() == {
            "label": "Body",
            "order_by": ["field_body_abc12345", "elements.id"],
            "attribute": "field:5",
        }

    def test_sort_option_requires_content_column(self):
        with pytest.raises(NotSupportedError):
            Table(id=3, name="Rows", handle="rows").get_sort_option()


class TestQueries:
    """Test element query modification."""

    def test_null_value_leaves_query_alone(self):
        query = ElementQuery()
        assert PlainText(handle="body").modify_elements_query(query, None) is None
        assert query.conditions == []

    def test_value_adds_content_condition(self):
        query = ElementQuery()
        field = PlainText(handle="body", column_suffix="abc12345")

        assert field.modify_elements_query(query, "hello") is None
        assert query.conditions == [("content.field_body_abc12345", "hello")]

    def test_field_without_column_rejects_criteria(self):
        assert Table(handle="rows").modify_elements_query(ElementQuery(), "x") is False

    def test_eager_loading_fields_join_index_query(self):
        query = ElementQuery()
        Table(handle="rows").modify_element_index_query(query)
        PlainText(handle="body").modify_element_index_query(query)
        assert query.eager_loads == ["rows"]


class TestLifecycle:
    """Test element lifecycle events and cancellation."""

    def test_before_element_save_valid_by_default(self, element):
        assert PlainText(handle="body").before_element_save(element, True) is True

    @pytest.mark.parametrize(
        "event_name, call",
        [
            (EVENT_BEFORE_ELEMENT_SAVE, lambda f, e: f.before_element_save(e, False)),
            (EVENT_BEFORE_ELEMENT_DELETE, lambda f, e: f.before_element_delete(e)),
            (EVENT_BEFORE_ELEMENT_RESTORE, lambda f, e: f.before_element_restore(e)),
        ],
    )
    def test_listener_can_cancel(self, element, event_name, call):
        field = PlainText(handle="body")

        def veto(event):
            event.is_valid = False

        Component.on_class(Field, event_name, veto)

        assert call(field, element) is False

    def test_after_element_save_passes_is_new(self, element):
        field = PlainText(handle="body")
        seen = []
        field.on(EVENT_AFTER_ELEMENT_SAVE, lambda e: seen.append((e.element, e.is_new)))

        field.after_element_save(element, True)

        assert seen == [(element, True)]

    def test_before_save_sets_default_context(self):
        field = PlainText(handle="body")
        assert field.before_save(True) is True
        assert field.context == "global"

    def test_is_fresh(self, element):
        field = PlainText(handle="body")
        assert field.is_fresh() is True
        assert field.is_fresh(element) is False

        field.set_is_fresh(True)
        assert field.is_fresh(element) is True

    def test_request_param_name(self, site):
        field = PlainText(handle="body")
        assert field.request_param_name(None) is None
        assert field.request_param_name(Element(site=site)) == "fields.body"
        assert field.request_param_name(Element(site=site, field_param_namespace=None)) == "body"

    def test_get_group(self, registry):
        group = registry.save_group(FieldGroup(name="Common"))
        field = PlainText(handle="body", group_id=group.id)
        assert field.get_group() is None

        field.registry = registry
        assert field.get_group() is group


class TestGraphQL:
    """Test GraphQL descriptors."""

    def test_descriptors(self):
        field = PlainText(handle="body", instructions="The body")
        assert field.include_in_gql_schema(None) is True
        assert field.get_content_gql_type() == "String"
        assert field.get_content_gql_mutation_argument_type() == {
            "name": "body",
            "type": "String",
            "description": "The body",
        }
        assert field.get_content_gql_query_argument_type() == {"name": "body", "type": "[QueryArgument]"}
        assert field.get_eager_loading_gql_conditions() == {}
