"""Unit tests for sorting keys into pass-through, joint-group and ordinary work items."""
from transl8.content_classifier import (
    LinkedContentPattern,
    classify_keys,
    find_joint_group,
    is_pass_through_key,
)
from transl8.tree_model import flatten_keys


class TestPassThroughKeys:

    def test_href_is_pass_through_by_default(self):
        assert is_pass_through_key("a.href")
        assert is_pass_through_key("footer.links.0.href")
        assert not is_pass_through_key("a.hrefs")
        assert not is_pass_through_key("a.text")

    def test_custom_patterns(self):
        assert is_pass_through_key("meta.url", ["*.url", "*.href"])
        assert not is_pass_through_key("meta.url", [])

    def test_pass_through_value_is_never_translated(self):
        source = {"a": {"href": "https://x", "label": "Open"}}

        classified = classify_keys(source, ["a.href", "a.label"], ["*.href"])

        assert classified.pass_through == ("a.href",)
        assert classified.ordinary == ("a.label",)


class TestJointGroups:

    def test_description_with_links_forms_group(self, source_tree):
        group = find_joint_group(source_tree, "home.hero.description")

        assert group is not None
        assert group.description == "Read our guide and the FAQ to get started."
        assert group.link_text_keys == ("home.hero.links.0.text", "home.hero.links.1.text")
        assert group.link_texts == ("guide", "FAQ")
        assert group.keys[0] == "home.hero.description"

    def test_links_without_text_do_not_form_group(self):
        source = {"s": {"description": "See docs", "links": [{"text": "docs"}, {"href": "/x"}]}}

        assert find_joint_group(source, "s.description") is None

    def test_empty_links_do_not_form_group(self):
        source = {"s": {"description": "See docs", "links": []}}

        assert find_joint_group(source, "s.description") is None

    def test_custom_pattern_field_names_are_used(self):
        pattern = LinkedContentPattern("*.body", "anchors", "label", "url")
        source = {"card": {"body": "Open the help center", "anchors": [{"label": "help center", "url": "/help"}]}}

        classified = classify_keys(source, flatten_keys(source), ["*.url"], [pattern])

        assert classified.pass_through == ("card.anchors.0.url",)
        assert len(classified.joint_groups) == 1
        assert classified.joint_groups[0].link_text_keys == ("card.anchors.0.label",)
        assert classified.ordinary == ()

    def test_pattern_from_dict_accepts_both_key_styles(self):
        assert LinkedContentPattern.from_dict({"descriptionPattern": "*.body", "linksKey": "anchors"}) == \
            LinkedContentPattern("*.body", "anchors", "text", "href")
        assert LinkedContentPattern.from_dict({"link_text_field": "label"}).link_text_field == "label"


class TestClassifyKeys:

    def test_full_partition(self, source_tree):
        classified = classify_keys(source_tree, flatten_keys(source_tree))

        assert classified.pass_through == (
            "home.hero.links.0.href",
            "home.hero.links.1.href",
            "footer.privacy.href",
        )
        assert [g.description_key for g in classified.joint_groups] == ["home.hero.description"]
        assert classified.ordinary == (
            "common.save",
            "common.cancel",
            "common.greeting",
            "home.hero.title",
            "footer.privacy.label",
        )
        assert classified.total == len(flatten_keys(source_tree))

    def test_link_text_keys_never_appear_as_ordinary(self, source_tree):
        classified = classify_keys(source_tree, ["home.hero.links.0.text", "home.hero.description"])

        assert "home.hero.links.0.text" not in classified.ordinary
        assert classified.joint_groups[0].link_text_keys == ("home.hero.links.0.text", "home.hero.links.1.text")

    def test_non_string_values_are_ignored(self):
        source = {"count": 3, "label": "Items", "flag": None}

        classified = classify_keys(source, ["count", "label", "flag"])

        assert classified.ordinary == ("label",)
        assert classified.pass_through == ()

    def test_empty_linked_patterns_fall_back_to_default(self, source_tree):
        classified = classify_keys(source_tree, flatten_keys(source_tree), None, [])

        assert len(classified.joint_groups) == 1

    def test_link_href_field_is_copied_without_pass_through_pattern(self):
        pattern = LinkedContentPattern("*.body", "anchors", "label", "url")
        source = {"card": {"body": "Open the help center", "anchors": [{"label": "help center", "url": "/help"}]}}

        classified = classify_keys(source, flatten_keys(source), [], [pattern])

        assert classified.joint_groups[0].link_href_keys == ("card.anchors.0.url",)
        assert classified.pass_through == ("card.anchors.0.url",)
        assert classified.ordinary == ()


class TestPassThroughAnchors:

    def test_anchor_matching_pass_through_pattern_leaves_the_group(self, source_tree):
        keys = flatten_keys(source_tree)

        classified = classify_keys(source_tree, keys, ["*.href", "*.0.text"])

        group = classified.joint_groups[0]
        assert group.link_text_keys == ("home.hero.links.1.text",)
        assert group.link_texts == ("FAQ",)
        assert "home.hero.links.0.text" in classified.pass_through
        assert classified.total == len(keys)

    def test_group_without_translatable_anchors_becomes_ordinary(self, source_tree):
        keys = flatten_keys(source_tree)

        classified = classify_keys(source_tree, keys, ["*.href", "*.text"])

        grouped = {key for group in classified.joint_groups for key in group.keys}
        assert classified.joint_groups == ()
        assert "home.hero.description" in classified.ordinary
        assert {"home.hero.links.0.text", "home.hero.links.1.text"} <= set(classified.pass_through)
        assert set(classified.pass_through) & grouped == set()
        assert set(classified.pass_through) & set(classified.ordinary) == set()
        assert classified.total == len(keys)
