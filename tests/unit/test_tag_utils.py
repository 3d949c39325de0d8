"""Unit tests for tag conversion helpers."""

from tag_sync.models.tags import Tag
from tag_sync.utils.tag_utils import is_reserved_tag_key, tag_list, tags_from_aws, tags_to_aws


def test_tags_from_aws():
    tags = tags_from_aws([{"Key": "Env", "Value": "prod"}, {"Key": "Owner", "Value": ""}])
    assert tags == {"Env": "prod", "Owner": ""}


def test_tags_from_aws_handles_missing_list():
    assert tags_from_aws(None) == {}
    assert tags_from_aws([]) == {}


def test_tags_from_aws_skips_empty_keys():
    assert tags_from_aws([{"Key": "", "Value": "x"}, {"Value": "y"}]) == {}


def test_tags_to_aws_from_models():
    assert tags_to_aws([Tag(key="Env", value="prod")]) == [{"Key": "Env", "Value": "prod"}]


def test_tags_to_aws_from_dict():
    assert tags_to_aws({"A": "1", "B": "2"}) == [
        {"Key": "A", "Value": "1"},
        {"Key": "B", "Value": "2"},
    ]


def test_tag_list_preserves_order():
    assert [t.key for t in tag_list({"Z": "1", "A": "2"})] == ["Z", "A"]


def test_tags_from_aws_drops_reserved_keys():
    tags = tags_from_aws(
        [
            {"Key": "aws:cloudformation:stack-name", "Value": "web"},
            {"Key": "aws:autoscaling:groupName", "Value": "asg"},
            {"Key": "Env", "Value": "prod"},
        ]
    )
    assert tags == {"Env": "prod"}


def test_is_reserved_tag_key():
    assert is_reserved_tag_key("aws:ec2launchtemplate:id")
    assert is_reserved_tag_key("AWS:foo")
    assert not is_reserved_tag_key("awsome")
    assert not is_reserved_tag_key("team:aws:x")
